"""Application layer: in-memory conversation sessions."""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from app.domain.commands import ConversationTurn, Sender
from app.domain.errors import SessionBusyError, SessionClosedError, SessionNotFoundError
from utils.time import utc_now

logger = logging.getLogger(__name__)


class ConversationSession:
    """Ordered, append-only record of one chat with the agent.

    ``in_flight`` is set while a command is being processed so callers can
    refuse a second submission. A closed session accepts no new turns.
    ``owner_id`` is the user who opened it; ``None`` means unowned.
    """

    def __init__(self, session_id: Optional[str] = None, owner_id: Optional[str] = None):
        self.id = session_id or str(uuid.uuid4())
        self.owner_id = owner_id
        self.created_at: datetime = utc_now()
        self.last_activity: datetime = self.created_at
        self.in_flight = False
        self.closed = False
        self._turns: List[ConversationTurn] = []

    def append_user_message(self, text: str) -> ConversationTurn:
        return self._append(ConversationTurn(sender=Sender.USER, text=text))

    def append_agent_message(self, text: str) -> ConversationTurn:
        return self._append(ConversationTurn(sender=Sender.AGENT, text=text))

    def _append(self, turn: ConversationTurn) -> ConversationTurn:
        if self.closed:
            raise SessionClosedError(self.id)
        self._turns.append(turn)
        self.last_activity = utc_now()
        return turn

    def history(self) -> Tuple[ConversationTurn, ...]:
        """Snapshot of the turns so far; reading twice gives the same turns."""
        return tuple(self._turns)

    def begin_command(self) -> None:
        if self.closed:
            raise SessionClosedError(self.id)
        if self.in_flight:
            raise SessionBusyError(self.id)
        self.in_flight = True
        self.last_activity = utc_now()

    def end_command(self) -> None:
        self.in_flight = False

    def close(self) -> None:
        self.closed = True

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return self.owner_id is None or self.owner_id == user_id

    def __len__(self) -> int:
        return len(self._turns)


class ConversationRegistry:
    """Open sessions keyed by id.

    Sessions idle for longer than ``idle_timeout`` are closed and dropped the
    next time a session is opened. A session with a command in flight is never
    dropped. ``idle_timeout=None`` keeps sessions until they are closed.
    """

    def __init__(self, idle_timeout: Optional[timedelta] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: Dict[str, ConversationSession] = {}

    def open(self, owner_id: Optional[str] = None) -> ConversationSession:
        self.expire_idle()
        session = ConversationSession(owner_id=owner_id)
        self._sessions[session.id] = session
        logger.info(f"💬 Conversation session opened: {session.id} (owner {owner_id})")
        return session

    def get(self, session_id: str, owner_id: Optional[str] = None) -> ConversationSession:
        """Return the session; another user's session is reported as not found."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if owner_id is not None and not session.is_owned_by(owner_id):
            logger.warning(f"🚫 User {owner_id} asked for session {session_id} owned by {session.owner_id}")
            raise SessionNotFoundError(session_id)
        return session

    def close(self, session_id: str, owner_id: Optional[str] = None) -> ConversationSession:
        session = self.get(session_id, owner_id)
        del self._sessions[session_id]
        session.close()
        logger.info(f"👋 Conversation session closed: {session_id} ({len(session)} turns)")
        return session

    def expire_idle(self) -> int:
        """Close and drop idle sessions; returns how many were dropped."""
        if self.idle_timeout is None:
            return 0
        cutoff = self._clock() - self.idle_timeout
        expired = [
            s for s in self._sessions.values()
            if not s.in_flight and s.last_activity < cutoff
        ]
        for session in expired:
            del self._sessions[session.id]
            session.close()
        if expired:
            logger.info(f"🧹 Expired {len(expired)} idle conversation session(s)")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
