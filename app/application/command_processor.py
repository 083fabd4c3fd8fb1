"""Application layer: command processor, the agent's single entry point."""
import logging
from typing import Optional

from app.application.dispatcher import CommandDispatcher
from app.application.session import ConversationSession
from app.domain.commands import Command, ConversationTurn, Sender, UserContext
from app.domain.intents import Unrecognized, UnrecognizedReason
from app.domain.interpreter import CommandInterpreter, default_interpreter
from app.infrastructure.repositories import EntityStore

logger = logging.getLogger(__name__)

# Longer texts are not interpreted; the user gets the clarifying reply
MAX_COMMAND_LENGTH = 2000


class CommandProcessor:
    """Runs interpret -> dispatch -> append for one command at a time per session."""

    def __init__(self, store: EntityStore,
                 interpreter: Optional[CommandInterpreter] = None,
                 dispatcher: Optional[CommandDispatcher] = None):
        self.store = store
        self.interpreter = interpreter or default_interpreter
        self.dispatcher = dispatcher or CommandDispatcher(store)

    async def submit_command(self, session: ConversationSession, text: str,
                             context: UserContext) -> ConversationTurn:
        """Process ``text`` and return the agent's reply turn.

        Raises SessionBusyError or SessionClosedError only; every command
        problem is reported in the returned turn.
        """
        session.begin_command()
        command = Command(text=text, user_id=context.user_id)
        try:
            session.append_user_message(command.text)
            if len(command.text) > MAX_COMMAND_LENGTH:
                intent = Unrecognized(UnrecognizedReason.TOO_LONG, detail=str(len(command.text)))
            else:
                intent = self.interpreter.interpret(command.text)
            logger.info(f"[AGENT_CMD] {type(intent).__name__} from {context.name} in {session.id}")
            result = await self.dispatcher.dispatch(intent, context)
        finally:
            session.end_command()

        if session.closed:
            # Side effects already applied stay applied; only the reply is dropped.
            logger.info(f"Session {session.id} closed during dispatch; reply discarded")
            return ConversationTurn(sender=Sender.AGENT, text=result.message)
        return session.append_agent_message(result.message)
