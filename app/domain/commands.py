"""Domain layer: Command pattern for handling user intents."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from app.domain.intents import Intent
from utils.time import utc_now

READ_ONLY_ROLES = frozenset({"Viewer"})


@dataclass(frozen=True)
class Command:
    """Raw text submitted by a user."""
    text: str
    user_id: str
    timestamp: datetime = field(default_factory=utc_now)


class FailureKind(str, Enum):
    INTERPRETATION = "interpretation"
    VALIDATION = "validation"
    LOOKUP_MISS = "lookup_miss"
    AMBIGUOUS_REFERENCE = "ambiguous_reference"
    PERMISSION_DENIED = "permission_denied"
    BACKEND = "backend"


@dataclass(frozen=True)
class DispatchResult:
    success: bool
    message: str
    entity_id: Optional[str] = None
    failure: Optional[FailureKind] = None
    invalid_field: Optional[str] = None

    @classmethod
    def ok(cls, message: str, entity_id: Optional[str] = None) -> "DispatchResult":
        return cls(success=True, message=message, entity_id=entity_id)

    @classmethod
    def fail(cls, failure: FailureKind, message: str,
             invalid_field: Optional[str] = None) -> "DispatchResult":
        return cls(success=False, message=message, failure=failure, invalid_field=invalid_field)


class Sender(str, Enum):
    USER = "user"
    AGENT = "agent"


@dataclass(frozen=True)
class ConversationTurn:
    sender: Sender
    text: str
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class UserContext:
    """Who is acting. Passed explicitly to the dispatcher."""
    user_id: str
    name: str
    role: str = "Agent"

    @property
    def can_create(self) -> bool:
        return self.role not in READ_ONLY_ROLES


class CommandHandler(ABC):
    """Handler interface for executing one kind of intent."""

    @abstractmethod
    async def handle(self, intent: Intent, context: UserContext) -> DispatchResult:
        """Execute the intent on behalf of the user in ``context``."""
        pass
