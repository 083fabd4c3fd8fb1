"""Domain layer: the closed set of intents the agent understands."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from app.domain.entities import EntityKind


class UnrecognizedReason(str, Enum):
    EMPTY = "empty"
    NO_KEYWORD = "no_keyword"
    CONFLICTING_KEYWORDS = "conflicting_keywords"
    MISSING_TARGET = "missing_target"
    MISSING_REFERENCE = "missing_reference"
    NEEDS_MORE_INFO = "needs_more_info"
    TOO_LONG = "too_long"


@dataclass(frozen=True)
class Intent:
    """Base class for recognized intents."""


@dataclass(frozen=True)
class QueryEntityStatus(Intent):
    reference: str
    kind: EntityKind


@dataclass(frozen=True)
class CreateTask(Intent):
    title: Optional[str] = None
    due_date: Optional[str] = None
    project_ref: Optional[str] = None


@dataclass(frozen=True)
class CreateTicket(Intent):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None


@dataclass(frozen=True)
class RequestedItem:
    """One warehouse line. ``quantity`` is None when the text gave no number."""
    name: str
    quantity: Optional[int] = None


@dataclass(frozen=True)
class CreateWarehouseRequest(Intent):
    project_ref: Optional[str] = None
    items: Tuple[RequestedItem, ...] = ()
    required_by: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class CreateProject(Intent):
    name: Optional[str] = None
    client: Optional[str] = None
    due_date: Optional[str] = None


@dataclass(frozen=True)
class ListProjects(Intent):
    pass


@dataclass(frozen=True)
class SummarizeProject(Intent):
    project: str


@dataclass(frozen=True)
class Unrecognized(Intent):
    reason: UnrecognizedReason = UnrecognizedReason.NO_KEYWORD
    detail: Optional[str] = None
