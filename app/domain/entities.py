"""Domain layer: value objects exchanged with the entity store."""
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple


class EntityKind(str, Enum):
    TASK = "task"
    TICKET = "ticket"
    PROJECT = "project"
    WAREHOUSE_REQUEST = "warehouse_request"


# Reference code prefix per entity kind, e.g. TKT-1234.
REFERENCE_PREFIXES: Dict[EntityKind, str] = {
    EntityKind.TASK: "TASK",
    EntityKind.TICKET: "TKT",
    EntityKind.PROJECT: "PROJ",
    EntityKind.WAREHOUSE_REQUEST: "WR",
}

REFERENCE_PATTERN = re.compile(r"\b(TASK|TKT|PROJ|WR)-(\d+)\b", re.IGNORECASE)


def kind_for_reference(reference: str) -> Optional[EntityKind]:
    """Return the entity kind encoded in a reference code, if any."""
    m = REFERENCE_PATTERN.fullmatch(reference.strip())
    if not m:
        return None
    prefix = m.group(1).upper()
    for kind, known in REFERENCE_PREFIXES.items():
        if known == prefix:
            return kind
    return None


@dataclass(frozen=True)
class EntitySnapshot:
    """Read-only view of a stored entity, detached from any DB session."""
    kind: EntityKind
    id: str
    title: str
    status: str
    priority: Optional[str] = None
    project_id: Optional[str] = None
    client: Optional[str] = None
    due_date: Optional[date] = None


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: str
    role: str


@dataclass(frozen=True)
class NewTask:
    title: str
    due_date: date
    created_by: str
    project_id: Optional[str] = None
    status: str = "To Do"


@dataclass(frozen=True)
class NewTicket:
    title: str
    description: str
    requester_id: str
    priority: str = "Medium"
    status: str = "Open"
    requester_type: str = "user"


@dataclass(frozen=True)
class NewWarehouseRequest:
    project_id: str
    requester_id: str
    items: Tuple[Tuple[str, int], ...]
    request_date: date
    required_by_date: Optional[date] = None
    notes: Optional[str] = None
    status: str = "Pending"


@dataclass(frozen=True)
class NewProject:
    name: str
    client: str
    created_by: str
    due_date: Optional[date] = None
    status: str = "On Track"


@dataclass(frozen=True)
class ProjectSummary:
    project: EntitySnapshot
    task_counts: Dict[str, int] = field(default_factory=dict)
    warehouse_counts: Dict[str, int] = field(default_factory=dict)
    pending_tasks: List[str] = field(default_factory=list)
