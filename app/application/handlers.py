"""Application layer: Command handlers implementing business logic."""
import logging
from abc import abstractmethod
from datetime import date
from typing import Callable, Optional

from app.application import formatter
from app.domain.commands import CommandHandler, DispatchResult, FailureKind, UserContext
from app.domain.entities import (
    EntityKind,
    NewProject,
    NewTask,
    NewTicket,
    NewWarehouseRequest,
    kind_for_reference,
)
from app.domain.intents import (
    CreateProject,
    CreateTask,
    CreateTicket,
    CreateWarehouseRequest,
    Intent,
    QueryEntityStatus,
    SummarizeProject,
)
from app.infrastructure.repositories import EntityStore
from utils.time import fold_text, parse_date_expression

logger = logging.getLogger(__name__)

Clock = Callable[[], date]

PRIORITIES = {
    "baja": "Low", "low": "Low",
    "media": "Medium", "medium": "Medium", "normal": "Medium",
    "alta": "High", "high": "High",
    "urgente": "Urgent", "urgent": "Urgent",
}

DATE_HINT = "Usa un formato como 2026-11-05, 05/11/2026, mañana o el viernes."


class ValidationFailure(Exception):
    """A recognized intent is missing or has an invalid parameter."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


def _required(kind: EntityKind, field: str, value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValidationFailure(field, formatter.missing_field(kind, field))
    return value.strip()


def _parse_date(field: str, value: Optional[str], today: date) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date_expression(value, today)
    except ValueError:
        raise ValidationFailure(field, formatter.invalid_field(field, value, DATE_HINT))


def _project_code(value: str) -> str:
    if kind_for_reference(value) != EntityKind.PROJECT:
        raise ValidationFailure("project_ref", formatter.invalid_field("project_ref", value, "Usa un código como PROJ-0001."))
    return value.upper()


class QueryEntityStatusHandler(CommandHandler):
    """Handler for status queries on any entity code."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def handle(self, intent: QueryEntityStatus, context: UserContext) -> DispatchResult:
        entity = self.store.find_entity_by_reference(intent.reference)
        if entity is None:
            return DispatchResult.fail(FailureKind.LOOKUP_MISS, formatter.not_found(intent.kind, intent.reference))
        return DispatchResult.ok(formatter.entity_status(entity), entity_id=entity.id)


class CreateEntityHandler(CommandHandler):
    """Shared flow for creations: permission, validation, references, one store call."""

    kind: EntityKind

    def __init__(self, store: EntityStore, clock: Clock):
        self.store = store
        self.clock = clock

    async def handle(self, intent: Intent, context: UserContext) -> DispatchResult:
        if not context.can_create:
            logger.info(f"[PERMISSION] {context.user_id} ({context.role}) may not create {self.kind.value}")
            return DispatchResult.fail(FailureKind.PERMISSION_DENIED, formatter.permission_denied(context.role, self.kind))

        try:
            fields = self.validate(intent, context)
        except ValidationFailure as e:
            logger.info(f"[VALIDATION] {type(intent).__name__}: {e.field}")
            return DispatchResult.fail(FailureKind.VALIDATION, e.message, invalid_field=e.field)

        project_id = getattr(fields, "project_id", None)
        if project_id and self.store.find_entity_by_reference(project_id) is None:
            return DispatchResult.fail(FailureKind.LOOKUP_MISS, formatter.not_found(EntityKind.PROJECT, project_id))

        entity_id = self.create(fields)
        return DispatchResult.ok(formatter.created(self.kind, self.label(fields), entity_id), entity_id=entity_id)

    @abstractmethod
    def validate(self, intent: Intent, context: UserContext):
        """Return the store payload or raise ValidationFailure."""
        pass

    @abstractmethod
    def create(self, fields) -> str:
        pass

    @abstractmethod
    def label(self, fields) -> str:
        pass


class CreateTaskHandler(CreateEntityHandler):
    kind = EntityKind.TASK

    def validate(self, intent: CreateTask, context: UserContext) -> NewTask:
        title = _required(self.kind, "title", intent.title)
        _required(self.kind, "due_date", intent.due_date)
        due_date = _parse_date("due_date", intent.due_date, self.clock())
        project_id = _project_code(intent.project_ref) if intent.project_ref else None
        return NewTask(title=title, due_date=due_date, created_by=context.user_id, project_id=project_id)

    def create(self, fields: NewTask) -> str:
        return self.store.create_task(fields)

    def label(self, fields: NewTask) -> str:
        return fields.title


class CreateTicketHandler(CreateEntityHandler):
    kind = EntityKind.TICKET

    def validate(self, intent: CreateTicket, context: UserContext) -> NewTicket:
        title = _required(self.kind, "title", intent.title)
        priority = "Medium"
        if intent.priority:
            priority = PRIORITIES.get(fold_text(intent.priority.strip()))
            if priority is None:
                raise ValidationFailure("priority", formatter.invalid_field(
                    "priority", intent.priority, "Usa baja, media, alta o urgente."))
        description = (intent.description or "").strip() or title
        return NewTicket(title=title, description=description, requester_id=context.user_id, priority=priority)

    def create(self, fields: NewTicket) -> str:
        return self.store.create_ticket(fields)

    def label(self, fields: NewTicket) -> str:
        return fields.title


class CreateWarehouseRequestHandler(CreateEntityHandler):
    kind = EntityKind.WAREHOUSE_REQUEST

    def validate(self, intent: CreateWarehouseRequest, context: UserContext) -> NewWarehouseRequest:
        project_id = _project_code(_required(self.kind, "project_ref", intent.project_ref))
        if not intent.items:
            raise ValidationFailure("items", formatter.missing_field(self.kind, "items"))
        items = []
        for item in intent.items:
            name = (item.name or "").strip()
            if not name or item.quantity is None or item.quantity <= 0:
                raise ValidationFailure("items", formatter.invalid_field(
                    "items", name or str(item.quantity), "Indica cada artículo con su cantidad, p. ej. 10 sillas."))
            items.append((name, item.quantity))
        today = self.clock()
        return NewWarehouseRequest(
            project_id=project_id,
            requester_id=context.user_id,
            items=tuple(items),
            request_date=today,
            required_by_date=_parse_date("required_by", intent.required_by, today),
            notes=intent.notes,
        )

    def create(self, fields: NewWarehouseRequest) -> str:
        return self.store.create_warehouse_request(fields)

    def label(self, fields: NewWarehouseRequest) -> str:
        return fields.project_id


class CreateProjectHandler(CreateEntityHandler):
    kind = EntityKind.PROJECT

    def validate(self, intent: CreateProject, context: UserContext) -> NewProject:
        name = _required(self.kind, "name", intent.name)
        client = _required(self.kind, "client", intent.client)
        due_date = _parse_date("due_date", intent.due_date, self.clock())
        return NewProject(name=name, client=client, created_by=context.user_id, due_date=due_date)

    def create(self, fields: NewProject) -> str:
        return self.store.create_project(fields)

    def label(self, fields: NewProject) -> str:
        return fields.name


class ListProjectsHandler(CommandHandler):
    """Handler for listing project names."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def handle(self, intent: Intent, context: UserContext) -> DispatchResult:
        return DispatchResult.ok(formatter.project_list(self.store.list_projects()))


class SummarizeProjectHandler(CommandHandler):
    """Handler for project status summaries by code or name."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def handle(self, intent: SummarizeProject, context: UserContext) -> DispatchResult:
        matches = self.store.find_projects(intent.project)
        if not matches:
            return DispatchResult.fail(FailureKind.LOOKUP_MISS, formatter.project_not_found(intent.project))
        if len(matches) > 1:
            return DispatchResult.fail(FailureKind.AMBIGUOUS_REFERENCE, formatter.ambiguous_projects(intent.project, matches))

        summary = self.store.project_summary(matches[0].id)
        if summary is None:
            return DispatchResult.fail(FailureKind.LOOKUP_MISS, formatter.project_not_found(intent.project))
        return DispatchResult.ok(formatter.project_summary(summary), entity_id=summary.project.id)


class UnrecognizedHandler(CommandHandler):
    """Handler for anything the interpreter could not place."""

    async def handle(self, intent: Intent, context: UserContext) -> DispatchResult:
        return DispatchResult.fail(FailureKind.INTERPRETATION, formatter.CLARIFYING_MESSAGE)
