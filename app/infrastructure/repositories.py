"""Infrastructure layer: Entity store interface and implementation."""
import logging
import re
from abc import ABC, abstractmethod
from collections import Counter
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    REFERENCE_PREFIXES,
    EntityKind,
    EntitySnapshot,
    NewProject,
    NewTask,
    NewTicket,
    NewWarehouseRequest,
    ProjectSummary,
    UserRecord,
    kind_for_reference,
)
from app.domain.errors import EntityStoreError
from database.models import Notification, Project, Task, Ticket, User, WarehouseRequest

logger = logging.getLogger(__name__)

_MODELS = {
    EntityKind.TASK: Task,
    EntityKind.TICKET: Ticket,
    EntityKind.PROJECT: Project,
    EntityKind.WAREHOUSE_REQUEST: WarehouseRequest,
}


class EntityStore(ABC):
    """Repository interface for the business entities the agent can touch."""

    @abstractmethod
    def find_entity_by_reference(self, reference: str) -> Optional[EntitySnapshot]:
        """Look up any entity by its code (TKT-1234, TASK-0001, ...)."""
        pass

    @abstractmethod
    def create_task(self, task: NewTask) -> str:
        pass

    @abstractmethod
    def create_ticket(self, ticket: NewTicket) -> str:
        pass

    @abstractmethod
    def create_warehouse_request(self, request: NewWarehouseRequest) -> str:
        pass

    @abstractmethod
    def create_project(self, project: NewProject) -> str:
        pass

    @abstractmethod
    def list_projects(self) -> List[EntitySnapshot]:
        pass

    @abstractmethod
    def find_projects(self, term: str) -> List[EntitySnapshot]:
        """Projects whose code equals or whose name contains ``term``."""
        pass

    @abstractmethod
    def project_summary(self, project_id: str) -> Optional[ProjectSummary]:
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    def first_super_admin(self) -> Optional[UserRecord]:
        pass


def _snapshot(kind: EntityKind, row) -> EntitySnapshot:
    if kind == EntityKind.TASK:
        return EntitySnapshot(kind=kind, id=row.id, title=row.title, status=row.status,
                              project_id=row.project_id, due_date=row.due_date)
    if kind == EntityKind.TICKET:
        return EntitySnapshot(kind=kind, id=row.id, title=row.title, status=row.status,
                              priority=row.priority)
    if kind == EntityKind.PROJECT:
        return EntitySnapshot(kind=kind, id=row.id, title=row.name, status=row.status,
                              client=row.client, due_date=row.due_date)
    return EntitySnapshot(kind=kind, id=row.id, title=row.id, status=row.status,
                          project_id=row.project_id, due_date=row.required_by_date)


def _user(row: Optional[User]) -> Optional[UserRecord]:
    if row is None:
        return None
    return UserRecord(id=row.id, name=row.name, role=row.role)


class SqlAlchemyEntityStore(EntityStore):
    """SQLAlchemy implementation of EntityStore.

    Each operation runs in its own session from ``session_factory``. Every
    create also records a dashboard notification in the same transaction.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    @contextmanager
    def _session(self, context: str) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error in {context}: {e}")
            raise EntityStoreError(f"Database operation failed: {context}") from e
        finally:
            db.close()

    @staticmethod
    def _next_id(db: Session, kind: EntityKind) -> str:
        prefix = REFERENCE_PREFIXES[kind]
        model = _MODELS[kind]
        highest = 0
        for (existing,) in db.query(model.id).filter(model.id.like(f"{prefix}-%")):
            m = re.fullmatch(rf"{prefix}-(\d+)", existing)
            if m:
                highest = max(highest, int(m.group(1)))
        return f"{prefix}-{highest + 1:04d}"

    @staticmethod
    def _actor_name(db: Session, user_id: str) -> str:
        user = db.get(User, user_id)
        return user.name if user else user_id

    def find_entity_by_reference(self, reference: str) -> Optional[EntitySnapshot]:
        kind = kind_for_reference(reference)
        if kind is None:
            return None
        with self._session("find_entity_by_reference") as db:
            row = db.get(_MODELS[kind], reference.strip().upper())
            return _snapshot(kind, row) if row else None

    def create_task(self, task: NewTask) -> str:
        with self._session("create_task") as db:
            task_id = self._next_id(db, EntityKind.TASK)
            db.add(Task(
                id=task_id,
                title=task.title,
                project_id=task.project_id,
                status=task.status,
                due_date=task.due_date,
                created_by=task.created_by,
            ))
            db.add(Notification(
                message=f'{self._actor_name(db, task.created_by)} agregó la tarea "{task.title}"',
                link=f"/projects/{task.project_id}" if task.project_id else "/tasks",
            ))
            db.commit()
            logger.info(f"📝 Task created: {task_id}")
            return task_id

    def create_ticket(self, ticket: NewTicket) -> str:
        with self._session("create_ticket") as db:
            ticket_id = self._next_id(db, EntityKind.TICKET)
            db.add(Ticket(
                id=ticket_id,
                title=ticket.title,
                description=ticket.description,
                requester_id=ticket.requester_id,
                requester_type=ticket.requester_type,
                status=ticket.status,
                priority=ticket.priority,
            ))
            db.add(Notification(message=f'Nuevo ticket creado: "{ticket.title}"', link=f"/tickets/{ticket_id}"))
            db.commit()
            logger.info(f"🎫 Ticket created: {ticket_id}")
            return ticket_id

    def create_warehouse_request(self, request: NewWarehouseRequest) -> str:
        with self._session("create_warehouse_request") as db:
            request_id = self._next_id(db, EntityKind.WAREHOUSE_REQUEST)
            db.add(WarehouseRequest(
                id=request_id,
                project_id=request.project_id,
                requester_id=request.requester_id,
                status=request.status,
                request_date=request.request_date,
                required_by_date=request.required_by_date,
                items=[
                    {"id": f"item-{i}", "name": name, "quantity": quantity}
                    for i, (name, quantity) in enumerate(request.items, 1)
                ],
                notes=request.notes,
            ))
            project = db.get(Project, request.project_id)
            db.add(Notification(
                message=(f"{self._actor_name(db, request.requester_id)} creó una solicitud de almacén "
                         f"para {project.name if project else request.project_id}"),
                link="/warehouse",
            ))
            db.commit()
            logger.info(f"📦 Warehouse request created: {request_id}")
            return request_id

    def create_project(self, project: NewProject) -> str:
        with self._session("create_project") as db:
            project_id = self._next_id(db, EntityKind.PROJECT)
            db.add(Project(
                id=project_id,
                name=project.name,
                client=project.client,
                status=project.status,
                due_date=project.due_date,
            ))
            db.add(Notification(
                message=f'{self._actor_name(db, project.created_by)} creó el nuevo proyecto: "{project.name}"',
                link=f"/projects/{project_id}",
            ))
            db.commit()
            logger.info(f"🎉 Project created: {project_id}")
            return project_id

    def list_projects(self) -> List[EntitySnapshot]:
        with self._session("list_projects") as db:
            rows = db.query(Project).order_by(Project.name, Project.id).all()
            return [_snapshot(EntityKind.PROJECT, row) for row in rows]

    def find_projects(self, term: str) -> List[EntitySnapshot]:
        term = term.strip()
        with self._session("find_projects") as db:
            if kind_for_reference(term) == EntityKind.PROJECT:
                row = db.get(Project, term.upper())
                return [_snapshot(EntityKind.PROJECT, row)] if row else []
            rows = (
                db.query(Project)
                .filter(func.lower(Project.name).contains(term.lower(), autoescape=True))
                .order_by(Project.name, Project.id)
                .all()
            )
            exact = [row for row in rows if row.name.lower() == term.lower()]
            return [_snapshot(EntityKind.PROJECT, row) for row in (exact if len(exact) == 1 else rows)]

    def project_summary(self, project_id: str) -> Optional[ProjectSummary]:
        with self._session("project_summary") as db:
            project = db.get(Project, project_id)
            if project is None:
                return None
            tasks = db.query(Task).filter(Task.project_id == project_id).order_by(Task.due_date, Task.id).all()
            requests = db.query(WarehouseRequest).filter(WarehouseRequest.project_id == project_id).all()
            return ProjectSummary(
                project=_snapshot(EntityKind.PROJECT, project),
                task_counts=dict(Counter(t.status for t in tasks)),
                warehouse_counts=dict(Counter(r.status for r in requests)),
                pending_tasks=[t.title for t in tasks if t.status != "Done"],
            )

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self._session("get_user") as db:
            return _user(db.get(User, user_id))

    def first_super_admin(self) -> Optional[UserRecord]:
        with self._session("first_super_admin") as db:
            row = (
                db.query(User)
                .filter(User.role == "Super-Admin")
                .order_by(User.created_at, User.id)
                .first()
            )
            return _user(row)
