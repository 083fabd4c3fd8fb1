"""Application layer: routes each intent to its handler."""
import logging
from functools import partial
from typing import Dict, Optional, Type

from app.application import formatter
from app.application.handlers import (
    Clock,
    CreateProjectHandler,
    CreateTaskHandler,
    CreateTicketHandler,
    CreateWarehouseRequestHandler,
    ListProjectsHandler,
    QueryEntityStatusHandler,
    SummarizeProjectHandler,
    UnrecognizedHandler,
)
from app.config import get_settings
from app.domain.commands import CommandHandler, DispatchResult, FailureKind, UserContext
from app.domain.intents import (
    CreateProject,
    CreateTask,
    CreateTicket,
    CreateWarehouseRequest,
    Intent,
    ListProjects,
    QueryEntityStatus,
    SummarizeProject,
    Unrecognized,
)
from app.infrastructure.repositories import EntityStore
from utils.time import local_today

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Maps an Intent to one handler and never lets a backend error escape."""

    def __init__(self, store: EntityStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or partial(local_today, get_settings().timezone)
        self._unrecognized = UnrecognizedHandler()
        self._handlers: Dict[Type[Intent], CommandHandler] = {
            QueryEntityStatus: QueryEntityStatusHandler(store),
            CreateTask: CreateTaskHandler(store, self.clock),
            CreateTicket: CreateTicketHandler(store, self.clock),
            CreateWarehouseRequest: CreateWarehouseRequestHandler(store, self.clock),
            CreateProject: CreateProjectHandler(store, self.clock),
            ListProjects: ListProjectsHandler(store),
            SummarizeProject: SummarizeProjectHandler(store),
            Unrecognized: self._unrecognized,
        }

    def get_handler(self, intent: Intent) -> CommandHandler:
        return self._handlers.get(type(intent), self._unrecognized)

    async def dispatch(self, intent: Intent, context: UserContext) -> DispatchResult:
        handler = self.get_handler(intent)
        try:
            result = await handler.handle(intent, context)
        except Exception as e:
            logger.error(f"Dispatch error for {type(intent).__name__}: {e}", exc_info=True)
            return DispatchResult.fail(FailureKind.BACKEND, formatter.BACKEND_FAILURE_MESSAGE)

        logger.info(
            f"[DISPATCH] {type(intent).__name__} by {context.user_id}: "
            f"success={result.success} failure={result.failure.value if result.failure else None}"
        )
        return result
