"""Service singletons (initialized once) used across routers.

This avoids circular imports between routers and keeps construction logic
away from `main.py` for cleaner testing.
"""
import logging
from datetime import timedelta

from app.application.command_processor import CommandProcessor
from app.application.session import ConversationRegistry
from app.config import get_settings
from app.domain.interpreter import CommandInterpreter, default_interpreter
from app.infrastructure.llm_interpreter import build_claude_interpreter
from app.infrastructure.repositories import SqlAlchemyEntityStore
from database.connection import SessionLocal

settings = get_settings()
logger = logging.getLogger(__name__)


def _build_interpreter() -> CommandInterpreter:
    if not settings.llm_enabled:
        logger.info("📏 Using rule-based command interpreter")
        return default_interpreter
    try:
        interpreter = build_claude_interpreter(settings.anthropic_api_key, settings.anthropic_model)
        logger.info(f"🤖 Claude command interpreter initialized ({settings.anthropic_model})")
        return interpreter
    except Exception as e:
        logger.warning(f"⚠️  Failed to initialize Claude interpreter: {e}. Using rule-based interpreter.")
        return default_interpreter


entity_store = SqlAlchemyEntityStore(SessionLocal)
interpreter = _build_interpreter()
command_processor = CommandProcessor(entity_store, interpreter=interpreter)
idle_timeout = timedelta(minutes=settings.session_idle_minutes) if settings.session_idle_minutes > 0 else None
conversation_registry = ConversationRegistry(idle_timeout=idle_timeout)
