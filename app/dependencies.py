"""Shared FastAPI dependencies (acting user, service lookup).

Centralizes cross-router logic to reduce duplication and gives tests a
single place to override services.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException

from app import services
from app.application.command_processor import CommandProcessor
from app.application.session import ConversationRegistry
from app.config import get_settings
from app.domain.commands import UserContext
from app.domain.errors import EntityStoreError
from app.infrastructure.repositories import EntityStore

logger = logging.getLogger(__name__)


def get_entity_store() -> EntityStore:
    return services.entity_store


def get_command_processor() -> CommandProcessor:
    return services.command_processor


def get_conversation_registry() -> ConversationRegistry:
    return services.conversation_registry


def get_user_context(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    store: EntityStore = Depends(get_entity_store),
) -> UserContext:
    """Resolve the acting user from the X-User-Id header.

    Without the header, non-production deployments act as the first
    Super-Admin, the way the dashboard agent did.
    """
    try:
        if x_user_id:
            user = store.get_user(x_user_id.strip())
        elif get_settings().allow_anonymous_agent:
            user = store.first_super_admin()
        else:
            raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    except EntityStoreError as e:
        logger.error(f"❌ Could not resolve acting user: {e}")
        raise HTTPException(status_code=503, detail="User directory unavailable")

    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return UserContext(user_id=user.id, name=user.name, role=user.role)
