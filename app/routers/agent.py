"""Conversation endpoints for the command agent."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from app.application.command_processor import CommandProcessor
from app.application.session import ConversationRegistry, ConversationSession
from app.dependencies import get_command_processor, get_conversation_registry, get_user_context
from app.domain.commands import UserContext
from app.domain.errors import SessionBusyError, SessionClosedError, SessionNotFoundError
from app.schemas import (
    CommandRequest,
    ConversationTurnResponse,
    HistoryResponse,
    SessionResponse,
    SimpleSuccessResponse,
)

router = APIRouter(prefix="/agent", tags=["agent"])
logger = logging.getLogger(__name__)


def _lookup(registry: ConversationRegistry, session_id: str, context: UserContext) -> ConversationSession:
    try:
        return registry.get(session_id, owner_id=context.user_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def open_session(
    context: UserContext = Depends(get_user_context),
    registry: ConversationRegistry = Depends(get_conversation_registry),
):
    session = registry.open(owner_id=context.user_id)
    logger.info(f"👤 {context.name} opened session {session.id}")
    return SessionResponse(session_id=session.id, created_at=session.created_at)


@router.post("/sessions/{session_id}/commands", response_model=ConversationTurnResponse)
async def submit_command(
    session_id: str,
    body: CommandRequest,
    context: UserContext = Depends(get_user_context),
    registry: ConversationRegistry = Depends(get_conversation_registry),
    processor: CommandProcessor = Depends(get_command_processor),
):
    session = _lookup(registry, session_id, context)
    try:
        turn = await processor.submit_command(session, body.text, context)
    except SessionBusyError:
        raise HTTPException(status_code=409, detail="A command is already being processed for this session")
    except SessionClosedError:
        raise HTTPException(status_code=409, detail="Session is closed")
    return ConversationTurnResponse.from_turn(turn)


@router.get("/sessions/{session_id}/history", response_model=HistoryResponse)
async def session_history(
    session_id: str,
    context: UserContext = Depends(get_user_context),
    registry: ConversationRegistry = Depends(get_conversation_registry),
):
    session = _lookup(registry, session_id, context)
    return HistoryResponse(
        session_id=session.id,
        in_flight=session.in_flight,
        turns=[ConversationTurnResponse.from_turn(t) for t in session.history()],
    )


@router.delete("/sessions/{session_id}", response_model=SimpleSuccessResponse)
async def close_session(
    session_id: str,
    context: UserContext = Depends(get_user_context),
    registry: ConversationRegistry = Depends(get_conversation_registry),
):
    try:
        registry.close(session_id, owner_id=context.user_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return SimpleSuccessResponse()
