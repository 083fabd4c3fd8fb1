"""Pydantic models for request/response bodies.

Adding explicit schemas improves validation, documentation and reduces
ad-hoc dict access complexity inside route handlers.
"""
from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import List

from app.domain.commands import ConversationTurn


class CommandRequest(BaseModel):
    text: str = Field(..., description="Comando en lenguaje natural")

    @field_validator("text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class ConversationTurnResponse(BaseModel):
    sender: str
    text: str
    created_at: datetime

    @classmethod
    def from_turn(cls, turn: ConversationTurn) -> "ConversationTurnResponse":
        return cls(sender=turn.sender.value, text=turn.text, created_at=turn.created_at)


class SessionResponse(BaseModel):
    session_id: str
    created_at: datetime


class HistoryResponse(BaseModel):
    session_id: str
    in_flight: bool
    turns: List[ConversationTurnResponse] = Field(default_factory=list)


class SimpleSuccessResponse(BaseModel):
    success: bool = True
