"""Pydantic schemas for the chat session and escalation APIs."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class TurnPayload(BaseModel):
    role: Literal["user", "assistant"]
    content: str = ""


class EscalationRequest(BaseModel):
    messages: list[TurnPayload] = Field(default_factory=list)
    already_offered: bool = False


class EscalationResponse(BaseModel):
    offer: bool
    reason: str | None = None


class SessionSummary(BaseModel):
    id: str
    title: str
    active: bool


class SessionList(BaseModel):
    items: list[SessionSummary]
    total: int


class SessionMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    html: str
    meta: str | None = None


class SessionDetail(BaseModel):
    id: str
    title: str
    created_at: datetime
    offer_ticket: bool
    messages: list[SessionMessage] = Field(default_factory=list)


class MessageRequest(BaseModel):
    content: str


class MessageResponse(BaseModel):
    session_id: str
    title: str
    reply: str
    html: str
    meta: str | None = None
    offer_ticket: bool
