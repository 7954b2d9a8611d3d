"""Pydantic schemas for the ticket API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class TicketCreate(BaseModel):
    # Optional at the schema level so missing fields surface as a 400 from the
    # service rather than a 422 validation error.
    subject: str | None = None
    description: str | None = None
    email: str | None = None
    chat: Any = None
    session_id: str | None = None


class TicketCreated(BaseModel):
    ok: bool = True
    id: int


class TicketSummary(BaseModel):
    id: int
    subject: str
    status: str
    created_at: datetime
    email: str | None = None


class TicketList(BaseModel):
    items: list[TicketSummary]
    total: int
