"""Support ticket model."""

from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from . import Base


def _utcnow() -> dt.datetime:
    """Return the current UTC timestamp with timezone awareness."""

    return dt.datetime.now(dt.timezone.utc)


class Ticket(Base):
    """A hand-off request raised from a chat conversation.

    Attributes:
        id: Autoincrementing primary key returned to the widget.
        subject: Short summary typed by the user.
        description: Free-form problem description.
        email: Optional contact address.
        chat: Transcript of the conversation at the time of submission.
        status: Workflow status, ``open`` when created.
        created_at: Creation timestamp used for newest-first listings.
    """

    __tablename__ = "tickets"
    __table_args__ = (Index("ix_tickets_created_at", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject: Mapped[str] = mapped_column(String(length=255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(String(length=255), nullable=True)
    chat: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(
        String(length=32),
        nullable=False,
        default="open",
        server_default=text("'open'"),
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
