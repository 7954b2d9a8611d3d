"""Ticket persistence backends."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..models import Ticket
from . import schemas


class TicketStoreError(RuntimeError):
    """Raised when the ticket store cannot be read or written."""


class TicketRepository(Protocol):
    """Persistence abstraction used by :class:`TicketService`."""

    def create_ticket(
        self,
        subject: str,
        description: str,
        email: Optional[str],
        chat: Any,
    ) -> schemas.TicketSummary: ...

    def list_tickets(self) -> List[schemas.TicketSummary]: ...


class InMemoryTicketRepository:
    """Process-local store used in tests and demo mode."""

    def __init__(self) -> None:
        self._rows: list[dict[str, Any]] = []
        self._next_id = 1

    def create_ticket(
        self,
        subject: str,
        description: str,
        email: Optional[str],
        chat: Any,
    ) -> schemas.TicketSummary:
        row = {
            "id": self._next_id,
            "subject": subject,
            "description": description,
            "email": email,
            "chat": chat,
            "status": "open",
            "created_at": datetime.now(timezone.utc),
        }
        self._next_id += 1
        self._rows.append(row)
        return schemas.TicketSummary(**row)

    def list_tickets(self) -> List[schemas.TicketSummary]:
        rows = sorted(
            self._rows, key=lambda r: (r["created_at"], r["id"]), reverse=True
        )
        return [schemas.TicketSummary(**row) for row in rows]


class SqlAlchemyTicketRepository:
    """Ticket store backed by any database SQLAlchemy can reach."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _summary(ticket: Ticket) -> schemas.TicketSummary:
        return schemas.TicketSummary(
            id=ticket.id,
            subject=ticket.subject,
            status=ticket.status,
            created_at=ticket.created_at,
            email=ticket.email,
        )

    def create_ticket(
        self,
        subject: str,
        description: str,
        email: Optional[str],
        chat: Any,
    ) -> schemas.TicketSummary:
        ticket = Ticket(
            subject=subject,
            description=description,
            email=email,
            chat=chat,
            status="open",
        )
        try:
            with self._session_factory.begin() as session:
                session.add(ticket)
                session.flush()
                return self._summary(ticket)
        except SQLAlchemyError as exc:
            raise TicketStoreError(f"Insert failed: {exc}") from exc

    def list_tickets(self) -> List[schemas.TicketSummary]:
        stmt = select(Ticket).order_by(Ticket.created_at.desc(), Ticket.id.desc())
        try:
            with self._session_factory() as session:
                return [self._summary(t) for t in session.scalars(stmt)]
        except SQLAlchemyError as exc:
            raise TicketStoreError(f"Listing failed: {exc}") from exc
