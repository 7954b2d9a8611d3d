"""Ticket submission for conversations that need a human."""

from __future__ import annotations

import logging
from typing import List

from . import schemas
from .repository import TicketRepository

logger = logging.getLogger(__name__)


class TicketValidationError(ValueError):
    """Raised when required ticket fields are missing."""


class TicketService:
    def __init__(self, repository: TicketRepository) -> None:
        self._repository = repository

    def create_ticket(self, payload: schemas.TicketCreate) -> schemas.TicketCreated:
        subject = (payload.subject or "").strip()
        description = (payload.description or "").strip()
        if not subject or not description:
            raise TicketValidationError("subject and description are required")
        email = (payload.email or "").strip() or None
        ticket = self._repository.create_ticket(subject, description, email, payload.chat)
        logger.info("Ticket %s opened", ticket.id)
        return schemas.TicketCreated(ok=True, id=ticket.id)

    def list_tickets(self) -> List[schemas.TicketSummary]:
        return self._repository.list_tickets()
