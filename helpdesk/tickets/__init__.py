"""Support ticket submission and listing."""

from . import schemas
from .repository import (
    InMemoryTicketRepository,
    SqlAlchemyTicketRepository,
    TicketRepository,
    TicketStoreError,
)
from .service import TicketService, TicketValidationError

__all__ = [
    "InMemoryTicketRepository",
    "SqlAlchemyTicketRepository",
    "TicketRepository",
    "TicketService",
    "TicketStoreError",
    "TicketValidationError",
    "schemas",
]
