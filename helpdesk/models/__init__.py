"""SQLAlchemy declarative base and persisted models.

The helpdesk only persists support tickets; chat sessions live in memory for
the lifetime of the process.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


from .ticket import Ticket


__all__ = [
    "Base",
    "Ticket",
]
