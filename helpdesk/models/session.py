"""Engine and session factories for the ticket store."""

from __future__ import annotations

import os

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from . import Base


def get_engine(database_url: str | None = None, **kwargs: object) -> Engine:
    """Engine for ``database_url``, falling back to ``DATABASE_URL``.

    Raises ``RuntimeError`` when neither is set; extra keyword arguments go
    straight to :func:`sqlalchemy.create_engine`.
    """
    url = database_url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not configured.")
    return create_engine(url, **kwargs)


def get_sessionmaker(
    database_url: str | None = None, *, create_tables: bool = False, **kwargs: object
) -> sessionmaker[Session]:
    """Session factory for the ticket store.

    With ``create_tables`` the ``tickets`` table is created when missing,
    which is all a fresh SQLite file needs.
    """
    engine = get_engine(database_url, **kwargs)
    if create_tables:
        Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


__all__ = ["get_engine", "get_sessionmaker"]
