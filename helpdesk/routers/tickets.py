"""Support ticket API routes."""

import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from ..conversations.sessions import SessionNotFoundError
from ..models.session import get_sessionmaker
from ..tickets import (
    SqlAlchemyTicketRepository,
    TicketService,
    TicketStoreError,
    TicketValidationError,
    schemas,
)

router = APIRouter(prefix="/api", tags=["tickets"])

logger = logging.getLogger(__name__)


def get_ticket_service(request: Request) -> TicketService:
    """Return the app's ticket service, building it from DATABASE_URL once."""
    service = getattr(request.app.state, "ticket_service", None)
    if service is not None:
        return service
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise HTTPException(status_code=500, detail="DATABASE_URL not configured")
    try:
        session_factory = get_sessionmaker(database_url, create_tables=True)
    except SQLAlchemyError as exc:
        logger.error("Ticket store unavailable: %s", exc)
        raise HTTPException(status_code=500, detail="Ticket store unavailable") from exc
    service = TicketService(SqlAlchemyTicketRepository(session_factory))
    request.app.state.ticket_service = service
    return service


def _attach_transcript(payload: schemas.TicketCreate, request: Request) -> None:
    if payload.chat is not None or not payload.session_id:
        return
    registry = getattr(request.app.state, "sessions", None)
    if registry is None:
        return
    try:
        payload.chat = registry.get(payload.session_id).transcript()
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Chat session not found") from exc


@router.post("/tickets", response_model=schemas.TicketCreated)
def create_ticket(
    payload: schemas.TicketCreate,
    request: Request,
    service: TicketService = Depends(get_ticket_service),
) -> schemas.TicketCreated:
    """Open a support ticket, attaching the chat transcript when available."""
    _attach_transcript(payload, request)
    try:
        return service.create_ticket(payload)
    except TicketValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TicketStoreError as exc:
        logger.error("Ticket insert failed: %s", exc)
        raise HTTPException(status_code=500, detail="Insert failed") from exc


@router.get("/tickets", response_model=schemas.TicketList)
def list_tickets(
    service: TicketService = Depends(get_ticket_service),
) -> schemas.TicketList:
    """List tickets, newest first."""
    try:
        items = service.list_tickets()
    except TicketStoreError as exc:
        logger.error("Ticket listing failed: %s", exc)
        raise HTTPException(status_code=500, detail="Listing failed") from exc
    return schemas.TicketList(items=items, total=len(items))
