"""Chat session routes: history, switching and sending messages."""

import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from ..conversations import schemas
from ..conversations.models import ASSISTANT
from ..conversations.sessions import ChatSession, SessionNotFoundError, SessionRegistry
from ..limits import CHAT_RATE_LIMIT, limiter
from ..markup import HtmlMount, escape, parse, render_markdown
from ..markup.reveal import DEFAULT_CHAR_DELAY_MS
from ..replies import ReplyService, ReplyUpstreamError
from ..sse_utils import SSE_HEADERS, SSE_MEDIA_TYPE, sse_event, sse_reveal_frames

router = APIRouter(prefix="/api", tags=["sessions"])

logger = logging.getLogger(__name__)

CHAT_MAX_MESSAGE_LENGTH = int(os.getenv("CHAT_MAX_MESSAGE_LENGTH", "400"))
ASSISTANT_LABEL = os.getenv("ASSISTANT_LABEL", "TriKash AI")


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_reply_service(request: Request) -> ReplyService:
    return request.app.state.replies


def _get_session(registry: SessionRegistry, session_id: str) -> ChatSession:
    try:
        return registry.get(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Chat session not found") from exc


def _validate_content(content: str) -> str:
    text = content.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message is empty")
    if len(text) > CHAT_MAX_MESSAGE_LENGTH:
        raise HTTPException(status_code=400, detail="Message too long")
    return text


def _detail(session: ChatSession) -> schemas.SessionDetail:
    messages = [
        schemas.SessionMessage(
            role=turn.role,
            content=turn.content,
            html=render_markdown(turn.content)
            if turn.role == ASSISTANT
            else escape(turn.content),
            meta=turn.meta,
        )
        for turn in session.turns
    ]
    return schemas.SessionDetail(
        id=session.id,
        title=session.title,
        created_at=session.created_at,
        offer_ticket=session.escalation.offered,
        messages=messages,
    )


async def _take_turn(
    session: ChatSession, content: str, replies: ReplyService
) -> tuple[str, schemas.EscalationResponse]:
    """Record the user message, fetch a reply and run the classifier."""
    session.add_user_turn(content)
    try:
        reply = await run_in_threadpool(replies.reply, session.messages_for_model())
    except ReplyUpstreamError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    decision = session.add_assistant_turn(reply, meta=ASSISTANT_LABEL)
    return reply, schemas.EscalationResponse(
        offer=decision.should_offer, reason=decision.reason
    )


@router.post("/sessions", response_model=schemas.SessionDetail)
def create_session(
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.SessionDetail:
    """Start a new chat and make it the current one."""
    return _detail(registry.new_chat())


@router.get("/sessions", response_model=schemas.SessionList)
def list_sessions(
    registry: SessionRegistry = Depends(get_registry),
) -> schemas.SessionList:
    """Sidebar history, newest first."""
    items = [schemas.SessionSummary(**item) for item in registry.history()]
    return schemas.SessionList(items=items, total=len(items))


@router.get("/sessions/{session_id}", response_model=schemas.SessionDetail)
def get_session(
    session_id: str, registry: SessionRegistry = Depends(get_registry)
) -> schemas.SessionDetail:
    return _detail(_get_session(registry, session_id))


@router.post("/sessions/{session_id}/select", response_model=schemas.SessionDetail)
def select_session(
    session_id: str, registry: SessionRegistry = Depends(get_registry)
) -> schemas.SessionDetail:
    """Switch the widget to ``session_id``; the previous chat stops revealing."""
    try:
        session = registry.select(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Chat session not found") from exc
    return _detail(session)


@router.post("/sessions/{session_id}/messages", response_model=schemas.MessageResponse)
@limiter.limit(CHAT_RATE_LIMIT)
async def send_message(
    request: Request,
    session_id: str,
    payload: schemas.MessageRequest,
    registry: SessionRegistry = Depends(get_registry),
    replies: ReplyService = Depends(get_reply_service),
) -> schemas.MessageResponse:
    """Send a user message and return the rendered assistant reply."""
    content = _validate_content(payload.content)
    session = _get_session(registry, session_id)
    registry.select(session.id)
    reply, escalation = await _take_turn(session, content, replies)
    return schemas.MessageResponse(
        session_id=session.id,
        title=session.title,
        reply=reply,
        html=render_markdown(reply),
        meta=ASSISTANT_LABEL,
        offer_ticket=escalation.offer,
    )


@router.post("/sessions/{session_id}/messages/stream")
@limiter.limit(CHAT_RATE_LIMIT)
async def stream_message(
    request: Request,
    session_id: str,
    payload: schemas.MessageRequest,
    batch: bool = True,
    registry: SessionRegistry = Depends(get_registry),
    replies: ReplyService = Depends(get_reply_service),
):
    """Send a user message and stream the reply as typewriter frames.

    Events: ``frame`` (bubble markup after each batch), ``escalation`` and
    ``done``. A disconnect, a newer message or a session switch cancels the
    reveal and ends the stream without ``done``.
    """
    content = _validate_content(payload.content)
    session = _get_session(registry, session_id)
    registry.select(session.id)
    reply, escalation = await _take_turn(session, content, replies)

    mount = HtmlMount()
    reveal = session.begin_reveal(mount, parse(reply))

    async def event_stream():
        async for frame in sse_reveal_frames(
            reveal,
            mount,
            DEFAULT_CHAR_DELAY_MS,
            batch=batch,
            is_disconnected=request.is_disconnected,
        ):
            yield frame
        if reveal.cancelled:
            logger.debug("Reveal for session %s stopped early", session.id)
            return
        yield sse_event("escalation", escalation.model_dump())
        yield sse_event(
            "done",
            {"completed": True, "html": mount.to_html(), "meta": ASSISTANT_LABEL},
        )

    return StreamingResponse(
        event_stream(), media_type=SSE_MEDIA_TYPE, headers=SSE_HEADERS
    )
