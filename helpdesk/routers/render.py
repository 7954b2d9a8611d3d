"""Markdown rendering endpoints used by the widget and for previews."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from ..markup import HtmlMount, Reveal, parse, to_html
from ..markup.reveal import DEFAULT_CHAR_DELAY_MS
from ..markup.tree import block_element
from ..sse_utils import SSE_HEADERS, SSE_MEDIA_TYPE, sse_event, sse_reveal_frames

router = APIRouter(prefix="/api", tags=["render"])


class RenderRequest(BaseModel):
    text: str = ""


class RenderedBlock(BaseModel):
    type: str
    html: str


class RenderResponse(BaseModel):
    html: str
    blocks: list[RenderedBlock]


class RenderStreamRequest(BaseModel):
    text: str = ""
    batch: bool = True
    char_delay_ms: float | None = None


_BLOCK_TYPES = {
    "Heading": "heading",
    "StepHeading": "step_heading",
    "UnorderedList": "unordered_list",
    "OrderedList": "ordered_list",
    "Paragraph": "paragraph",
    "Break": "break",
}


@router.post("/render", response_model=RenderResponse)
def render(payload: RenderRequest) -> RenderResponse:
    """Render markdown to sanitized HTML, also returned block by block."""
    blocks = [
        RenderedBlock(
            type=_BLOCK_TYPES[type(block).__name__],
            html=to_html([block_element(block)]),
        )
        for block in parse(payload.text)
    ]
    return RenderResponse(html="".join(b.html for b in blocks), blocks=blocks)


@router.post("/render/stream")
async def render_stream(payload: RenderStreamRequest, request: Request):
    """Typewriter preview of ``text`` streamed as SSE frames."""
    mount = HtmlMount()
    reveal = Reveal(mount, parse(payload.text))
    delay = (
        DEFAULT_CHAR_DELAY_MS if payload.char_delay_ms is None else payload.char_delay_ms
    )

    async def event_stream():
        async for frame in sse_reveal_frames(
            reveal,
            mount,
            delay,
            batch=payload.batch,
            is_disconnected=request.is_disconnected,
        ):
            yield frame
        if reveal.cancelled:
            return
        yield sse_event("done", {"completed": reveal.done, "html": mount.to_html()})

    return StreamingResponse(
        event_stream(), media_type=SSE_MEDIA_TYPE, headers=SSE_HEADERS
    )
