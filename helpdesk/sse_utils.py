"""SSE helpers for streaming a typewriter reveal.

Each frame carries the full markup of the bubble after a batch of characters
has been written, so the widget can swap ``innerHTML`` and never sees an
unbalanced tag.

Event format produced:
- "event: frame" with ``{"html": ..., "revealed": n, "total": m}``
- "event: escalation" with ``{"offer": bool, "reason": ...}`` (chat turns)
- "event: done" with ``{"completed": bool, "html": <final markup>}``
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable

from .markup import HtmlMount, Reveal

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
SSE_MEDIA_TYPE = "text/event-stream; charset=utf-8"


def sse_event(event: str, data: object) -> str:
    """Format one Server-Sent Event with a JSON payload on a single line."""
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


async def sse_reveal_frames(
    reveal: Reveal,
    mount: HtmlMount,
    char_delay_ms: float,
    *,
    batch: bool = True,
    is_disconnected: Callable[[], Awaitable[bool]] | None = None,
) -> AsyncIterator[str]:
    """Drive ``reveal`` and emit one ``frame`` event per step.

    In batch mode a step writes 30 to 44 characters and the stream sleeps for
    that many character delays; otherwise every character is its own frame.
    A disconnected client cancels the reveal before the next step.
    """
    delay = max(char_delay_ms, 0.0) / 1000.0
    while not reveal.finished:
        if is_disconnected is not None and await is_disconnected():
            reveal.cancel()
            break
        written = reveal.advance_frame() if batch else reveal.step()
        if written:
            yield sse_event(
                "frame",
                {
                    "html": mount.to_html(),
                    "revealed": reveal.revealed,
                    "total": reveal.total_chars,
                },
            )
        if reveal.finished:
            break
        await asyncio.sleep(delay * max(written, 1))
