"""Markup escaping for raw message text."""

from __future__ import annotations

import re

_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}
_RESERVED = re.compile(r"[&<>\"']")


def escape(raw: str | None) -> str:
    """Replace the five markup-reserved characters with their entities.

    Must run exactly once per raw segment: a second pass re-encodes the
    ``&`` of entities produced by the first one.
    """
    if not raw:
        return ""
    return _RESERVED.sub(lambda m: _ESCAPES[m.group(0)], raw)
