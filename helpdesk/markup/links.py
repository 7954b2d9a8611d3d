"""Labeled link and bare URL detection on escaped text.

Code spans are opaque to both passes. Labeled links ``[label](url)`` are
resolved first; the bare-URL pass then only looks at the text *between*
anchors, so an anchor's href or label is never linked a second time.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from .escaper import escape

LINK_ICONS = {
    "linkedin": "🔗",
    "instagram": "📸",
}

_CODE_SPAN = re.compile(r"(`[^`\n]+`)")
_LABELED_LINK = re.compile(r"\[([^\[\]\n]+)\]\((https?://[^\s)`*]+)\)")
# Anchors and code spans are opaque to the bare-URL pass.
_OPAQUE = re.compile(r"(<a\b[^>]*>.*?</a>|`[^`\n]+`)", re.DOTALL)
# Stops at emphasis markers, backticks and escaped quotes or angle brackets.
_BARE_URL = re.compile(r"https?://(?:(?!&gt;|&lt;|&quot;|&#39;)[^\s<`*])+")
_TRAILING_PUNCTUATION = re.compile(r"[_.,:!?]+$")


def anchor(href: str, label: str) -> str:
    """Return anchor markup for an already escaped ``href`` and ``label``."""
    return (
        f'<a href="{href}" target="_blank" rel="noopener noreferrer">{label}</a>'
    )


def _label_with_icon(label: str, icons: dict[str, str]) -> str:
    glyph = icons.get(label.strip().lower())
    if not glyph:
        return label
    return f"{escape(glyph)} {label}"


def _link_bare_url(match: re.Match[str]) -> str:
    url = match.group(0)
    href = _TRAILING_PUNCTUATION.sub("", url)
    if href.endswith("://"):
        return url
    return anchor(href, href) + url[len(href):]


def _split_every_other(
    pattern: re.Pattern[str], text: str, func: Callable[[str], str]
) -> str:
    parts = pattern.split(text)
    for index in range(0, len(parts), 2):
        parts[index] = func(parts[index])
    return "".join(parts)


def resolve_links(escaped_line: str, icons: dict[str, str] | None = None) -> str:
    """Convert labeled links and bare ``http(s)://`` URLs into anchors."""
    if not escaped_line:
        return ""
    icon_map = LINK_ICONS if icons is None else icons

    def _replace_labeled(match: re.Match[str]) -> str:
        label, href = match.group(1), match.group(2)
        return anchor(href, _label_with_icon(label, icon_map))

    linked = _split_every_other(
        _CODE_SPAN, escaped_line, lambda text: _LABELED_LINK.sub(_replace_labeled, text)
    )
    return _split_every_other(
        _OPAQUE, linked, lambda text: _BARE_URL.sub(_link_bare_url, text)
    )
