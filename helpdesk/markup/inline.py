"""Inline emphasis, strong and code-span styling for escaped text."""

from __future__ import annotations

import re

_ANCHOR = re.compile(r"<a\b[^>]*>.*?</a>", re.DOTALL)
_CODE = re.compile(r"`([^`\n]+)`")
_STRONG = re.compile(r"\*\*(.+?)\*\*")
_EMPHASIS_STAR = re.compile(r"(?<!\*)\*(?![\s*])(.+?)(?<![\s*])\*(?!\*)")
_EMPHASIS_UNDERSCORE = re.compile(r"(?<!\w)_(?![\s_])(.+?)(?<![\s_])_(?!\w)")
_ANCHOR_SLOT = re.compile("\x01(\\d+)\x01")
_CODE_SLOT = re.compile("\x00(\\d+)\x00")


def style_inline(escaped_line: str) -> str:
    """Apply strong, emphasis and code spans to one escaped line.

    Anchors produced by the link resolver and code spans are cut out first and
    put back last, so their content is never styled while strong or emphasis
    can still wrap them whole. Strong is matched before emphasis so the inner
    ``*`` of ``**x**`` never opens an emphasis.
    """
    if not escaped_line:
        return ""
    anchors: list[str] = []
    codes: list[str] = []

    def _stash_anchor(match: re.Match[str]) -> str:
        anchors.append(match.group(0))
        return f"\x01{len(anchors) - 1}\x01"

    def _stash_code(match: re.Match[str]) -> str:
        codes.append(match.group(1))
        return f"\x00{len(codes) - 1}\x00"

    text = _ANCHOR.sub(_stash_anchor, escaped_line)
    text = _CODE.sub(_stash_code, text)
    text = _STRONG.sub(r"<strong>\1</strong>", text)
    text = _EMPHASIS_STAR.sub(r"<em>\1</em>", text)
    text = _EMPHASIS_UNDERSCORE.sub(r"<em>\1</em>", text)
    text = _CODE_SLOT.sub(lambda m: f"<code>{codes[int(m.group(1))]}</code>", text)
    return _ANCHOR_SLOT.sub(lambda m: anchors[int(m.group(1))], text)
