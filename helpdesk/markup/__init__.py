"""Markdown-to-markup rendering and the typewriter reveal engine."""

from .blocks import RULES, parse, render_inline
from .escaper import escape
from .inline import style_inline
from .links import LINK_ICONS, resolve_links
from .mount import HtmlMount, MessageView, MountPoint, TerminalMount
from .nodes import Document
from .reveal import Reveal, iter_reveal, reveal
from .tree import build_tree, parse_inline, to_html


def render_markdown(text: str | None) -> str:
    """Render raw assistant markdown straight to HTML."""
    return to_html(build_tree(parse(text)))


__all__ = [
    "Document",
    "HtmlMount",
    "LINK_ICONS",
    "MessageView",
    "MountPoint",
    "RULES",
    "Reveal",
    "TerminalMount",
    "build_tree",
    "escape",
    "iter_reveal",
    "parse",
    "parse_inline",
    "render_inline",
    "render_markdown",
    "resolve_links",
    "reveal",
    "style_inline",
    "to_html",
]
