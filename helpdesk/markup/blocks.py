"""Line-oriented block parser for assistant markdown.

Each source line is matched against ``RULES`` from top to bottom and the first
rule that matches decides what the line becomes. The parser keeps a single
piece of open-group state, the kind of list currently open (if any), so the
two list kinds are mutually exclusive by construction.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import NamedTuple

from .escaper import escape
from .inline import style_inline
from .links import resolve_links
from .nodes import (
    Block,
    Break,
    Document,
    Heading,
    OrderedList,
    Paragraph,
    Span,
    StepHeading,
    UnorderedList,
)
from .tree import parse_inline

MAX_HEADING_LEVEL = 3

_HEADING = re.compile(r"^(#{1,6})\s+(.+)$")
_STEP_HEADING = re.compile(r"^(\d+)\.\s+(.+?):\s*$")
_UNORDERED_ITEM = re.compile(r"^[-•]\s+(.+)$")
_ORDERED_ITEM = re.compile(r"^(\d+)\.\s+(.+)$")
_BLANK = re.compile(r"^$")
_PARAGRAPH = re.compile(r"^(.+)$")

_UNORDERED = "unordered"
_ORDERED = "ordered"


def render_inline(text: str) -> tuple[Span, ...]:
    """Run raw inline text through escaper, link resolver and stylist."""
    return parse_inline(style_inline(resolve_links(escape(text))))


class _ParserState:
    def __init__(self, lines: list[str]) -> None:
        self.lines = lines
        self.index = 0
        self.blocks: list[Block] = []
        self.open_kind: str | None = None
        self.open_items: list[tuple[Span, ...]] = []
        self.open_start = 1

    def next_line(self) -> str | None:
        if self.index + 1 < len(self.lines):
            return self.lines[self.index + 1]
        return None

    def emit(self, block: Block) -> None:
        if isinstance(block, Break) and not self.blocks:
            return
        self.blocks.append(block)

    def close_lists(self) -> None:
        if self.open_kind == _UNORDERED:
            self.emit(UnorderedList(tuple(self.open_items)))
        elif self.open_kind == _ORDERED:
            self.emit(OrderedList(tuple(self.open_items), start=self.open_start))
        self.open_kind = None
        self.open_items = []
        self.open_start = 1

    def add_item(self, kind: str, item: tuple[Span, ...], start: int = 1) -> None:
        if self.open_kind != kind:
            self.close_lists()
            self.open_kind = kind
            self.open_start = start
        self.open_items.append(item)


def _heading(state: _ParserState, match: re.Match[str]) -> None:
    state.close_lists()
    level = min(len(match.group(1)), MAX_HEADING_LEVEL)
    state.emit(Heading(level, render_inline(match.group(2))))


def _step_heading(state: _ParserState, match: re.Match[str]) -> None:
    state.close_lists()
    state.emit(StepHeading(int(match.group(1)), match.group(2).strip()))


def _unordered_item(state: _ParserState, match: re.Match[str]) -> None:
    state.add_item(_UNORDERED, render_inline(match.group(1)))


def _ordered_item(state: _ParserState, match: re.Match[str]) -> None:
    state.add_item(_ORDERED, render_inline(match.group(2)), start=int(match.group(1)))


def _blank(state: _ParserState, match: re.Match[str]) -> None:
    following = state.next_line()
    if (
        state.open_kind == _ORDERED
        and following is not None
        and _classify(following).name == "ordered_item"
    ):
        return
    state.close_lists()
    state.emit(Break())


def _paragraph(state: _ParserState, match: re.Match[str]) -> None:
    state.close_lists()
    state.emit(Paragraph(render_inline(match.group(1))))


class LineRule(NamedTuple):
    name: str
    pattern: re.Pattern[str]
    handler: Callable[[_ParserState, re.Match[str]], None]


RULES: tuple[LineRule, ...] = (
    LineRule("heading", _HEADING, _heading),
    LineRule("step_heading", _STEP_HEADING, _step_heading),
    LineRule("unordered_item", _UNORDERED_ITEM, _unordered_item),
    LineRule("ordered_item", _ORDERED_ITEM, _ordered_item),
    LineRule("blank", _BLANK, _blank),
    LineRule("paragraph", _PARAGRAPH, _paragraph),
)


def _classify(line: str) -> LineRule:
    for rule in RULES:
        if rule.pattern.match(line):
            return rule
    return RULES[-1]


def split_lines(document: str | None) -> list[str]:
    text = (document or "").replace("\r\n", "\n").replace("\r", "\n")
    return [line.strip() for line in text.split("\n")]


def parse(document: str | None) -> Document:
    """Parse raw markdown into an immutable tuple of blocks. Never raises."""
    state = _ParserState(split_lines(document))
    for index, line in enumerate(state.lines):
        state.index = index
        for rule in RULES:
            match = rule.pattern.match(line)
            if match is not None:
                rule.handler(state, match)
                break
    state.close_lists()
    return tuple(state.blocks)
