"""Node types produced by the block parser and consumed by the reveal engine.

Two layers live here:

- the *document* layer (``Block`` and ``Span`` variants), produced once per
  rendered message and never mutated afterwards;
- the *markup* layer (``Element`` and ``TextNode``), a small tag tree that any
  target (in-memory HTML, terminal, browser bridge) can materialize.

Text carried by ``Text``, ``Code``, ``StepHeading`` and ``TextNode`` is raw,
unescaped text. Escaping happens once, when a node is serialized.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Strong:
    children: tuple[Span, ...]


@dataclass(frozen=True)
class Emphasis:
    children: tuple[Span, ...]


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class Link:
    """Anchor span. ``label`` never contains another ``Link``."""

    href: str
    label: tuple[Span, ...]


Span = Union[Text, Strong, Emphasis, Code, Link]


@dataclass(frozen=True)
class Heading:
    level: int
    spans: tuple[Span, ...]


@dataclass(frozen=True)
class StepHeading:
    ordinal: int
    title: str


@dataclass(frozen=True)
class UnorderedList:
    items: tuple[tuple[Span, ...], ...]


@dataclass(frozen=True)
class OrderedList:
    items: tuple[tuple[Span, ...], ...]
    start: int = 1


@dataclass(frozen=True)
class Paragraph:
    spans: tuple[Span, ...]


@dataclass(frozen=True)
class Break:
    pass


Block = Union[Heading, StepHeading, UnorderedList, OrderedList, Paragraph, Break]
Document = tuple[Block, ...]


@dataclass
class TextNode:
    text: str


@dataclass
class Element:
    tag: str
    attrs: tuple[tuple[str, str], ...] = ()
    children: list[Node] = field(default_factory=list)

    def empty_clone(self) -> Element:
        return Element(self.tag, self.attrs)


Node = Union[Element, TextNode]

VOID_TAGS = frozenset({"br"})


__all__ = [
    "Block",
    "Break",
    "Code",
    "Document",
    "Element",
    "Emphasis",
    "Heading",
    "Link",
    "Node",
    "OrderedList",
    "Paragraph",
    "Span",
    "StepHeading",
    "Strong",
    "Text",
    "TextNode",
    "UnorderedList",
    "VOID_TAGS",
]
