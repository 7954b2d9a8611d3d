"""Conversion between inline markup, document nodes and the markup tree."""

from __future__ import annotations

import warnings
from collections.abc import Iterable

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, NavigableString, Tag

from .escaper import escape
from .nodes import (
    VOID_TAGS,
    Block,
    Break,
    Code,
    Element,
    Emphasis,
    Heading,
    Link,
    Node,
    OrderedList,
    Paragraph,
    Span,
    StepHeading,
    Strong,
    Text,
    TextNode,
    UnorderedList,
)

# Short lines such as "setup.exe" look like file names to BeautifulSoup.
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

LINK_ATTRS = (("target", "_blank"), ("rel", "noopener noreferrer"))


def _spans_from(contents: Iterable[object], *, in_link: bool = False) -> list[Span]:
    spans: list[Span] = []
    for item in contents:
        if isinstance(item, NavigableString):
            text = str(item)
            if text:
                spans.append(Text(text))
            continue
        if not isinstance(item, Tag):
            continue
        name = (item.name or "").lower()
        if name == "strong":
            spans.append(Strong(tuple(_spans_from(item.contents, in_link=in_link))))
        elif name == "em":
            spans.append(Emphasis(tuple(_spans_from(item.contents, in_link=in_link))))
        elif name == "code":
            spans.append(Code(item.get_text()))
        elif name == "a" and not in_link:
            href = item.get("href") or ""
            if isinstance(href, list):
                href = " ".join(href)
            spans.append(Link(href, tuple(_spans_from(item.contents, in_link=True))))
        else:
            # Unknown tags and nested anchors are flattened into their content.
            spans.extend(_spans_from(item.contents, in_link=in_link))
    return spans


def parse_inline(markup: str) -> tuple[Span, ...]:
    """Parse the output of the inline pipeline into a tuple of spans."""
    if not markup:
        return ()
    soup = BeautifulSoup(markup, "html.parser")
    return tuple(_spans_from(soup.contents))


def _span_node(span: Span) -> Node:
    if isinstance(span, Text):
        return TextNode(span.text)
    if isinstance(span, Strong):
        return Element("strong", children=_span_nodes(span.children))
    if isinstance(span, Emphasis):
        return Element("em", children=_span_nodes(span.children))
    if isinstance(span, Code):
        return Element("code", children=[TextNode(span.text)])
    if isinstance(span, Link):
        return Element(
            "a",
            attrs=(("href", span.href),) + LINK_ATTRS,
            children=_span_nodes(span.label),
        )
    raise TypeError(f"Unsupported span: {span!r}")


def _span_nodes(spans: Iterable[Span]) -> list[Node]:
    return [_span_node(span) for span in spans]


def _list_items(items: Iterable[tuple[Span, ...]]) -> list[Node]:
    return [Element("li", children=_span_nodes(item)) for item in items]


def block_element(block: Block) -> Element:
    """Materialize one block as a markup element."""
    if isinstance(block, Heading):
        return Element(f"h{block.level}", children=_span_nodes(block.spans))
    if isinstance(block, StepHeading):
        return Element(
            "h4",
            attrs=(("class", "step"),),
            children=[TextNode(f"{block.ordinal}. {block.title}")],
        )
    if isinstance(block, UnorderedList):
        return Element("ul", children=_list_items(block.items))
    if isinstance(block, OrderedList):
        attrs = (("start", str(block.start)),) if block.start != 1 else ()
        return Element("ol", attrs=attrs, children=_list_items(block.items))
    if isinstance(block, Paragraph):
        return Element("p", children=_span_nodes(block.spans))
    if isinstance(block, Break):
        return Element("br")
    raise TypeError(f"Unsupported block: {block!r}")


def build_tree(document: Iterable[Block]) -> list[Element]:
    return [block_element(block) for block in document]


def _open_tag(element: Element) -> str:
    attrs = "".join(f' {name}="{escape(value)}"' for name, value in element.attrs)
    return f"<{element.tag}{attrs}>"


def to_html(nodes: Iterable[Node]) -> str:
    """Serialize markup nodes. Text is escaped here and nowhere else."""
    out: list[str] = []
    for node in nodes:
        if isinstance(node, TextNode):
            out.append(escape(node.text))
            continue
        out.append(_open_tag(node))
        if node.tag in VOID_TAGS:
            continue
        out.append(to_html(node.children))
        out.append(f"</{node.tag}>")
    return "".join(out)


def count_chars(nodes: Iterable[Node]) -> int:
    """Number of text characters a reveal of ``nodes`` will write."""
    total = 0
    for node in nodes:
        if isinstance(node, TextNode):
            total += len(node.text)
        else:
            total += count_chars(node.children)
    return total
