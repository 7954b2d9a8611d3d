"""Mount points the reveal engine writes into.

A mount point only has to support a handful of operations: attach a top-level
element, mount an element under a parent handle, append one character under a
parent handle, clear itself and report whether it is still live. Handles are
opaque to the engine; ``None`` always means the mount point's root.

Every ``clear`` bumps the mount point's ``generation``. A reveal remembers the
generation it started under and stops once it changes, so a cleared and
reused mount point only ever receives writes from the newest reveal.
"""

from __future__ import annotations

import sys
from typing import Any, Protocol, TextIO

from .nodes import Element, Node, TextNode
from .tree import to_html


class MountPoint(Protocol):
    generation: int

    def attach_child(self, element: Element) -> Any: ...

    def mount(self, parent: Any, element: Element) -> Any: ...

    def append_char(self, parent: Any, ch: str) -> None: ...

    def clear(self) -> None: ...

    def is_still_live(self) -> bool: ...


class HtmlMount:
    """In-memory tree mirroring the body of one chat bubble."""

    def __init__(self, view: MessageView | None = None) -> None:
        self.children: list[Node] = []
        self.view = view
        self._attached = True
        self.generation = 0

    def attach_child(self, element: Element) -> Element:
        clone = element.empty_clone()
        self.children.append(clone)
        return clone

    def mount(self, parent: Element | None, element: Element) -> Element:
        if parent is None:
            return self.attach_child(element)
        clone = element.empty_clone()
        parent.children.append(clone)
        return clone

    def append_char(self, parent: Element | None, ch: str) -> None:
        siblings = self.children if parent is None else parent.children
        if siblings and isinstance(siblings[-1], TextNode):
            siblings[-1].text += ch
        else:
            siblings.append(TextNode(ch))

    def clear(self) -> None:
        self.children = []
        self.generation += 1

    def detach(self) -> None:
        self._attached = False

    def is_still_live(self) -> bool:
        return self._attached

    def to_html(self) -> str:
        return to_html(self.children)


class MessageView:
    """The chat log: an ordered container of bubble mounts.

    Clearing the view (switching conversation, starting a new chat) detaches
    every mount it holds, which stops any reveal still writing into them.
    """

    def __init__(self) -> None:
        self.mounts: list[HtmlMount] = []

    def new_mount(self) -> HtmlMount:
        mount = HtmlMount(view=self)
        self.mounts.append(mount)
        return mount

    def clear(self) -> None:
        for mount in self.mounts:
            mount.detach()
        self.mounts = []

    def to_html(self) -> str:
        return "".join(f"<div>{mount.to_html()}</div>" for mount in self.mounts)


class _TerminalHandle:
    def __init__(self, tag: str, ordered: bool = False, start: int = 1) -> None:
        self.tag = tag
        self.ordered = ordered
        self.counter = start


class TerminalMount:
    """Plain-text mount point used by the ``typewriter`` command line tool."""

    _BLOCK_TAGS = {"p", "h1", "h2", "h3", "h4", "ul", "ol"}

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout
        self._started = False
        self._closed = False
        self.generation = 0

    def _newline(self) -> None:
        if self._started:
            self.stream.write("\n")

    def attach_child(self, element: Element) -> _TerminalHandle:
        return self.mount(None, element)

    def mount(self, parent: _TerminalHandle | None, element: Element) -> _TerminalHandle:
        tag = element.tag
        if tag in self._BLOCK_TAGS and parent is None:
            self._newline()
        if tag == "br":
            self._newline()
        if tag == "li" and parent is not None:
            self._newline()
            if parent.ordered:
                self.stream.write(f"  {parent.counter}. ")
                parent.counter += 1
            else:
                self.stream.write("  • ")
        self._started = True
        attrs = dict(element.attrs)
        start = int(attrs.get("start", "1")) if tag == "ol" else 1
        return _TerminalHandle(tag, ordered=tag == "ol", start=start)

    def append_char(self, parent: _TerminalHandle | None, ch: str) -> None:
        self._started = True
        self.stream.write(ch)
        self.stream.flush()

    def clear(self) -> None:
        self._started = False
        self.generation += 1

    def close(self) -> None:
        self._closed = True

    def is_still_live(self) -> bool:
        return not self._closed and not getattr(self.stream, "closed", False)
