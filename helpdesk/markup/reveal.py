"""Structure-preserving typewriter reveal.

The reveal walks the markup tree depth first. Elements are mounted at once as
empty clones, so paragraphs, bullets and headings take their final shape
immediately; text is then written one character at a time into the element
that owns it. ``iter_reveal`` yields after every character, and every yield is
a point at which the mounted tree is complete, well-formed markup.

The host owns the clock. It either pulls steps through a ``Reveal`` handle
(``step`` / ``advance_frame``) or awaits ``Reveal.run`` / ``reveal`` which
sleep on the asyncio loop between characters or batches. Before resuming,
the handle checks that its target is still live and has not been cleared
since the reveal started, and silently stops otherwise.
"""

from __future__ import annotations

import asyncio
import logging
import os
import random
from collections.abc import Iterable, Iterator
from typing import Any, Protocol

from .mount import MountPoint
from .nodes import Document, Element, Node, TextNode
from .tree import build_tree, count_chars

logger = logging.getLogger(__name__)

FRAME_MIN_CHARS = 30
FRAME_MAX_CHARS = 44
DEFAULT_CHAR_DELAY_MS = float(os.getenv("REVEAL_CHAR_DELAY_MS", "12"))


class RevealVisitor(Protocol):
    def mount(self, parent: Any, element: Element) -> Any: ...

    def append_char(self, parent: Any, ch: str) -> None: ...


def iter_reveal(
    visitor: RevealVisitor, nodes: Iterable[Node], parent: Any = None
) -> Iterator[None]:
    """Materialize ``nodes`` through ``visitor``, yielding after each character."""
    for node in nodes:
        if isinstance(node, TextNode):
            for ch in node.text:
                visitor.append_char(parent, ch)
                yield
        else:
            handle = visitor.mount(parent, node)
            yield from iter_reveal(visitor, node.children, handle)


class Reveal:
    """Cancellable handle over one reveal of ``document`` into ``target``."""

    def __init__(
        self,
        target: MountPoint,
        document: Document,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.target = target
        self.nodes = build_tree(document)
        self.total_chars = count_chars(self.nodes)
        self.revealed = 0
        self.done = False
        self.cancelled = False
        self._generation = target.generation
        self._rng = rng or random.Random()
        self._steps = iter_reveal(target, self.nodes)

    def _target_is_live(self) -> bool:
        return (
            self.target.is_still_live()
            and self.target.generation == self._generation
        )

    @property
    def finished(self) -> bool:
        return self.done or self.cancelled

    def cancel(self) -> None:
        if self.finished:
            return
        self.cancelled = True
        self._steps.close()
        logger.debug(
            "Reveal cancelled after %d/%d chars", self.revealed, self.total_chars
        )

    def step(self, count: int = 1) -> int:
        """Write up to ``count`` characters; return how many were written."""
        written = 0
        while written < count and not self.finished:
            if not self._target_is_live():
                self.cancel()
                break
            try:
                next(self._steps)
            except StopIteration:
                self.done = True
                break
            written += 1
        self.revealed += written
        return written

    def advance_frame(self) -> int:
        """Write one variable-size batch, for hosts driven by a frame clock."""
        return self.step(self._rng.randint(FRAME_MIN_CHARS, FRAME_MAX_CHARS))

    def finish(self) -> int:
        """Write everything that is left without suspending."""
        return self.step(self.total_chars - self.revealed + 1)

    async def run(
        self, char_delay_ms: float = DEFAULT_CHAR_DELAY_MS, *, batch: bool = False
    ) -> bool:
        """Drive the reveal on the running event loop.

        Returns ``True`` when every character was written and ``False`` when
        the reveal was cancelled or its target stopped being live.
        """
        delay = max(char_delay_ms, 0.0) / 1000.0
        while not self.finished:
            if batch:
                self.advance_frame()
            else:
                self.step()
            if self.finished:
                break
            await asyncio.sleep(delay)
        return self.done


async def reveal(
    target: MountPoint,
    document: Document,
    char_delay_ms: float = DEFAULT_CHAR_DELAY_MS,
    *,
    batch: bool = False,
    rng: random.Random | None = None,
) -> bool:
    """Reveal ``document`` into ``target`` and resolve when done or cancelled."""
    return await Reveal(target, document, rng=rng).run(char_delay_ms, batch=batch)
