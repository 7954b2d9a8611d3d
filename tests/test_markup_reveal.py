"""Tests for the typewriter reveal engine and its mount points."""

import asyncio
import io
import random
from html.parser import HTMLParser

import pytest

from helpdesk.markup import (
    HtmlMount,
    MessageView,
    Reveal,
    TerminalMount,
    parse,
    render_markdown,
    reveal,
)
from helpdesk.markup.reveal import FRAME_MAX_CHARS, FRAME_MIN_CHARS

SAMPLE = "\n".join(
    [
        "### Outlook fix",
        "Try **File → Account Settings** and [Docs](https://support.example.com/a?b=1&c=2).",
        "- Restart *Outlook*",
        "- Check `ost` size",
        "",
        "1. Sign out:",
        "1. Close the app",
        "",
        "2. Open it again",
        "Still stuck? <b>ask</b> me",
    ]
)


class _BalanceChecker(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.stack = []
        self.errors = []
        self.text = []

    def handle_starttag(self, tag, attrs):
        if tag != "br":
            self.stack.append(tag)

    def handle_endtag(self, tag):
        if not self.stack or self.stack.pop() != tag:
            self.errors.append(tag)

    def handle_data(self, data):
        self.text.append(data)


def _check(markup):
    checker = _BalanceChecker()
    checker.feed(markup)
    checker.close()
    return checker


def test_every_frame_is_well_formed():
    mount = HtmlMount()
    handle = Reveal(mount, parse(SAMPLE))
    final_text = "".join(_check(render_markdown(SAMPLE)).text)
    frames = 0

    while handle.step():
        checker = _check(mount.to_html())
        assert checker.errors == []
        assert checker.stack == []
        assert final_text.startswith("".join(checker.text))
        frames += 1

    assert handle.done
    assert frames == handle.total_chars == len(final_text)
    assert mount.to_html() == render_markdown(SAMPLE)


def test_structure_is_mounted_before_text():
    mount = HtmlMount()
    handle = Reveal(mount, parse("- first\n- second"))

    handle.step()

    assert mount.to_html() == "<ul><li>f</li></ul>"


def test_empty_document_resolves_immediately():
    mount = HtmlMount()

    assert asyncio.run(reveal(mount, parse(""), 0)) is True
    assert mount.to_html() == ""


def test_run_reveals_everything():
    mount = HtmlMount()

    completed = asyncio.run(reveal(mount, parse(SAMPLE), 0))

    assert completed is True
    assert mount.to_html() == render_markdown(SAMPLE)


def test_clearing_the_view_stops_the_reveal():
    view = MessageView()
    mount = view.new_mount()
    handle = Reveal(mount, parse("hello world"))

    assert handle.step(3) == 3
    view.clear()

    assert handle.step(5) == 0
    assert handle.cancelled
    assert not handle.done
    assert mount.to_html() == "<p>hel</p>"
    assert view.to_html() == ""


def test_clearing_the_mount_stops_the_old_reveal():
    mount = HtmlMount()
    old = Reveal(mount, parse("a\n\nold"))

    assert old.step(1) == 1
    mount.clear()
    Reveal(mount, parse("new")).finish()

    assert old.step(5) == 0
    assert old.cancelled
    assert mount.to_html() == "<p>new</p>"


def test_reveal_started_after_clear_runs_to_completion():
    mount = HtmlMount()
    mount.clear()

    completed = asyncio.run(reveal(mount, parse("fresh"), 0))

    assert completed is True
    assert mount.to_html() == "<p>fresh</p>"


def test_cancelled_run_resolves_false():
    async def scenario():
        mount = HtmlMount()
        handle = Reveal(mount, parse("abcdef" * 10))
        task = asyncio.create_task(handle.run(0))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        mount.detach()
        return await task, handle

    completed, handle = asyncio.run(scenario())

    assert completed is False
    assert 0 < handle.revealed < handle.total_chars


def test_cancel_is_idempotent():
    handle = Reveal(HtmlMount(), parse("abc"))

    handle.cancel()
    handle.cancel()

    assert handle.finished
    assert handle.step() == 0


def test_batch_frames_write_between_30_and_44_characters():
    mount = HtmlMount()
    handle = Reveal(mount, parse("x" * 500), rng=random.Random(7))
    sizes = []

    while not handle.finished:
        sizes.append(handle.advance_frame())

    assert sum(sizes) == 500
    assert all(FRAME_MIN_CHARS <= size <= FRAME_MAX_CHARS for size in sizes[:-2])
    assert mount.to_html() == "<p>" + "x" * 500 + "</p>"


def test_finish_writes_the_rest():
    mount = HtmlMount()
    handle = Reveal(mount, parse("**done** now"))
    handle.step(2)

    handle.finish()

    assert handle.done
    assert mount.to_html() == "<p><strong>done</strong> now</p>"


def test_message_view_wraps_each_bubble():
    view = MessageView()
    first = view.new_mount()
    second = view.new_mount()
    Reveal(first, parse("one")).finish()
    Reveal(second, parse("two")).finish()

    assert view.to_html() == "<div><p>one</p></div><div><p>two</p></div>"


def test_terminal_mount_writes_plain_text():
    stream = io.StringIO()
    mount = TerminalMount(stream)

    asyncio.run(reveal(mount, parse("# Title\n- a\n- b\n3. x"), 0))

    out = stream.getvalue()
    assert out.startswith("Title")
    assert "  • a\n  • b" in out
    assert "  3. x" in out


def test_closed_terminal_mount_stops_reveal():
    mount = TerminalMount(io.StringIO())
    handle = Reveal(mount, parse("abc"))
    mount.close()

    assert handle.step() == 0
    assert handle.cancelled


@pytest.mark.parametrize("char_delay_ms", [0, -5])
def test_non_positive_delay_is_allowed(char_delay_ms):
    assert asyncio.run(reveal(HtmlMount(), parse("hi"), char_delay_ms)) is True


def test_clearing_the_terminal_stops_the_old_reveal():
    stream = io.StringIO()
    mount = TerminalMount(stream)
    old = Reveal(mount, parse("abc"))

    old.step(1)
    mount.clear()
    Reveal(mount, parse("xyz")).finish()

    assert old.step(5) == 0
    assert old.cancelled
    assert stream.getvalue() == "axyz"
