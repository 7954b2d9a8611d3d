"""Tests for chat sessions and the session registry."""

import itertools

import pytest

from helpdesk.conversations import SessionNotFoundError, SessionRegistry
from helpdesk.conversations.sessions import DEFAULT_TITLE
from helpdesk.markup import HtmlMount, MessageView, parse


@pytest.fixture
def registry():
    ticks = itertools.count(1_700_000_000, 0.001)
    return SessionRegistry(clock=lambda: next(ticks))


def test_new_chat_is_current_and_newest_first(registry):
    first = registry.new_chat()
    second = registry.new_chat()

    assert registry.current() is second
    assert [s.id for s in registry.sessions()] == [second.id, first.id]
    assert first.id.startswith("c_")
    assert first.title == DEFAULT_TITLE


def test_ids_stay_unique_with_a_frozen_clock():
    registry = SessionRegistry(clock=lambda: 1.0)

    ids = {registry.new_chat().id for _ in range(3)}

    assert ids == {"c_1000", "c_1000_1", "c_1000_2"}


def test_title_comes_from_first_user_message(registry):
    session = registry.new_chat()

    session.add_user_turn("My laptop will not connect to the office Wi-Fi at all")
    session.add_user_turn("second message")

    assert session.title == "My laptop will not connect to the office"


def test_initial_title_is_kept(registry):
    session = registry.new_chat("Printer")

    session.add_user_turn("jammed")

    assert session.title == "Printer"


def test_get_unknown_session_raises(registry):
    with pytest.raises(SessionNotFoundError):
        registry.get("c_missing")
    with pytest.raises(SessionNotFoundError):
        registry.select("c_missing")


def test_history_marks_active_and_truncates(registry):
    old = registry.new_chat()
    old.title = "x" * 60
    registry.new_chat()
    registry.select(old.id)

    history = registry.history()

    assert [item["active"] for item in history] == [False, True]
    assert history[1]["title"] == "x" * 48


def test_assistant_turn_runs_classifier(registry):
    session = registry.new_chat()
    session.add_user_turn("outlook keeps asking for password")
    assert session.add_assistant_turn("Re-enter it.").should_offer is False

    session.add_user_turn("still not working")
    decision = session.add_assistant_turn("Let's try MFA.", meta="TriKash AI")

    assert decision.should_offer is True
    assert session.escalation.offered is True
    assert session.transcript()[-1] == {
        "role": "assistant",
        "content": "Let's try MFA.",
        "meta": "TriKash AI",
    }
    assert session.messages_for_model()[-1] == {
        "role": "assistant",
        "content": "Let's try MFA.",
    }


def test_begin_reveal_cancels_previous(registry):
    session = registry.new_chat()
    first = session.begin_reveal(HtmlMount(), parse("first reply"))
    first.step(2)

    second = session.begin_reveal(HtmlMount(), parse("second reply"))

    assert first.cancelled
    assert session.active_reveal is second
    assert not second.finished


def test_switching_sessions_cancels_previous_reveal(registry):
    first = registry.new_chat()
    handle = first.begin_reveal(HtmlMount(), parse("a long answer"))
    handle.step()
    second = registry.new_chat()

    assert handle.cancelled
    assert first.active_reveal is None

    other = second.begin_reveal(HtmlMount(), parse("another"))
    registry.select(first.id)
    assert other.cancelled


def test_selecting_current_session_keeps_reveal(registry):
    session = registry.new_chat()
    handle = session.begin_reveal(HtmlMount(), parse("answer"))

    registry.select(session.id)

    assert not handle.cancelled


def test_cleared_view_stops_session_reveal(registry):
    view = MessageView()
    session = registry.new_chat()
    handle = session.begin_reveal(view.new_mount(), parse("answer"))

    view.clear()

    assert handle.step() == 0
    assert handle.cancelled
