"""Tests for the reply service and its system prompt."""

import pytest
from openai import APIConnectionError

from helpdesk.replies import (
    PERSONA_PROMPT,
    ReplyService,
    ReplyUpstreamError,
    build_system_prompt,
    mock_reply,
    truncate_messages,
)
from helpdesk.replies.prompts import language_instruction
from helpdesk.replies.service import EMPTY_REPLY


def _turns(*contents):
    roles = ["user", "assistant"]
    return [
        {"role": roles[i % 2], "content": content} for i, content in enumerate(contents)
    ]


def test_mock_reply_topics():
    assert mock_reply(_turns("My WireGuard VPN drops")).startswith("**VPN Setup")
    assert mock_reply(_turns("outlook won't sync")).startswith("**Outlook fix")
    assert "demo mode" in mock_reply(_turns("printer jam"))
    assert "demo mode" in mock_reply([])


def test_truncate_keeps_system_and_latest_turns():
    messages = [{"role": "system", "content": "sys"}] + _turns(
        *[str(i) for i in range(30)]
    )

    kept = truncate_messages(messages, 20)

    assert len(kept) == 20
    assert kept[0]["content"] == "sys"
    assert [m["content"] for m in kept[1:]] == [str(i) for i in range(11, 30)]


def test_truncate_short_history_untouched():
    messages = [{"role": "system", "content": "sys"}] + _turns("a", "b")

    assert truncate_messages(messages, 20) == messages


def test_system_prompt_override(monkeypatch):
    monkeypatch.setenv("OPENAI_LANG", "en")
    monkeypatch.delenv("SYSTEM_PROMPT", raising=False)
    assert build_system_prompt("hi").startswith(PERSONA_PROMPT)

    monkeypatch.setenv("SYSTEM_PROMPT", "Be brief.")
    assert build_system_prompt("hi") == "Be brief.\n\nReply in en."


def test_language_instruction_falls_back_on_empty_text(monkeypatch):
    monkeypatch.delenv("OPENAI_LANG", raising=False)

    assert language_instruction("   ") == "Reply in the same language as the question."


def test_demo_mode_without_client(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    service = ReplyService(use_mock=False)

    assert service.demo_mode
    assert service.reply(_turns("vpn help")).startswith("**VPN Setup")


def test_use_mock_wins_over_client(dummy_client, dummy_completions):
    service = ReplyService(dummy_client, use_mock=True)

    assert service.reply(_turns("outlook")).startswith("**Outlook fix")
    assert dummy_completions.calls == []


def test_reply_calls_completion_api(monkeypatch, dummy_client, dummy_completions):
    monkeypatch.setenv("OPENAI_LANG", "en")
    service = ReplyService(dummy_client, model="gpt-4o-mini", use_mock=False)

    text = service.reply(_turns("wifi slow"))

    assert text == "Try restarting the **router**."
    call = dummy_completions.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == 0.2
    assert call["max_tokens"] == 700
    assert call["messages"][0]["role"] == "system"
    assert call["messages"][-1] == {"role": "user", "content": "wifi slow"}


def test_long_history_is_truncated(monkeypatch, dummy_client, dummy_completions):
    monkeypatch.setenv("OPENAI_LANG", "en")
    service = ReplyService(dummy_client, use_mock=False)

    service.reply(_turns(*[f"m{i}" for i in range(25)]))

    messages = dummy_completions.calls[0]["messages"]
    assert len(messages) == 20
    assert messages[-1]["content"] == "m24"


def test_empty_reply_placeholder(monkeypatch, dummy_client, dummy_completions):
    monkeypatch.setenv("OPENAI_LANG", "en")
    dummy_completions.content = "   "
    service = ReplyService(dummy_client, use_mock=False)

    assert service.reply(_turns("hi")) == EMPTY_REPLY


def test_content_parts_are_joined(monkeypatch, dummy_client, dummy_completions):
    monkeypatch.setenv("OPENAI_LANG", "en")
    dummy_completions.content = [{"type": "text", "text": "Hello "}, {"text": "there"}]
    service = ReplyService(dummy_client, use_mock=False)

    assert service.reply(_turns("hi")) == "Hello there"


def _connection_error():
    import httpx

    return APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))


def test_upstream_error_raises(monkeypatch, dummy_client, dummy_completions):
    monkeypatch.setenv("OPENAI_LANG", "en")
    dummy_completions.error = _connection_error()
    service = ReplyService(dummy_client, use_mock=False, fallback_to_mock=False)

    with pytest.raises(ReplyUpstreamError):
        service.reply(_turns("vpn"))


def test_upstream_error_falls_back_to_mock(monkeypatch, dummy_client, dummy_completions):
    monkeypatch.setenv("OPENAI_LANG", "en")
    dummy_completions.error = _connection_error()
    service = ReplyService(dummy_client, use_mock=False, fallback_to_mock=True)

    assert service.reply(_turns("vpn")).startswith("**VPN Setup")


def test_upstream_error_falls_back_by_default(monkeypatch, dummy_client, dummy_completions):
    monkeypatch.setenv("OPENAI_LANG", "en")
    monkeypatch.delenv("REPLY_FALLBACK_TO_MOCK", raising=False)
    dummy_completions.error = _connection_error()
    service = ReplyService(dummy_client, use_mock=False)

    assert service.reply(_turns("outlook")).startswith("**Outlook fix")


def test_fallback_can_be_switched_off(monkeypatch, dummy_client, dummy_completions):
    monkeypatch.setenv("OPENAI_LANG", "en")
    monkeypatch.setenv("REPLY_FALLBACK_TO_MOCK", "false")
    dummy_completions.error = _connection_error()
    service = ReplyService(dummy_client, use_mock=False)

    with pytest.raises(ReplyUpstreamError):
        service.reply(_turns("outlook"))
