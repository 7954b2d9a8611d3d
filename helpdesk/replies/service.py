"""Chat completion proxy with a deterministic demo fallback."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping, Sequence
from typing import Any

from openai import OpenAI, OpenAIError

from .prompts import build_system_prompt

logger = logging.getLogger(__name__)

REPLY_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
REPLY_TEMPERATURE = float(os.getenv("REPLY_TEMPERATURE", "0.2"))
REPLY_MAX_TOKENS = int(os.getenv("REPLY_MAX_TOKENS", "700"))
REPLY_MAX_MESSAGES = int(os.getenv("REPLY_MAX_MESSAGES", "20"))
EMPTY_REPLY = "(No reply)"

_VPN = re.compile(r"vpn|wireguard|openvpn", re.IGNORECASE)
_MAIL = re.compile(r"outlook|mail", re.IGNORECASE)


class ReplyUpstreamError(RuntimeError):
    """Raised when the chat completion provider fails or is unreachable."""


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def truncate_messages(
    messages: Sequence[dict[str, str]], max_messages: int = REPLY_MAX_MESSAGES
) -> list[dict[str, str]]:
    """Keep the system prompt plus the most recent turns, ``max_messages`` total."""
    if len(messages) <= max_messages:
        return list(messages)
    return [messages[0], *messages[-(max_messages - 1):]]


def mock_reply(messages: Sequence[Mapping[str, str]]) -> str:
    """Canned answers used in demo mode or when no provider is configured."""
    last = (messages[-1].get("content") if messages else "") or ""
    if _VPN.search(last):
        return "\n".join(
            [
                "**VPN Setup (Quick):**",
                "1. Install your VPN client.",
                "2. Import the config file (or login).",
                "3. Click **Connect**.",
                "",
                "_Tell me your OS and client (e.g., Windows + WireGuard) and I'll give exact steps._",
            ]
        )
    if _MAIL.search(last):
        return "\n".join(
            [
                "**Outlook fix checklist:**",
                "- Restart Outlook",
                "- Check **File → Account Settings**",
                "- Verify **Work/School account** is signed in (MFA OK)",
                "- **Send/Receive** → Update folders",
                "",
                "_Want exact steps for Windows or macOS?_",
            ]
        )
    return (
        "I'm running in demo mode. Tell me your issue "
        "(e.g., **Teams mic not working on Mac**) and I'll guide you step-by-step."
    )


def _message_text(content: Any) -> str:
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, Sequence):
        return "".join(
            part.get("text", "") for part in content if isinstance(part, dict)
        ).strip()
    return ""


class ReplyService:
    """Send a conversation to the model and return the reply text."""

    def __init__(
        self,
        client: Any | None = None,
        *,
        model: str = REPLY_MODEL,
        use_mock: bool | None = None,
        fallback_to_mock: bool | None = None,
    ) -> None:
        if client is None and os.getenv("OPENAI_API_KEY"):
            client = OpenAI()
        self._client = client
        self._model = model
        self._use_mock = _env_flag("USE_MOCK") if use_mock is None else use_mock
        self._fallback_to_mock = (
            _env_flag("REPLY_FALLBACK_TO_MOCK", "true")
            if fallback_to_mock is None
            else fallback_to_mock
        )

    @property
    def demo_mode(self) -> bool:
        return self._use_mock or self._client is None

    def build_messages(self, turns: Sequence[Mapping[str, str]]) -> list[dict[str, str]]:
        last_user = next(
            (t.get("content", "") for t in reversed(turns) if t.get("role") == "user"),
            "",
        )
        messages = [{"role": "system", "content": build_system_prompt(last_user)}]
        messages.extend(
            {"role": t.get("role", "user"), "content": t.get("content", "")}
            for t in turns
        )
        return truncate_messages(messages)

    def reply(self, turns: Sequence[Mapping[str, str]]) -> str:
        if self.demo_mode:
            return mock_reply(turns)
        try:
            completion = self._client.chat.completions.create(
                model=self._model,
                messages=self.build_messages(turns),
                temperature=REPLY_TEMPERATURE,
                max_tokens=REPLY_MAX_TOKENS,
            )
            text = _message_text(completion.choices[0].message.content)
        except (OpenAIError, IndexError, AttributeError) as exc:
            logger.warning("OpenAI chat completion failed: %s", exc)
            if self._fallback_to_mock:
                return mock_reply(turns)
            raise ReplyUpstreamError("Upstream error") from exc
        return text or EMPTY_REPLY
