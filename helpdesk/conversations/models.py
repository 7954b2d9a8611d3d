"""Domain models used by the conversation layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Role = Literal["user", "assistant"]

USER: Role = "user"
ASSISTANT: Role = "assistant"


@dataclass(frozen=True)
class Turn:
    """One message of a conversation, as typed or as returned by the model."""

    role: Role
    content: str
    meta: str | None = None


@dataclass(frozen=True)
class EscalationDecision:
    should_offer: bool
    reason: str | None = None
