"""Deterministic trigger for offering a human hand-off (support ticket).

The decision only looks at the most recent user turn and the number of
assistant turns so far:

- the "not resolved" lexicon fires once the assistant has answered at least
  once;
- the "soft acknowledgment" lexicon fires once the assistant has answered at
  least twice.

Once offered, the offer stays: ``already_offered`` short-circuits to ``True``
and :class:`EscalationState` never resets.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from .models import ASSISTANT, USER, EscalationDecision, Turn

logger = logging.getLogger(__name__)

NOT_RESOLVED_MIN_ASSISTANT_TURNS = 1
SOFT_ACK_MIN_ASSISTANT_TURNS = 2

_APOSTROPHE = r"[’']"

NOT_RESOLVED = re.compile(
    r"\bnot\s+fixed\b"
    rf"|\bisn{_APOSTROPHE}?t\s+fixed\b"
    r"|\bstill\s+not\b"
    rf"|\bstill\s+isn{_APOSTROPHE}?t\b"
    rf"|\b(?:does|did)n{_APOSTROPHE}?t\s+work"
    r"|\b(?:does|did)\s+not\s+work"
    r"|\bnot\s+working\b"
    r"|\bno\s+luck\b",
    re.IGNORECASE,
)

SOFT_ACK = re.compile(r"\b(?:ok|okay|hmm+|still|same|nope)\b", re.IGNORECASE)


def last_user_content(conversation: Sequence[Turn]) -> str:
    for turn in reversed(conversation):
        if turn.role == USER:
            return turn.content or ""
    return ""


def assistant_count(conversation: Sequence[Turn]) -> int:
    return sum(1 for turn in conversation if turn.role == ASSISTANT)


def evaluate(
    conversation: Sequence[Turn], already_offered: bool = False
) -> EscalationDecision:
    """Return the escalation decision together with the rule that fired."""
    if already_offered:
        return EscalationDecision(True, reason="already_offered")
    last_user = last_user_content(conversation)
    answered = assistant_count(conversation)
    if answered >= NOT_RESOLVED_MIN_ASSISTANT_TURNS and NOT_RESOLVED.search(last_user):
        return EscalationDecision(True, reason="not_resolved")
    if answered >= SOFT_ACK_MIN_ASSISTANT_TURNS and SOFT_ACK.search(last_user):
        return EscalationDecision(True, reason="soft_acknowledgment")
    return EscalationDecision(False)


def should_offer(conversation: Sequence[Turn], already_offered: bool = False) -> bool:
    return evaluate(conversation, already_offered).should_offer


@dataclass
class EscalationState:
    """Per-conversation latch: ``offered`` goes from False to True once."""

    offered: bool = False

    def observe(self, conversation: Sequence[Turn]) -> EscalationDecision:
        decision = evaluate(conversation, self.offered)
        if decision.should_offer and not self.offered:
            self.offered = True
            logger.info("Ticket offer triggered (%s)", decision.reason)
        return decision
