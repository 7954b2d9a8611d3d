"""Conversation state, chat sessions and escalation classification."""

from . import schemas
from .escalation import EscalationState, evaluate, should_offer
from .models import EscalationDecision, Turn
from .sessions import ChatSession, SessionNotFoundError, SessionRegistry

__all__ = [
    "ChatSession",
    "EscalationDecision",
    "EscalationState",
    "SessionNotFoundError",
    "SessionRegistry",
    "Turn",
    "evaluate",
    "schemas",
    "should_offer",
]
