"""Stateless escalation check for clients that keep their own history."""

from __future__ import annotations

from fastapi import APIRouter

from ..conversations import schemas
from ..conversations.escalation import evaluate
from ..conversations.models import Turn

router = APIRouter(prefix="/api", tags=["escalation"])


@router.post("/escalation", response_model=schemas.EscalationResponse)
def check_escalation(payload: schemas.EscalationRequest) -> schemas.EscalationResponse:
    """Decide whether the ticket offer should be shown for ``messages``."""
    conversation = [Turn(m.role, m.content) for m in payload.messages]
    decision = evaluate(conversation, payload.already_offered)
    return schemas.EscalationResponse(
        offer=decision.should_offer, reason=decision.reason
    )
