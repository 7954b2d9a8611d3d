"""Reply generation for chat turns."""

from .prompts import PERSONA_PROMPT, build_system_prompt
from .service import ReplyService, ReplyUpstreamError, mock_reply, truncate_messages

__all__ = [
    "PERSONA_PROMPT",
    "ReplyService",
    "ReplyUpstreamError",
    "build_system_prompt",
    "mock_reply",
    "truncate_messages",
]
