"""Chat sessions and the registry that owns them.

A :class:`SessionRegistry` replaces the widget's module-level state (the list
of chats and the id of the current one). Each :class:`ChatSession` owns its
conversation, its escalation latch and the reveal currently writing one of its
messages, so the render and classification code never reaches for globals.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..markup import MountPoint, Reveal
from ..markup.nodes import Document
from .escalation import EscalationState
from .models import ASSISTANT, USER, EscalationDecision, Turn

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New chat"
TITLE_MAX_LENGTH = 40
HISTORY_TITLE_LENGTH = 48


class SessionNotFoundError(RuntimeError):
    """Raised when a chat session id is unknown to the registry."""


@dataclass
class ChatSession:
    id: str
    title: str = DEFAULT_TITLE
    turns: list[Turn] = field(default_factory=list)
    escalation: EscalationState = field(default_factory=EscalationState)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    active_reveal: Reveal | None = field(default=None, repr=False)

    @property
    def conversation(self) -> tuple[Turn, ...]:
        return tuple(self.turns)

    def add_user_turn(self, content: str) -> Turn:
        turn = Turn(USER, content)
        self.turns.append(turn)
        if self.title == DEFAULT_TITLE and self.turns[0].role == USER:
            self.title = self.turns[0].content[:TITLE_MAX_LENGTH]
        return turn

    def add_assistant_turn(self, content: str, meta: str | None = None) -> EscalationDecision:
        """Record a reply and run the escalation classifier over the history."""
        self.turns.append(Turn(ASSISTANT, content, meta))
        return self.escalation.observe(self.conversation)

    def messages_for_model(self) -> list[dict[str, str]]:
        return [{"role": turn.role, "content": turn.content} for turn in self.turns]

    def transcript(self) -> list[dict[str, str]]:
        """Conversation as attached to a support ticket, labels included."""
        items = []
        for turn in self.turns:
            item = {"role": turn.role, "content": turn.content}
            if turn.meta:
                item["meta"] = turn.meta
            items.append(item)
        return items

    def begin_reveal(
        self,
        target: MountPoint,
        document: Document,
        *,
        rng: random.Random | None = None,
    ) -> Reveal:
        """Start a reveal, cancelling any reveal of this session still in flight."""
        self.cancel_reveal()
        self.active_reveal = Reveal(target, document, rng=rng)
        return self.active_reveal

    def cancel_reveal(self) -> None:
        if self.active_reveal is not None:
            self.active_reveal.cancel()
            self.active_reveal = None


class SessionRegistry:
    """In-memory, newest-first collection of chat sessions."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._sessions: list[ChatSession] = []
        self.current_id: str | None = None

    def _new_id(self) -> str:
        base = f"c_{int(self._clock() * 1000)}"
        existing = {session.id for session in self._sessions}
        candidate = base
        suffix = 1
        while candidate in existing:
            candidate = f"{base}_{suffix}"
            suffix += 1
        return candidate

    def new_chat(self, initial_title: str | None = None) -> ChatSession:
        previous = self.current()
        if previous is not None:
            previous.cancel_reveal()
        session = ChatSession(id=self._new_id())
        if initial_title:
            session.title = initial_title[:TITLE_MAX_LENGTH]
        self._sessions.insert(0, session)
        self.current_id = session.id
        logger.info("Created chat session %s", session.id)
        return session

    def get(self, session_id: str) -> ChatSession:
        for session in self._sessions:
            if session.id == session_id:
                return session
        raise SessionNotFoundError(f"Chat session {session_id} not found")

    def current(self) -> ChatSession | None:
        if self.current_id is None:
            return None
        try:
            return self.get(self.current_id)
        except SessionNotFoundError:
            return None

    def select(self, session_id: str) -> ChatSession:
        """Make ``session_id`` current; the previous session's reveal stops."""
        session = self.get(session_id)
        previous = self.current()
        if previous is not None and previous is not session:
            previous.cancel_reveal()
        self.current_id = session.id
        return session

    def sessions(self) -> list[ChatSession]:
        return list(self._sessions)

    def history(self) -> list[dict[str, object]]:
        return [
            {
                "id": session.id,
                "title": session.title[:HISTORY_TITLE_LENGTH],
                "active": session.id == self.current_id,
            }
            for session in self._sessions
        ]
