import pathlib
import sys

import pytest
from fastapi import FastAPI, Request

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))
from helpdesk.app_logging import init_logging
from helpdesk.conversations import SessionRegistry
from helpdesk.conversations.models import Turn
from helpdesk.replies import ReplyService
from helpdesk.tickets import InMemoryTicketRepository, TicketService


class DummyCompletions:
    """Stands in for ``client.chat.completions`` and records every call."""

    def __init__(self, content="Try restarting the **router**.", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = type("Message", (), {"content": self.content})()
        choice = type("Choice", (), {"message": message})()
        return type("Completion", (), {"choices": [choice]})()


class DummyClient:
    def __init__(self, completions):
        self.chat = type("Chat", (), {"completions": completions})()


@pytest.fixture
def dummy_completions():
    return DummyCompletions()


@pytest.fixture
def dummy_client(dummy_completions):
    return DummyClient(dummy_completions)


@pytest.fixture
def conversation():
    def _build(*pairs):
        return [Turn(role, content) for role, content in pairs]

    return _build


@pytest.fixture
def app_factory(monkeypatch):
    def _create_app(log_dir: str, log_request_bodies: bool = False):
        """Create a FastAPI app with logging initialised."""
        monkeypatch.setenv("LOG_DIR", str(log_dir))
        if log_request_bodies:
            monkeypatch.setenv("LOG_REQUEST_BODIES", "true")
        app = FastAPI()

        @app.post("/echo")
        async def echo(request: Request):
            return await request.json()

        init_logging(app)
        return app

    return _create_app


@pytest.fixture
def api_app(monkeypatch):
    """The real application with fresh in-memory state and no rate limit."""
    from helpdesk.limits import limiter
    from helpdesk.main import app

    monkeypatch.setattr(limiter, "enabled", False)
    monkeypatch.setattr("helpdesk.routers.sessions.DEFAULT_CHAR_DELAY_MS", 0)
    monkeypatch.setattr(app.state, "sessions", SessionRegistry(), raising=False)
    monkeypatch.setattr(
        app.state, "replies", ReplyService(client=None, use_mock=True), raising=False
    )
    monkeypatch.setattr(
        app.state,
        "ticket_service",
        TicketService(InMemoryTicketRepository()),
        raising=False,
    )
    return app
