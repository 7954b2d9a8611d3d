"""FastAPI application wiring for the helpdesk chat widget.

This module bootstraps the HTTP API behind the widget:

- Configures logging, CORS (for the pages embedding the widget), Prometheus
  metrics and rate limiting.
- Keeps the chat sessions and the reply service on ``app.state`` so routers
  reach them through dependencies instead of module globals.
- Exposes health/version/config endpoints; rendering, escalation, sessions
  and tickets live in :mod:`helpdesk.routers`.

Replies come from OpenAI when ``OPENAI_API_KEY`` is configured and from a
deterministic demo responder otherwise.
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .__version__ import __build_date__, __commit_sha__, __version__
from .app_logging import init_logging
from .conversations import SessionRegistry
from .limits import CHAT_RATE_LIMIT, get_client_ip, limiter
from .markup.reveal import DEFAULT_CHAR_DELAY_MS
from .replies import ReplyService
from .routers import escalation, render, sessions, tickets
from .routers.sessions import ASSISTANT_LABEL, CHAT_MAX_MESSAGE_LENGTH

load_dotenv()

logger = logging.getLogger(__name__)

__all__ = [
    "CHAT_MAX_MESSAGE_LENGTH",
    "app",
    "create_app",
    "get_client_ip",
]


def create_app() -> FastAPI:
    """Build the API application with its middleware and routers."""
    app = FastAPI(title="Helpdesk Chat", version=__version__)
    init_logging(app)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    widget_origins = os.getenv("WIDGET_ORIGINS")
    if widget_origins:
        origins = [o.strip() for o in widget_origins.split(",") if o.strip()]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.sessions = SessionRegistry()
    app.state.replies = ReplyService()
    if app.state.replies.demo_mode:
        logger.info("Reply service running in demo mode")

    app.include_router(render.router)
    app.include_router(escalation.router)
    app.include_router(sessions.router)
    app.include_router(tickets.router)

    # Expose Prometheus metrics
    Instrumentator().instrument(app).expose(
        app, include_in_schema=False, endpoint="/api/metrics"
    )

    @app.get("/api/health")
    async def health():
        """Liveness/readiness probe with a minimal JSON body."""
        return {"status": "ok"}

    @app.get("/api/version")
    async def version():
        """Return version information for the application."""
        return {
            "version": __version__,
            "build_date": __build_date__,
            "commit_sha": __commit_sha__,
        }

    @app.get("/api/config")
    async def config():
        """Expose widget configuration from environment variables."""
        return {
            "BRAND_NAME": os.getenv("BRAND_NAME", "TriKash Helpdesk"),
            "ASSISTANT_LABEL": ASSISTANT_LABEL,
            "CHAT_MAX_MESSAGE_LENGTH": CHAT_MAX_MESSAGE_LENGTH,
            "CHAT_RATE_LIMIT": CHAT_RATE_LIMIT,
            "REVEAL_CHAR_DELAY_MS": DEFAULT_CHAR_DELAY_MS,
            "DEMO_MODE": app.state.replies.demo_mode,
        }

    return app


app = create_app()
