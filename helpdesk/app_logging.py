"""Application and access logging for the helpdesk API.

Two rotating log files are written under ``LOG_DIR``:

- ``app.log`` for the ``helpdesk`` logger tree (sessions, replies, tickets);
- ``access.log`` for ``uvicorn.access``, one JSON object per request with the
  request id, the chat session the path refers to, latency and scrubbed
  headers and bodies.

Settings come from LOG_DIR, LOG_LEVEL, LOG_JSON, LOG_REQUEST_BODIES,
LOG_RETENTION_DAYS and LOG_ROTATE_UTC; ``tools/print_log_config.py`` prints
what they resolve to.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from dataclasses import asdict, dataclass
from logging.handlers import TimedRotatingFileHandler
from typing import Any, cast
from uuid import uuid4

from fastapi import FastAPI, Request

APP_LOGGER = "helpdesk"
ACCESS_LOGGER = "uvicorn.access"
UNLOGGED_PATHS = frozenset({"/api/health", "/api/metrics"})

# Keys compared lower-cased, in headers and in JSON bodies at any depth.
SENSITIVE_FIELDS = frozenset(
    {
        "authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
        "api_key",
        "password",
        "token",
        "email",
    }
)
REDACTED = "***"

_SESSION_PATH = re.compile(r"^/api/sessions/([^/]+)")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


@dataclass(frozen=True)
class LogSettings:
    log_dir: str
    log_level: int
    log_json: bool
    log_request_bodies: bool
    retention_days: int
    rotate_utc: bool

    @classmethod
    def from_env(cls) -> LogSettings:
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()
        return cls(
            log_dir=os.getenv("LOG_DIR", "logs"),
            log_level=getattr(logging, level_name, logging.INFO),
            log_json=_env_flag("LOG_JSON"),
            log_request_bodies=_env_flag("LOG_REQUEST_BODIES"),
            retention_days=int(os.getenv("LOG_RETENTION_DAYS", "7")),
            rotate_utc=_env_flag("LOG_ROTATE_UTC"),
        )

    def path(self, filename: str) -> str:
        return os.path.join(self.log_dir, filename)

    def describe(self) -> dict[str, Any]:
        data = asdict(self)
        data["log_dir"] = os.path.abspath(self.log_dir)
        data["log_level"] = logging.getLevelName(self.log_level)
        data["app_log"] = os.path.abspath(self.path("app.log"))
        data["access_log"] = os.path.abspath(self.path("access.log"))
        return data


class JsonFormatter(logging.Formatter):
    """One JSON object per record, used when LOG_JSON=true."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _formatter(settings: LogSettings) -> logging.Formatter:
    if settings.log_json:
        return JsonFormatter()
    return logging.Formatter("[%(asctime)s] %(levelname)s in %(name)s: %(message)s")


def _rotating_handler(
    settings: LogSettings, filename: str, formatter: logging.Formatter
) -> TimedRotatingFileHandler:
    handler = TimedRotatingFileHandler(
        settings.path(filename),
        when="midnight",
        backupCount=settings.retention_days,
        utc=settings.rotate_utc,
    )
    handler.setFormatter(formatter)
    return handler


def _scrub(data: object) -> object:
    """Replace values of sensitive keys, recursing into dicts and lists."""
    if isinstance(data, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_FIELDS else _scrub(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [_scrub(item) for item in data]
    return data


def _session_from_path(path: str) -> str | None:
    match = _SESSION_PATH.match(path)
    return match.group(1) if match else None


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded
    return request.client.host if request.client else None


async def _capture_body(request: Request) -> object | None:
    """Read the body for logging and replay it to the endpoint."""
    body = await request.body()

    async def receive() -> dict:
        return {"type": "http.request", "body": body, "more_body": False}

    request._receive = receive  # type: ignore[attr-defined]
    if not body:
        return None
    try:
        return _scrub(json.loads(body))
    except ValueError:
        return body.decode("utf-8", errors="replace")


def _install_access_logging(app: FastAPI, settings: LogSettings | None = None) -> None:
    """Log one JSON line per request on ``uvicorn.access``.

    Health and metrics probes are not logged. The request id comes from the
    ``X-Request-Id`` header or is generated, and is echoed in the response.
    """
    settings = settings or LogSettings.from_env()
    access_logger = logging.getLogger(ACCESS_LOGGER)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        path = request.url.path
        if path in UNLOGGED_PATHS:
            return await call_next(request)

        request_id = request.headers.get("X-Request-Id") or uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        body = await _capture_body(request) if settings.log_request_bodies else None

        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id

        entry: dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": path,
            "session_id": _session_from_path(path),
            "status": response.status_code,
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "client_ip": _client_ip(request),
            "headers": _scrub(dict(request.headers)),
        }
        if body is not None:
            entry["body"] = body
        access_logger.info(json.dumps(entry, default=str, ensure_ascii=False))
        return response


def init_logging(app: FastAPI | None = None) -> None:
    """Attach rotating file handlers and, given an app, the access middleware.

    The ``helpdesk`` logger keeps handlers it already has; the access logger
    is always reset so uvicorn's console handler does not duplicate lines.
    """
    settings = LogSettings.from_env()
    os.makedirs(settings.log_dir, exist_ok=True)
    formatter = _formatter(settings)

    app_logger = logging.getLogger(APP_LOGGER)
    if not app_logger.handlers:
        app_logger.addHandler(_rotating_handler(settings, "app.log", formatter))
    app_logger.setLevel(settings.log_level)

    access_logger = logging.getLogger(ACCESS_LOGGER)
    access_logger.handlers.clear()
    access_logger.addHandler(_rotating_handler(settings, "access.log", formatter))
    access_logger.setLevel(settings.log_level)

    if app is not None:
        cast(Any, app).logger = app_logger
        _install_access_logging(app, settings)
