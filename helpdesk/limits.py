"""Shared slowapi limiter so routers and the app agree on one instance."""

from __future__ import annotations

import os

from fastapi import Request
from slowapi import Limiter

CHAT_RATE_LIMIT = os.getenv("CHAT_RATE_LIMIT", "20/minute")


def get_client_ip(request: Request) -> str:
    """Extract a best-effort client IP for rate limiting.

    Prefer ``X-Forwarded-For`` (first hop) if present, otherwise use the
    socket peer address.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is None:
        return "unknown"
    return request.client.host


limiter = Limiter(key_func=get_client_ip)
