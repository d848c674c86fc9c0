"""Request throttling for the storefront API (slowapi)."""
from __future__ import annotations

import os
from typing import Any

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

# Order submissions and logins get tighter per-route limits
CHECKOUT_LIMIT = os.getenv("RATE_LIMIT_CHECKOUT", "10/minute")
AUTH_LIMIT = os.getenv("RATE_LIMIT_AUTH", "10/minute")


def visitor_address(request: Request) -> str:
    """Client address as seen by the reverse proxy in front of the API."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    first_hop = next((hop.strip() for hop in forwarded.split(",") if hop.strip()), None)
    if first_hop:
        return first_hop
    real_ip = (request.headers.get("X-Real-IP") or "").strip()
    return real_ip or get_remote_address(request)


def _build_limiter() -> Limiter:
    disabled = os.getenv("RATE_LIMIT_DISABLED", "").strip().lower() in {"1", "true", "yes"}
    options: dict[str, Any] = {
        "key_func": visitor_address,
        "default_limits": [] if disabled else [os.getenv("RATE_LIMIT_DEFAULT", "120/minute")],
    }
    # Counters are shared between workers when Redis is configured
    storage_uri = os.getenv("RATE_LIMIT_REDIS_URL") or os.getenv("REDIS_URL")
    if storage_uri:
        options["storage_uri"] = storage_uri
    return Limiter(**options)


limiter = _build_limiter()


__all__ = ["AUTH_LIMIT", "CHECKOUT_LIMIT", "limiter", "visitor_address"]
