"""
Rate Limiting Configuration

This module provides rate limiting functionality for API endpoints.
Rate limiting keeps code probing on /r/* expensive and protects the
redirect endpoint from floods.

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- Limits come from settings; create_app() applies the settings it was
  given, and routes read the current value on every request
- IP-based limiting, honouring proxy headers
"""

from slowapi import Limiter
from starlette.requests import Request

from tg_redirect.core.setting import Settings, settings
from tg_redirect.core.utils import get_client_ip


def rate_limit_key(request: Request) -> str:
    """Key requests by the originating client IP."""
    return get_client_ip(request)


# Initialize rate limiter
limiter = Limiter(key_func=rate_limit_key)

# Rate limit configurations per endpoint
# Format: "count/period" (e.g., "60/minute" means 60 requests per minute)
RATE_LIMITS = {
    "resolve": settings.RESOLVE_RATE_LIMIT,
    "redirect": settings.REDIRECT_RATE_LIMIT,
}


def configure_rate_limits(app_settings: Settings) -> None:
    """
    Apply the rate limits of an application's settings.

    The limiter is process-wide, so the most recently created app wins.
    """
    RATE_LIMITS["resolve"] = app_settings.RESOLVE_RATE_LIMIT
    RATE_LIMITS["redirect"] = app_settings.REDIRECT_RATE_LIMIT


def resolve_rate_limit() -> str:
    return RATE_LIMITS["resolve"]


def redirect_rate_limit() -> str:
    return RATE_LIMITS["redirect"]
