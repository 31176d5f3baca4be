"""
Request Utilities

Small helpers shared by the middleware, rate limiter and services:
- Request correlation IDs
- Client IP extraction behind proxies/load balancers
- Salted, truncated IP hashing for privacy
- UTC timestamps in ISO-8601
"""

import hashlib
import uuid
from datetime import datetime, timezone
from typing import Optional

from starlette.requests import Request

IP_HASH_LENGTH = 16

# Checked in order; the first header present wins
CLIENT_IP_HEADERS = ("X-Forwarded-For", "X-Real-IP", "CF-Connecting-IP")


def generate_request_id() -> str:
    """Return a new random request ID (UUID4)."""
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Handles proxies and load balancers by checking forwarding headers.

    Args:
        request: Starlette/FastAPI Request object

    Returns:
        IP address as string, "unknown" if none can be determined
    """
    for header in CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            # X-Forwarded-For can contain multiple IPs, take the first one
            return value.split(",")[0].strip()

    # Fallback to direct client IP
    return request.client.host if request.client else "unknown"


def hash_ip(ip: Optional[str], salt: str) -> str:
    """
    Hash an IP address for privacy.

    SHA-256 over salt + IP, truncated for storage efficiency. A trailing
    port on an IPv4 address is dropped so the same client hashes the same.

    Args:
        ip: Client IP address
        salt: Deployment-specific salt

    Returns:
        16 hex characters, or "unknown" when no IP is available
    """
    if not ip or ip == "unknown":
        return "unknown"

    normalized = ip.strip()
    if normalized.count(":") == 1:
        normalized = normalized.split(":")[0]

    digest = hashlib.sha256((salt + normalized).encode("utf-8")).hexdigest()
    return digest[:IP_HASH_LENGTH]
