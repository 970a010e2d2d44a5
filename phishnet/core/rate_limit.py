"""Rate limiting configuration for the PhishNet API."""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from phishnet.core.config import settings

# Single-process deployment: counters live in memory
IS_TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")
DEFAULT_LIMITS = (
    []
    if IS_TESTING or settings.RATE_LIMIT_API <= 0
    else [f"{settings.RATE_LIMIT_API}/minute"]
)

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    default_limits=DEFAULT_LIMITS,
    enabled=not IS_TESTING,
)


def auth_limit() -> str:
    """Limit string for login and registration endpoints."""
    return f"{settings.RATE_LIMIT_AUTH}/minute"
