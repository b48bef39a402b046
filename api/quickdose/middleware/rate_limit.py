"""Rate limiting middleware for FastAPI application."""
from __future__ import annotations

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from quickdose.core.config import get_settings

# Login-style endpoints get a tighter limit than the default.
AUTH_RATE_LIMIT = "10/minute"


def get_limiter() -> Limiter:
    """
    Create and configure rate limiter.

    Uses client IP address as the key. The default limit comes from
    ``RATE_LIMIT_DEFAULT``.

    Storage:
    - Development: In-memory (single instance)
    - Production: Redis (shared across instances)
    """
    settings = get_settings()

    if settings.environment == "production":
        storage_uri = str(settings.redis_url)
    else:
        storage_uri = "memory://"

    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit_default],
        storage_uri=storage_uri,
    )


limiter = get_limiter()


__all__ = ["AUTH_RATE_LIMIT", "get_limiter", "limiter", "RateLimitExceeded", "_rate_limit_exceeded_handler"]
