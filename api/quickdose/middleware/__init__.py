"""Middleware for the QuickDose API."""
from __future__ import annotations

from quickdose.middleware.rate_limit import (
    AUTH_RATE_LIMIT,
    RateLimitExceeded,
    _rate_limit_exceeded_handler,
    get_limiter,
    limiter,
)
from quickdose.middleware.security import SecurityHeadersMiddleware

__all__ = [
    "AUTH_RATE_LIMIT",
    "SecurityHeadersMiddleware",
    "get_limiter",
    "limiter",
    "RateLimitExceeded",
    "_rate_limit_exceeded_handler",
]
