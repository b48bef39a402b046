"""Security middleware for FastAPI application."""
from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from quickdose.core.config import get_settings

# Map tiles and geocoding used by the locator and location picker
MAP_HOSTS = (
    "https://api.mapbox.com",
    "https://*.tiles.mapbox.com",
    "https://*.tile.openstreetmap.org",
)


def _csp(environment: str) -> str:
    connect_src = " ".join(("'self'",) + MAP_HOSTS)
    if environment == "development":
        # Dev tooling needs inline/eval scripts and the local websocket.
        directives = [
            "default-src 'self'",
            "script-src 'self' 'unsafe-inline' 'unsafe-eval'",
            "style-src 'self' 'unsafe-inline'",
            "img-src 'self' data: blob: https:",
            "font-src 'self' data:",
            f"connect-src {connect_src} ws://localhost:* http://localhost:*",
            "frame-ancestors 'none'",
        ]
    else:
        directives = [
            "default-src 'self'",
            "script-src 'self'",
            "style-src 'self'",
            "img-src 'self' data: blob: https:",
            "font-src 'self' data:",
            f"connect-src {connect_src}",
            "frame-ancestors 'none'",
            "base-uri 'self'",
            "form-action 'self'",
        ]
    return "; ".join(directives)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all responses.

    Headers added:
    - X-Content-Type-Options: Prevents MIME type sniffing
    - X-Frame-Options: Prevents clickjacking
    - Strict-Transport-Security: Enforces HTTPS (production only)
    - Content-Security-Policy: Controls resource loading
    - Referrer-Policy: Controls referrer information
    - Permissions-Policy: Geolocation for the locator, nothing else
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        settings = get_settings()

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"

        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"

        response.headers["Content-Security-Policy"] = _csp(settings.environment)
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        permissions_directives = [
            "geolocation=(self)",  # Nearby pharmacy locator
            "microphone=()",
            "camera=()",
            "payment=()",  # Checkout is simulated
            "usb=()",
        ]
        response.headers["Permissions-Policy"] = ", ".join(permissions_directives)

        return response


__all__ = ["MAP_HOSTS", "SecurityHeadersMiddleware"]
