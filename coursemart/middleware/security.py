"""Security middleware."""

from collections.abc import Callable

from fastapi import Request
from fastapi.responses import Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from coursemart.config.settings import get_settings


# In-memory rate limiter keyed by client address
limiter = Limiter(key_func=get_remote_address)


class SimpleSecurityMiddleware(BaseHTTPMiddleware):
    """Adds essential security headers to every response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Handle request with security headers."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if "authorization" in request.headers:
            # Per-user progress must not be cached by shared proxies
            response.headers["Cache-Control"] = "no-store"

        return response


def _mutation_limit() -> str:
    return get_settings().MUTATION_RATE_LIMIT


# Writes are fire-once from the client's point of view; throttle duplicate submits
mutation_rate_limit = limiter.limit(_mutation_limit)
