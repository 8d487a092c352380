"""
Rate Limiting for the Registration API
======================================
Implements per-client rate limiting using slowapi.

The public registration form is the only unauthenticated write path, so
POST /registrations gets its own limit (RATE_LIMIT_REGISTRATIONS).
Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at
redis:// when running more than one worker.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """Rate limit key: forwarded client IP when behind a proxy, else peer address"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Return the standard error envelope with a Retry-After header"""
    retry_after = "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "code": "RATE_LIMITED",
            "message": "Too many requests. Please slow down.",
            "detail": str(exc.detail),
        },
        headers={"Retry-After": retry_after},
    )


def registration_rate_limit():
    """Limit applied to registration submissions"""
    return limiter.limit(settings.RATE_LIMIT_REGISTRATIONS)
