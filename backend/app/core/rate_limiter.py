"""
Rate Limiting for the RoomRoster API
====================================
Implements rate limiting using slowapi with in-memory storage.

- Every route: RATE_LIMIT_PER_MINUTE per client
- /api/login: LOGIN_RATE_LIMIT (brute force protection)
- /api/register: REGISTER_RATE_LIMIT
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """
    Get rate limit key for the caller.

    Authenticated requests are keyed by user id (set on request.state by the
    auth dependency), everything else by IP address.
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.

    Returns the usual error envelope plus a Retry-After header.
    """
    retry_after = exc.detail.split(":")[-1].strip() if exc.detail else "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "Too many requests. Please slow down.",
            "code": "RATE_LIMIT_EXCEEDED",
            "details": {"limit": str(exc.detail)},
        },
        headers={
            "Retry-After": retry_after if retry_after.isdigit() else "60",
            "X-RateLimit-Limit": str(settings.RATE_LIMIT_PER_MINUTE),
        }
    )


def login_rate_limit():
    """Rate limit for the login endpoint"""
    return limiter.limit(settings.LOGIN_RATE_LIMIT)


def register_rate_limit():
    """Rate limit for the register endpoint"""
    return limiter.limit(settings.REGISTER_RATE_LIMIT)
