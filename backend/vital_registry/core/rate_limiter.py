"""
Rate Limiting for the Vital Records Registry API
================================================
Implements rate limiting using slowapi.

Authenticated callers are keyed by user id, anonymous callers by IP.
Credential endpoints carry their own tighter limits:
- /api/auth/login: LOGIN_RATE_LIMIT (brute force protection)
- /api/auth/register, /forgot-password, /resend-verification: REGISTER_RATE_LIMIT
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from vital_registry.core.config import settings
from vital_registry.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """
    Get rate limit key based on user authentication.

    Priority:
    1. Authenticated user ID (set on request.state by the auth dependency)
    2. IP address (for anonymous users)
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Return a JSON 429 in the same {message, code} shape as other errors"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "message": "Too many requests. Please slow down.",
            "code": "RATE_LIMITED",
            "detail": str(exc.detail),
        },
        headers={"Retry-After": "60"},
    )


def auth_rate_limit():
    """Rate limit for sign-in attempts"""
    return limiter.limit(settings.LOGIN_RATE_LIMIT, key_func=get_user_identifier)


def strict_rate_limit():
    """Rate limit for account creation and email-sending endpoints"""
    return limiter.limit(settings.REGISTER_RATE_LIMIT, key_func=get_user_identifier)
