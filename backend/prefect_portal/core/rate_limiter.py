"""
Rate Limiting for the Prefect Portal API
========================================
slowapi limiter; storage is in-process memory by default, or Redis when
RATE_LIMIT_STORAGE_URI points at one so limits hold across workers.

- everything: RATE_LIMIT_PER_MINUTE per user (or IP when anonymous)
- /auth/signin: RATE_LIMIT_SIGNIN (brute force protection)
- /auth/signup: RATE_LIMIT_SIGNUP
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from prefect_portal.core.config import settings
from prefect_portal.core.exceptions import RateLimitError, error_response
from prefect_portal.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """
    Rate limit key: authenticated user id when known, else client IP
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute", f"{settings.RATE_LIMIT_PER_HOUR}/hour"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """429 in the same body shape as every other PortalError"""
    retry_after = str(exc.detail).split(" per ")[-1] if exc.detail else ""

    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    error = RateLimitError()
    error.details["limit"] = str(exc.detail)
    return JSONResponse(
        status_code=error.status_code,
        content=error_response(error),
        headers={
            "Retry-After": "60" if "minute" in retry_after else "3600",
            "X-RateLimit-Limit": str(settings.RATE_LIMIT_PER_MINUTE),
        }
    )


def signin_rate_limit():
    """Rate limit for sign in"""
    return limiter.limit(settings.RATE_LIMIT_SIGNIN, key_func=get_user_identifier)


def signup_rate_limit():
    """Rate limit for sign up"""
    return limiter.limit(settings.RATE_LIMIT_SIGNUP, key_func=get_user_identifier)
