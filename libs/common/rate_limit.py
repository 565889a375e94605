"""Rate limiting configuration for the Tapp API.

Uses slowapi; storage defaults to in-process memory and can point at Redis
through REDIS_URL when several instances run behind a balancer.
"""

from functools import lru_cache
from typing import Callable

from fastapi import Request, Response
from libs.common.config import get_settings
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse


def _get_client_ip(request: Request) -> str:
    """
    Get client IP from request, handling proxies.

    Checks X-Forwarded-For header first (for proxied requests),
    then falls back to direct connection IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


@lru_cache
def get_limiter() -> Limiter:
    """Create and return a cached Limiter instance."""
    settings = get_settings()

    return Limiter(
        key_func=_get_client_ip,
        default_limits=["200/minute"],
        storage_uri=settings.REDIS_URL,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Custom handler for rate limit exceeded errors.

    Returns a JSON response with clear error message and retry-after header.
    """
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Слишком много запросов. Попробуйте позже.",
            "message": "Слишком много запросов. Попробуйте позже.",
            "code": "RATE_LIMIT_EXCEEDED",
        },
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


def auth_limit(func: Callable) -> Callable:
    """Apply strict rate limit for authentication endpoints (10/minute)."""
    return limiter.limit("10/minute")(func)


def public_limit(func: Callable) -> Callable:
    """Apply rate limit for anonymous storefront writes (30/minute)."""
    return limiter.limit("30/minute")(func)
