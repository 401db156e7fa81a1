"""Rate limiting configuration for the storefront API.

Uses slowapi; storage is in-memory by default and can point at Redis
(``RATE_LIMIT_STORAGE_URI``) when several API instances run side by side.
"""

from functools import lru_cache
from typing import Callable

from fastapi import FastAPI, Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings


def _get_client_ip(request: Request) -> str:
    """
    Get client IP from request, handling proxies.

    Checks X-Forwarded-For header first (for proxied requests),
    then falls back to direct connection IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain (original client)
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def _get_user_or_ip(request: Request) -> str:
    """
    Rate limit by user ID if authenticated, otherwise by IP.
    """
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user:{user.user_id}"
    return f"ip:{_get_client_ip(request)}"


@lru_cache
def get_limiter() -> Limiter:
    """
    Create and return a cached Limiter instance.
    """
    settings = get_settings()
    return Limiter(
        key_func=_get_user_or_ip,
        default_limits=["100/minute"],
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Return a JSON error with a retry-after header.
    """
    retry_after = exc.detail.split("per")[-1].strip() if exc.detail else "1 minute"

    return JSONResponse(
        status_code=429,
        content={"error": f"Rate limit exceeded. Try again in {retry_after}."},
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


def add_rate_limiting(app: FastAPI) -> None:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def checkout_limit(func: Callable) -> Callable:
    """Apply the checkout rate limit (``CHECKOUT_RATE_LIMIT``)."""
    return limiter.limit(get_settings().CHECKOUT_RATE_LIMIT)(func)
