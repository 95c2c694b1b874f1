"""
Rate Limiting Module

Sliding-window rate limiting backed by the shared Redis client, with an
in-memory fallback when Redis is unavailable.

Used on the login endpoint to slow down password guessing
(5 attempts per 15 minutes per client address).
"""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any

from fastapi import HTTPException, Request, status

from supchaissac.core import redis as redis_module

logger = logging.getLogger(__name__)

LOGIN_ATTEMPTS_LIMIT = 5
LOGIN_WINDOW_SECONDS = 15 * 60

# In-memory fallback store: {key: [timestamp, ...]}
_memory_store: dict[str, list[float]] = {}
# Time at which each key's window is empty again
_memory_expiry: dict[str, float] = {}


class RateLimitExceeded(HTTPException):
    """429 with a Retry-After header equal to the window length."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "RATE_LIMIT_EXCEEDED",
                "message": "Trop de tentatives. Réessayez plus tard.",
                "limit": limit,
                "retry_after_seconds": window_seconds,
            },
            headers={"Retry-After": str(window_seconds)},
        )


async def _check_rate_limit_redis(client, key: str, limit: int, window_seconds: int) -> bool:
    """One sorted set per key; members are attempt timestamps."""
    now = time.time()
    window_start = now - window_seconds

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)
    results = await pipe.execute()

    return results[1] < limit


def _check_rate_limit_memory(key: str, limit: int, window_seconds: int) -> bool:
    """Single-process fallback; does not coordinate across workers."""
    now = time.time()
    window_start = now - window_seconds

    for stale in [k for k, expires_at in _memory_expiry.items() if expires_at <= now]:
        _memory_store.pop(stale, None)
        del _memory_expiry[stale]

    hits = [ts for ts in _memory_store.get(key, []) if ts > window_start]
    if len(hits) >= limit:
        _memory_store[key] = hits
        return False

    hits.append(now)
    _memory_store[key] = hits
    _memory_expiry[key] = now + window_seconds
    return True


def reset_memory_store() -> None:
    _memory_store.clear()
    _memory_expiry.clear()


async def check_rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """
    Record an attempt under ``key`` and tell whether it is allowed.

    Redis is used when connected; a Redis error degrades to the
    process-local window instead of failing the request.
    """
    client = redis_module.redis_client
    if client is not None:
        try:
            return await _check_rate_limit_redis(client, key, limit, window_seconds)
        except Exception as e:
            logger.warning(f"Redis unavailable for rate limiting ({e}); using process memory")

    return _check_rate_limit_memory(key, limit, window_seconds)


def client_ip_key(request: Request) -> str:
    """Default key: client address + endpoint path."""
    client_ip = request.client.host if request.client else "unknown"
    return f"rate_limit:{client_ip}:{request.url.path}"


def rate_limit(
    limit: int = 10,
    window_seconds: int = 60,
    key_func: Callable[[Request], str] | None = None,
):
    """
    Limit calls to an endpoint taking a ``request: Request`` parameter.

    Endpoints without one are called unthrottled, with a warning.

    Raises:
        RateLimitExceeded: Once ``limit`` attempts were made within the window
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            request: Request | None = kwargs.get("request")
            if request is None:
                request = next((arg for arg in args if isinstance(arg, Request)), None)

            if request is None:
                logger.warning(f"{func.__name__} has no Request parameter; rate limit skipped")
                return await func(*args, **kwargs)

            key = (key_func or client_ip_key)(request)
            if not await check_rate_limit(key, limit, window_seconds):
                logger.warning(f"Too many attempts on {key} ({limit} per {window_seconds}s)")
                raise RateLimitExceeded(limit, window_seconds)

            return await func(*args, **kwargs)

        return wrapper

    return decorator


__all__ = [
    "LOGIN_ATTEMPTS_LIMIT",
    "LOGIN_WINDOW_SECONDS",
    "RateLimitExceeded",
    "check_rate_limit",
    "client_ip_key",
    "rate_limit",
    "reset_memory_store",
]
