"""
Redis Connection

Shared async Redis client holding cookie sessions and login rate-limit
windows.
"""

import logging

from redis.asyncio import Redis, from_url

from supchaissac.core.config import settings

logger = logging.getLogger(__name__)

redis_client: Redis | None = None


async def init_redis() -> Redis:
    """
    Open the Redis connection and verify it answers.

    Call this on application startup.
    """
    global redis_client
    redis_client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await redis_client.ping()
    return redis_client


async def get_redis() -> Redis | None:
    """
    FastAPI dependency returning the shared client.

    Returns None when Redis was not initialized; callers decide whether
    that is fatal (sessions) or tolerable (rate limiting).
    """
    return redis_client


def is_redis_available() -> bool:
    return redis_client is not None


async def close_redis() -> None:
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis connection closed")
