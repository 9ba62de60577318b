"""Shared Redis connection pool (optional: only used for transition notifications)."""

import redis.asyncio as redis

from app.core.config import get_settings

_redis: redis.Redis | None = None


async def init_redis(url: str | None = None) -> bool:
    """Initialize the shared Redis connection pool.

    Returns False without connecting when no Redis URL is configured.
    """
    global _redis

    if _redis is not None:
        return True

    settings = get_settings()
    redis_url = url or settings.redis_url
    if not redis_url:
        return False

    _redis = redis.from_url(
        redis_url,
        encoding="utf-8",
        decode_responses=True,
    )

    # Verify connectivity
    try:
        await _redis.ping()
    except Exception:
        await _redis.aclose()
        _redis = None
        raise
    return True


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis

    if _redis is not None:
        await _redis.aclose()
        _redis = None


def get_redis() -> redis.Redis:
    """Return the shared Redis client.

    Raises RuntimeError if init_redis() has not been called.
    """
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


def get_redis_or_none() -> redis.Redis | None:
    return _redis
