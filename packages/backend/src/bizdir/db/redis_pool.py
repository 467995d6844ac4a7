"""Process-wide Redis connection, used by the rate limiter.

Redis is optional. When init_redis() fails at startup the app keeps
serving and get_redis() raises, which the rate limiter treats as
"limiting disabled".
"""

from typing import Optional

import redis.asyncio as aioredis

from bizdir.config import settings

_redis: Optional[aioredis.Redis] = None


async def init_redis(url: Optional[str] = None) -> aioredis.Redis:
    global _redis
    client = aioredis.from_url(
        url or settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    _redis = client
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> aioredis.Redis:
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


def redis_available() -> bool:
    return _redis is not None
