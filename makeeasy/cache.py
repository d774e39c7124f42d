"""
Read-through cache for public catalog listings (active banners and service
locations). Redis being unavailable never fails a request: reads fall back to
the database and writes are skipped.
"""

import json

from loguru import logger
from redis.asyncio import Redis

from makeeasy import settings

_redis: Redis | None = None
CATALOG_TTL = 60  # 1 minute

ACTIVE_BANNERS_KEY = "banners:active"
ACTIVE_LOCATIONS_KEY = "locations:active"


def get_redis() -> Redis:
    global _redis
    if _redis is None:
        _redis = Redis.from_url(settings.redis_url, decode_responses=True)
    return _redis


async def get_cached(key: str) -> list | None:
    try:
        data = await get_redis().get(key)
        return json.loads(data) if data else None
    except Exception:
        logger.warning("Redis get failed, skipping cache for {}", key, exc_info=True)
        return None


async def set_cached(key: str, items: list) -> None:
    try:
        await get_redis().setex(key, CATALOG_TTL, json.dumps(items))
    except Exception:
        logger.warning("Redis set failed, skipping cache for {}", key, exc_info=True)


async def invalidate(key: str) -> None:
    try:
        await get_redis().delete(key)
    except Exception:
        logger.warning("Redis invalidate failed for {}", key, exc_info=True)
