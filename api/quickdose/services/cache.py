from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Optional

from redis import asyncio as aioredis

from quickdose.core.config import get_settings

logger = logging.getLogger(__name__)

_settings = get_settings()


class CacheClient:
    """Thin async wrapper over the shared Redis connection pool."""

    def __init__(self) -> None:
        self._redis = aioredis.from_url(str(_settings.redis_url), decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        return await self._redis.get(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        await self._redis.set(key, value, ex=ttl)

    async def delete(self, key: str) -> None:
        await self._redis.delete(key)

    async def ping(self) -> bool:
        return await self._redis.ping()


_cache = CacheClient()


async def get_redis_client() -> CacheClient:
    """Returns the shared Redis cache client for health checks and other uses."""
    return _cache


async def cached_json(key: str, ttl: Optional[int], producer: Callable[[], Awaitable[Any]]) -> Any:
    """
    Return the cached JSON value for ``key`` or compute it with ``producer``.

    A TTL of 0 or None bypasses the cache. Cache failures are logged and the
    producer result is served uncached.
    """
    if ttl:
        try:
            cached = await _cache.get(key)
            if cached:
                return json.loads(cached)
        except Exception:
            logger.warning("Cache read failed for %s", key, exc_info=True)

    result = await producer()

    if ttl:
        try:
            await _cache.set(key, json.dumps(result), ttl)
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)

    return result


async def invalidate(key: str) -> None:
    try:
        await _cache.delete(key)
    except Exception:
        logger.warning("Cache invalidation failed for %s", key, exc_info=True)


__all__ = ["CacheClient", "cached_json", "get_redis_client", "invalidate"]
