"""
Redis-backed JSON cache with graceful degradation.

When ``REDIS_URL`` is empty, or Redis errors at runtime, every operation
degrades to a miss / no-op and logs instead of raising. Callers can always
fall through to the database.
"""

import json
import logging
import time
from typing import Any, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from infrastructure.config.settings import Settings

logger = logging.getLogger(__name__)

_CACHE_ERRORS = (RedisError, OSError, ConnectionError, TypeError, ValueError)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class CacheService:
    """Async JSON cache over ``redis.asyncio``."""

    def __init__(
        self,
        client: Optional[aioredis.Redis] = None,
        default_ttl: int = 300,
    ):
        self._client = client
        self.default_ttl = default_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheService":
        if not settings.redis_url:
            logger.info("Redis not configured, caching disabled (set REDIS_URL)")
            return cls(client=None, default_ttl=settings.cache_default_ttl)
        client = aioredis.from_url(settings.redis_url, decode_responses=True)
        logger.info("Redis cache initialized")
        return cls(client=client, default_ttl=settings.cache_default_ttl)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def get(self, key: str) -> Any:
        """Return the cached value, or None on miss, error or when disabled."""
        if self._client is None:
            return None

        start = time.perf_counter()
        try:
            raw = await self._client.get(key)
        except _CACHE_ERRORS as e:
            logger.error(
                "Cache get failed: %s (%s)",
                key,
                e,
                extra={"cache_key": key, "operation": "get", "duration_ms": _elapsed_ms(start)},
            )
            return None

        hit = raw is not None
        logger.debug(
            "Cache %s: %s",
            "hit" if hit else "miss",
            key,
            extra={"cache_key": key, "operation": "get", "duration_ms": _elapsed_ms(start)},
        )
        if not hit:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding undecodable cache entry: %s", key)
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store a JSON-serializable value; ``ttl=0`` stores without expiry."""
        if self._client is None:
            return False

        ttl = self.default_ttl if ttl is None else ttl
        start = time.perf_counter()
        try:
            payload = json.dumps(value, default=str)
            if ttl:
                await self._client.setex(key, ttl, payload)
            else:
                await self._client.set(key, payload)
        except _CACHE_ERRORS as e:
            logger.error(
                "Cache set failed: %s (%s)",
                key,
                e,
                extra={"cache_key": key, "operation": "set", "duration_ms": _elapsed_ms(start)},
            )
            return False

        logger.debug(
            "Cache set: %s (TTL %ss)",
            key,
            ttl,
            extra={"cache_key": key, "operation": "set", "duration_ms": _elapsed_ms(start)},
        )
        return True

    async def delete(self, *keys: str) -> bool:
        if self._client is None or not keys:
            return False

        try:
            await self._client.delete(*keys)
        except _CACHE_ERRORS as e:
            logger.error("Cache delete failed: %s (%s)", ", ".join(keys), e)
            return False

        logger.debug("Cache delete: %s", ", ".join(keys), extra={"operation": "delete"})
        return True

    async def invalidate(self, pattern: str) -> int:
        """Delete every key matching ``pattern`` (SCAN based). Returns the count deleted."""
        if self._client is None:
            return 0

        start = time.perf_counter()
        try:
            keys = [key async for key in self._client.scan_iter(match=pattern, count=100)]
            if keys:
                await self._client.delete(*keys)
        except _CACHE_ERRORS as e:
            logger.error("Cache invalidate failed: %s (%s)", pattern, e)
            return 0

        logger.info(
            "Cache invalidated: %s (%d keys)",
            pattern,
            len(keys),
            extra={"operation": "invalidate", "duration_ms": _elapsed_ms(start)},
        )
        return len(keys)

    async def flush(self) -> bool:
        """Clear the whole Redis database. Use with care in production."""
        if self._client is None:
            return False

        try:
            await self._client.flushdb()
        except _CACHE_ERRORS as e:
            logger.error("Cache flush failed: %s", e)
            return False

        logger.warning("Cache flushed")
        return True

    async def get_stats(self) -> Optional[dict[str, int]]:
        if self._client is None:
            return None

        try:
            keys = await self._client.dbsize()
        except _CACHE_ERRORS as e:
            logger.error("Failed to get cache stats: %s", e)
            return None
        return {"keys": int(keys)}

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()


class CacheKeys:
    """Cache key builders."""

    @staticmethod
    def product(slug: str) -> str:
        return f"products:slug:{slug}"
