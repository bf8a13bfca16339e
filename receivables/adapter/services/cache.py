"""Cache Implementations

In-process TTL dictionary and Redis-backed cache.
"""

import json
import logging
import time
from typing import Any, Dict, Optional, Tuple
import redis.asyncio as redis
from receivables.app.services.cache import Cache

logger = logging.getLogger(__name__)


class InMemoryCache(Cache):
    """Per-process cache; entries vanish on restart"""

    def __init__(self):
        self._entries: Dict[str, Tuple[float, Any]] = {}

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= time.monotonic():
            self._entries.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._entries[key] = (time.monotonic() + ttl_seconds, value)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)


class RedisCache(Cache):
    """
    Redis-backed cache

    Values are stored as JSON. Connection problems are logged and treated
    as cache misses so reports still work without Redis.
    """

    def __init__(self, redis_url: str, key_prefix: str = "receivables"):
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self._client: Optional[redis.Redis] = None

    async def get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.close()
            self._client = None

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        try:
            client = await self.get_client()
            value = await client.get(self._key(key))
        except Exception as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON in cache for {key}")
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            client = await self.get_client()
            await client.setex(self._key(key), ttl_seconds, json.dumps(value, default=str))
        except Exception as e:
            logger.warning(f"Cache set failed for {key}: {e}")

    async def delete(self, key: str) -> None:
        try:
            client = await self.get_client()
            await client.delete(self._key(key))
        except Exception as e:
            logger.warning(f"Cache delete failed for {key}: {e}")


def create_cache(backend: str = "memory", redis_url: Optional[str] = None) -> Cache:
    """
    Factory function for the configured cache backend

    Args:
        backend: "memory" or "redis"
        redis_url: Required for the redis backend

    Returns:
        Configured Cache
    """
    if backend == "redis":
        if not redis_url:
            raise ValueError("REDIS_URL is required for the redis cache backend")
        return RedisCache(redis_url)
    if backend != "memory":
        raise ValueError(f"Unknown cache backend: {backend}")
    return InMemoryCache()
