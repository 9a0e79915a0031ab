"""
Redis caching layer for catalog responses.

Upstream catalog quotas are small, so identical search and trending calls
within a short window are answered from Redis. The cache is optional:
when Redis is unreachable every operation degrades to a miss.
"""

import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from streamflow.config import settings

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Redis cache manager with JSON serialization and hit/miss statistics.

    Args:
        url: Redis connection URL
        default_ttl: TTL used when `set` is called without one
        key_prefix: Prefix applied to every key
    """

    def __init__(
        self,
        url: Optional[str] = None,
        default_ttl: Optional[int] = None,
        key_prefix: str = "streamflow:",
    ):
        self.url = url or settings.redis_url
        self.default_ttl = default_ttl or settings.redis_cache_ttl
        self.key_prefix = key_prefix
        self.redis_client: Optional[redis.Redis] = None

        self.cache_stats = {"hits": 0, "misses": 0, "sets": 0}

    async def connect(self) -> None:
        """Connect and ping. Raises ConnectionError when Redis is unreachable."""
        client = redis.Redis.from_url(
            self.url,
            max_connections=20,
            retry_on_timeout=True,
            socket_connect_timeout=5,
            decode_responses=False,
        )
        try:
            await client.ping()
        except (redis.RedisError, OSError) as e:
            await client.aclose()
            logger.error(f"Failed to connect to Redis: {e}")
            raise ConnectionError(f"Redis connection failed: {e}") from e

        self.redis_client = client
        logger.info("Redis connection established successfully")

    async def disconnect(self) -> None:
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None

    def _generate_key(self, key: str, namespace: str = "") -> str:
        if namespace:
            return f"{self.key_prefix}{namespace}:{key}"
        return f"{self.key_prefix}{key}"

    async def get(self, key: str, namespace: str = "") -> Optional[Any]:
        """
        Get value from cache.

        Returns:
            Cached value or None if not found (or Redis is unavailable)
        """
        if not self.redis_client:
            return None

        try:
            value = await self.redis_client.get(self._generate_key(key, namespace))
        except redis.RedisError as e:
            logger.error(f"Cache get error for key {key}: {e}")
            self.cache_stats["misses"] += 1
            return None

        if value is None:
            self.cache_stats["misses"] += 1
            return None

        try:
            decoded = json.loads(value)
        except (ValueError, UnicodeDecodeError) as e:
            logger.error(f"Failed to deserialize cache value for {key}: {e}")
            self.cache_stats["misses"] += 1
            return None

        self.cache_stats["hits"] += 1
        return decoded

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
        namespace: str = "",
    ) -> bool:
        """
        Store a JSON-serializable value.

        Returns:
            True if successfully set
        """
        if not self.redis_client:
            return False

        try:
            await self.redis_client.set(
                self._generate_key(key, namespace),
                json.dumps(value),
                ex=ttl or self.default_ttl,
            )
        except (redis.RedisError, TypeError, ValueError) as e:
            logger.error(f"Cache set error for key {key}: {e}")
            return False

        self.cache_stats["sets"] += 1
        return True

    def get_stats(self) -> Dict[str, Any]:
        lookups = self.cache_stats["hits"] + self.cache_stats["misses"]
        hit_rate = self.cache_stats["hits"] / lookups if lookups else 0

        return {
            **self.cache_stats,
            "connected": self.redis_client is not None,
            "hit_rate": round(hit_rate, 4),
        }


# Global cache manager instance
cache_manager = CacheManager()


async def init_cache() -> None:
    """Connect the global cache; the API keeps working without it."""
    try:
        await cache_manager.connect()
    except ConnectionError:
        logger.warning("Catalog cache disabled: Redis is unavailable")
        return
    logger.info("Cache system initialized successfully")


async def cleanup_cache() -> None:
    await cache_manager.disconnect()
    logger.info("Cache system cleaned up")
