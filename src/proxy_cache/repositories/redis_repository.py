"""Redis implementation of KeyValueStore.

Uses the asyncio Redis client. Every cache key is namespaced with a
configurable prefix and written with ``SET key value EX ttl`` so Redis
handles expiry.
"""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from proxy_cache.config import Settings, get_redis_client, get_settings

logger = logging.getLogger(__name__)


class RedisKeyValueStore:
    """Redis-backed key-value store.

    This class satisfies the KeyValueStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "",
    ) -> None:
        """Initialize the Redis store.

        Args:
            redis_client: Asyncio Redis client instance.
            key_prefix: Namespace prepended to every cache key.
        """
        self._client = redis_client
        self._key_prefix = key_prefix

    @classmethod
    def create(cls, settings: Settings | None = None) -> "RedisKeyValueStore":
        """Factory method to create RedisKeyValueStore from settings.

        Args:
            settings: Application settings. If None, uses the cached settings.

        Returns:
            Configured RedisKeyValueStore
        """
        settings = settings or get_settings()
        return cls(
            redis_client=get_redis_client(settings),
            key_prefix=settings.cache_key_prefix,
        )

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def get(self, key: str) -> bytes | None:
        value = await self._client.get(self._key(key))
        if value is None:
            return None
        if isinstance(value, str):
            return value.encode()
        return value

    async def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        await self._client.set(self._key(key), value, ex=ttl_seconds)

    async def delete(self, key: str) -> None:
        await self._client.delete(self._key(key))

    async def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError) as e:
            logger.warning("Redis health check failed: %s", e)
            return False

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
