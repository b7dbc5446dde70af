"""Cache controller.

Owns the serialized record format and TTL semantics on top of a
KeyValueStore. The controller never computes expiry itself; the store
evicts entries once their TTL elapses.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from pydantic import ValidationError

from proxy_cache.dto import StoredCacheRecord
from proxy_cache.entities import CacheEntry, JSONValue
from proxy_cache.errors import CacheReadCorruption, ClientInputError
from proxy_cache.protocols import KeyValueStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheController:
    """Lookup, invalidation and write-through for named cache entries.

    Example:
        ```python
        controller = CacheController(store=InMemoryKeyValueStore(), default_ttl=3600)

        await controller.store("users", {"id": 1}, 200, ttl_seconds=60)
        entry = await controller.lookup("users")
        await controller.invalidate("users")
        ```
    """

    def __init__(
        self,
        store: KeyValueStore,
        default_ttl: int,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the cache controller.

        Args:
            store: Key-value storage backend (required).
            default_ttl: TTL in seconds used when the caller sends none.
            clock: Source of the storage timestamp.
        """
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self._store = store
        self._default_ttl = default_ttl
        self._clock = clock

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    @property
    def store_backend(self) -> KeyValueStore:
        """Get the underlying store (for testing)."""
        return self._store

    def resolve_ttl(self, raw: str | None) -> int:
        """Turn a raw ``x-cache-ttl`` header value into seconds.

        Args:
            raw: Header value, or None when the header was not sent

        Returns:
            The TTL in seconds, ``default_ttl`` when absent

        Raises:
            ClientInputError: If the value is not an integer
        """
        if raw is None or not raw.strip():
            return self._default_ttl
        try:
            return int(raw.strip())
        except ValueError:
            raise ClientInputError(f"Invalid cache TTL: {raw!r}") from None

    @staticmethod
    def decode(key: str, raw: bytes) -> CacheEntry:
        """Decode a stored record.

        Raises:
            CacheReadCorruption: If the bytes are not a valid record
        """
        try:
            record = StoredCacheRecord.model_validate_json(raw)
        except ValidationError as e:
            raise CacheReadCorruption(key, f"{e.error_count()} validation error(s)") from e
        try:
            return record.to_entry()
        except (OverflowError, ValueError) as e:
            # timestamp outside the datetime range
            raise CacheReadCorruption(key, str(e)) from e

    @staticmethod
    def encode(entry: CacheEntry) -> bytes:
        return StoredCacheRecord.from_entry(entry).model_dump_json().encode()

    async def lookup(self, key: str) -> CacheEntry | None:
        """Return the live entry for ``key``, or None.

        A record that cannot be decoded is logged and treated as a miss so
        the request can still be served from upstream.
        """
        raw = await self._store.get(key)
        if raw is None:
            logger.debug("Cache miss for %r", key)
            return None

        try:
            entry = self.decode(key, raw)
        except CacheReadCorruption as e:
            logger.warning("%s; treating as a miss", e)
            return None

        logger.debug("Cache hit for %r (stored %s)", key, entry.stored_at.isoformat())
        return entry

    async def invalidate(self, key: str) -> None:
        """Delete the entry for ``key``. Idempotent."""
        await self._store.delete(key)
        logger.info("Invalidated cache entry %r", key)

    async def store(
        self,
        key: str,
        payload: JSONValue,
        status_code: int,
        ttl_seconds: int,
    ) -> CacheEntry | None:
        """Write a new entry stamped with the current time.

        Args:
            key: The cache key
            payload: Decoded upstream body
            status_code: Upstream HTTP status
            ttl_seconds: Time-to-live; zero or negative writes nothing

        Returns:
            The stored entry, or None when nothing was written
        """
        if ttl_seconds <= 0:
            return None

        # Records keep millisecond precision
        now = self._clock()
        stored_at = now.replace(microsecond=now.microsecond // 1000 * 1000)
        entry = CacheEntry(payload=payload, status_code=status_code, stored_at=stored_at)
        await self._store.put(key, self.encode(entry), ttl_seconds)
        logger.debug("Stored %r (status %d, ttl %ds)", key, status_code, ttl_seconds)
        return entry
