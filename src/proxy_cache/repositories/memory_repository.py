"""In-process implementation of KeyValueStore.

Entries live in a dictionary together with a monotonic deadline and are
dropped lazily when read after expiry. Suitable for local development and
tests; nothing is shared between processes.
"""

import time
from collections.abc import Callable


class InMemoryKeyValueStore:
    """Dictionary-backed key-value store with TTL expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[bytes, float]] = {}

    async def get(self, key: str) -> bytes | None:
        item = self._entries.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    async def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for _, expires_at in self._entries.values() if expires_at > now)
