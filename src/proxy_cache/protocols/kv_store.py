"""Key-value store protocol.

Defines the interface for the storage engine behind the response cache.
The store owns expiry: entries are written with a TTL and the store evicts
them on its own. Callers never check expiry themselves.

Implementations can include:
- Redis (default)
- In-process dictionary (development, tests)
- Any other store with per-key TTL
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol for key-value storage backends.

    Each operation is atomic on its own; there is no transaction or
    compare-and-swap across operations, so concurrent writers to the same
    key resolve as last-write-wins.
    """

    async def get(self, key: str) -> bytes | None:
        """Read a value.

        Args:
            key: The cache key

        Returns:
            The stored bytes, or None if absent or expired
        """
        ...

    async def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """Write a value that expires after ``ttl_seconds``.

        Args:
            key: The cache key
            value: Serialized record
            ttl_seconds: Time-to-live in seconds, always positive
        """
        ...

    async def delete(self, key: str) -> None:
        """Delete a value. Deleting an absent key is not an error.

        Args:
            key: The cache key
        """
        ...

    async def health_check(self) -> bool:
        """Check if the store is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...
