"""Repository layer for data access.

This layer abstracts the storage engine behind the KeyValueStore
protocol. The repositories are protocol-based (structural typing), not
inheritance-based. Any class implementing the required methods will
satisfy the protocol.
"""

from proxy_cache.protocols import KeyValueStore

from .memory_repository import InMemoryKeyValueStore
from .redis_repository import RedisKeyValueStore

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
]
