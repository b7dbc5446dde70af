"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → in-memory, Cloudflare KV, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from proxy_cache.protocols import KeyValueStore

    store: KeyValueStore = RedisKeyValueStore.create()     # works
    store: KeyValueStore = InMemoryKeyValueStore()         # also works
    ```
"""

from .kv_store import KeyValueStore

__all__ = [
    "KeyValueStore",
]
