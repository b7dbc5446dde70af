"""Service layer for business logic.

This layer contains the cache decision and request forwarding logic.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from proxy_cache.services import CacheController, ForwardingEngine, ProxyService

    service = ProxyService(
        cache=CacheController(store=store, default_ttl=3600),
        forwarder=ForwardingEngine.create(),
    )
    ```
"""

from .cache_controller import CacheController
from .forwarding_engine import ForwardingEngine
from .proxy_service import ProxyService

__all__ = [
    "CacheController",
    "ForwardingEngine",
    "ProxyService",
]
