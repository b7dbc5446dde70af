"""Proxy Cache - HTTP forwarding proxy with a named response cache.

A client calls the proxy with ``?url=<target>`` and, optionally, the
``x-cache-name`` and ``x-cache-ttl`` headers. The proxy serves a stored
response, invalidates it (ttl 0), or forwards the request upstream and
stores the result.

Layers:
    - protocols: Interface contracts (KeyValueStore)
    - repositories: Store implementations (Redis, in-memory)
    - services: Cache decision and request forwarding
    - handlers: HTTP request/response conversion
    - dto: Persisted record and response bodies
    - entities: Domain models (internal)

For the HTTP app:
    ```python
    from proxy_cache.api.app import app, create_app
    ```
"""

from proxy_cache.config import Settings, get_redis_client, get_settings
from proxy_cache.entities import CacheEntry, ProxyOutcome, ProxyRequest, ProxyResponse
from proxy_cache.errors import ClientInputError, ForwardingTransportError, ProxyError
from proxy_cache.handlers import ProxyHandler
from proxy_cache.protocols import KeyValueStore
from proxy_cache.repositories import InMemoryKeyValueStore, RedisKeyValueStore
from proxy_cache.services import CacheController, ForwardingEngine, ProxyService

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    "get_redis_client",
    # Protocols (interfaces)
    "KeyValueStore",
    # Services (business logic)
    "CacheController",
    "ForwardingEngine",
    "ProxyService",
    # Handlers (HTTP)
    "ProxyHandler",
    # Repositories (data access)
    "RedisKeyValueStore",
    "InMemoryKeyValueStore",
    # Entities (domain models)
    "CacheEntry",
    "ProxyRequest",
    "ProxyResponse",
    "ProxyOutcome",
    # Errors
    "ProxyError",
    "ClientInputError",
    "ForwardingTransportError",
]
