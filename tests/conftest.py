"""
Shared fixtures: an in-memory store and a recording upstream.
"""

from collections.abc import Callable

import httpx
import pytest

from proxy_cache.config import Settings
from proxy_cache.repositories import InMemoryKeyValueStore
from proxy_cache.services import CacheController, ForwardingEngine, ProxyService


class UpstreamRecorder:
    """httpx.MockTransport handler that records every upstream request."""

    def __init__(self, responder: Callable | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.responder = responder or (lambda request: httpx.Response(200, json={"ok": True}))

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responder(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def calls(self) -> int:
        return len(self.requests)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def settings():
    """Settings with the in-memory backend."""
    return Settings(
        cache_backend="memory",
        cache_default_ttl=3600,
        cache_coalesce_requests=False,
        log_level="DEBUG",
    )


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def upstream():
    return UpstreamRecorder()


@pytest.fixture
def controller(store):
    return CacheController(store=store, default_ttl=3600)


@pytest.fixture
def forwarder(upstream):
    return ForwardingEngine(client=upstream.client())


@pytest.fixture
def service(controller, forwarder):
    return ProxyService(cache=controller, forwarder=forwarder)
