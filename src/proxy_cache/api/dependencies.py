"""Dependency wiring for the FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Lookup functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from proxy_cache.config import Settings
from proxy_cache.handlers import ProxyHandler
from proxy_cache.protocols import KeyValueStore
from proxy_cache.repositories import InMemoryKeyValueStore, RedisKeyValueStore
from proxy_cache.services import CacheController, ForwardingEngine, ProxyService

logger = logging.getLogger(__name__)


def get_proxy_service(request: Request) -> ProxyService:
    """Retrieve the ProxyService from app.state.

    Raises:
        RuntimeError: If service is not initialized
    """
    service = getattr(request.app.state, "proxy_service", None)
    if service is None:
        raise RuntimeError("ProxyService not initialized. Check lifespan setup.")
    return service


def get_handler(request: Request) -> ProxyHandler:
    """Retrieve the ProxyHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "proxy_handler", None)
    if handler is None:
        raise RuntimeError("ProxyHandler not initialized. Check lifespan setup.")
    return handler


def build_store(settings: Settings) -> KeyValueStore:
    """Create the configured key-value store."""
    if settings.cache_backend == "memory":
        return InMemoryKeyValueStore()
    return RedisKeyValueStore.create(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores them in app.state:
    1. Store (data access) - app.state.store, unless one was injected
    2. Forwarding engine - built around app.state.http_client when injected
    3. Service (business logic) - app.state.proxy_service
    4. Handler (HTTP endpoint) - app.state.proxy_handler

    Cleanup:
        Closes the HTTP client and store it created, removes services from app.state
    """
    settings: Settings = app.state.settings

    # Injected store and client belong to the caller and are not closed here
    store = getattr(app.state, "store", None)
    owns_store = store is None
    if owns_store:
        store = build_store(settings)

    http_client = getattr(app.state, "http_client", None)
    owns_client = http_client is None
    if owns_client:
        forwarder = ForwardingEngine.create(settings)
    else:
        forwarder = ForwardingEngine(client=http_client, reserved_header_prefix=settings.cache_header_prefix)

    proxy_service = ProxyService(
        cache=CacheController(store=store, default_ttl=settings.cache_default_ttl),
        forwarder=forwarder,
        coalesce_requests=settings.cache_coalesce_requests,
    )

    app.state.store = store
    app.state.proxy_service = proxy_service
    app.state.proxy_handler = ProxyHandler(
        proxy_service=proxy_service,
        header_prefix=settings.cache_header_prefix,
    )

    logger.info("Proxy cache started (backend=%s, default ttl=%ds)", settings.cache_backend, settings.cache_default_ttl)
    if await store.health_check():
        logger.info("Cache store connection successful")
    else:
        logger.warning("Cache store is unreachable; cache reads and writes will fail")

    yield

    if owns_client:
        await forwarder.aclose()
    if owns_store:
        close = getattr(store, "close", None)
        if close is not None:
            await close()
        del app.state.store

    del app.state.proxy_handler
    del app.state.proxy_service
    logger.info("Proxy cache shut down")
