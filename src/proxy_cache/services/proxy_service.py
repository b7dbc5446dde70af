"""Proxy service for the per-request cache decision.

Every request walks the same path and ends in exactly one outcome:

    START -> INVALIDATE                          -> DONE (invalidated)
    START -> CACHE_LOOKUP -> HIT                 -> DONE (cache hit)
    START -> [CACHE_LOOKUP -> MISS] -> FORWARD   -> MAYBE_STORE -> DONE
                                    -> FORWARD_FAIL              -> DONE (error)

No state is shared between requests except the key-value store, unless
request coalescing is switched on.
"""

import asyncio
import logging
from datetime import timezone

import httpx

from proxy_cache.dto import ClientErrorResponse, InvalidationResponse, ProxyErrorResponse
from proxy_cache.entities import CacheEntry, ForwardResult, ProxyOutcome, ProxyRequest, ProxyResponse
from proxy_cache.errors import ClientInputError, ForwardingTransportError

from .cache_controller import CacheController
from .forwarding_engine import ForwardingEngine

logger = logging.getLogger(__name__)


def format_cache_date(entry: CacheEntry) -> str:
    """ISO-8601 UTC with milliseconds, e.g. ``2025-01-31T12:00:00.000Z``."""
    stored_at = entry.stored_at.astimezone(timezone.utc)
    return stored_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def client_error_response(error: ClientInputError) -> ProxyResponse:
    return ProxyResponse(
        status_code=error.status_code,
        body=ClientErrorResponse(error=error.message).model_dump(),
        outcome=ProxyOutcome.CLIENT_ERROR,
    )


class ProxyService:
    """Core proxy orchestration service.

    Composes the CacheController and the ForwardingEngine. The policy is
    evaluated in a fixed order: invalidate, then lookup, then forward and
    maybe store.

    Example:
        ```python
        service = ProxyService(
            cache=CacheController(store=RedisKeyValueStore.create(), default_ttl=3600),
            forwarder=ForwardingEngine.create(),
        )
        response = await service.handle(proxy_request)
        ```
    """

    def __init__(
        self,
        cache: CacheController,
        forwarder: ForwardingEngine,
        coalesce_requests: bool = False,
    ) -> None:
        """Initialize the proxy service.

        Args:
            cache: Cache controller (required).
            forwarder: Forwarding engine (required).
            coalesce_requests: Share one upstream fetch between concurrent
                misses for the same cache key.
        """
        self._cache = cache
        self._forwarder = forwarder
        self._coalesce = coalesce_requests
        self._in_flight: dict[str, asyncio.Task] = {}

    @staticmethod
    def validate_target_url(target_url: str | None) -> str:
        """Check the target is an absolute http(s) URL.

        Raises:
            ClientInputError: If the URL is missing or unusable
        """
        if not target_url or not target_url.strip():
            raise ClientInputError("No URL provided")
        try:
            url = httpx.URL(target_url)
        except httpx.InvalidURL:
            raise ClientInputError(f"Invalid URL provided: {target_url}") from None
        if url.scheme not in ("http", "https") or not url.host:
            raise ClientInputError(f"Invalid URL provided: {target_url}")
        return target_url

    async def handle(self, request: ProxyRequest) -> ProxyResponse:
        """Resolve one proxy request to its response.

        Args:
            request: The inbound request

        Returns:
            The normalized ProxyResponse; never a partial one
        """
        try:
            target_url = self.validate_target_url(request.target_url)
        except ClientInputError as e:
            return client_error_response(e)

        key = request.cache_key

        if key and request.wants_invalidation:
            await self._cache.invalidate(key)
            return ProxyResponse(
                status_code=200,
                body=InvalidationResponse(cacheName=key).model_dump(),
                outcome=ProxyOutcome.INVALIDATED,
            )

        if key:
            entry = await self._cache.lookup(key)
            if entry is not None:
                return ProxyResponse(
                    status_code=entry.status_code,
                    body=entry.payload,
                    outcome=ProxyOutcome.CACHE_HIT,
                    headers={
                        "X-Cache-Hit": "true",
                        "X-Cache-Name": key,
                        "X-Cache-Date": format_cache_date(entry),
                    },
                )

        try:
            result, stored = await self._fetch(request)
        except ForwardingTransportError as e:
            return ProxyResponse(
                status_code=e.status_code,
                body=ProxyErrorResponse(message=e.message, targetUrl=e.target_url).model_dump(),
                outcome=ProxyOutcome.FORWARD_ERROR,
            )

        headers = {
            "X-Proxy-Status": "success",
            "X-Target-URL": target_url,
        }
        if key:
            headers["X-Cache-Hit"] = "false"
            headers["X-Cache-Name"] = key
            headers["X-Cache-TTL"] = str(request.requested_ttl)

        return ProxyResponse(
            status_code=result.status_code,
            body=result.payload,
            outcome=ProxyOutcome.FORWARDED_CACHED if stored else ProxyOutcome.FORWARDED_UNCACHED,
            headers=headers,
        )

    async def _fetch(self, request: ProxyRequest) -> tuple[ForwardResult, bool]:
        key = request.cache_key
        if not (self._coalesce and key):
            return await self._fetch_and_store(request)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._fetch_and_store(request))
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            logger.debug("Joining in-flight fetch for %r", key)

        # One waiter being cancelled must not cancel the shared fetch
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Mark the error retrieved even if every waiter was cancelled
        if not task.cancelled():
            task.exception()

    async def _fetch_and_store(self, request: ProxyRequest) -> tuple[ForwardResult, bool]:
        result = await self._forwarder.forward(request)

        stored = False
        if request.cache_key and request.wants_store:
            entry = await self._cache.store(
                request.cache_key,
                result.payload,
                result.status_code,
                request.requested_ttl,
            )
            stored = entry is not None
        return result, stored

    @property
    def cache(self) -> CacheController:
        """Get the cache controller (for testing)."""
        return self._cache

    @property
    def forwarder(self) -> ForwardingEngine:
        """Get the forwarding engine (for testing)."""
        return self._forwarder
