"""Proxy request domain entity."""

from dataclasses import dataclass, field

import httpx


@dataclass(frozen=True)
class ProxyRequest:
    """One inbound call to the proxy, scoped to a single request cycle.

    Attributes:
        target_url: Absolute URL to forward to (None when the caller omitted it)
        method: Inbound HTTP method, forwarded as-is
        requested_ttl: TTL in seconds for a cache write; 0 means invalidate
        cache_key: Optional cache key; absent means do not cache
        headers: Inbound headers (case-insensitive)
        body: Buffered request body, only for non-GET requests with a content-type
    """

    target_url: str | None
    method: str
    requested_ttl: int
    cache_key: str | None = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes | None = None

    @property
    def wants_invalidation(self) -> bool:
        return bool(self.cache_key) and self.requested_ttl == 0

    @property
    def wants_store(self) -> bool:
        return bool(self.cache_key) and self.requested_ttl > 0
