"""Proxy response domain entity."""

from dataclasses import dataclass, field
from enum import Enum

from .cache_entry import JSONValue


class ProxyOutcome(str, Enum):
    """Terminal state a request resolved to."""

    INVALIDATED = "invalidated"
    CACHE_HIT = "cache_hit"
    FORWARDED_CACHED = "forwarded_cached"
    FORWARDED_UNCACHED = "forwarded_uncached"
    CLIENT_ERROR = "client_error"
    FORWARD_ERROR = "forward_error"


@dataclass(frozen=True)
class ProxyResponse:
    """Normalized response returned to the caller.

    Attributes:
        status_code: HTTP status to send back
        body: JSON body
        outcome: Which terminal state produced this response
        headers: Diagnostic headers (cache hit/miss, key, TTL, target)
    """

    status_code: int
    body: JSONValue
    outcome: ProxyOutcome
    headers: dict[str, str] = field(default_factory=dict)
