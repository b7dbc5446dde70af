"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and handlers. They are NOT the persisted or wire format - use the
models from the dto package for that.
"""

from .cache_entry import CacheEntry, JSONValue
from .forward_result import ForwardResult
from .proxy_request import ProxyRequest
from .proxy_response import ProxyOutcome, ProxyResponse

__all__ = [
    "CacheEntry",
    "ForwardResult",
    "JSONValue",
    "ProxyOutcome",
    "ProxyRequest",
    "ProxyResponse",
]
