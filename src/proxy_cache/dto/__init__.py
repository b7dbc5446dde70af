"""Data Transfer Objects for the persisted record and API bodies.

These Pydantic models define the external contracts: the layout written
to the key-value store and the JSON bodies of proxy-generated responses.

Internal domain logic should use entities from the entities package.
"""

from .records import StoredCacheRecord
from .responses import ClientErrorResponse, InvalidationResponse, ProxyErrorResponse

__all__ = [
    "StoredCacheRecord",
    "InvalidationResponse",
    "ClientErrorResponse",
    "ProxyErrorResponse",
]
