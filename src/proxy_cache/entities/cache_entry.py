"""Cache entry domain entity."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

# Anything json.dumps accepts: dict, list, str, int, float, bool, None
JSONValue = Any

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A stored upstream response.

    Entries are immutable: a later write for the same key replaces the
    whole record, and expiry is left to the store.

    Attributes:
        payload: The decoded upstream body
        status_code: HTTP status the upstream returned
        stored_at: When the entry was written (UTC)
    """

    payload: T
    status_code: int
    stored_at: datetime
