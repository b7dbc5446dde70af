"""Persisted cache record layout."""

from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, Field

from proxy_cache.entities import CacheEntry

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MILLISECOND = timedelta(milliseconds=1)


class StoredCacheRecord(BaseModel):
    """Record stored under a cache key: ``{data, status, timestamp}``."""

    data: Any = Field(None, description="Decoded upstream body")
    status: int = Field(..., description="Upstream HTTP status", ge=100, le=599)
    timestamp: int = Field(..., description="Storage time, Unix epoch milliseconds", ge=0)

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> "StoredCacheRecord":
        return cls(
            data=entry.payload,
            status=entry.status_code,
            timestamp=(entry.stored_at - EPOCH) // ONE_MILLISECOND,
        )

    def to_entry(self) -> CacheEntry:
        return CacheEntry(
            payload=self.data,
            status_code=self.status,
            stored_at=EPOCH + self.timestamp * ONE_MILLISECOND,
        )
