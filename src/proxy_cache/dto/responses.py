"""Response DTOs for bodies the proxy generates itself."""

from pydantic import BaseModel, Field


class InvalidationResponse(BaseModel):
    """Body returned after a ttl=0 invalidation."""

    message: str = Field("Cache cleared successfully", description="Human-readable status message")
    cacheName: str = Field(..., description="The cache key that was cleared")


class ClientErrorResponse(BaseModel):
    """Body returned for unusable client input."""

    error: str = Field(..., description="What was wrong with the request")


class ProxyErrorResponse(BaseModel):
    """Body returned when the upstream exchange did not complete."""

    error: str = Field("Proxy error", description="Error category")
    message: str = Field(..., description="Human-readable failure reason")
    targetUrl: str = Field(..., description="The URL the proxy tried to reach")
