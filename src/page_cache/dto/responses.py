"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ClearCacheResponse(BaseModel):
    """Response DTO for an explicit cache flush."""

    success: bool = Field(..., description="Whether the store was cleared")
    message: str = Field(..., description="Human-readable status message")


class ContentEventResponse(BaseModel):
    """Response DTO for a reported content event."""

    event: str = Field(..., description="The event that was handled")
    cleared: bool = Field(..., description="Whether the event cleared the cache")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    backend: str = Field(..., description="Store implementation, e.g. 'redis' or 'memory'")
    total_entries: int = Field(..., description="Cached pages, or -1 if the store could not be counted")
    enabled: bool = Field(..., description="Whether the master switch is on")
    segment_hostname: bool = Field(..., description="Whether keys are segmented by host")
    response_header: str = Field(..., description="Name of the diagnostic header")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'degraded'")
    store_healthy: bool = Field(..., description="Whether the response store is reachable")
