"""Data Transfer Objects for the admin API contracts.

These Pydantic models define the external API contract of the cache's
own endpoints. The cached pages themselves never pass through them.
"""

from .requests import ContentEventRequest
from .responses import CacheStatsResponse, ClearCacheResponse, ContentEventResponse, HealthCheckResponse

__all__ = [
    "ContentEventRequest",
    "CacheStatsResponse",
    "ClearCacheResponse",
    "ContentEventResponse",
    "HealthCheckResponse",
]
