"""HTTP handlers for cache administration.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes and error responses.
"""

from fastapi import HTTPException, status

from page_cache.dto import (
    CacheStatsResponse,
    ClearCacheResponse,
    ContentEventRequest,
    ContentEventResponse,
    HealthCheckResponse,
)
from page_cache.exceptions import FlushNotAuthorizedError
from page_cache.services import DynamicCacheService, InvalidationHooks


class CacheHandler:
    """HTTP handlers for cache administration.

    Example:
        ```python
        handler = CacheHandler(cache_service=cache, hooks=InvalidationHooks(cache))

        @app.delete("/_cache", response_model=ClearCacheResponse)
        async def flush(admin: AdminDep):
            return await handler.flush_cache(authorized=admin)
        ```
    """

    def __init__(self, cache_service: DynamicCacheService, hooks: InvalidationHooks) -> None:
        """Initialize the cache handler.

        Args:
            cache_service: The cache service (required).
            hooks: Invalidation hooks fired by the endpoints (required).
        """
        self._cache = cache_service
        self._hooks = hooks

    async def flush_cache(self, authorized: bool) -> ClearCacheResponse:
        """Handle DELETE /_cache requests.

        Raises:
            HTTPException: 403 for unprivileged callers, 503 if the store failed
        """
        try:
            cleared = self._hooks.on_flush_command(authorized=authorized)
        except FlushNotAuthorizedError as e:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e

        if not cleared:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Response store could not be cleared",
            )
        return ClearCacheResponse(success=True, message="Cache cleared successfully")

    async def content_event(self, request: ContentEventRequest) -> ContentEventResponse:
        """Handle POST /_cache/events requests."""
        cleared = self._hooks.dispatch(request.event, versioned=request.versioned)
        return ContentEventResponse(event=request.event.value, cleared=cleared)

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /_cache/stats requests."""
        stats = self._cache.get_stats()
        return CacheStatsResponse(
            backend=stats.get("backend", "unknown"),
            total_entries=stats.get("total_entries", -1),
            enabled=stats["enabled"],
            segment_hostname=stats["segment_hostname"],
            response_header=stats["response_header"],
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        The cache is an optimisation, so an unreachable store degrades
        the service rather than failing it.
        """
        is_healthy = self._cache.is_healthy()
        return HealthCheckResponse(
            status="healthy" if is_healthy else "degraded",
            store_healthy=is_healthy,
        )
