"""FastAPI application factory serving a site's routes through the page cache."""

from collections.abc import Sequence
from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI

from page_cache.api.dependencies import AdminDep, HandlerDep, require_admin
from page_cache.api.middleware import DynamicCacheMiddleware
from page_cache.config import Settings, settings
from page_cache.dto import (
    CacheStatsResponse,
    ClearCacheResponse,
    ContentEventRequest,
    ContentEventResponse,
    HealthCheckResponse,
)
from page_cache.handlers import CacheHandler
from page_cache.protocols import CacheExtension, ResponseStore
from page_cache.repositories import RedisResponseStore
from page_cache.services import AdminAuthorizer, BasicAuthChecker, DynamicCacheService, InvalidationHooks

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    cache_service: DynamicCacheService = app.state.cache_service
    config = cache_service.settings
    log.info(
        "dynamic_cache.startup",
        enabled=config.enabled,
        segment_hostname=config.segment_hostname,
        store=type(cache_service.store).__name__,
    )
    if not cache_service.is_healthy():
        # Keep serving; every request behaves as an uncached miss until the store is back
        log.warning("dynamic_cache.store_unreachable")

    yield

    store = cache_service.store
    if isinstance(store, RedisResponseStore):
        store.client.close()
    log.info("dynamic_cache.shutdown")


def create_app(
    config: Settings | None = None,
    store: ResponseStore | None = None,
    extensions: Sequence[CacheExtension] = (),
    **fastapi_kwargs,
) -> FastAPI:
    """Build a FastAPI app whose routes are served through the page cache.

    Register the site's own routes on the returned app; they become the
    backend behind the cache.

    Args:
        config: Cache policy. Defaults to the process settings.
        store: Response store. Defaults to Redis configured from settings.
        extensions: Cache extensions, invoked in order.
        **fastapi_kwargs: Passed through to FastAPI().

    Returns:
        The configured application
    """
    config = config or settings
    store = store if store is not None else RedisResponseStore.create(config)

    cache_service = DynamicCacheService.create(store=store, config=config, extensions=extensions)
    hooks = InvalidationHooks(cache_service)
    admin_authorizer = AdminAuthorizer(config)

    fastapi_kwargs.setdefault("title", "Dynamic Page Cache")
    app = FastAPI(lifespan=lifespan, **fastapi_kwargs)

    app.state.cache_service = cache_service
    app.state.cache_handler = CacheHandler(cache_service=cache_service, hooks=hooks)
    app.state.admin_authorizer = admin_authorizer

    app.add_middleware(
        DynamicCacheMiddleware,  # type: ignore[arg-type]
        cache_service=cache_service,
        hooks=hooks,
        config=config,
        auth_checker=BasicAuthChecker(config),
        admin_authorizer=admin_authorizer,
    )

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.get("/_cache/stats", response_model=CacheStatsResponse, dependencies=[Depends(require_admin)])
    async def cache_stats(handler: HandlerDep) -> CacheStatsResponse:
        """Get cache statistics."""
        return await handler.get_stats()

    @app.delete("/_cache", response_model=ClearCacheResponse)
    async def flush_cache(handler: HandlerDep, admin: AdminDep) -> ClearCacheResponse:
        """Clear every cached page."""
        return await handler.flush_cache(authorized=admin)

    @app.post("/_cache/events", response_model=ContentEventResponse, dependencies=[Depends(require_admin)])
    async def content_event(request: ContentEventRequest, handler: HandlerDep) -> ContentEventResponse:
        """Report a content change from the content system."""
        return await handler.content_event(request)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "page_cache.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
