"""Dynamic Page Cache - full-page HTTP response caching for FastAPI apps.

This package provides a layered architecture for page caching:

Layers:
    - protocols: Interface contracts (ResponseStore, CacheExtension)
    - repositories: Response stores (Redis, in-memory)
    - services: Eligibility rules, key derivation, envelope codec,
      the caching decision and invalidation hooks
    - handlers: Admin HTTP endpoint handlers
    - dto: Data transfer objects (admin API contracts)
    - entities: Domain models (internal)
    - api: Middleware and application factory

Usage:
    ```python
    from page_cache.api.app import create_app

    app = create_app()

    @app.get("/about")
    async def about():
        return HTMLResponse(render("about.html"))
    ```
"""

from page_cache.config import Settings, get_redis_client, settings
from page_cache.entities import AuthState, CacheOutcome, CacheResult, EligibilityVerdict, PageRequest, PageResponse
from page_cache.exceptions import ConfigurationError, PageCacheError, StoreUnavailableError
from page_cache.protocols import CacheExtension, CacheExtensionBase, ResponseStore
from page_cache.repositories import InMemoryResponseStore, RedisResponseStore
from page_cache.services import ContentEvent, DynamicCacheService, InvalidationHooks

__all__ = [
    # Configuration
    "Settings",
    "settings",
    "get_redis_client",
    # Errors
    "PageCacheError",
    "ConfigurationError",
    "StoreUnavailableError",
    # Protocols (interfaces)
    "ResponseStore",
    "CacheExtension",
    "CacheExtensionBase",
    # Services (business logic)
    "DynamicCacheService",
    "InvalidationHooks",
    "ContentEvent",
    # Repositories (data access)
    "RedisResponseStore",
    "InMemoryResponseStore",
    # Entities (domain models)
    "PageRequest",
    "PageResponse",
    "AuthState",
    "EligibilityVerdict",
    "CacheOutcome",
    "CacheResult",
]
