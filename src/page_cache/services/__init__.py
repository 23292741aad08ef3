"""Service layer for business logic.

This layer contains the caching decision and its supporting pieces.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Middleware -> DynamicCacheService -> ResponseStore
    (HTTP)     -> (Decision)          -> (Data Access)

Usage:
    ```python
    from page_cache.services import DynamicCacheService, InvalidationHooks

    cache = DynamicCacheService.create(store=store)
    hooks = InvalidationHooks(cache)
    ```
"""

from . import codec
from .auth import AdminAuthorizer, BasicAuthChecker
from .cache_key import CacheKeyBuilder, normalize_url
from .cache_service import Backend, DynamicCacheService
from .eligibility import EligibilityEvaluator
from .invalidation import ContentEvent, InvalidationHooks

__all__ = [
    "AdminAuthorizer",
    "Backend",
    "BasicAuthChecker",
    "CacheKeyBuilder",
    "ContentEvent",
    "DynamicCacheService",
    "EligibilityEvaluator",
    "InvalidationHooks",
    "codec",
    "normalize_url",
]
