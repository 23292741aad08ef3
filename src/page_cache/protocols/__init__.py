"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Swapping the response store (Redis, in-memory, anything with get/set/clear)
- Plugging in extensions that narrow eligibility or add cache key fragments
- Unit testing with lightweight fakes

Usage:
    ```python
    from page_cache.protocols import ResponseStore

    store: ResponseStore = RedisResponseStore.create()
    store: ResponseStore = InMemoryResponseStore()
    ```
"""

from .cache_extension import CacheExtension, CacheExtensionBase
from .response_store import ResponseStore

__all__ = [
    "CacheExtension",
    "CacheExtensionBase",
    "ResponseStore",
]
