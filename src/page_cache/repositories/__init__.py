"""Repository layer for data access.

This layer hides the storage engine behind the ResponseStore protocol.
The repositories are protocol-based (structural typing), not
inheritance-based. Any class implementing get/set/clear will satisfy
the protocol.
"""

from page_cache.protocols import ResponseStore

from .memory_repository import InMemoryResponseStore
from .redis_repository import RedisResponseStore

__all__ = [
    "ResponseStore",
    "InMemoryResponseStore",
    "RedisResponseStore",
]
