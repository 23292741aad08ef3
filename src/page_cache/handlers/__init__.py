"""Handler layer for the admin HTTP endpoints.

Handlers depend on services (business logic), not directly on
repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .cache_handler import CacheHandler

__all__ = [
    "CacheHandler",
]
