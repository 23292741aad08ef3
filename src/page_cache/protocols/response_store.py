"""Response store protocol.

Defines the minimal byte-oriented key-value interface the cache service
needs. Entries are opaque bytes produced by the envelope codec.

Implementations can include:
- Redis (default)
- An in-process dict (tests, single worker deployments)
- Memcached, a filesystem directory, or any other key-value store
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ResponseStore(Protocol):
    """Protocol for response storage backends.

    Each operation must be atomic for a single key. Implementations raise
    StoreUnavailableError when the backing service fails; the cache
    service treats that as a miss and keeps serving.
    """

    def get(self, key: str) -> bytes | None:
        """Fetch the bytes stored under ``key``.

        Args:
            key: The cache key

        Returns:
            The stored bytes, or None if absent
        """
        ...

    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous entry.

        Args:
            key: The cache key
            value: Encoded response envelope
        """
        ...

    def clear(self) -> int:
        """Remove every entry owned by this store.

        Returns:
            Number of entries deleted
        """
        ...

    def health_check(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        ...

    def get_stats(self) -> dict:
        """Get store statistics.

        Returns:
            Dictionary with stats (implementation-specific)
        """
        ...
