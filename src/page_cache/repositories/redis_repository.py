"""Redis implementation of ResponseStore.

Entries are plain string keys holding encoded envelopes, namespaced
under a prefix so that clearing the cache never touches unrelated data
sharing the same Redis database.
"""

import redis
import structlog

from page_cache.config import Settings, get_redis_client, settings
from page_cache.exceptions import StoreUnavailableError

log = structlog.get_logger(__name__)

_CLEAR_BATCH_SIZE = 500


class RedisResponseStore:
    """Redis implementation of the ResponseStore protocol.

    This class satisfies the ResponseStore protocol through structural
    typing - no explicit inheritance needed.

    Redis errors are re-raised as StoreUnavailableError so the cache
    service can degrade without knowing which client library is in use.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
        ttl: int | None = None,
    ) -> None:
        """Initialize the Redis response store.

        Args:
            redis_client: Redis client instance. If None, creates default.
            prefix: Namespace for keys. Defaults to settings.
            ttl: Entry lifetime in seconds, 0 for no expiry. Defaults to settings.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = prefix or settings.cache_prefix
        self._ttl = settings.cache_ttl if ttl is None else ttl

    @classmethod
    def create(cls, config: Settings | None = None) -> "RedisResponseStore":
        """Factory method to create a RedisResponseStore from settings.

        Args:
            config: Settings to read the Redis URL, prefix and TTL from.

        Returns:
            Configured RedisResponseStore
        """
        config = config or settings
        return cls(
            redis_client=get_redis_client(config),
            prefix=config.cache_prefix,
            ttl=config.cache_ttl,
        )

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def get(self, key: str) -> bytes | None:
        try:
            value = self._client.get(self._key(key))
        except redis.RedisError as e:
            raise StoreUnavailableError(f"Redis get failed: {e}") from e
        if value is None:
            return None
        return value if isinstance(value, bytes) else str(value).encode()

    def set(self, key: str, value: bytes) -> None:
        try:
            if self._ttl:
                self._client.setex(self._key(key), self._ttl, value)
            else:
                self._client.set(self._key(key), value)
        except redis.RedisError as e:
            raise StoreUnavailableError(f"Redis set failed: {e}") from e

    def clear(self) -> int:
        """Delete every key under the prefix using SCAN + DEL.

        Returns:
            Number of entries deleted
        """
        deleted = 0
        try:
            batch: list = []
            for key in self._client.scan_iter(match=f"{self._prefix}:*", count=_CLEAR_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= _CLEAR_BATCH_SIZE:
                    deleted += self._delete_batch(batch)
                    batch = []
            if batch:
                deleted += self._delete_batch(batch)
        except redis.RedisError as e:
            raise StoreUnavailableError(f"Redis clear failed: {e}") from e

        log.debug("dynamic_cache.redis.cleared", prefix=self._prefix, deleted=deleted)
        return deleted

    def _delete_batch(self, keys: list) -> int:
        pipe = self._client.pipeline()
        for key in keys:
            pipe.delete(key)
        return sum(int(result) for result in pipe.execute())

    def count_all(self) -> int:
        """Count entries under the prefix."""
        return sum(1 for _ in self._client.scan_iter(match=f"{self._prefix}:*"))

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    def get_stats(self) -> dict:
        """Get store statistics.

        Returns:
            Dictionary with stats
        """
        try:
            total = self.count_all()
        except redis.RedisError as e:
            log.warning("dynamic_cache.redis.stats_failed", error=str(e))
            total = -1
        return {
            "backend": "redis",
            "prefix": self._prefix,
            "total_entries": total,
            "ttl": self._ttl,
        }

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
