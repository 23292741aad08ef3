"""
Tests for the response stores.
"""

from unittest.mock import MagicMock

import pytest
import redis

from page_cache.exceptions import StoreUnavailableError
from page_cache.protocols import ResponseStore
from page_cache.repositories import InMemoryResponseStore, RedisResponseStore


class TestInMemoryResponseStore:
    """Unit tests for InMemoryResponseStore."""

    def test_satisfies_protocol(self, store):
        assert isinstance(store, ResponseStore)

    def test_set_and_get(self, store):
        store.set("k", b"v")
        assert store.get("k") == b"v"

    def test_get_missing_key_returns_none(self, store):
        assert store.get("nope") is None

    def test_set_overwrites(self, store):
        store.set("k", b"one")
        store.set("k", b"two")
        assert store.get("k") == b"two"
        assert len(store) == 1

    def test_clear_is_idempotent(self, store):
        store.set("a", b"1")
        store.set("b", b"2")
        assert store.clear() == 2
        assert store.clear() == 0
        assert store.get("a") is None
        assert store.get("b") is None

    def test_stats(self, store):
        store.set("a", b"1")
        assert store.get_stats() == {"backend": "memory", "total_entries": 1}
        assert store.health_check() is True


class TestRedisResponseStore:
    """RedisResponseStore against a mocked redis client."""

    @pytest.fixture
    def client(self):
        return MagicMock(spec=redis.Redis)

    @pytest.fixture
    def repo(self, client):
        return RedisResponseStore(redis_client=client, prefix="pages", ttl=0)

    def test_satisfies_protocol(self, repo):
        assert isinstance(repo, ResponseStore)

    def test_get_uses_prefixed_key(self, repo, client):
        client.get.return_value = b"payload"
        assert repo.get("DynamicCache_abc") == b"payload"
        client.get.assert_called_once_with("pages:DynamicCache_abc")

    def test_get_missing(self, repo, client):
        client.get.return_value = None
        assert repo.get("k") is None

    def test_set_without_ttl(self, repo, client):
        repo.set("k", b"v")
        client.set.assert_called_once_with("pages:k", b"v")
        client.setex.assert_not_called()

    def test_set_with_ttl(self, client):
        repo = RedisResponseStore(redis_client=client, prefix="pages", ttl=60)
        repo.set("k", b"v")
        client.setex.assert_called_once_with("pages:k", 60, b"v")

    def test_errors_become_store_unavailable(self, repo, client):
        client.get.side_effect = redis.ConnectionError("refused")
        client.set.side_effect = redis.ConnectionError("refused")
        with pytest.raises(StoreUnavailableError):
            repo.get("k")
        with pytest.raises(StoreUnavailableError):
            repo.set("k", b"v")

    def test_clear_deletes_only_prefixed_keys(self, repo, client):
        pipe = MagicMock()
        pipe.execute.return_value = [1, 1]
        client.pipeline.return_value = pipe
        client.scan_iter.return_value = iter([b"pages:a", b"pages:b"])

        assert repo.clear() == 2
        client.scan_iter.assert_called_once_with(match="pages:*", count=500)
        assert pipe.delete.call_count == 2
        client.flushdb.assert_not_called()

    def test_clear_failure(self, repo, client):
        client.scan_iter.side_effect = redis.ConnectionError("refused")
        with pytest.raises(StoreUnavailableError):
            repo.clear()

    def test_health_check(self, repo, client):
        client.ping.return_value = True
        assert repo.health_check() is True
        client.ping.side_effect = redis.ConnectionError("refused")
        assert repo.health_check() is False

    def test_stats(self, repo, client):
        client.scan_iter.return_value = iter([b"pages:a"])
        assert repo.get_stats() == {"backend": "redis", "prefix": "pages", "total_entries": 1, "ttl": 0}


def test_in_memory_store_is_usable_as_response_store():
    store: ResponseStore = InMemoryResponseStore()
    store.set("k", b"v")
    assert store.get("k") == b"v"
