"""Unit tests for the in-memory and Redis store adapters."""

import threading
from unittest.mock import MagicMock, patch

import pytest
import redis

from ratelimitations.adapters.store.factory import create_store
from ratelimitations.adapters.store.in_memory import InMemoryStore
from ratelimitations.adapters.store.redis_store import RedisStore
from ratelimitations.core.config import StoreSettings
from ratelimitations.core.errors import StoreUnavailableError


class TestInMemoryStore:
    """List semantics, expiry and key enumeration."""

    def test_push_prepends(self, store: InMemoryStore) -> None:
        store.push("k", 1)
        store.push("k", 2)

        assert store.entries("k") == [2, 1]
        assert store.index("k", 0) == 2
        assert store.index("k", 1) == 1

    def test_index_absent(self, store: InMemoryStore) -> None:
        assert store.index("missing", 0) is None
        store.push("k", 0)
        # A zero timestamp is present, not absent
        assert store.index("k", 0) == 0
        assert store.index("k", 1) is None

    def test_trim_keeps_prefix(self, store: InMemoryStore) -> None:
        for value in range(5):
            store.push("k", value)

        store.trim("k", 3)

        assert store.entries("k") == [4, 3, 2]

    def test_expire_removes_key(self, store: InMemoryStore, clock) -> None:
        store.push("k", 1)
        store.expire("k", 10)

        clock.advance(9)
        assert store.entries("k") == [1]
        clock.advance(1)
        assert store.entries("k") == []
        assert store.delete("k") == 0

    def test_expire_missing_key_is_noop(self, store: InMemoryStore) -> None:
        store.expire("missing", 10)

        assert list(store.scan("*")) == []

    def test_record_and_fetch(self, store: InMemoryStore) -> None:
        for value in (1, 2, 3):
            store.push("k", value)

        result = store.record_and_fetch("k", 4, length=3, ttl_seconds=60, positions=[0, 2, 3])

        assert result == [4, 2, None]
        assert store.entries("k") == [4, 3, 2]
        assert store.ttl("k") == 60

    def test_scan_glob(self, store: InMemoryStore) -> None:
        store.push("A::x::1", 1)
        store.push("A::y::2", 1)
        store.push("B::x::1", 1)

        assert sorted(store.scan("A::*::*")) == ["A::x::1", "A::y::2"]
        assert list(store.scan("a::*")) == []

    def test_delete(self, store: InMemoryStore) -> None:
        store.push("k", 1)

        assert store.delete("k") == 1
        assert store.delete("k") == 0

    def test_concurrent_records_stay_bounded(self, store: InMemoryStore) -> None:
        def _writer() -> None:
            for value in range(50):
                store.record_and_fetch("k", value, length=10, ttl_seconds=60, positions=[9])

        threads = [threading.Thread(target=_writer) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.entries("k")) == 10


class TestRedisStore:
    """Command mapping and error wrapping against a mocked client."""

    def test_record_and_fetch_uses_single_pipeline(self) -> None:
        client = MagicMock()
        pipe = client.pipeline.return_value
        pipe.execute.return_value = [3, True, True, "120", None]

        result = RedisStore(client).record_and_fetch(
            "k", 150, length=6, ttl_seconds=3600, positions=[2, 5]
        )

        assert result == [120, None]
        client.pipeline.assert_called_once_with(transaction=True)
        pipe.lpush.assert_called_once_with("k", 150)
        pipe.ltrim.assert_called_once_with("k", 0, 5)
        pipe.expire.assert_called_once_with("k", 3600)
        assert [c.args for c in pipe.lindex.call_args_list] == [("k", 2), ("k", 5)]
        pipe.execute.assert_called_once()

    def test_primitives(self) -> None:
        client = MagicMock()
        client.lindex.return_value = b"42"
        store = RedisStore(client)

        store.push("k", 1)
        store.trim("k", 4)
        store.expire("k", 30)

        assert store.index("k", 0) == 42
        client.lpush.assert_called_once_with("k", 1)
        client.ltrim.assert_called_once_with("k", 0, 3)
        client.expire.assert_called_once_with("k", 30)

    def test_index_absent(self) -> None:
        client = MagicMock()
        client.lindex.return_value = None

        assert RedisStore(client).index("k", 3) is None

    def test_scan_and_delete(self) -> None:
        client = MagicMock()
        client.scan_iter.return_value = iter(["RATELIMITATIONS::s::a", b"RATELIMITATIONS::s::b"])
        client.delete.return_value = 1
        store = RedisStore(client)

        assert store.scan("RATELIMITATIONS::*::*") == [
            "RATELIMITATIONS::s::a",
            "RATELIMITATIONS::s::b",
        ]
        client.scan_iter.assert_called_once_with(match="RATELIMITATIONS::*::*")
        assert store.delete("RATELIMITATIONS::s::a") == 1

    @pytest.mark.parametrize(
        "error",
        [redis.ConnectionError("refused"), redis.TimeoutError("slow"), redis.ResponseError("WRONGTYPE")],
    )
    def test_errors_become_store_unavailable(self, error: redis.RedisError) -> None:
        client = MagicMock()
        client.pipeline.return_value.execute.side_effect = error

        with pytest.raises(StoreUnavailableError) as exc_info:
            RedisStore(client).record_and_fetch("k", 1, length=2, ttl_seconds=10, positions=[1])

        assert exc_info.value.code == "store_unavailable"
        assert exc_info.value.retryable is True
        assert exc_info.value.__cause__ is error

    def test_scan_errors_wrapped(self) -> None:
        client = MagicMock()
        client.scan_iter.side_effect = redis.ConnectionError("refused")

        with pytest.raises(StoreUnavailableError):
            RedisStore(client).scan("*")

    def test_from_url_decodes_responses(self) -> None:
        with patch("ratelimitations.adapters.store.redis_store.redis.Redis.from_url") as from_url:
            store = RedisStore.from_url("redis://example:6379/1", socket_timeout=2.0)

        from_url.assert_called_once_with(
            "redis://example:6379/1", socket_timeout=2.0, decode_responses=True
        )
        assert isinstance(store, RedisStore)


class TestCreateStore:
    """Back-end selection from settings."""

    def test_memory_backend(self) -> None:
        assert isinstance(create_store(StoreSettings(backend="memory")), InMemoryStore)

    def test_redis_backend(self) -> None:
        with patch("ratelimitations.adapters.store.redis_store.redis.Redis.from_url") as from_url:
            store = create_store(
                StoreSettings(backend="redis", redis_url="redis://cache:6379/0", socket_timeout_seconds=1.5)
            )

        assert isinstance(store, RedisStore)
        from_url.assert_called_once_with(
            "redis://cache:6379/0", socket_timeout=1.5, decode_responses=True
        )

    def test_backend_from_environment(self) -> None:
        # conftest pins RATELIMIT_STORE_BACKEND=memory
        assert isinstance(create_store(), InMemoryStore)
