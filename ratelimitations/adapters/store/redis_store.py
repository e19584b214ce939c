"""Redis-backed access log store.

Access logs are Redis lists (LPUSH/LTRIM/EXPIRE/LINDEX). The hot-path
sequence is sent as one MULTI/EXEC pipeline, so a check costs a single round
trip and Redis applies the commands for a key back to back.

Every redis-py failure is re-raised as StoreUnavailableError; no retries are
attempted here.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Sequence

import redis

from ratelimitations.adapters.store.base import AbstractAccessLogStore, AbstractKeyspaceStore
from ratelimitations.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def _to_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


class RedisStore(AbstractAccessLogStore, AbstractKeyspaceStore):
    """Shared store on top of a redis-py client."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, *, socket_timeout: float | None = None) -> "RedisStore":
        """Create a store from a ``redis://`` URL.

        Args:
            url: Redis connection URL.
            socket_timeout: Optional per-command socket timeout in seconds.
        """
        client = redis.Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            decode_responses=True,
        )
        return cls(client)

    @contextmanager
    def _store_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as exc:
            logger.error(
                "store.unavailable",
                extra={"operation": operation, "error_type": type(exc).__name__},
            )
            raise StoreUnavailableError(
                code="store_unavailable",
                message=f"Redis {operation} failed: {exc}",
                details={"operation": operation, "hint": "Check Redis connectivity"},
            ) from exc

    def push(self, key: str, value: int) -> None:
        with self._store_errors("lpush"):
            self._client.lpush(key, value)

    def trim(self, key: str, length: int) -> None:
        with self._store_errors("ltrim"):
            self._client.ltrim(key, 0, length - 1)

    def expire(self, key: str, seconds: int) -> None:
        with self._store_errors("expire"):
            self._client.expire(key, seconds)

    def index(self, key: str, position: int) -> int | None:
        with self._store_errors("lindex"):
            return _to_int(self._client.lindex(key, position))

    def record_and_fetch(
        self,
        key: str,
        value: int,
        *,
        length: int,
        ttl_seconds: int,
        positions: Sequence[int],
    ) -> list[int | None]:
        with self._store_errors("pipeline"):
            pipe = self._client.pipeline(transaction=True)
            pipe.lpush(key, value)
            pipe.ltrim(key, 0, length - 1)
            pipe.expire(key, ttl_seconds)
            for position in positions:
                pipe.lindex(key, position)
            results = pipe.execute()

        # First three replies belong to LPUSH, LTRIM and EXPIRE.
        return [_to_int(item) for item in results[3:]]

    def scan(self, pattern: str) -> Iterable[str]:
        with self._store_errors("scan"):
            return [
                key.decode() if isinstance(key, bytes) else key
                for key in self._client.scan_iter(match=pattern)
            ]

    def delete(self, key: str) -> int:
        with self._store_errors("del"):
            return int(self._client.delete(key))
