"""In-memory access log store.

Notes:
- Per-process only: running multiple workers gives each its own limits.
- Thread-safe: uses a lock around shared state.
- Expiry is evaluated lazily against the injected clock, which lets tests
  share one fake clock between the store and the limiter.
"""

from __future__ import annotations

import fnmatch
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from ratelimitations.adapters.store.base import AbstractAccessLogStore, AbstractKeyspaceStore


@dataclass
class _LogState:
    entries: list[int] = field(default_factory=list)
    expires_at: float | None = None


class InMemoryStore(AbstractAccessLogStore, AbstractKeyspaceStore):
    """Dictionary-backed stand-in for the shared store."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the store.

        Args:
            clock: Time source returning UNIX time in seconds, used for TTLs.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._logs: dict[str, _LogState] = {}

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryStore(keys={len(self._logs)})"

    def _live_state_locked(self, key: str) -> _LogState | None:
        state = self._logs.get(key)
        if state is None:
            return None
        if state.expires_at is not None and self._clock() >= state.expires_at:
            del self._logs[key]
            return None
        return state

    def push(self, key: str, value: int) -> None:
        with self._lock:
            state = self._live_state_locked(key)
            if state is None:
                state = self._logs[key] = _LogState()
            state.entries.insert(0, int(value))

    def trim(self, key: str, length: int) -> None:
        with self._lock:
            state = self._live_state_locked(key)
            if state is None:
                return
            del state.entries[max(0, length):]
            if not state.entries:
                del self._logs[key]

    def expire(self, key: str, seconds: int) -> None:
        with self._lock:
            state = self._live_state_locked(key)
            if state is not None:
                state.expires_at = self._clock() + seconds

    def index(self, key: str, position: int) -> int | None:
        with self._lock:
            state = self._live_state_locked(key)
            if state is None:
                return None
            try:
                return state.entries[position]
            except IndexError:
                return None

    def record_and_fetch(
        self,
        key: str,
        value: int,
        *,
        length: int,
        ttl_seconds: int,
        positions: Sequence[int],
    ) -> list[int | None]:
        # Hold the lock across the sequence so concurrent callers see it atomically.
        with self._lock:
            return super().record_and_fetch(
                key, value, length=length, ttl_seconds=ttl_seconds, positions=positions
            )

    def scan(self, pattern: str) -> Iterable[str]:
        with self._lock:
            keys = [key for key in list(self._logs) if self._live_state_locked(key) is not None]
        return [key for key in keys if fnmatch.fnmatchcase(key, pattern)]

    def delete(self, key: str) -> int:
        with self._lock:
            if self._live_state_locked(key) is None:
                return 0
            del self._logs[key]
            return 1

    def entries(self, key: str) -> list[int]:
        """Return a copy of the whole list at ``key`` (empty when absent)."""
        with self._lock:
            state = self._live_state_locked(key)
            return list(state.entries) if state else []

    def ttl(self, key: str) -> float | None:
        """Seconds until ``key`` expires, or None when absent or persistent."""
        with self._lock:
            state = self._live_state_locked(key)
            if state is None or state.expires_at is None:
                return None
            return state.expires_at - self._clock()
