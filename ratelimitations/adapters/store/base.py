"""Shared store interfaces.

The limiter depends on AbstractAccessLogStore and the registry on
AbstractKeyspaceStore, never on a concrete client, so Redis can be swapped
for the in-memory store in tests or single-process deployments.

The interfaces stay deliberately narrow: list push/trim/expire/index for the
hot path, pattern scan/delete for maintenance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Sequence


class AbstractAccessLogStore(ABC):
    """Per-key, most-recent-first list of integer timestamps."""

    @abstractmethod
    def push(self, key: str, value: int) -> None:
        """Prepend ``value`` to the list at ``key``, creating it if needed."""
        raise NotImplementedError

    @abstractmethod
    def trim(self, key: str, length: int) -> None:
        """Keep only the first ``length`` entries of the list at ``key``."""
        raise NotImplementedError

    @abstractmethod
    def expire(self, key: str, seconds: int) -> None:
        """(Re)set the time-to-live of ``key``."""
        raise NotImplementedError

    @abstractmethod
    def index(self, key: str, position: int) -> int | None:
        """Return the entry at zero-based ``position``, or None when absent."""
        raise NotImplementedError

    def record_and_fetch(
        self,
        key: str,
        value: int,
        *,
        length: int,
        ttl_seconds: int,
        positions: Sequence[int],
    ) -> list[int | None]:
        """Push, trim and expire ``key``, then read each of ``positions``.

        Back-ends able to batch commands (e.g. a Redis pipeline) should
        override this so the whole sequence costs one round trip.

        Args:
            key: Access log key.
            value: Timestamp to prepend.
            length: Number of entries to keep after the push.
            ttl_seconds: Expiry to set on the key.
            positions: Zero-based positions to read after the update.

        Returns:
            Entry at each requested position (None where absent), in order.
        """
        self.push(key, value)
        self.trim(key, length)
        self.expire(key, ttl_seconds)
        return [self.index(key, position) for position in positions]


class AbstractKeyspaceStore(ABC):
    """Key enumeration and deletion for maintenance paths."""

    @abstractmethod
    def scan(self, pattern: str) -> Iterable[str]:
        """Yield every live key matching the glob-style ``pattern``."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> int:
        """Delete ``key``; return the number of keys removed (0 or 1)."""
        raise NotImplementedError
