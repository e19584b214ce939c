"""Introspection and maintenance over configured limits and live access logs.

Nothing here is on the hot path. Consumer listings are rebuilt on demand by
scanning the store for access log keys; they are never persisted.
"""

from __future__ import annotations

import logging

from ratelimitations.adapters.store.base import AbstractKeyspaceStore
from ratelimitations.schemas.limits import RateLimitConfig
from ratelimitations.services.limiter import make_key, split_key, validate_identifier

logger = logging.getLogger(__name__)

ALL_KEYS_PATTERN = make_key("*", "*")


class RateLimitRegistry:
    """Read-only views of the limits plus a global flush."""

    def __init__(self, config: RateLimitConfig, store: AbstractKeyspaceStore) -> None:
        self._config = config
        self._store = store

    def list_services(self) -> list[str]:
        """Return every rate-limited service name, sorted."""
        return self._config.services()

    def tiers_for(self, service: str) -> list[tuple[int, int]]:
        """Return ``(window_seconds, max_count)`` pairs for ``service``, shortest first.

        Raises:
            InvalidArgumentError: If service is missing or empty.
            UnknownServiceError: If the service is not configured.
        """
        validate_identifier("service", service)
        return [tier.as_pair() for tier in self._config.limits_for(service).tiers]

    def _all_keys(self) -> list[str]:
        return list(self._store.scan(ALL_KEYS_PATTERN))

    def all_consumers(self) -> dict[str, set[str]]:
        """Map each service to the consumers that currently have an access log."""
        consumers: dict[str, set[str]] = {}
        for key in self._all_keys():
            service, consumer = split_key(key)
            consumers.setdefault(service, set()).add(consumer)
        return consumers

    def flush_all(self) -> int:
        """Delete every access log, for every service.

        Returns:
            Number of keys actually removed.
        """
        removed = sum(self._store.delete(key) for key in self._all_keys())
        logger.info("rate_limit.flushed", extra={"removed": removed})
        return removed

    # Long-form aliases.
    rate_limited_services = list_services
    rate_limits_for_service = tiers_for
    all_service_consumers = all_consumers
    flush_all_service_consumers = flush_all
