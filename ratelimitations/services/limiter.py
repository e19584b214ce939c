"""Sliding-window rate limiter backed by the shared store.

Every (service, consumer) pair owns one list in the store holding access
timestamps, most recent first, capped at ``max_count + 1`` entries of the
service's largest tier. A check always records the access first, then looks
at position ``tier.max_count`` for each tier: that entry is the access made
``max_count`` pushes before this one, so if it is still inside the tier's
window the tier has seen ``max_count + 1`` accesses and is exceeded.

Because all tiers read the same list, a shorter tier's position must fall
inside the list kept for the longest tier. That holds when counts grow with
the window length (see ratelimitations.services.validator).

Denied requests are still recorded: the caller may well consume the
resource anyway, so the limiter stays conservative.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from ratelimitations.adapters.store.base import AbstractAccessLogStore
from ratelimitations.core.errors import InvalidArgumentError
from ratelimitations.core.logging import hash_identifier
from ratelimitations.schemas.limits import RateLimitConfig, Tier

logger = logging.getLogger(__name__)

KEYSPACE = "RATELIMITATIONS"
SEPARATOR = "::"


def make_key(service: str, consumer: str) -> str:
    """Build the access log key for a (service, consumer) pair."""
    return SEPARATOR.join((KEYSPACE, service, consumer))


def split_key(key: str) -> tuple[str, str]:
    """Recover (service, consumer) from an access log key."""
    service, consumer = key.split(SEPARATOR)[-2:]
    return service, consumer


def validate_identifier(name: str, value: object) -> str:
    """Ensure a service/consumer identifier is usable in a key.

    Raises:
        InvalidArgumentError: If the value is missing, empty or contains the
            key separator.
    """
    if not isinstance(value, str) or not value:
        raise InvalidArgumentError(
            code="invalid_argument",
            message='Must supply both "service" and "consumer" arguments',
            details={"hint": f"{name} must be a non-empty string"},
        )
    if SEPARATOR in value:
        raise InvalidArgumentError(
            code="invalid_argument",
            message=f'{name} must not contain "{SEPARATOR}"',
            details={"hint": f"{name} identifiers are stored in keys joined by {SEPARATOR}"},
        )
    return value


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a check-and-record operation.

    Attributes:
        allowed: Whether the access is within every tier.
        service: Service that was checked.
        consumer: Consumer that was checked.
        checked_at: UNIX epoch seconds recorded for this access.
        violated_tier: First (shortest) tier found exceeded, None when allowed.
    """

    allowed: bool
    service: str
    consumer: str
    checked_at: int
    violated_tier: Tier | None = None

    def __bool__(self) -> bool:
        return self.allowed


class SlidingWindowRateLimiter:
    """Multi-tier sliding-window limiter over a shared access log store."""

    def __init__(
        self,
        config: RateLimitConfig,
        store: AbstractAccessLogStore,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            config: Immutable per-service limits.
            store: Access log store shared by every process.
            clock: Time source returning UNIX time in seconds.
        """
        self._config = config
        self._store = store
        self._clock = clock

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def check(self, service: str, consumer: str) -> RateLimitResult:
        """Record an access for (service, consumer) and decide if it is allowed.

        The access is recorded whatever the outcome.

        Args:
            service: Configured service name.
            consumer: Identifier of whoever is accessing the service.

        Returns:
            RateLimitResult with the decision and the first violated tier.

        Raises:
            InvalidArgumentError: If service or consumer is missing or malformed.
            UnknownServiceError: If the service has no configured limits.
            StoreUnavailableError: If the store cannot be reached.
        """
        validate_identifier("service", service)
        validate_identifier("consumer", consumer)
        limit_set = self._config.limits_for(service)

        now = int(self._clock())
        # Push first so heavy (DoS) traffic hits the limits sooner.
        entries = self._store.record_and_fetch(
            make_key(service, consumer),
            now,
            length=limit_set.max_count + 1,
            ttl_seconds=limit_set.max_window_seconds,
            positions=[tier.max_count for tier in limit_set.tiers],
        )

        for tier, entry in zip(limit_set.tiers, entries):
            if entry is not None and entry > now - tier.window_seconds:
                logger.warning(
                    "rate_limit.exceeded",
                    extra={
                        "service": service,
                        "consumer_hash": hash_identifier(consumer),
                        "tier": tier.name,
                        "limit": tier.max_count,
                        "window_s": tier.window_seconds,
                    },
                )
                return RateLimitResult(
                    allowed=False,
                    service=service,
                    consumer=consumer,
                    checked_at=now,
                    violated_tier=tier,
                )

        logger.debug(
            "rate_limit.allowed",
            extra={"service": service, "consumer_hash": hash_identifier(consumer)},
        )
        return RateLimitResult(allowed=True, service=service, consumer=consumer, checked_at=now)

    def within_rate_limits(self, service: str, consumer: str) -> bool:
        """Record an access and return True if it is within every tier."""
        return self.check(service, consumer).allowed
