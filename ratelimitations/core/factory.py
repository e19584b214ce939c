"""Process-start wiring for the rate limiter.

Centralizes construction (settings, limits file, store, limiter, registry)
so that the limits are loaded once and the same immutable config is handed
to every component explicitly.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from ratelimitations.adapters.store.factory import create_store
from ratelimitations.adapters.store.in_memory import InMemoryStore
from ratelimitations.adapters.store.redis_store import RedisStore
from ratelimitations.core.config import Settings, get_settings
from ratelimitations.core.logging import configure_logging
from ratelimitations.schemas.limits import RateLimitConfig
from ratelimitations.services.limiter import SlidingWindowRateLimiter
from ratelimitations.services.limits_loader import load_rate_limits_from_settings
from ratelimitations.services.registry import RateLimitRegistry


@dataclass(frozen=True)
class RateLimitations:
    """The assembled components sharing one config and one store."""

    config: RateLimitConfig
    store: InMemoryStore | RedisStore
    limiter: SlidingWindowRateLimiter
    registry: RateLimitRegistry

    def within_rate_limits(self, service: str, consumer: str) -> bool:
        return self.limiter.within_rate_limits(service, consumer)


def create_rate_limitations(
    settings: Settings | None = None,
    *,
    config: RateLimitConfig | None = None,
    store: InMemoryStore | RedisStore | None = None,
    clock: Callable[[], float] = time.time,
    setup_logging: bool = False,
) -> RateLimitations:
    """Create the limiter and registry from settings.

    Args:
        settings: Runtime settings; read from the environment when omitted.
        config: Pre-built limits, bypassing the limits file.
        store: Pre-built store, bypassing the store settings.
        clock: Time source for the limiter.
        setup_logging: Configure root logging from settings first.

    Returns:
        RateLimitations bundle.

    Raises:
        ConfigurationError: If the limits file or store settings are unusable.
    """
    cfg = settings or get_settings()

    # Logging first so subsequent init logs are formatted as desired
    if setup_logging:
        configure_logging(cfg.log)

    limits = config if config is not None else load_rate_limits_from_settings(cfg.limits)
    shared_store = store if store is not None else create_store(cfg.store)

    return RateLimitations(
        config=limits,
        store=shared_store,
        limiter=SlidingWindowRateLimiter(limits, shared_store, clock=clock),
        registry=RateLimitRegistry(limits, shared_store),
    )
