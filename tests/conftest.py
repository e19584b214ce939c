"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins the environment so settings never pick up a developer's .env file
or a real Redis instance.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["RATELIMIT_ENV"] = "testing"
os.environ.setdefault("RATELIMIT_STORE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest  # noqa: E402

from ratelimitations.adapters.store.in_memory import InMemoryStore  # noqa: E402
from ratelimitations.schemas.limits import RateLimitConfig  # noqa: E402
from ratelimitations.services.limiter import SlidingWindowRateLimiter  # noqa: E402
from ratelimitations.services.registry import RateLimitRegistry  # noqa: E402


class FakeClock:
    """Deterministic clock shared by the store and the limiter."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def set(self, value: float) -> None:
        self.current = value

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryStore:
    return InMemoryStore(clock=clock)


@pytest.fixture
def config() -> RateLimitConfig:
    return RateLimitConfig.from_mapping(
        {
            "s": {"60s": 2, "1h": 5},
            "api": {"1s": 3, "1m": 20, "1h": 300},
        }
    )


@pytest.fixture
def limiter(config: RateLimitConfig, store: InMemoryStore, clock: FakeClock) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(config, store, clock=clock)


@pytest.fixture
def registry(config: RateLimitConfig, store: InMemoryStore) -> RateLimitRegistry:
    return RateLimitRegistry(config, store)
