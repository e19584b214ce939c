"""Per-service, per-consumer rate limits shared across processes via Redis.

Typical use::

    from ratelimitations import create_rate_limitations

    rl = create_rate_limitations()
    if rl.within_rate_limits("my_service", consumer_id):
        provide_service()

Checks always record the access, even when they deny it.
"""

from ratelimitations.core.errors import (
    AppError,
    CallerError,
    ConfigurationError,
    EmptyTierSetError,
    InvalidArgumentError,
    InvalidDurationError,
    StoreUnavailableError,
    UnknownServiceError,
)
from ratelimitations.core.factory import RateLimitations, create_rate_limitations
from ratelimitations.schemas.limits import RateLimitConfig, ServiceLimitSet, Tier
from ratelimitations.services.limiter import RateLimitResult, SlidingWindowRateLimiter
from ratelimitations.services.limits_loader import load_rate_limits
from ratelimitations.services.registry import RateLimitRegistry
from ratelimitations.services.validator import (
    VerificationReport,
    verify,
    verify_rate_limits,
    verify_rate_limits_file,
)
from ratelimitations.utils.duration import parse_duration

__version__ = "0.1.0"

__all__ = [
    "AppError",
    "CallerError",
    "ConfigurationError",
    "EmptyTierSetError",
    "InvalidArgumentError",
    "InvalidDurationError",
    "RateLimitConfig",
    "RateLimitRegistry",
    "RateLimitResult",
    "RateLimitations",
    "ServiceLimitSet",
    "SlidingWindowRateLimiter",
    "StoreUnavailableError",
    "Tier",
    "UnknownServiceError",
    "VerificationReport",
    "create_rate_limitations",
    "load_rate_limits",
    "parse_duration",
    "verify",
    "verify_rate_limits",
    "verify_rate_limits_file",
]
