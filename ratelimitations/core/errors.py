"""Rate limiting exception types.

This module defines the error taxonomy shared by the limiter, the registry,
the configuration loader and the store adapters. Errors are split into:
- caller errors (bad arguments, unknown service), never worth retrying
- configuration errors, raised while loading/validating the limits file
- store errors, surfaced uninterpreted so the caller can decide on retries
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and callers."""

    code: str
    message: str
    hint: str
    service: str
    tier: str
    value: str
    path: str
    operation: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for rate limiting failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    retryable: ClassVar[bool] = False

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class CallerError(AppError):
    """Raised when the caller supplied something unusable."""


class InvalidArgumentError(CallerError):
    """Raised when service or consumer is missing, empty or malformed."""


class UnknownServiceError(CallerError):
    """Raised when a service has no configured limits."""


class ConfigurationError(AppError):
    """Raised when the rate limits configuration cannot be used."""


class InvalidDurationError(ConfigurationError):
    """Raised when a tier window string cannot be parsed."""


class EmptyTierSetError(ConfigurationError):
    """Raised when a service is configured with no tiers."""


class StoreUnavailableError(AppError):
    """Raised when the shared store cannot be reached or a command fails."""

    retryable: ClassVar[bool] = True
