"""Pydantic schemas for rate limit tiers and per-service limit sets."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, ValidationInfo, field_validator

from ratelimitations.core.errors import (
    ConfigurationError,
    EmptyTierSetError,
    UnknownServiceError,
)
from ratelimitations.utils.duration import parse_duration


class Tier(BaseModel):
    """At most ``max_count`` accesses in any trailing ``window_seconds`` interval."""

    model_config = ConfigDict(frozen=True)

    window_seconds: StrictInt = Field(
        ..., gt=0, description="Length of the trailing window in seconds."
    )
    max_count: StrictInt = Field(
        ..., gt=0, description="Maximum accesses permitted within the window."
    )
    label: str | None = Field(
        default=None,
        description="Duration string the window was parsed from (diagnostics only).",
    )

    @property
    def rate(self) -> float:
        """Permitted accesses per second."""
        return self.max_count / self.window_seconds

    @property
    def name(self) -> str:
        return self.label or f"{self.window_seconds}s"

    def as_pair(self) -> tuple[int, int]:
        return self.window_seconds, self.max_count


class ServiceLimitSet(BaseModel):
    """All tiers configured for one service, sorted by ascending window.

    Cross-tier consistency (counts increasing, rates decreasing) is not
    enforced here; see ratelimitations.services.validator.
    """

    model_config = ConfigDict(frozen=True)

    service: str = Field(..., min_length=1, description="Service name.")
    tiers: tuple[Tier, ...] = Field(
        ..., description="Tiers strictly ascending by window_seconds."
    )

    @field_validator("tiers")
    @classmethod
    def _sort_tiers(cls, tiers: tuple[Tier, ...], info: ValidationInfo) -> tuple[Tier, ...]:
        service = info.data.get("service", "")
        if not tiers:
            raise EmptyTierSetError(
                code="empty_tier_set",
                message=f"Service '{service}' has no rate limit tiers",
                details={"service": service},
            )

        ordered = tuple(sorted(tiers, key=lambda tier: tier.window_seconds))
        for shorter, longer in zip(ordered, ordered[1:]):
            if shorter.window_seconds == longer.window_seconds:
                raise ConfigurationError(
                    code="duplicate_tier_window",
                    message=(
                        f"Service '{service}' defines '{shorter.name}' and '{longer.name}', "
                        f"which are both {shorter.window_seconds} seconds"
                    ),
                    details={"service": service, "tier": longer.name},
                )
        return ordered

    @property
    def max_window_seconds(self) -> int:
        return self.tiers[-1].window_seconds

    @property
    def max_count(self) -> int:
        return self.tiers[-1].max_count

    @classmethod
    def from_mapping(cls, service: str, raw: Mapping[Any, Any]) -> "ServiceLimitSet":
        """Build a limit set from a ``{duration: max_count}`` mapping.

        Args:
            service: Service name.
            raw: Mapping of duration strings (e.g. "1h") to integer counts.

        Returns:
            ServiceLimitSet with tiers sorted by window length.

        Raises:
            InvalidDurationError: If a duration cannot be parsed.
            EmptyTierSetError: If the mapping is empty.
            ConfigurationError: If a count is not a positive integer or two
                durations normalize to the same window.
        """
        try:
            tiers = [
                Tier(window_seconds=parse_duration(duration), max_count=count, label=str(duration))
                for duration, count in raw.items()
            ]
            return cls(service=service, tiers=tuple(tiers))
        except ValidationError as exc:
            raise ConfigurationError(
                code="invalid_tier",
                message=f"Service '{service}' has an invalid tier: {exc.errors()[0]['msg']}",
                details={"service": service, "context": {"errors": exc.errors(include_url=False)}},
            ) from exc


@dataclass(frozen=True)
class RateLimitConfig:
    """Immutable set of per-service limits, built once at process start.

    Pass the same instance to the limiter and the registry; reloading limits
    means building a new config (and new limiter).
    """

    limits: Mapping[str, ServiceLimitSet] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "limits", MappingProxyType(dict(self.limits)))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[Any, Any]]) -> "RateLimitConfig":
        """Build a config from ``{service: {duration: max_count}}``."""
        return cls(
            limits={
                str(service): ServiceLimitSet.from_mapping(str(service), tiers)
                for service, tiers in sorted(raw.items(), key=lambda item: str(item[0]))
            }
        )

    def services(self) -> list[str]:
        return sorted(self.limits)

    def limits_for(self, service: str) -> ServiceLimitSet:
        """Return the limit set for ``service``.

        Raises:
            UnknownServiceError: If the service is not configured.
        """
        limit_set = self.limits.get(service)
        if limit_set is None:
            raise UnknownServiceError(
                code="unknown_service",
                message=f"Unknown service supplied: {service}",
                details={"service": str(service)},
            )
        return limit_set

    def __contains__(self, service: object) -> bool:
        return service in self.limits

    def __iter__(self) -> Iterator[ServiceLimitSet]:
        return (self.limits[service] for service in self.services())

    def __len__(self) -> int:
        return len(self.limits)
