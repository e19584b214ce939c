"""Cross-tier consistency checks for rate limit configuration.

The sliding-window limiter reads every tier's verdict out of one log sized
for the largest tier, so a limit set is only usable when, moving from a
shorter window to a longer one, the permitted count strictly increases and
the permitted rate strictly decreases.

The check never stops at the first problem: every pair of tiers of every
service is examined, each violation is logged as a warning and recorded,
and the overall verdict is returned at the end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ratelimitations.schemas.limits import RateLimitConfig, ServiceLimitSet, Tier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierViolation:
    """One inconsistency between two tiers of the same service.

    Attributes:
        service: Service the tiers belong to.
        tier: The tier held responsible for the violation.
        other: The tier it was compared against.
        reason: Human-readable explanation.
    """

    service: str
    tier: Tier
    other: Tier
    reason: str

    def __str__(self) -> str:
        return f"{self.service} - {self.tier.name} entry improper: {self.reason}"


@dataclass(frozen=True)
class VerificationReport:
    """Outcome of verify_rate_limits(); truthy when the configuration is proper."""

    violations: tuple[TierViolation, ...] = ()

    @property
    def proper(self) -> bool:
        return not self.violations

    def __bool__(self) -> bool:
        return self.proper

    def for_service(self, service: str) -> list[TierViolation]:
        return [violation for violation in self.violations if violation.service == service]


def _check_service(limit_set: ServiceLimitSet) -> list[TierViolation]:
    violations: list[TierViolation] = []
    tiers = limit_set.tiers

    for i, shorter in enumerate(tiers):
        for longer in tiers[i + 1:]:
            if longer.max_count <= shorter.max_count:
                violations.append(
                    TierViolation(
                        service=limit_set.service,
                        tier=longer,
                        other=shorter,
                        reason=f"count should be higher than {shorter.name} count",
                    )
                )
            if shorter.rate <= longer.rate:
                violations.append(
                    TierViolation(
                        service=limit_set.service,
                        tier=shorter,
                        other=longer,
                        reason=f"rate should be higher than {longer.name} rate",
                    )
                )

    return violations


def verify_rate_limits(
    limit_sets: RateLimitConfig | Iterable[ServiceLimitSet],
) -> VerificationReport:
    """Check every service's tiers for cross-tier consistency.

    Args:
        limit_sets: A RateLimitConfig or any iterable of ServiceLimitSet.

    Returns:
        VerificationReport listing every violation found (empty when proper).
    """
    violations: list[TierViolation] = []

    for limit_set in sorted(limit_sets, key=lambda item: item.service):
        for violation in _check_service(limit_set):
            logger.warning(
                str(violation),
                extra={
                    "event": "rate_limit.config_improper",
                    "service": violation.service,
                    "tier": violation.tier.name,
                    "compared_to": violation.other.name,
                },
            )
            violations.append(violation)

    return VerificationReport(violations=tuple(violations))


def verify(limit_sets: RateLimitConfig | Iterable[ServiceLimitSet]) -> bool:
    """Return True iff no tier of any service is inconsistent."""
    return verify_rate_limits(limit_sets).proper


def verify_rate_limits_file(path: str | Path | None = None) -> bool:
    """Load a limits file (the packaged one by default) and verify it.

    Raises:
        ConfigurationError: If the file itself cannot be parsed into tiers.
    """
    # Imported here: the loader depends on this module for strict loading.
    from ratelimitations.services.limits_loader import load_rate_limits

    return verify(load_rate_limits(path))
