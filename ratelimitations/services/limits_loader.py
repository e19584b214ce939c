"""Load rate limit tiers from a YAML limits file.

The file maps each service to its tiers::

    my_service:
      1m: 10
      1h: 100
      1d: 500

It is read once at process start into an immutable RateLimitConfig.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from ratelimitations.core.config import LimitsSettings
from ratelimitations.core.errors import ConfigurationError
from ratelimitations.schemas.limits import RateLimitConfig
from ratelimitations.services.validator import verify_rate_limits

logger = logging.getLogger(__name__)

DEFAULT_LIMITS_FILE = Path(__file__).resolve().parents[1] / "data" / "rate_limits.yml"


def _read_document(path: Path) -> Any:
    try:
        with open(os.path.normpath(path), "r", encoding="utf-8") as file:
            return yaml.safe_load(file)
    except OSError as exc:
        raise ConfigurationError(
            code="limits_file_unreadable",
            message=f"Cannot read rate limits file: {path}",
            details={"path": str(path)},
        ) from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            code="limits_file_malformed",
            message=f"Rate limits file is not valid YAML: {path}",
            details={"path": str(path)},
        ) from exc


def parse_rate_limits(document: Any, *, strict: bool = False, source: str = "<mapping>") -> RateLimitConfig:
    """Turn a decoded ``{service: {duration: count}}`` document into a config.

    Args:
        document: Decoded YAML/JSON document.
        strict: Also reject configurations failing the tier consistency checks.
        source: Where the document came from, for error messages.

    Returns:
        RateLimitConfig built from the document.

    Raises:
        ConfigurationError: If the document shape is wrong, a tier is invalid,
            or (with ``strict``) the tiers are inconsistent.
    """
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigurationError(
            code="limits_file_malformed",
            message=f"Rate limits in {source} must be a mapping of service to tiers",
            details={"path": source},
        )

    for service, tiers in document.items():
        if not isinstance(tiers, dict):
            raise ConfigurationError(
                code="limits_file_malformed",
                message=f"Tiers for service '{service}' in {source} must be a mapping of duration to count",
                details={"path": source, "service": str(service)},
            )

    config = RateLimitConfig.from_mapping(document)

    if strict:
        report = verify_rate_limits(config)
        if not report:
            raise ConfigurationError(
                code="improper_rate_limits",
                message=f"Rate limits in {source} are inconsistent: {len(report.violations)} violation(s)",
                details={
                    "path": source,
                    "context": {"violations": [str(violation) for violation in report.violations]},
                },
            )

    logger.info(
        "rate_limits.loaded",
        extra={"source": source, "services": len(config), "strict": strict},
    )
    return config


def load_rate_limits(path: str | Path | None = None, *, strict: bool = False) -> RateLimitConfig:
    """Load and parse a YAML limits file.

    Args:
        path: Limits file; the packaged rate_limits.yml when omitted.
        strict: Reject configurations failing the tier consistency checks.

    Returns:
        RateLimitConfig for every service in the file.
    """
    limits_path = Path(path) if path is not None else DEFAULT_LIMITS_FILE
    return parse_rate_limits(_read_document(limits_path), strict=strict, source=str(limits_path))


def load_rate_limits_from_settings(limits_settings: LimitsSettings | None = None) -> RateLimitConfig:
    """Load the limits file named by settings (RATELIMIT_LIMITS_FILE)."""
    cfg = limits_settings or LimitsSettings()
    return load_rate_limits(cfg.limits_file, strict=cfg.strict_tiers)
