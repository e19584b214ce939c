"""Rate limiting configuration using Pydantic Settings.

Configuration is environment-aware:
- RATELIMIT_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

These settings describe the runtime (store connection, limits file, logging).
The tier definitions themselves live in the YAML limits file and are loaded
once into an immutable RateLimitConfig.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
RATELIMIT_ENV = os.getenv("RATELIMIT_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(RATELIMIT_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class StoreSettings(BaseSettings):
    """Shared store connection configuration."""

    backend: Literal["redis", "memory"] = Field(
        "redis",
        description="Store back-end: 'redis' for shared state, 'memory' for a single process",
    )
    redis_url: str = Field(
        "redis://localhost:6379/0",
        description="Redis connection URL used when backend is 'redis'",
    )
    socket_timeout_seconds: float | None = Field(
        5.0,
        description="Socket timeout for Redis commands (None waits forever)",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="RATELIMIT_STORE_",
        case_sensitive=False,
    )


class LimitsSettings(BaseSettings):
    """Where the tier definitions come from and how strictly they are checked."""

    limits_file: Path | None = Field(
        None,
        description="Path to the YAML limits file (defaults to the packaged rate_limits.yml)",
    )
    strict_tiers: bool = Field(
        False,
        description="Refuse to load a limits file that fails tier consistency checks",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATELIMIT_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field(
        "json",
        description="Log output format",
    )
    output: Literal["stdout", "file"] = Field(
        "stdout",
        description="Log destination",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file'",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(
        5,
        description="Number of rotated log files to keep",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{RATELIMIT_ENV} file.
    Raises validation errors on startup if a setting is malformed.
    """

    ratelimit_env: str = RATELIMIT_ENV
    store: StoreSettings = Field(default_factory=StoreSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Build settings from the current environment."""

    return Settings()
