# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for cache, probe and logging settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Cache ===
    cache_backend: Literal["memory", "json"] = "memory"
    cache_root: Path = Path("~/.capprobe/cache")
    cache_policy: Literal["prefer_cache", "refresh", "bypass"] = "prefer_cache"

    # === TTL / backoff ===
    ttl_seconds: int = 300
    ttl_no_fingerprint_seconds: int = 900

    # === Probing ===
    probe_timeout_seconds: float = 10.0
    known_features: str = "features_list,output_schema,add_dir,mcp_login"
    version_args: str = "--version"
    features_args: str = "features list"
    help_args: str = "--help"
    overrides_file: Path | None = None

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("ttl_seconds", "ttl_no_fingerprint_seconds")
    @classmethod
    def validate_ttl(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("TTL values must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.probe_timeout_seconds <= 0:
            errors.append("PROBE_TIMEOUT_SECONDS must be > 0")

        if self.ttl_no_fingerprint_seconds < self.ttl_seconds:
            errors.append(
                "TTL_NO_FINGERPRINT_SECONDS must be >= TTL_SECONDS"
            )

        if not self.version_args.split():
            errors.append("VERSION_ARGS must not be empty")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def known_features_list(self) -> list[str]:
        """Parse comma-separated known feature names."""
        return [f.strip() for f in self.known_features.split(",") if f.strip()]

    @property
    def version_argv(self) -> list[str]:
        return self.version_args.split()

    @property
    def features_argv(self) -> list[str]:
        return self.features_args.split()

    @property
    def help_argv(self) -> list[str]:
        return self.help_args.split()


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-host config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
