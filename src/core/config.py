"""Centralized configuration management for Signet.

This module provides Pydantic-based configuration with environment variable
support. The signing core itself never reads these settings; the application
edge turns them into an explicit SigningConfig and hands that to the
SigningService.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.signing.config import SigningConfig


class SigningSettings(BaseSettings):
    """Timeout and passphrase candidates for signing calls."""

    model_config = SettingsConfigDict(
        env_prefix="SIGNET_SIGNING_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    timeout: float = Field(
        default=10.0, gt=0, le=300, description="Bound for each external call in seconds"
    )
    passphrases: list[SecretStr] = Field(
        default_factory=list,
        description="Ordered passphrase candidates tried when unlocking (JSON list)",
    )

    def to_config(self) -> SigningConfig:
        """Build the explicit configuration consumed by the signing core.

        Returns:
            Signing configuration
        """
        return SigningConfig(
            timeout=self.timeout,
            passphrases=tuple(p.get_secret_value() for p in self.passphrases),
        )


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="SIGNET_OBSERVABILITY_", case_sensitive=False)

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or text)")
    log_file_path: Path | None = Field(default=None, description="Log file path")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Args:
            v: Log level value

        Returns:
            Validated log level

        Raises:
            ValueError: If log level is invalid
        """
        valid_levels = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        valid_formats = {"json", "text"}
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}")
        return v.lower()

    @property
    def structured(self) -> bool:
        return self.log_format == "json"


class Settings(BaseSettings):
    """Main Signet configuration combining all subsystems."""

    model_config = SettingsConfigDict(
        env_prefix="SIGNET_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, testing, staging, production)",
    )
    debug: bool = Field(default=False, description="Global debug mode")

    signing: SigningSettings = Field(default_factory=SigningSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value.

        Args:
            v: Environment value

        Returns:
            Validated environment

        Raises:
            ValueError: If environment is invalid
        """
        valid_envs = {"development", "testing", "staging", "production"}
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}")
        return v.lower()

    def is_production(self) -> bool:
        return self.environment == "production"

    def is_development(self) -> bool:
        return self.environment == "development"

    def validate_required_settings(self) -> dict[str, list[str]]:
        """Report settings that are unsafe for the current environment.

        Returns:
            Dictionary of validation issues by component
        """
        issues: dict[str, list[str]] = {}

        if self.is_production():
            if self.debug:
                issues.setdefault("general", []).append(
                    "Debug mode should be disabled in production"
                )

            if self.observability.log_level in {"TRACE", "DEBUG"}:
                issues.setdefault("observability", []).append(
                    "Debug logging exposes signing roots and should be disabled in production"
                )

        if not self.signing.passphrases:
            issues.setdefault("signing", []).append(
                "No passphrase candidates configured; locked accounts cannot be unlocked"
            )

        return issues


# Global settings instance, for the application edge only
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure_settings(settings: Settings) -> None:
    """Configure the global settings instance.

    Args:
        settings: Settings instance to use globally
    """
    global _settings
    _settings = settings


def reload_settings() -> Settings:
    """Reload settings from environment variables.

    Returns:
        Reloaded Settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
