"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with the same defaults as BackoffConfiguration. Supports .env files and
nested configuration.

Example:
    >>> from expbackoff.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.backoff.initial_interval_millis
    500
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # EXPBACKOFF_BACKOFF_MAX_ELAPSED_TIME_MILLIS=60000
    # EXPBACKOFF_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import Field, NonNegativeInt, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .defaults import (
    DEFAULT_INITIAL_INTERVAL_MILLIS,
    DEFAULT_MAX_ELAPSED_TIME_MILLIS,
    DEFAULT_MAX_INTERVAL_MILLIS,
    DEFAULT_MULTIPLIER,
    DEFAULT_RANDOMIZATION_FACTOR,
)

if TYPE_CHECKING:
    from expbackoff.runtime.retry.properties import BackoffConfiguration


class BackoffSettings(BaseSettings):
    """Default backoff policy configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPBACKOFF_BACKOFF_",
        extra="ignore",
    )

    initial_interval_millis: NonNegativeInt = Field(
        default=DEFAULT_INITIAL_INTERVAL_MILLIS, description="Starting backoff interval in ms",
    )
    max_interval_millis: NonNegativeInt = Field(
        default=DEFAULT_MAX_INTERVAL_MILLIS, description="Cap on the interval growth curve in ms",
    )
    max_elapsed_time_millis: NonNegativeInt = Field(
        default=DEFAULT_MAX_ELAPSED_TIME_MILLIS, description="Total backoff budget in ms",
    )
    multiplier: Annotated[float, Field(ge=1.0)] = DEFAULT_MULTIPLIER
    randomization_factor: Annotated[float, Field(ge=0.0, lt=1.0)] = DEFAULT_RANDOMIZATION_FACTOR

    def to_configuration(self) -> BackoffConfiguration:
        """Build the immutable policy configuration from these settings."""
        from expbackoff.runtime.retry.properties import BackoffConfiguration
        return BackoffConfiguration(**self.model_dump())


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPBACKOFF_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class Settings(BaseSettings):
    """Root settings for expbackoff.

    Loads configuration from environment variables with EXPBACKOFF_ prefix.
    Supports nested configuration and .env files.

    Example environment variables:
        EXPBACKOFF_DEBUG=true
        EXPBACKOFF_BACKOFF_MULTIPLIER=2.0
        EXPBACKOFF_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPBACKOFF_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    # Strict completion checks: a reused completion raises instead of warning
    debug: bool = Field(default=False, description="Enable debug mode")

    backoff: BackoffSettings = Field(default_factory=BackoffSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @computed_field
    @property
    def strict_completion(self) -> bool:
        """Whether drivers raise on a completion invoked twice."""
        return self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the global settings instance (cached).

    Returns:
        Cached Settings instance
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
