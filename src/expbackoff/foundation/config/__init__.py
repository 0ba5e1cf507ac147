"""Configuration management using pydantic-settings.

Provides environment-based configuration with type safety and validation.
"""

from .settings import (
    BackoffSettings,
    LoggingSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "BackoffSettings",
    "LoggingSettings",
    "Settings",
    "clear_settings_cache",
    "get_settings",
]
