"""Foundation - Core building blocks for expbackoff.

Contains: error handling, config, testing.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "ErrorCode", "BackoffError", "ConfigurationError", "CompletionError", "SessionStateError",
    # Config
    "Settings", "BackoffSettings", "LoggingSettings", "get_settings", "clear_settings_cache",
    # Testing
    "ManualTimer", "ManualHandle", "ScriptedOperation", "Invocation",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("ErrorCode", "BackoffError", "ConfigurationError", "CompletionError", "SessionStateError"):
        from . import errors
        return getattr(errors, name)

    if name in ("Settings", "BackoffSettings", "LoggingSettings", "get_settings", "clear_settings_cache"):
        from . import config
        return getattr(config, name)

    if name in ("ManualTimer", "ManualHandle", "ScriptedOperation", "Invocation"):
        from . import testing
        return getattr(testing, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
