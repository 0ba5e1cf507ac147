"""Runtime - Retry execution and monitoring.

Contains: retry (policy, driver, timers), observability.
"""

from __future__ import annotations

_RETRY = (
    "BackoffConfiguration", "BackoffPolicy", "next_interval", "randomize", "should_continue",
    "BackOffState", "SessionStatus", "RetrySessionState", "SessionOutcome",
    "BackOff", "Completion", "FunctionOperation", "RetryDriver", "as_operation",
    "Timer", "TimerHandle", "AsyncioTimer", "CoroutineOperation", "run_with_backoff",
)
_OBSERVABILITY = (
    "BoundLogger", "ConsoleRenderer", "JsonRenderer", "NoOpRenderer",
    "configure_logging", "configure_from_settings", "get_logger",
)

__all__ = [*_RETRY, *_OBSERVABILITY]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in _RETRY:
        from . import retry
        return getattr(retry, name)

    if name in _OBSERVABILITY:
        from . import observability
        return getattr(observability, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
