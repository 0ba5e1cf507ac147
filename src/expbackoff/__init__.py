"""expbackoff - Exponential backoff retries for callback-driven operations.

Schedules successive attempts of an unreliable operation with
geometrically growing, randomized delays until it succeeds or an elapsed
time budget runs out. Operations report their outcome through a
completion callback, so network clients and other asynchronous I/O plug
in without blocking.

Quick Start (Callback):
    >>> from expbackoff import BackoffConfiguration, RetryDriver, AsyncioTimer
    >>>
    >>> def connect(last_interval_millis, elapsed_time_millis, completion):
    ...     socket.connect_async(on_connected=lambda: completion(True),
    ...                          on_error=lambda err: completion(False))
    >>>
    >>> driver = RetryDriver(connect, BackoffConfiguration(), timer=AsyncioTimer(),
    ...                      on_finish=lambda outcome: print(outcome.status))
    >>> driver.start()

Quick Start (Coroutine):
    >>> from expbackoff import run_with_backoff
    >>>
    >>> async def fetch(last_interval_millis: int, elapsed_time_millis: int) -> bool:
    ...     return (await client.get("/status")).ok
    >>>
    >>> outcome = await run_with_backoff(fetch)
    >>> outcome.succeeded, outcome.attempts

Defaults: 500ms initial interval, x1.5 growth, +/-50% jitter, 60s interval
cap, 15 minute budget. Override per configuration or via EXPBACKOFF_*
environment variables (see expbackoff.foundation.config).
"""

from expbackoff.foundation.config import BackoffSettings, LoggingSettings, Settings, clear_settings_cache, get_settings
from expbackoff.foundation.errors import (
    BackoffError,
    CompletionError,
    ConfigurationError,
    ErrorCode,
    SessionStateError,
)
from expbackoff.runtime.observability import configure_from_settings, configure_logging, get_logger
from expbackoff.runtime.retry import (
    DEFAULT_INITIAL_INTERVAL_MILLIS,
    DEFAULT_MAX_ELAPSED_TIME_MILLIS,
    DEFAULT_MAX_INTERVAL_MILLIS,
    DEFAULT_MULTIPLIER,
    DEFAULT_RANDOMIZATION_FACTOR,
    AsyncioTimer,
    BackOff,
    BackoffConfiguration,
    BackoffPolicy,
    BackOffState,
    Completion,
    CoroutineOperation,
    RetryDriver,
    RetrySessionState,
    SessionOutcome,
    SessionStatus,
    Timer,
    TimerHandle,
    next_interval,
    run_with_backoff,
    should_continue,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "BackoffConfiguration",
    "DEFAULT_INITIAL_INTERVAL_MILLIS",
    "DEFAULT_MAX_INTERVAL_MILLIS",
    "DEFAULT_MAX_ELAPSED_TIME_MILLIS",
    "DEFAULT_MULTIPLIER",
    "DEFAULT_RANDOMIZATION_FACTOR",
    # Policy
    "BackoffPolicy",
    "next_interval",
    "should_continue",
    # Driver
    "BackOff",
    "BackOffState",
    "Completion",
    "RetryDriver",
    "RetrySessionState",
    "SessionOutcome",
    "SessionStatus",
    # Timers
    "Timer",
    "TimerHandle",
    "AsyncioTimer",
    # Asyncio
    "CoroutineOperation",
    "run_with_backoff",
    # Errors
    "ErrorCode",
    "BackoffError",
    "ConfigurationError",
    "CompletionError",
    "SessionStateError",
    # Settings
    "Settings",
    "BackoffSettings",
    "LoggingSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_from_settings",
    "get_logger",
]
