"""Exponential backoff retry policy for callback-driven operations.

Provides the backoff interval math, the retry driver state machine, and
timer collaborators.

Example:
    >>> from expbackoff.runtime.retry import BackoffConfiguration, RetryDriver, AsyncioTimer
    >>>
    >>> def ping(last_interval_millis, elapsed_time_millis, completion):
    ...     client.ping(callback=lambda ok: completion(ok))
    >>>
    >>> driver = RetryDriver(
    ...     ping,
    ...     BackoffConfiguration(initial_interval_millis=250, max_elapsed_time_millis=60_000),
    ...     timer=AsyncioTimer(),
    ...     on_finish=lambda outcome: print(outcome.status),
    ... )
    >>> driver.start()
"""

from .aio import CoroutineOperation, run_with_backoff
from .backoff import BackoffPolicy, RandomSource, next_interval, randomize, should_continue
from .driver import BackOff, Completion, FunctionOperation, RetryDriver, as_operation
from .properties import (
    DEFAULT_INITIAL_INTERVAL_MILLIS,
    DEFAULT_MAX_ELAPSED_TIME_MILLIS,
    DEFAULT_MAX_INTERVAL_MILLIS,
    DEFAULT_MULTIPLIER,
    DEFAULT_RANDOMIZATION_FACTOR,
    BackoffConfiguration,
)
from .state import BackOffState, RetrySessionState, SessionOutcome, SessionStatus
from .timer import AsyncioHandle, AsyncioTimer, Timer, TimerHandle

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
    "RandomSource",
    "next_interval",
    "randomize",
    "should_continue",
    # Session state
    "BackOffState",
    "SessionStatus",
    "RetrySessionState",
    "SessionOutcome",
    # Driver
    "BackOff",
    "Completion",
    "FunctionOperation",
    "RetryDriver",
    "as_operation",
    # Timers
    "Timer",
    "TimerHandle",
    "AsyncioTimer",
    "AsyncioHandle",
    # Asyncio
    "CoroutineOperation",
    "run_with_backoff",
]
