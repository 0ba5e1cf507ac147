"""Retry driver: runs one operation under an exponential backoff policy.

The driver owns exactly one RetrySessionState and keeps at most one attempt
in flight. Each attempt receives a single-use Completion; the operation
reports its outcome through it, usually from an asynchronous callback.
On failure the driver consults the policy and either stops (budget
exhausted) or hands the next attempt to a Timer.

State machine:
    IDLE -> ATTEMPTING                  start()
    ATTEMPTING -> SUCCEEDED             completion(True)
    ATTEMPTING -> ABORTED               completion(BackOffState.ABORT)
    ATTEMPTING -> DECIDING              completion(False)
    DECIDING -> EXHAUSTED               elapsed budget spent
    DECIDING -> SCHEDULED -> ATTEMPTING wait, then next attempt
    any non-terminal -> CANCELLED       cancel()

Example:
    >>> class Ping:
    ...     def run(self, last_interval_millis, elapsed_time_millis, completion):
    ...         client.ping(on_done=lambda ok: completion(ok))
    >>>
    >>> driver = RetryDriver(Ping(), BackoffConfiguration(), timer=AsyncioTimer(),
    ...                      on_finish=lambda outcome: print(outcome.status))
    >>> driver.start()
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

from expbackoff.foundation.config import get_settings
from expbackoff.foundation.errors import CompletionError, SessionStateError
from expbackoff.runtime.observability import get_logger

from .backoff import BackoffPolicy, RandomSource
from .properties import BackoffConfiguration
from .state import BackOffState, RetrySessionState, SessionOutcome, SessionStatus

if TYPE_CHECKING:
    from .timer import Timer, TimerHandle


@runtime_checkable
class BackOff(Protocol):
    """Contract for operations run under a backoff policy.

    run() is invoked once per attempt. The implementation must eventually
    call completion exactly once with the attempt's outcome: True/False, or
    a BackOffState (ABORT stops retrying). A completion that is never
    called stalls the session; the driver cannot detect it.

    Args:
        last_interval_millis: Current backoff interval (initial_interval_millis for the first attempt)
        elapsed_time_millis: Total backoff time spent so far
        completion: Single-use callback reporting the outcome
    """

    def run(self, last_interval_millis: int, elapsed_time_millis: int, completion: Completion) -> None: ...


OperationFn = Callable[[int, int, "Completion"], None]
OnRetry = Callable[[int, int, int], None]  # (retry number, interval ms, elapsed ms)
OnFinish = Callable[[SessionOutcome], None]


class FunctionOperation:
    """Adapts a plain run(last_interval_millis, elapsed_time_millis, completion) function to BackOff."""

    __slots__ = ("_fn",)

    def __init__(self, fn: OperationFn) -> None:
        self._fn = fn

    @property
    def name(self) -> str:
        return getattr(self._fn, "__name__", type(self._fn).__name__)

    def run(self, last_interval_millis: int, elapsed_time_millis: int, completion: Completion) -> None:
        self._fn(last_interval_millis, elapsed_time_millis, completion)


def as_operation(operation: BackOff | OperationFn) -> BackOff:
    """Return operation unchanged if it implements BackOff, else wrap the function."""
    if isinstance(operation, BackOff):
        return operation
    if callable(operation):
        return FunctionOperation(operation)
    raise TypeError(f"Expected a BackOff or a callable, got {type(operation).__name__}")


class Completion:
    """Single-use outcome callback handed to one attempt.

    Calling it returns the status the session moved to: SCHEDULED,
    SUCCEEDED, EXHAUSTED, ABORTED, or CANCELLED if the session was torn
    down meanwhile.
    """

    __slots__ = ("_driver", "_attempt", "_status")

    def __init__(self, driver: RetryDriver, attempt: int) -> None:
        self._driver, self._attempt = driver, attempt
        self._status: SessionStatus | None = None

    @property
    def attempt(self) -> int:
        """1-based number of the attempt this completion belongs to."""
        return self._attempt

    @property
    def called(self) -> bool:
        return self._status is not None

    def __call__(self, outcome: bool | str | BackOffState) -> SessionStatus:
        state = BackOffState.coerce(outcome)
        if self._status is not None:
            return self._driver._reused(self)
        self._status = SessionStatus.DECIDING  # Marks called before the driver re-enters
        self._status = self._driver._complete(state)
        return self._status

    def __repr__(self) -> str:
        return f"Completion(attempt={self._attempt}, called={self.called})"


class RetryDriver:
    """Drives one retry session of an operation.

    Not thread-safe: completions must be delivered on the thread (or event
    loop) the timer fires on. Independent drivers share nothing but the
    immutable configuration.

    Args:
        operation: BackOff implementation or plain run-style function
        config: Backoff configuration (defaults to BackoffConfiguration())
        timer: Delayed-invocation collaborator that fires the next attempt
        rng: Random source for jitter (a fresh random.Random if omitted)
        on_retry: Called after each retry is scheduled with (retry number, interval ms, elapsed ms)
        on_finish: Called once with the outcome on SUCCEEDED, EXHAUSTED or ABORTED (never after cancel)
        strict: Raise CompletionError on a reused completion (defaults to settings.debug)
        name: Operation name for logs
    """

    __slots__ = (
        "_operation", "_policy", "_timer", "_state", "_attempts", "_handle",
        "_on_retry", "_on_finish", "_strict", "_outcome", "_log",
    )

    def __init__(
        self,
        operation: BackOff | OperationFn,
        config: BackoffConfiguration | None = None,
        *,
        timer: Timer,
        rng: RandomSource | None = None,
        on_retry: OnRetry | None = None,
        on_finish: OnFinish | None = None,
        strict: bool | None = None,
        name: str | None = None,
    ) -> None:
        self._operation = as_operation(operation)
        self._policy = BackoffPolicy(config or BackoffConfiguration(), rng or random.Random())
        self._timer = timer
        self._state = RetrySessionState(current_interval_millis=self._policy.config.initial_interval_millis)
        self._attempts = 0
        self._handle: TimerHandle | None = None
        self._on_retry, self._on_finish = on_retry, on_finish
        self._strict = get_settings().strict_completion if strict is None else strict
        self._outcome: SessionOutcome | None = None
        self._log = get_logger("expbackoff.retry").bind(operation=name or _operation_name(self._operation))

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def state(self) -> RetrySessionState:
        """Live session state. Read it, do not mutate it."""
        return self._state

    @property
    def attempts(self) -> int:
        """Number of times the operation has been invoked."""
        return self._attempts

    @property
    def outcome(self) -> SessionOutcome | None:
        """Terminal outcome, or None while the session is running."""
        return self._outcome

    @property
    def done(self) -> bool:
        return self._state.status.is_terminal

    def start(self) -> SessionStatus:
        """Invoke the first attempt. Returns the status after run() returned.

        Raises:
            SessionStateError: If the session was already started or cancelled
        """
        if self._state.status is not SessionStatus.IDLE:
            raise SessionStateError(f"Session already {self._state.status.value}, cannot start again")
        self._attempt()
        return self._state.status

    def cancel(self) -> bool:
        """Tear the session down. The operation is never invoked again.

        Returns:
            True if the session was running and is now cancelled, False if already terminal
        """
        st = self._state
        if st.status.is_terminal:
            return False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        st.status = SessionStatus.CANCELLED
        self._outcome = st.outcome(self._attempts)
        self._log.debug("session cancelled", attempts=self._attempts, elapsed_ms=st.elapsed_time_millis)
        return True

    def _attempt(self) -> None:
        self._handle = None
        st = self._state
        if st.status is SessionStatus.CANCELLED:
            return
        st.status = SessionStatus.ATTEMPTING
        self._attempts += 1
        self._log.debug("attempt started", attempt=self._attempts,
                        last_interval_ms=st.current_interval_millis, elapsed_ms=st.elapsed_time_millis)
        self._operation.run(st.current_interval_millis, st.elapsed_time_millis, Completion(self, self._attempts))

    def _complete(self, result: BackOffState) -> SessionStatus:
        st = self._state
        if st.status is SessionStatus.CANCELLED:
            self._log.debug("completion after cancel ignored", attempt=self._attempts, result=result.value)
            return st.status

        match result:
            case BackOffState.SUCCESS:
                return self._finish(SessionStatus.SUCCEEDED)
            case BackOffState.ABORT:
                return self._finish(SessionStatus.ABORTED)

        st.status = SessionStatus.DECIDING
        if not self._policy.should_continue(st.elapsed_time_millis):
            return self._finish(SessionStatus.EXHAUSTED)

        interval = self._policy.next_interval(st.current_interval_millis)
        st.advance(interval)
        st.status = SessionStatus.SCHEDULED
        self._handle = self._timer.schedule(interval, self._attempt)
        self._log.info("retry scheduled", retry=st.attempt_count, interval_ms=interval,
                       elapsed_ms=st.elapsed_time_millis)
        if self._on_retry:
            self._on_retry(st.attempt_count, interval, st.elapsed_time_millis)
        return st.status  # on_retry may have cancelled

    def _finish(self, status: SessionStatus) -> SessionStatus:
        st = self._state
        st.status = status
        self._outcome = outcome = st.outcome(self._attempts)
        if status is SessionStatus.SUCCEEDED:
            self._log.info("session succeeded", attempts=outcome.attempts, elapsed_ms=outcome.elapsed_time_millis)
        else:
            self._log.warning(f"session {status.value}", attempts=outcome.attempts,
                              elapsed_ms=outcome.elapsed_time_millis,
                              max_elapsed_ms=self._policy.config.max_elapsed_time_millis)
        if self._on_finish:
            self._on_finish(outcome)
        return status

    def _reused(self, completion: Completion) -> SessionStatus:
        msg = f"Completion for attempt {completion.attempt} invoked more than once"
        if self._strict:
            raise CompletionError(msg)
        self._log.warning("completion reused", attempt=completion.attempt)
        return completion._status or self._state.status

    def __repr__(self) -> str:
        return (f"RetryDriver({_operation_name(self._operation)}, status={self.status.value}, "
                f"attempts={self._attempts}, elapsed_ms={self._state.elapsed_time_millis})")


def _operation_name(operation: BackOff) -> str:
    return getattr(operation, "name", None) or type(operation).__name__
