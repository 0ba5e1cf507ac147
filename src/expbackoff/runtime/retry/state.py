"""Session state for the retry driver.

- BackOffState: outcome an operation reports through its completion
- SessionStatus: driver lifecycle states
- RetrySessionState: mutable per-session counters, owned by one driver
- SessionOutcome: immutable summary of a finished session
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Self


class BackOffState(StrEnum):
    """Outcome of one attempt, as reported by the operation."""
    SUCCESS = "success"  # Done, stop retrying
    RETRY = "retry"      # Failed, back off and try again if budget remains
    ABORT = "abort"      # Failed permanently, stop without retrying

    @classmethod
    def coerce(cls, value: bool | str | BackOffState) -> Self:
        """Map a completion argument to a state. True -> SUCCESS, False -> RETRY."""
        if isinstance(value, bool):
            return cls.SUCCESS if value else cls.RETRY
        return cls(value)


class SessionStatus(StrEnum):
    """Retry session lifecycle states."""
    IDLE = "idle"              # Not yet started
    ATTEMPTING = "attempting"  # Operation invoked, awaiting completion
    DECIDING = "deciding"      # Failure reported, consulting the policy
    SCHEDULED = "scheduled"    # Next attempt handed to the timer
    SUCCEEDED = "succeeded"    # Terminal: operation reported success
    EXHAUSTED = "exhausted"    # Terminal: elapsed-time budget spent
    ABORTED = "aborted"        # Terminal: operation reported a permanent failure
    CANCELLED = "cancelled"    # Terminal: torn down by the caller

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL: frozenset[SessionStatus] = frozenset({
    SessionStatus.SUCCEEDED,
    SessionStatus.EXHAUSTED,
    SessionStatus.ABORTED,
    SessionStatus.CANCELLED,
})


@dataclass(slots=True)
class RetrySessionState:
    """Mutable state of one retry session.

    Attributes:
        current_interval_millis: Interval the next growth step starts from, passed to each attempt
        elapsed_time_millis: Sum of all scheduled waits so far
        attempt_count: Retries scheduled so far (diagnostics only)
        status: Current lifecycle state
    """

    current_interval_millis: int
    elapsed_time_millis: int = 0
    attempt_count: int = 0
    status: SessionStatus = SessionStatus.IDLE

    def advance(self, interval_millis: int) -> None:
        """Record a scheduled wait of interval_millis before the next attempt."""
        self.elapsed_time_millis += interval_millis
        self.current_interval_millis = interval_millis
        self.attempt_count += 1

    def outcome(self, attempts: int) -> SessionOutcome:
        return SessionOutcome(
            status=self.status,
            attempts=attempts,
            retries=self.attempt_count,
            elapsed_time_millis=self.elapsed_time_millis,
            current_interval_millis=self.current_interval_millis,
        )


@dataclass(frozen=True, slots=True)
class SessionOutcome:
    """How a retry session ended.

    Attributes:
        status: Terminal status
        attempts: Number of times the operation was invoked
        retries: Number of retries scheduled
        elapsed_time_millis: Total backoff time spent
        current_interval_millis: Interval in effect when the session ended
    """

    status: SessionStatus
    attempts: int
    retries: int
    elapsed_time_millis: int
    current_interval_millis: int

    @property
    def succeeded(self) -> bool:
        return self.status is SessionStatus.SUCCEEDED

    @property
    def exhausted(self) -> bool:
        return self.status is SessionStatus.EXHAUSTED

    @property
    def aborted(self) -> bool:
        return self.status is SessionStatus.ABORTED

    @property
    def cancelled(self) -> bool:
        return self.status is SessionStatus.CANCELLED
