"""Standardized errors for backoff configuration and session misuse.

Operation failures are not errors at this layer: they are reported through
the completion callback and drive the retry loop. The exceptions here cover
invalid configuration and violations of the driver's usage contract.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from pydantic import ValidationError


class ErrorCode(StrEnum):
    """Machine-readable error classification."""
    INVALID_CONFIG = "INVALID_CONFIG"
    COMPLETION_REUSED = "COMPLETION_REUSED"
    INVALID_STATE = "INVALID_STATE"
    UNKNOWN = "UNKNOWN"


class BackoffError(Exception):
    """Base exception for expbackoff.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
    """

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code.value})"


class ConfigurationError(BackoffError, ValueError):
    """Raised when a BackoffConfiguration is constructed with invalid values.

    Fatal to construction: no session can start with an invalid configuration.

    Attributes:
        errors: (field, message) pairs, one per violated constraint
    """

    code = ErrorCode.INVALID_CONFIG

    def __init__(self, message: str, *, errors: list[tuple[str, str]] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)

    @classmethod
    def from_validation_error(cls, exc: ValidationError, *, model: str = "BackoffConfiguration") -> Self:
        """Flatten a pydantic ValidationError into field-level messages."""
        errors = [(".".join(str(p) for p in e["loc"]) or "__root__", e["msg"]) for e in exc.errors()]
        detail = "; ".join(f"{field}: {msg}" for field, msg in errors)
        return cls(f"Invalid {model}: {detail}", errors=errors)


class CompletionError(BackoffError, RuntimeError):
    """Raised in strict mode when an attempt's completion is invoked more than once."""

    code = ErrorCode.COMPLETION_REUSED


class SessionStateError(BackoffError, RuntimeError):
    """Raised when a driver is used outside its lifecycle (e.g. started twice)."""

    code = ErrorCode.INVALID_STATE
