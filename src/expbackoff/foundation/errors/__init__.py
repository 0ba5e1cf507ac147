"""Error handling for expbackoff.

- ErrorCode: Machine-readable error classification
- BackoffError: Base exception carrying an ErrorCode
- ConfigurationError: Invalid BackoffConfiguration values
- CompletionError/SessionStateError: Driver usage contract violations
"""

from .errors import BackoffError, CompletionError, ConfigurationError, ErrorCode, SessionStateError

__all__ = [
    "ErrorCode",
    "BackoffError",
    "ConfigurationError",
    "CompletionError",
    "SessionStateError",
]
