"""Backoff configuration and its defaults.

BackoffConfiguration is validated once at construction and never mutated,
so a single instance can be shared read-only by any number of sessions.

Optimizations:
- Frozen for immutability and hashability
- Validation errors surface as ConfigurationError, never at use time
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field

from expbackoff.foundation.config.defaults import (
    DEFAULT_INITIAL_INTERVAL_MILLIS,
    DEFAULT_MAX_ELAPSED_TIME_MILLIS,
    DEFAULT_MAX_INTERVAL_MILLIS,
    DEFAULT_MULTIPLIER,
    DEFAULT_RANDOMIZATION_FACTOR,
)
from expbackoff.foundation.errors import ConfigurationError

if TYPE_CHECKING:
    from expbackoff.foundation.config import BackoffSettings

__all__ = [
    "DEFAULT_INITIAL_INTERVAL_MILLIS",
    "DEFAULT_MAX_INTERVAL_MILLIS",
    "DEFAULT_MAX_ELAPSED_TIME_MILLIS",
    "DEFAULT_MULTIPLIER",
    "DEFAULT_RANDOMIZATION_FACTOR",
    "BackoffConfiguration",
]


class BackoffConfiguration(BaseModel):
    """Immutable parameters of an exponential backoff policy.

    Attributes:
        initial_interval_millis: Starting interval; each retry waits it grown by multiplier
        max_interval_millis: Cap on the interval growth curve (jitter may exceed it)
        max_elapsed_time_millis: Total backoff budget; no retry is scheduled once spent
        multiplier: Growth factor applied per retry (>= 1)
        randomization_factor: Half-width of the jitter band as a fraction of the interval, in [0, 1)

    Example:
        >>> cfg = BackoffConfiguration(initial_interval_millis=100, multiplier=2.0)
        >>> cfg.max_interval_millis
        60000
        >>> BackoffConfiguration(randomization_factor=1.0)  # raises ConfigurationError
    """

    model_config = ConfigDict(
        frozen=True,
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Backoff Configuration",
            "description": "Parameters of an exponential backoff retry policy",
            "examples": [{
                "initial_interval_millis": DEFAULT_INITIAL_INTERVAL_MILLIS,
                "max_interval_millis": DEFAULT_MAX_INTERVAL_MILLIS,
                "max_elapsed_time_millis": DEFAULT_MAX_ELAPSED_TIME_MILLIS,
                "multiplier": DEFAULT_MULTIPLIER,
                "randomization_factor": DEFAULT_RANDOMIZATION_FACTOR,
            }],
        },
    )

    initial_interval_millis: Annotated[int, Field(ge=0)] = DEFAULT_INITIAL_INTERVAL_MILLIS
    max_interval_millis: Annotated[int, Field(ge=0)] = DEFAULT_MAX_INTERVAL_MILLIS
    max_elapsed_time_millis: Annotated[int, Field(ge=0)] = DEFAULT_MAX_ELAPSED_TIME_MILLIS
    multiplier: Annotated[float, Field(ge=1.0, allow_inf_nan=False)] = DEFAULT_MULTIPLIER
    randomization_factor: Annotated[float, Field(ge=0.0, lt=1.0)] = DEFAULT_RANDOMIZATION_FACTOR

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError.from_validation_error(e) from e

    @computed_field
    @property
    def is_jittered(self) -> bool:
        """Whether intervals are randomized."""
        return self.randomization_factor > 0

    def with_overrides(self, **changes: Any) -> Self:
        """Return a new validated configuration with the given fields replaced."""
        return type(self)(**{**self.model_dump(exclude={"is_jittered"}), **changes})

    @classmethod
    def from_settings(cls, settings: BackoffSettings | None = None) -> Self:
        """Build from environment settings (EXPBACKOFF_BACKOFF_*)."""
        if settings is None:
            from expbackoff.foundation.config import get_settings
            settings = get_settings().backoff
        return cls(**settings.model_dump())
