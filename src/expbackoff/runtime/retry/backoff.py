"""Exponential backoff interval math.

Pure computation over a BackoffConfiguration:
- next_interval: grow the interval geometrically up to the cap, then jitter it
- randomize: uniform draw from the jitter band around an interval
- should_continue: whether the elapsed-time budget allows another retry

The cap bounds the growth curve, not the final random draw: a capped
interval jittered upward may reach max_interval_millis * (1 + factor).
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from .properties import BackoffConfiguration


@runtime_checkable
class RandomSource(Protocol):
    """Uniform random generator over a bounded real interval (random.Random satisfies it)."""

    def uniform(self, a: float, b: float) -> float: ...


def randomize(interval: float, factor: float, rng: RandomSource | None = None) -> int:
    """Draw uniformly from [interval * (1 - factor), interval * (1 + factor)].

    The draw is rounded to an int and kept inside the integer points of the
    closed band; when the band contains no integer the upper bound wins.
    factor == 0 returns round(interval).
    """
    if factor == 0:
        return round(interval)
    low, high = interval * (1 - factor), interval * (1 + factor)
    value = round((rng or _default_rng).uniform(low, high))
    return max(0, min(max(value, math.ceil(low)), math.floor(high)))


def next_interval(current: int, cfg: BackoffConfiguration, rng: RandomSource | None = None) -> int:
    """Compute the next randomized interval from the current one.

    Args:
        current: Current interval in ms (>= 0)
        cfg: Validated backoff configuration
        rng: Random source for jitter (defaults to a module-private Random)

    Returns:
        Jittered interval in ms, in [0, max_interval_millis * (1 + randomization_factor)]

    Raises:
        ValueError: If current is negative
    """
    if current < 0:
        raise ValueError(f"current interval must be >= 0, got {current}")
    return randomize(_grow(current, cfg), cfg.randomization_factor, rng)


def _grow(current: int, cfg: BackoffConfiguration) -> int:
    """Deterministic growth step: current * multiplier rounded, then capped.

    Rounding never swallows growth: while the product exceeds current the
    step is at least current + 1.
    """
    grown = current * cfg.multiplier
    step = max(round(grown), current + 1) if grown > current else current
    return min(step, cfg.max_interval_millis)


def should_continue(elapsed_time_millis: int, cfg: BackoffConfiguration) -> bool:
    """Whether another retry is permitted. The budget boundary itself is exhausted."""
    return elapsed_time_millis < cfg.max_elapsed_time_millis


# Private source so default jitter does not consume or depend on global random state
_default_rng = random.Random()


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    """Exponential backoff policy bound to a configuration and a random source.

    Side-effect free apart from drawing from its random source. Inject a
    seeded random.Random for deterministic jitter.

    Attributes:
        config: Validated configuration (shared, immutable)
        rng: Random source used for jitter

    Example:
        >>> policy = BackoffPolicy(BackoffConfiguration(randomization_factor=0), random.Random(7))
        >>> policy.next_interval(500), policy.next_interval(750)
        (750, 1125)
    """

    config: BackoffConfiguration = field(default_factory=BackoffConfiguration)
    rng: RandomSource = field(default_factory=random.Random, repr=False)

    def next_interval(self, current: int) -> int:
        return next_interval(current, self.config, self.rng)

    def should_continue(self, elapsed_time_millis: int) -> bool:
        return should_continue(elapsed_time_millis, self.config)

    @property
    def max_random_interval(self) -> float:
        """Upper bound of any interval this policy can return."""
        return self.config.max_interval_millis * (1 + self.config.randomization_factor)

    def intervals(self) -> Iterator[int]:
        """Yield the un-jittered interval curve (initial, grown, ..., capped forever).

        Infinite once the cap is reached; slice it with itertools.islice.
        """
        current = self.config.initial_interval_millis
        while True:
            yield current
            current = _grow(current, self.config)
