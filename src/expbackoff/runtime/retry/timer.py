"""Delayed-invocation collaborators for the retry driver.

The driver never waits itself: it hands "run this after N milliseconds" to
a Timer. Any Timer must guarantee that a callback never fires before its
delay and that a cancelled handle never fires.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class TimerHandle(Protocol):
    """Handle to a scheduled callback."""

    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


@runtime_checkable
class Timer(Protocol):
    """Schedules a callback to run once after a delay in milliseconds."""

    def schedule(self, delay_millis: int, callback: Callable[[], None]) -> TimerHandle: ...


@dataclass(slots=True)
class AsyncioHandle:
    """TimerHandle over asyncio.TimerHandle."""

    _handle: asyncio.TimerHandle = field(repr=False)

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioTimer:
    """Timer backed by an asyncio event loop's call_later.

    Callbacks run on the loop thread. With no loop given, the running loop
    is looked up at schedule time.

    Example:
        >>> async def main():
        ...     driver = RetryDriver(op, cfg, timer=AsyncioTimer())
        ...     driver.start()
    """

    __slots__ = ("_loop",)

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def schedule(self, delay_millis: int, callback: Callable[[], None]) -> AsyncioHandle:
        return AsyncioHandle(self.loop.call_later(delay_millis / 1000, callback))

    def __repr__(self) -> str:
        return f"AsyncioTimer(loop={self._loop!r})"
