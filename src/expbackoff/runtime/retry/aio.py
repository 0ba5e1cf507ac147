"""Asyncio adapters for coroutine-based operations.

Lets async I/O code use the callback-driven RetryDriver without writing
completion plumbing:

    >>> async def fetch(last_interval_millis: int, elapsed_time_millis: int) -> bool:
    ...     resp = await client.get("/health")
    ...     return resp.status_code == 200
    >>>
    >>> outcome = await run_with_backoff(fetch, BackoffConfiguration(max_elapsed_time_millis=30_000))
    >>> if outcome.exhausted:
    ...     alert("health check gave up")
"""

from __future__ import annotations

import asyncio
import inspect
import traceback
from typing import TYPE_CHECKING, Awaitable, Callable

from expbackoff.runtime.observability import get_logger

from .driver import BackOff, OnRetry, OperationFn, RetryDriver
from .state import BackOffState, SessionOutcome
from .timer import AsyncioHandle, AsyncioTimer

if TYPE_CHECKING:
    from .backoff import RandomSource
    from .driver import Completion
    from .properties import BackoffConfiguration

CoroutineFn = Callable[[int, int], Awaitable[bool | BackOffState]]
OnError = Callable[[Exception], None]

logger = get_logger("expbackoff.retry.aio")


class CoroutineOperation:
    """BackOff adapter running an async function per attempt.

    The coroutine's return value (bool or BackOffState) is passed to the
    completion. An exception raised by the coroutine counts as a failed
    attempt (RETRY); cancellation is never swallowed.

    Errors raised while reporting the result (an invalid return value, a
    failing on_retry or on_finish hook) go to on_error when given, and are
    re-raised inside the attempt task otherwise.
    """

    __slots__ = ("_fn", "_task", "_on_error")

    def __init__(self, fn: CoroutineFn, *, on_error: OnError | None = None) -> None:
        self._fn = fn
        self._on_error = on_error
        self._task: asyncio.Task[None] | None = None

    @property
    def name(self) -> str:
        return getattr(self._fn, "__name__", type(self._fn).__name__)

    def run(self, last_interval_millis: int, elapsed_time_millis: int, completion: Completion) -> None:
        self._task = asyncio.get_running_loop().create_task(
            self._execute(last_interval_millis, elapsed_time_millis, completion),
            name=f"{self.name}:attempt-{completion.attempt}",
        )

    async def _execute(self, last_interval_millis: int, elapsed_time_millis: int, completion: Completion) -> None:
        try:
            result: bool | BackOffState = await self._fn(last_interval_millis, elapsed_time_millis)
        except Exception as e:
            logger.warning("operation raised", operation=self.name, attempt=completion.attempt,
                           error=repr(e), exc_info=traceback.format_exc())
            result = BackOffState.RETRY
        try:
            completion(result)
        except Exception as e:
            logger.error("completion failed", operation=self.name, attempt=completion.attempt, error=repr(e))
            if self._on_error is None:
                raise
            self._on_error(e)

    def close(self) -> None:
        """Cancel the in-flight attempt, if any."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None


class _FailFastTimer(AsyncioTimer):
    """AsyncioTimer that routes errors raised by a fired attempt to on_error."""

    __slots__ = ("_on_error",)

    def __init__(self, loop: asyncio.AbstractEventLoop, on_error: OnError) -> None:
        super().__init__(loop)
        self._on_error = on_error

    def schedule(self, delay_millis: int, callback: Callable[[], None]) -> AsyncioHandle:
        def fire() -> None:
            try:
                callback()
            except Exception as e:
                self._on_error(e)
        return super().schedule(delay_millis, fire)


async def run_with_backoff(
    operation: CoroutineFn | BackOff | OperationFn,
    config: BackoffConfiguration | None = None,
    *,
    rng: RandomSource | None = None,
    on_retry: OnRetry | None = None,
    name: str | None = None,
) -> SessionOutcome:
    """Run a retry session on the running loop and await its outcome.

    Args:
        operation: Async function (last_interval_millis, elapsed_time_millis) -> bool | BackOffState,
            a BackOff implementation, or a plain run-style callback function
        config: Backoff configuration (defaults to BackoffConfiguration())
        rng: Random source for jitter
        on_retry: Called after each retry is scheduled
        name: Operation name for logs

    Returns:
        SessionOutcome with status SUCCEEDED, EXHAUSTED or ABORTED

    Raises:
        Exception: Whatever a synchronous run(), a hook, or an invalid coroutine
            result raised; the session is cancelled

    Cancelling the awaiting task cancels the session: no further attempts run.
    """
    loop = asyncio.get_running_loop()
    finished: asyncio.Future[SessionOutcome] = loop.create_future()

    def _on_error(e: Exception) -> None:
        if not finished.done():
            finished.set_exception(e)

    op = (CoroutineOperation(operation, on_error=_on_error)
          if inspect.iscoroutinefunction(operation) else operation)

    def _on_finish(outcome: SessionOutcome) -> None:
        if not finished.done():
            finished.set_result(outcome)

    driver = RetryDriver(op, config, timer=_FailFastTimer(loop, _on_error), rng=rng,
                         on_retry=on_retry, on_finish=_on_finish, name=name)
    try:
        driver.start()
        return await finished
    finally:
        driver.cancel()
        if isinstance(op, CoroutineOperation):
            op.close()
