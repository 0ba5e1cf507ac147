"""Tests for asyncio timers and coroutine adapters.

Intervals are a few milliseconds so the real event loop finishes quickly.
"""

from __future__ import annotations

import asyncio

import pytest

from expbackoff.runtime.retry import (
    AsyncioTimer,
    BackoffConfiguration,
    BackOffState,
    Completion,
    CoroutineOperation,
    RetryDriver,
    SessionStatus,
    TimerHandle,
    run_with_backoff,
)

FAST = BackoffConfiguration(
    initial_interval_millis=1, multiplier=1.0, randomization_factor=0,
    max_interval_millis=5, max_elapsed_time_millis=1000,
)


# ─────────────────────────────────────────────────────────────────────────────
# AsyncioTimer
# ─────────────────────────────────────────────────────────────────────────────


class TestAsyncioTimer:
    """Tests for the event-loop timer."""

    @pytest.mark.asyncio
    async def test_schedule_fires_after_delay(self) -> None:
        loop = asyncio.get_running_loop()
        fired: asyncio.Future[float] = loop.create_future()
        start = loop.time()

        handle = AsyncioTimer().schedule(20, lambda: fired.set_result(loop.time()))
        assert isinstance(handle, TimerHandle)
        at = await asyncio.wait_for(fired, timeout=1.0)

        assert at - start >= 0.015  # Loop clock granularity
        assert not handle.cancelled

    @pytest.mark.asyncio
    async def test_cancelled_handle_never_fires(self) -> None:
        calls: list[int] = []
        handle = AsyncioTimer(asyncio.get_running_loop()).schedule(5, lambda: calls.append(1))
        handle.cancel()
        await asyncio.sleep(0.03)
        assert calls == []
        assert handle.cancelled

    def test_requires_running_loop_when_unbound(self) -> None:
        with pytest.raises(RuntimeError):
            AsyncioTimer().schedule(1, lambda: None)


# ─────────────────────────────────────────────────────────────────────────────
# run_with_backoff
# ─────────────────────────────────────────────────────────────────────────────


class TestRunWithBackoff:
    """End-to-end sessions on a real event loop."""

    @pytest.mark.asyncio
    async def test_coroutine_succeeds_after_failures(self) -> None:
        seen: list[tuple[int, int]] = []

        async def fetch(last_interval_millis: int, elapsed_time_millis: int) -> bool:
            seen.append((last_interval_millis, elapsed_time_millis))
            await asyncio.sleep(0)
            return len(seen) == 3

        outcome = await run_with_backoff(fetch, FAST)

        assert outcome.succeeded
        assert outcome.attempts == 3
        assert seen == [(1, 0), (1, 1), (1, 2)]

    @pytest.mark.asyncio
    async def test_coroutine_exception_counts_as_failure(self) -> None:
        calls = 0

        async def flaky(last_interval_millis: int, elapsed_time_millis: int) -> bool:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise ConnectionResetError("peer reset")
            return True

        outcome = await run_with_backoff(flaky, FAST)
        assert outcome.succeeded and outcome.attempts == 2

    @pytest.mark.asyncio
    async def test_coroutine_abort(self) -> None:
        async def forbidden(last_interval_millis: int, elapsed_time_millis: int) -> BackOffState:
            return BackOffState.ABORT

        outcome = await run_with_backoff(forbidden, FAST)
        assert outcome.aborted and outcome.attempts == 1

    @pytest.mark.asyncio
    async def test_exhaustion_is_reported_distinctly(self) -> None:
        async def down(last_interval_millis: int, elapsed_time_millis: int) -> bool:
            return False

        cfg = FAST.with_overrides(multiplier=2.0, max_elapsed_time_millis=10)
        outcome = await run_with_backoff(down, cfg)

        assert outcome.exhausted and not outcome.succeeded
        assert outcome.status is SessionStatus.EXHAUSTED
        # Waits 2, 4, 5 (capped): 11ms >= 10ms after three retries
        assert outcome.retries == 3 and outcome.attempts == 4
        assert outcome.elapsed_time_millis == 11

    @pytest.mark.asyncio
    async def test_callback_style_operation(self) -> None:
        """A BackOff completing from a later loop callback, like a network client."""
        loop = asyncio.get_running_loop()

        class Reachability:
            def __init__(self) -> None:
                self.checks = 0

            def run(self, last_interval_millis: int, elapsed_time_millis: int, completion: Completion) -> None:
                self.checks += 1
                loop.call_soon(completion, self.checks >= 2)

        op = Reachability()
        outcome = await run_with_backoff(op, FAST)
        assert outcome.succeeded and op.checks == 2

    @pytest.mark.asyncio
    async def test_on_retry_hook(self) -> None:
        retries: list[int] = []

        async def down(last_interval_millis: int, elapsed_time_millis: int) -> bool:
            return False

        await run_with_backoff(down, FAST.with_overrides(max_elapsed_time_millis=3),
                               on_retry=lambda n, interval, elapsed: retries.append(n))
        assert retries == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_cancelling_caller_stops_attempts(self) -> None:
        calls = 0

        async def down(last_interval_millis: int, elapsed_time_millis: int) -> bool:
            nonlocal calls
            calls += 1
            return False

        cfg = FAST.with_overrides(initial_interval_millis=10, max_interval_millis=10, max_elapsed_time_millis=60_000)
        task = asyncio.create_task(run_with_backoff(down, cfg))
        await asyncio.sleep(0.035)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        seen = calls
        await asyncio.sleep(0.05)
        assert seen >= 1
        assert calls == seen

    @pytest.mark.asyncio
    async def test_sync_run_error_in_later_attempt_surfaces(self) -> None:
        class Breaks:
            calls = 0

            def run(self, last_interval_millis: int, elapsed_time_millis: int, completion: Completion) -> None:
                self.calls += 1
                if self.calls > 1:
                    raise RuntimeError("client closed")
                completion(False)

        with pytest.raises(RuntimeError, match="client closed"):
            await run_with_backoff(Breaks(), FAST)

    @pytest.mark.asyncio
    async def test_invalid_coroutine_result_surfaces(self) -> None:
        """A forgotten return (None) is an error, not a hang."""
        calls = 0

        async def fetch(last_interval_millis: int, elapsed_time_millis: int) -> bool:
            nonlocal calls
            calls += 1
            return None  # type: ignore[return-value]

        with pytest.raises(ValueError, match="not a valid BackOffState"):
            await asyncio.wait_for(run_with_backoff(fetch, FAST), timeout=1.0)
        await asyncio.sleep(0.01)
        assert calls == 1

    @pytest.mark.asyncio
    async def test_failing_on_retry_hook_surfaces(self) -> None:
        async def down(last_interval_millis: int, elapsed_time_millis: int) -> bool:
            return False

        def hook(retry: int, interval_millis: int, elapsed_millis: int) -> None:
            raise LookupError("metrics backend gone")

        with pytest.raises(LookupError, match="metrics backend gone"):
            await asyncio.wait_for(run_with_backoff(down, FAST, on_retry=hook), timeout=1.0)


# ─────────────────────────────────────────────────────────────────────────────
# CoroutineOperation
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_coroutine_operation_with_driver() -> None:
    done: asyncio.Future[SessionStatus] = asyncio.get_running_loop().create_future()

    async def ok(last_interval_millis: int, elapsed_time_millis: int) -> bool:
        return True

    op = CoroutineOperation(ok)
    driver = RetryDriver(op, FAST, timer=AsyncioTimer(), on_finish=lambda o: done.set_result(o.status))
    assert driver.start() is SessionStatus.ATTEMPTING  # Completes on a later loop iteration
    assert await asyncio.wait_for(done, timeout=1.0) is SessionStatus.SUCCEEDED
    assert op.name == "ok"


@pytest.mark.asyncio
async def test_coroutine_operation_close_cancels_in_flight_attempt() -> None:
    started = asyncio.Event()

    async def slow(last_interval_millis: int, elapsed_time_millis: int) -> bool:
        started.set()
        await asyncio.sleep(10)
        return True

    op = CoroutineOperation(slow)
    driver = RetryDriver(op, FAST, timer=AsyncioTimer())
    driver.start()
    await started.wait()
    driver.cancel()
    op.close()
    await asyncio.sleep(0)
    assert driver.status is SessionStatus.CANCELLED
    assert driver.attempts == 1
