"""Tests for the refresh controller, driven by a mock clock."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from limitwatch.sdk.display import LimitsDisplay
from limitwatch.sdk.exceptions import ClientFetchError
from limitwatch.sdk.refresh import (
    IDLE,
    Active,
    AsyncioScheduler,
    Idle,
    RefreshController,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeTimer:
    def __init__(self, scheduler: FakeScheduler, interval: float, callback) -> None:
        self.scheduler = scheduler
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        if not self.cancelled:
            self.cancelled = True
            self.scheduler.cancelled += 1

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


class FakeScheduler:
    """Counts scheduled and cancelled timers; ticks fire only on demand."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []
        self.cancelled = 0

    def call_every(self, interval: float, callback) -> FakeTimer:
        timer = FakeTimer(self, interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    @property
    def outstanding(self) -> int:
        return len(self.timers) - self.cancelled


def _snap(limit=100, remaining=42, reset=17):
    return SimpleNamespace(limit=limit, remaining=remaining, reset=reset)


class CountingFetch:
    def __init__(self, result=None) -> None:
        self.calls = 0
        self.result = result or _snap()

    async def __call__(self):
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class GatedFetch:
    """Each call blocks until the test releases it with a result."""

    def __init__(self) -> None:
        self.pending: list[asyncio.Future] = []

    async def __call__(self):
        fut = asyncio.get_running_loop().create_future()
        self.pending.append(fut)
        return await fut


def _controller(fetch=None, **kwargs):
    scheduler = FakeScheduler()
    display = LimitsDisplay()
    controller = RefreshController(
        fetch or CountingFetch(), display, scheduler=scheduler, **kwargs
    )
    return controller, scheduler, display


# ---------------------------------------------------------------------------
# Timer ownership
# ---------------------------------------------------------------------------


class TestTimerOwnership:
    def test_starts_idle(self):
        controller, scheduler, _ = _controller()
        assert controller.state == IDLE
        assert isinstance(controller.state, Idle)
        assert scheduler.timers == []

    def test_start_schedules_one_timer(self):
        controller, scheduler, _ = _controller()
        controller.start(30000)
        assert controller.state == Active(30000)
        assert len(scheduler.active) == 1
        assert scheduler.active[0].interval == 30.0

    async def test_switching_interval_replaces_timer(self):
        fetch = CountingFetch()
        controller, scheduler, _ = _controller(fetch)
        controller.start(5000)
        old = scheduler.active[0]

        controller.on_interval_changed(60000)

        assert controller.state == Active(60000)
        assert old.cancelled
        assert len(scheduler.active) == 1
        assert scheduler.active[0].interval == 60.0

        old.fire()
        await controller.drain()
        assert fetch.calls == 0

    def test_start_and_stop_never_leave_more_than_one_timer(self):
        controller, scheduler, _ = _controller()
        for i in range(50):
            controller.start(5000 + i)
            assert scheduler.outstanding == 1
            if i % 3 == 0:
                controller.stop()
                assert scheduler.outstanding == 0
                assert controller.state == IDLE
        controller.stop()
        assert scheduler.outstanding == 0
        assert scheduler.cancelled == len(scheduler.timers)

    def test_stop_from_idle_is_noop(self):
        controller, scheduler, _ = _controller()
        controller.stop()
        controller.stop()
        assert controller.state == IDLE
        assert scheduler.cancelled == 0

    @pytest.mark.parametrize("interval", [0, -1000])
    def test_non_positive_interval_rejected(self, interval):
        controller, scheduler, _ = _controller()
        controller.start(30000)
        with pytest.raises(ValueError):
            controller.start(interval)
        assert controller.state == Active(30000)
        assert len(scheduler.active) == 1


# ---------------------------------------------------------------------------
# Fetch-and-render cycles
# ---------------------------------------------------------------------------


class TestCycles:
    async def test_each_tick_runs_one_cycle(self):
        fetch = CountingFetch(_snap(500, 480, 3661))
        controller, scheduler, display = _controller(fetch)
        controller.start(15000)

        scheduler.active[0].fire()
        await controller.drain()

        assert fetch.calls == 1
        assert (display.limit, display.remaining, display.reset) == ("500", "480", "1h 1m 1s")
        assert display.error == ""

    async def test_refresh_now_runs_without_timer(self):
        fetch = CountingFetch()
        controller, scheduler, display = _controller(fetch)
        await controller.refresh_now()
        assert fetch.calls == 1
        assert scheduler.timers == []
        assert display.limit == "100"

    async def test_failure_keeps_values_and_loop_running(self):
        fetch = CountingFetch()
        controller, scheduler, display = _controller(fetch)
        controller.start(5000)
        timer = scheduler.active[0]

        timer.fire()
        await controller.drain()
        fetch.result = ClientFetchError("HTTP 502", 502)
        timer.fire()
        await controller.drain()

        assert display.error == "Failed to load limits. HTTP 502"
        assert (display.limit, display.remaining, display.reset) == ("100", "42", "17s")
        assert controller.state == Active(5000)

        fetch.result = _snap(100, 41, 16)
        timer.fire()
        await controller.drain()
        assert display.error == ""
        assert display.remaining == "41"

    async def test_unexpected_fetch_error_shown_and_loop_kept(self):
        fetch = CountingFetch(RuntimeError("decoder exploded"))
        controller, scheduler, display = _controller(fetch)
        controller.start(5000)
        timer = scheduler.active[0]

        timer.fire()
        await controller.drain()

        assert display.error == "Failed to load limits. decoder exploded"
        assert controller.state == Active(5000)

        fetch.result = _snap(9, 8, 7)
        timer.fire()
        await controller.drain()
        assert display.limit == "9"
        assert display.error == ""

    async def test_ticks_overlap_without_waiting(self):
        fetch = GatedFetch()
        controller, scheduler, _ = _controller(fetch)
        controller.start(5000)

        scheduler.active[0].fire()
        scheduler.active[0].fire()
        await asyncio.sleep(0)

        assert controller.inflight == 2
        assert len(fetch.pending) == 2
        for fut in fetch.pending:
            fut.set_result(_snap())
        await controller.drain()
        assert controller.inflight == 0

    async def test_stop_does_not_cancel_inflight_cycle(self):
        fetch = GatedFetch()
        controller, scheduler, display = _controller(fetch)
        controller.start(5000)
        scheduler.active[0].fire()
        await asyncio.sleep(0)

        controller.stop()
        fetch.pending[0].set_result(_snap(7, 6, 5))
        await controller.drain()

        assert display.limit == "7"

    async def test_late_result_overwrites_by_default(self):
        fetch = GatedFetch()
        controller, scheduler, display = _controller(fetch)
        controller.start(5000)
        scheduler.active[0].fire()
        scheduler.active[0].fire()
        await asyncio.sleep(0)
        older, newer = fetch.pending

        newer.set_result(_snap(remaining=10))
        await asyncio.sleep(0)
        older.set_result(_snap(remaining=20))
        await controller.drain()

        assert display.remaining == "20"

    async def test_discard_stale_keeps_newest_result(self):
        fetch = GatedFetch()
        controller, scheduler, display = _controller(fetch, discard_stale=True)
        controller.start(5000)
        scheduler.active[0].fire()
        scheduler.active[0].fire()
        await asyncio.sleep(0)
        older, newer = fetch.pending

        newer.set_result(_snap(remaining=10))
        await asyncio.sleep(0)
        older.set_exception(ClientFetchError("timed out"))
        await controller.drain()

        assert display.remaining == "10"
        assert display.error == ""


# ---------------------------------------------------------------------------
# Real event-loop scheduler
# ---------------------------------------------------------------------------


class TestAsyncioScheduler:
    async def test_ticks_repeat_until_stopped(self):
        fetch = CountingFetch()
        controller = RefreshController(fetch, LimitsDisplay(), scheduler=AsyncioScheduler())
        controller.start(10)
        await asyncio.sleep(0.1)
        controller.stop()
        await controller.drain()
        calls = fetch.calls
        assert calls >= 2

        await asyncio.sleep(0.05)
        assert fetch.calls == calls

    async def test_old_period_never_fires_after_switch(self):
        fetch = CountingFetch()
        controller = RefreshController(fetch, LimitsDisplay())
        controller.start(10)
        controller.start(60_000)
        await asyncio.sleep(0.08)
        controller.stop()
        assert fetch.calls == 0
