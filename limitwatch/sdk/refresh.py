"""Recurring refresh of a ``LimitsDisplay``.

``RefreshController`` owns at most one timer.  ``start`` always cancels the
current timer before arming the next one, so changing the interval takes
effect immediately and ticks at the old period stop.  Each tick launches one
fetch-and-render cycle as its own task; cycles may overlap and are never
cancelled by ``start`` or ``stop``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

from limitwatch.sdk.display import LimitsDisplay
from limitwatch.sdk.exceptions import ClientFetchError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Active:
    interval_ms: int


RefreshState = Idle | Active

IDLE = Idle()


# ---------------------------------------------------------------------------
# Timers
# ---------------------------------------------------------------------------


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_every(
        self, interval: float, callback: Callable[[], None]
    ) -> TimerHandle: ...


class _RepeatingTimer:
    """Calls *callback* every *interval* seconds on *loop* until cancelled."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle = loop.call_later(interval, self._run)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _run(self) -> None:
        if self._cancelled:
            return
        # Re-arm first so a failing callback does not end the loop.
        self._handle = self._loop.call_later(self._interval, self._run)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()


class AsyncioScheduler:
    """Default scheduler backed by ``loop.call_later``.

    Must be used from inside a running event loop.
    """

    def call_every(
        self, interval: float, callback: Callable[[], None]
    ) -> _RepeatingTimer:
        return _RepeatingTimer(asyncio.get_running_loop(), interval, callback)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class RefreshController:
    """Keep *display* in sync with ``fetch()`` on a selectable interval.

    Args:
        fetch: coroutine function returning an object with ``limit``,
            ``remaining`` and ``reset``; raises ``ClientFetchError`` on failure.
        display: receives ``render`` on success and ``show_error`` on failure.
        scheduler: timer source; ``AsyncioScheduler`` when omitted.
        discard_stale: when true, a cycle finishing after a newer cycle has
            already been applied is dropped instead of overwriting the
            display.  Off by default, so the last cycle to finish wins.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[Any]],
        display: LimitsDisplay,
        *,
        scheduler: Scheduler | None = None,
        discard_stale: bool = False,
    ) -> None:
        self._fetch = fetch
        self._display = display
        self._scheduler = scheduler or AsyncioScheduler()
        self.discard_stale = discard_stale

        self._state: RefreshState = IDLE
        self._timer: TimerHandle | None = None
        self._inflight: set[asyncio.Task] = set()
        self._issued = 0
        self._applied = 0

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def inflight(self) -> int:
        """Number of cycles started but not yet finished."""
        return len(self._inflight)

    # -- timer ownership -----------------------------------------------------

    def start(self, interval_ms: int) -> None:
        """Schedule cycles every *interval_ms*, replacing any current timer."""
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms!r}")
        self._cancel_timer()
        self._timer = self._scheduler.call_every(interval_ms / 1000, self._tick)
        self._state = Active(interval_ms)
        logger.debug("Refreshing every %d ms", interval_ms)

    def on_interval_changed(self, interval_ms: int) -> None:
        self.start(interval_ms)

    def stop(self) -> None:
        """Cancel the timer; in-flight cycles still complete."""
        if self._timer is None:
            return
        self._cancel_timer()
        self._state = IDLE
        logger.debug("Refresh stopped")

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    # -- cycles --------------------------------------------------------------

    def _tick(self) -> None:
        task = asyncio.get_running_loop().create_task(self.run_cycle())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def refresh_now(self) -> None:
        """Run one cycle immediately, outside the timer."""
        await self.run_cycle()

    async def run_cycle(self) -> None:
        self._issued += 1
        seq = self._issued
        try:
            snapshot = await self._fetch()
        except ClientFetchError as exc:
            logger.warning("Refresh failed: %s", exc.reason)
            self._apply(seq, self._display.show_error, exc.reason)
            return
        except Exception as exc:
            # A failing cycle never reaches the timer; it is shown like any other.
            logger.exception("Refresh cycle %d failed unexpectedly", seq)
            self._apply(seq, self._display.show_error, str(exc) or type(exc).__name__)
            return
        self._apply(seq, self._display.render, snapshot)

    def _apply(self, seq: int, show: Callable[[Any], None], value: Any) -> None:
        if self.discard_stale and seq < self._applied:
            logger.debug(
                "Dropping result of cycle %d; cycle %d already shown", seq, self._applied
            )
            return
        self._applied = seq
        show(value)

    async def drain(self) -> None:
        """Wait for every in-flight cycle to finish."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
