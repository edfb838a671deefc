"""Timer core: a countdown state machine that writes ticks to a text surface."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from countimer.core.scheduler import EventLoopScheduler, ScheduledTask, Scheduler
from countimer.core.surface import TextSurface

logger = logging.getLogger(__name__)

DEFAULT_TOTAL_COUNT = 60
DEFAULT_INTERVAL_MS = 1000


class TimerState(Enum):
    """Possible states of the countdown.

    A countdown that reaches zero on its own ends up CANCELLED, the same as
    one that was cancelled; only ``CountObserver.on_end`` tells them apart.
    """

    CANCELLED = "cancelled"
    PAUSED = "paused"
    RUNNING = "running"


class InvalidArgumentError(ValueError):
    """Raised when a required surface is missing."""


class CountObserver:
    """Receives count notifications.  Override only the hooks you need."""

    def on_start(self, surface: Any, count: int) -> None:
        """Called once per ``start()``, never on ``restart()``."""

    def on_count_down(self, surface: Any, count: int) -> None:
        """Called after each tick that leaves the count above zero."""

    def on_end(self, surface: Any, count: int) -> None:
        """Called when the count reaches zero naturally; *count* is always 0."""


class StateObserver:
    """Receives lifecycle notifications."""

    def on_state_change(self, surface: Any, state: TimerState) -> None:
        """Called with the new state after every transition."""


def _require_surface(surface: TextSurface | None) -> TextSurface:
    if surface is None:
        raise InvalidArgumentError("surface can not be None")
    return surface


class CountdownTimer:
    """Counts down from ``total_count`` to zero, one tick every ``interval_ms``.

    Each tick writes the remaining count to the surface.  The text the surface
    showed when ``start()`` was called is put back on cancel, including the
    automatic cancel when the count runs out.

    Every operation is a silent no-op when the current state does not allow
    it.  All calls, and all tick callbacks, must happen on the scheduler's
    thread.
    """

    def __init__(
        self,
        surface: TextSurface,
        total_count: int | None = None,
        interval_ms: int | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._surface: TextSurface = _require_surface(surface)
        self._total_count: int = DEFAULT_TOTAL_COUNT
        self._interval_ms: int = DEFAULT_INTERVAL_MS
        if total_count is not None:
            self.set_total_count(total_count)
        if interval_ms is not None:
            self.set_interval(interval_ms)
        self._remaining: int = self._total_count
        self._state: TimerState = TimerState.CANCELLED
        self._saved_text: str | None = None
        self._count_observer: CountObserver | None = None
        self._state_observer: StateObserver | None = None
        self._scheduler: Scheduler = scheduler if scheduler is not None else EventLoopScheduler()
        self._pending: ScheduledTask | None = None

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Begin a fresh countdown.  Only valid from CANCELLED."""
        if self._state != TimerState.CANCELLED:
            return
        self._saved_text = self._surface.get_text()
        self._remaining = self._total_count
        logger.debug("starting countdown from %d every %d ms", self._remaining, self._interval_ms)
        if self._count_observer is not None:
            self._count_observer.on_start(self._surface, self._remaining)
        self._begin_running()

    def restart(self) -> None:
        """Resume a paused countdown from where it stopped."""
        if self._state != TimerState.PAUSED:
            return
        logger.debug("resuming countdown at %d", self._remaining)
        self._begin_running()

    def pause(self) -> None:
        """Freeze the countdown.

        The pending tick is left in the scheduler and does nothing when it
        arrives.
        """
        if self._state != TimerState.RUNNING:
            return
        logger.debug("pausing countdown at %d", self._remaining)
        self._set_state(TimerState.PAUSED)

    def cancel(self) -> None:
        """Stop the countdown, restore the surface text and reset the count."""
        if self._state == TimerState.CANCELLED:
            return
        logger.debug("cancelling countdown at %d", self._remaining)
        self._set_state(TimerState.CANCELLED)
        self._surface.set_text(self._saved_text)
        self._remaining = self._total_count

    # -- configuration -------------------------------------------------------

    def set_total_count(self, total_count: int) -> None:
        """Set the count used by the next ``start()``.  Ignored unless > 0."""
        if total_count > 0:
            self._total_count = total_count

    def set_interval(self, interval_ms: int) -> None:
        """Set the delay before each subsequent tick.  Ignored unless > 0."""
        if interval_ms > 0:
            self._interval_ms = interval_ms

    def set_view(self, surface: TextSurface) -> None:
        """Send future writes to *surface*.  The saved text is kept as is."""
        self._surface = _require_surface(surface)

    def set_on_count_down_listener(self, observer: CountObserver | None) -> None:
        self._count_observer = observer

    def set_on_state_change_listener(self, observer: StateObserver | None) -> None:
        self._state_observer = observer

    # -- accessors -----------------------------------------------------------

    def get_view(self) -> TextSurface:
        return self._surface

    def get_state(self) -> TimerState:
        return self._state

    def get_remaining(self) -> int:
        return self._remaining

    def get_total_count(self) -> int:
        return self._total_count

    def get_interval(self) -> int:
        return self._interval_ms

    def get_saved_text(self) -> str | None:
        """Return the text captured by the most recent ``start()``."""
        return self._saved_text

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    # -- private helpers -----------------------------------------------------

    def _begin_running(self) -> None:
        self._set_state(TimerState.RUNNING)
        self._schedule_tick()

    def _set_state(self, state: TimerState) -> None:
        self._state = state
        if self._state_observer is not None:
            self._state_observer.on_state_change(self._surface, state)

    def _schedule_tick(self) -> None:
        # At most one tick is ever pending.
        if self._pending is not None:
            self._pending.cancel()
        self._pending = self._scheduler.post_delayed(self._tick, self._interval_ms)

    def _tick(self) -> None:
        self._pending = None
        if self._state != TimerState.RUNNING:
            logger.debug("ignoring stale tick in %s state", self._state.value)
            return

        self._remaining -= 1
        if self._remaining > 0:
            logger.debug("tick: %d remaining", self._remaining)
            self._surface.set_text(str(self._remaining))
            if self._count_observer is not None:
                self._count_observer.on_count_down(self._surface, self._remaining)
            # An observer may have paused or cancelled us.
            if self._state == TimerState.RUNNING:
                self._schedule_tick()
            return

        logger.debug("countdown reached zero")
        self.cancel()
        if self._count_observer is not None:
            self._count_observer.on_end(self._surface, 0)
