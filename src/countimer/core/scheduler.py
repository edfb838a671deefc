"""Schedulers: run a callback after a delay on a single logical thread.

Every scheduler returns a :class:`ScheduledTask` from ``post_delayed``.  A
cancelled task is never run.  Tasks due at the same moment run in the order
they were posted.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class ScheduledTask:
    """Handle for a callback waiting in a scheduler."""

    def __init__(self, callback: Callback, due_ms: float) -> None:
        self.callback = callback
        self.due_ms = due_ms
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler(Protocol):
    def post_delayed(self, callback: Callback, delay_ms: int) -> ScheduledTask: ...


class _TaskQueue:
    """Priority queue of tasks ordered by due time, then by posting order."""

    def __init__(self) -> None:
        self._queue: list[tuple[float, int, ScheduledTask]] = []
        self._sequence = itertools.count()

    def _now_ms(self) -> float:
        raise NotImplementedError

    def post_delayed(self, callback: Callback, delay_ms: int) -> ScheduledTask:
        task = ScheduledTask(callback, self._now_ms() + max(delay_ms, 0))
        heapq.heappush(self._queue, (task.due_ms, next(self._sequence), task))
        return task

    @property
    def pending_count(self) -> int:
        """Number of tasks still waiting to run."""
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def _peek(self) -> ScheduledTask | None:
        """Return the next live task, discarding cancelled ones on the way."""
        while self._queue:
            task = self._queue[0][2]
            if not task.cancelled:
                return task
            heapq.heappop(self._queue)
        return None

    def _pop(self) -> ScheduledTask:
        return heapq.heappop(self._queue)[2]


class ManualScheduler(_TaskQueue):
    """A scheduler on a virtual clock that only moves when told to.

    Nothing runs until :meth:`advance` or :meth:`run_next` is called, which
    makes countdowns fully deterministic.
    """

    def __init__(self) -> None:
        super().__init__()
        self.now_ms: float = 0.0

    def _now_ms(self) -> float:
        return self.now_ms

    def advance(self, delta_ms: float) -> None:
        """Move the clock forward by *delta_ms*, running every task that falls due.

        Tasks posted by callbacks during the advance run too when they are due
        before the new time.
        """
        target = self.now_ms + delta_ms
        while True:
            task = self._peek()
            if task is None or task.due_ms > target:
                break
            self._pop()
            self.now_ms = task.due_ms
            task.callback()
        self.now_ms = target

    def run_next(self) -> bool:
        """Jump to the next live task and run it.  Return False if none is left."""
        task = self._peek()
        if task is None:
            return False
        self._pop()
        self.now_ms = max(self.now_ms, task.due_ms)
        task.callback()
        return True


class EventLoopScheduler(_TaskQueue):
    """A blocking real-time loop driven by ``time.monotonic()``.

    :meth:`run` owns the calling thread until the queue drains or
    :meth:`stop` is called from a callback.
    """

    def __init__(self) -> None:
        super().__init__()
        self._stopped = False

    def _now_ms(self) -> float:
        return time.monotonic() * 1000.0

    def run(self) -> None:
        self._stopped = False
        while not self._stopped:
            task = self._peek()
            if task is None:
                break
            wait_ms = task.due_ms - self._now_ms()
            if wait_ms > 0:
                time.sleep(wait_ms / 1000.0)
                continue
            self._pop()
            task.callback()
        logger.debug("event loop finished with %d pending task(s)", self.pending_count)

    def stop(self) -> None:
        self._stopped = True


class _AsyncioTask(ScheduledTask):
    def __init__(self, callback: Callback, due_ms: float, handle: asyncio.TimerHandle) -> None:
        super().__init__(callback, due_ms)
        self._handle = handle

    def cancel(self) -> None:
        super().cancel()
        self._handle.cancel()


class AsyncioScheduler:
    """Posts callbacks onto an asyncio event loop with ``call_later``."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop if loop is not None else asyncio.get_running_loop()

    def post_delayed(self, callback: Callback, delay_ms: int) -> ScheduledTask:
        delay_s = max(delay_ms, 0) / 1000.0
        handle = self._loop.call_later(delay_s, callback)
        return _AsyncioTask(callback, self._loop.time() * 1000.0 + delay_ms, handle)
