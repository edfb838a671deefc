"""Tests for the schedulers that drive countdown ticks."""

import asyncio
from unittest.mock import patch

import pytest

from countimer.core.scheduler import AsyncioScheduler, EventLoopScheduler, ManualScheduler
from countimer.core.surface import TextBuffer
from countimer.core.timer import CountdownTimer, CountObserver, TimerState

# ---------------------------------------------------------------------------
# ManualScheduler
# ---------------------------------------------------------------------------


class TestManualScheduler:
    """The manual scheduler only runs tasks when its clock is moved."""

    def test_nothing_runs_without_advance(self) -> None:
        scheduler = ManualScheduler()
        ran: list[str] = []
        scheduler.post_delayed(lambda: ran.append("a"), 0)
        assert ran == []
        assert scheduler.pending_count == 1

    def test_advance_runs_due_tasks_in_due_order(self) -> None:
        scheduler = ManualScheduler()
        ran: list[str] = []
        scheduler.post_delayed(lambda: ran.append("late"), 300)
        scheduler.post_delayed(lambda: ran.append("early"), 100)
        scheduler.post_delayed(lambda: ran.append("never"), 301)
        scheduler.advance(300)
        assert ran == ["early", "late"]
        assert scheduler.now_ms == 300
        assert scheduler.pending_count == 1

    def test_equal_due_times_run_in_posting_order(self) -> None:
        scheduler = ManualScheduler()
        ran: list[int] = []
        for n in range(5):
            scheduler.post_delayed(lambda n=n: ran.append(n), 50)
        scheduler.advance(50)
        assert ran == [0, 1, 2, 3, 4]

    def test_cancelled_task_never_runs(self) -> None:
        scheduler = ManualScheduler()
        ran: list[str] = []
        task = scheduler.post_delayed(lambda: ran.append("x"), 10)
        task.cancel()
        assert scheduler.pending_count == 0
        scheduler.advance(100)
        assert ran == []

    def test_tasks_posted_during_advance_run_when_due(self) -> None:
        scheduler = ManualScheduler()
        seen: list[float] = []

        def again() -> None:
            seen.append(scheduler.now_ms)
            scheduler.post_delayed(again, 100)

        scheduler.post_delayed(again, 100)
        scheduler.advance(350)
        assert seen == [100, 200, 300]
        assert scheduler.pending_count == 1

    def test_run_next_jumps_the_clock(self) -> None:
        scheduler = ManualScheduler()
        ran: list[str] = []
        scheduler.post_delayed(lambda: ran.append("a"), 750)
        assert scheduler.run_next() is True
        assert ran == ["a"]
        assert scheduler.now_ms == 750

    def test_run_next_skips_cancelled(self) -> None:
        scheduler = ManualScheduler()
        ran: list[str] = []
        scheduler.post_delayed(lambda: ran.append("a"), 10).cancel()
        scheduler.post_delayed(lambda: ran.append("b"), 20)
        assert scheduler.run_next() is True
        assert ran == ["b"]

    def test_run_next_on_empty_queue(self) -> None:
        assert ManualScheduler().run_next() is False

    def test_negative_delay_is_treated_as_zero(self) -> None:
        scheduler = ManualScheduler()
        task = scheduler.post_delayed(lambda: None, -5)
        assert task.due_ms == 0


# ---------------------------------------------------------------------------
# EventLoopScheduler
# ---------------------------------------------------------------------------


class TestEventLoopScheduler:
    """The event loop sleeps until each task is due, then runs it."""

    def test_run_drains_queue_in_order(self) -> None:
        scheduler = EventLoopScheduler()
        ran: list[str] = []
        scheduler.post_delayed(lambda: ran.append("b"), 2)
        scheduler.post_delayed(lambda: ran.append("a"), 0)
        scheduler.run()
        assert ran == ["a", "b"]
        assert scheduler.pending_count == 0

    def test_run_returns_when_empty(self) -> None:
        EventLoopScheduler().run()

    def test_stop_from_callback(self) -> None:
        scheduler = EventLoopScheduler()
        ran: list[str] = []
        scheduler.post_delayed(scheduler.stop, 0)
        scheduler.post_delayed(lambda: ran.append("later"), 1)
        scheduler.run()
        assert ran == []
        assert scheduler.pending_count == 1

    def test_cancelled_task_is_skipped(self) -> None:
        scheduler = EventLoopScheduler()
        ran: list[str] = []
        scheduler.post_delayed(lambda: ran.append("x"), 1).cancel()
        scheduler.run()
        assert ran == []

    def test_sleeps_until_due(self) -> None:
        with patch("countimer.core.scheduler.time") as mock_time:
            mock_time.monotonic.side_effect = [0.0, 0.0, 1.0]
            scheduler = EventLoopScheduler()
            ran: list[str] = []
            scheduler.post_delayed(lambda: ran.append("x"), 10)
            scheduler.run()
            mock_time.sleep.assert_called_once_with(pytest.approx(0.01))
            assert ran == ["x"]

    def test_drives_a_countdown(self) -> None:
        scheduler = EventLoopScheduler()
        surface = TextBuffer("Send")
        timer = CountdownTimer(surface, 3, 1, scheduler)
        timer.start()
        scheduler.run()
        assert timer.get_state() == TimerState.CANCELLED
        assert surface.get_text() == "Send"


# ---------------------------------------------------------------------------
# AsyncioScheduler
# ---------------------------------------------------------------------------


class TestAsyncioScheduler:
    """The asyncio scheduler defers to ``loop.call_later``."""

    def test_requires_a_running_loop_by_default(self) -> None:
        with pytest.raises(RuntimeError):
            AsyncioScheduler()

    def test_runs_and_cancels(self) -> None:
        ran: list[str] = []

        async def main() -> None:
            scheduler = AsyncioScheduler()
            scheduler.post_delayed(lambda: ran.append("b"), 5)
            scheduler.post_delayed(lambda: ran.append("a"), 0)
            scheduler.post_delayed(lambda: ran.append("x"), 1).cancel()
            await asyncio.sleep(0.05)

        asyncio.run(main())
        assert ran == ["a", "b"]

    def test_drives_a_countdown(self) -> None:
        counts: list[int] = []

        class Recorder(CountObserver):
            def __init__(self, done: asyncio.Event) -> None:
                self.done = done

            def on_count_down(self, surface: TextBuffer, count: int) -> None:
                counts.append(count)

            def on_end(self, surface: TextBuffer, count: int) -> None:
                counts.append(count)
                self.done.set()

        async def main() -> str:
            done = asyncio.Event()
            surface = TextBuffer("Send")
            timer = CountdownTimer(surface, 4, 1, AsyncioScheduler())
            timer.set_on_count_down_listener(Recorder(done))
            timer.start()
            await asyncio.wait_for(done.wait(), timeout=5)
            return surface.get_text()

        assert asyncio.run(main()) == "Send"
        assert counts == [3, 2, 1, 0]
