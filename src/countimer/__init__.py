"""countimer: a countdown timer that ticks a text surface down to zero."""

from countimer.core.scheduler import (
    AsyncioScheduler,
    EventLoopScheduler,
    ManualScheduler,
    ScheduledTask,
    Scheduler,
)
from countimer.core.surface import EchoSurface, TextBuffer, TextSurface
from countimer.core.timer import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_TOTAL_COUNT,
    CountdownTimer,
    CountObserver,
    InvalidArgumentError,
    StateObserver,
    TimerState,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncioScheduler",
    "CountObserver",
    "CountdownTimer",
    "DEFAULT_INTERVAL_MS",
    "DEFAULT_TOTAL_COUNT",
    "EchoSurface",
    "EventLoopScheduler",
    "InvalidArgumentError",
    "ManualScheduler",
    "ScheduledTask",
    "Scheduler",
    "StateObserver",
    "TextBuffer",
    "TextSurface",
    "TimerState",
    "__version__",
]
