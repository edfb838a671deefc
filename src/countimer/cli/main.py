"""CLI entry point for countimer.

Uses Click to expose the ``countimer`` command group.  ``run`` counts down on
an :class:`~countimer.core.surface.EchoSurface` driven by an
:class:`~countimer.core.scheduler.EventLoopScheduler`.
"""

from __future__ import annotations

import logging
import sys

import click

import countimer
from countimer.core.scheduler import EventLoopScheduler
from countimer.core.surface import EchoSurface
from countimer.core.timer import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_TOTAL_COUNT,
    CountdownTimer,
    CountObserver,
)

_EXIT_INTERRUPTED = 130


class _EchoObserver(CountObserver):
    """Announces the start and natural end of a countdown."""

    def on_start(self, surface: EchoSurface, count: int) -> None:
        click.echo(f"Countdown started: {count}")

    def on_end(self, surface: EchoSurface, count: int) -> None:
        click.echo("Countdown finished")


@click.group()
@click.version_option(version=countimer.__version__, prog_name="countimer")
def cli() -> None:
    """countimer: count a line of text down to zero."""


@cli.command()
@click.option(
    "--count",
    "total_count",
    type=click.IntRange(min=1),
    default=DEFAULT_TOTAL_COUNT,
    show_default=True,
    envvar="COUNTIMER_COUNT",
    help="Number of ticks to count down from.",
)
@click.option(
    "--interval",
    "interval_ms",
    type=click.IntRange(min=1),
    default=DEFAULT_INTERVAL_MS,
    show_default=True,
    envvar="COUNTIMER_INTERVAL",
    help="Milliseconds between ticks.",
)
@click.option(
    "--text",
    default="",
    envvar="COUNTIMER_TEXT",
    help="Text shown before the countdown and restored after it.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log every transition and tick.")
def run(total_count: int, interval_ms: int, text: str, verbose: bool) -> None:
    """Count down from --count, one tick every --interval milliseconds."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    scheduler = EventLoopScheduler()
    timer = CountdownTimer(EchoSurface(text), total_count, interval_ms, scheduler)
    timer.set_on_count_down_listener(_EchoObserver())
    timer.start()
    try:
        scheduler.run()
    except KeyboardInterrupt:
        timer.cancel()
        click.echo("Countdown cancelled", err=True)
        sys.exit(_EXIT_INTERRUPTED)
