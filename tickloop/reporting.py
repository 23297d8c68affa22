"""
Reporting: the console-style side effects of a tick.

The loop calls every reporter it was given; ConsoleReporter prints one line
per callback. Other reporters (e.g. profiling.BlockingRecorder) use the same
protocol to collect data instead of printing.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO

from tickloop.events import CompletedResult, Event


class LoopReporter(Protocol):
    """Callbacks fired by EventLoop.tick, in tick order."""

    def on_received(self, event: Event) -> None:
        """An event was popped from the pending queue."""
        ...

    def on_no_handler(self, event: Event) -> None:
        """The popped event had no registered handler and was dropped."""
        ...

    def on_blocked(self, event: Event, blocked_ms: float) -> None:
        """The loop thread was occupied for blocked_ms running or scheduling event."""
        ...

    def on_output(self, result: CompletedResult) -> None:
        """A result (sync immediately, async on a later tick) is surfaced."""
        ...


class ConsoleReporter:
    """Print tick activity to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def _print(self, line: str) -> None:
        print(line, file=sys.stdout if self._stream is None else self._stream)

    def on_received(self, event: Event) -> None:
        self._print(f"received event: {event.key}")

    def on_no_handler(self, event: Event) -> None:
        self._print(f"no handler for {event.key}")

    def on_blocked(self, event: Event, blocked_ms: float) -> None:
        self._print(f"event loop was blocked for {blocked_ms:.2f} ms due to this operation")

    def on_output(self, result: CompletedResult) -> None:
        if result.failed:
            self._print(f"handler failed for {result.key}: {result.error}")
        else:
            self._print(f"output for {result.key}: {result.value}")
