"""
BlockingRecorder: a LoopReporter that records what each event cost the loop.

One sample per handled event, taken when its output is surfaced: how long the
loop thread was blocked, and how long it took from receipt to output.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime

import pandas as pd

from tickloop.events import CompletedResult, Event

logger = logging.getLogger(__name__)

COLUMNS = ("key", "is_async", "blocked_ms", "turnaround_ms", "failed", "timestamp")


@dataclass(frozen=True)
class BlockingSample:
    """Cost of one handled event."""

    key: str
    is_async: bool
    blocked_ms: float
    turnaround_ms: float
    failed: bool
    timestamp: datetime


@dataclass
class _Open:
    is_async: bool
    received_at: float
    blocked_ms: float | None = None


@dataclass
class BlockingRecorder:
    """
    Attach to EventLoop(reporters=[...]) alongside (or instead of) ConsoleReporter.

    Called from the loop thread only.
    """

    clock: Callable[[], float] = time.perf_counter
    samples: list[BlockingSample] = field(default_factory=list)
    missing_handlers: list[str] = field(default_factory=list)
    _open: dict[str, deque[_Open]] = field(default_factory=dict, repr=False)
    _sync_key: str | None = field(default=None, repr=False)

    def on_received(self, event: Event) -> None:
        self._sync_key = None
        # Keys may repeat; receipts for one key are matched to outputs in order.
        self._open.setdefault(event.key, deque()).append(
            _Open(is_async=event.is_async, received_at=self.clock())
        )

    def on_no_handler(self, event: Event) -> None:
        self._take(event.key, newest=True)
        self.missing_handlers.append(event.key)

    def on_blocked(self, event: Event, blocked_ms: float) -> None:
        entries = self._open.get(event.key)
        if entries:
            entries[-1].blocked_ms = blocked_ms
        if not event.is_async:
            # A synchronous result is reported right after this, ahead of any queued one.
            self._sync_key = event.key

    def on_output(self, result: CompletedResult) -> None:
        newest = result.key == self._sync_key
        self._sync_key = None
        entry = self._take(result.key, newest=newest)
        if entry is None or entry.blocked_ms is None:
            logger.debug("No receipt recorded for %s; output not sampled", result.key)
            return
        self.samples.append(
            BlockingSample(
                key=result.key,
                is_async=entry.is_async,
                blocked_ms=entry.blocked_ms,
                turnaround_ms=max(0.0, (self.clock() - entry.received_at) * 1000.0),
                failed=result.failed,
                timestamp=datetime.now(),
            )
        )

    def _take(self, key: str, *, newest: bool = False) -> _Open | None:
        entries = self._open.get(key)
        if not entries:
            return None
        entry = entries.pop() if newest else entries.popleft()
        if not entries:
            del self._open[key]
        return entry

    @property
    def outstanding(self) -> list[str]:
        """Keys received and handled but whose output has not been surfaced yet (repeated per event)."""
        return [key for key, entries in self._open.items() for _ in entries]

    def to_dataframe(self) -> pd.DataFrame:
        """Samples as a DataFrame, one row per event, in output order."""
        if not self.samples:
            return pd.DataFrame(columns=list(COLUMNS))
        return pd.DataFrame([asdict(s) for s in self.samples], columns=list(COLUMNS))
