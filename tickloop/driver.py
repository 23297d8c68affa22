"""
External drivers for EventLoop.

The loop only advances when its host calls tick(). These helpers are such a
host: they call tick() repeatedly from the calling thread.
"""

from __future__ import annotations

import logging
import time

from tickloop.event_loop import EventLoop, TickReport

logger = logging.getLogger(__name__)


def run_ticks(loop: EventLoop, n: int, *, interval: float = 0.0) -> list[TickReport]:
    """Call loop.tick() n times, sleeping interval seconds between ticks."""
    reports: list[TickReport] = []
    for i in range(n):
        if i and interval > 0:
            time.sleep(interval)
        reports.append(loop.tick())
    return reports


def run_until_idle(
    loop: EventLoop,
    *,
    timeout: float | None = None,
    interval: float = 0.01,
) -> list[TickReport]:
    """
    Tick until nothing is pending, queued or running on a worker.

    Idle ticks (nothing popped) sleep interval seconds before the next one so
    an in-flight worker is polled rather than spun on. Raises TimeoutError if
    the loop is still busy after timeout seconds.
    """
    deadline = None if timeout is None else time.monotonic() + timeout
    reports: list[TickReport] = []
    while not loop.is_idle:
        if deadline is not None and time.monotonic() > deadline:
            raise TimeoutError(
                f"loop not idle after {timeout}s: {loop.pending_count} pending, "
                f"{loop.completed_count} completed, {loop.dispatcher.in_flight} in flight"
            )
        report = loop.tick()
        reports.append(report)
        if report.idle:
            time.sleep(interval)
    logger.debug("Loop idle after %d tick(s)", len(reports))
    return reports
