"""
Event loop: single-threaded, bounded work per tick.

Each tick runs at most one pending event and surfaces at most one completed
result, in that order. The loop never drives itself; the host program calls
tick() repeatedly.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from tickloop.config import LoopConfig
from tickloop.dispatcher import Dispatcher, ExecutionOutcome, Handled, NoHandler
from tickloop.events import CompletedResult, Event
from tickloop.queues import CompletedQueue, PendingQueue
from tickloop.registry import Handler, HandlerRegistry
from tickloop.reporting import ConsoleReporter, LoopReporter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickReport:
    """
    What one tick did.

    received/outcome describe the pending check, completed the result check;
    each is None when that step found nothing.
    """

    tick: int
    received: Event | None = None
    outcome: ExecutionOutcome | None = None
    completed: CompletedResult | None = None

    @property
    def outputs(self) -> list[CompletedResult]:
        """Results surfaced by this tick: the synchronous one first, then the completed one."""
        out: list[CompletedResult] = []
        if isinstance(self.outcome, Handled) and self.outcome.result is not None:
            out.append(self.outcome.result)
        if self.completed is not None:
            out.append(self.completed)
        return out

    @property
    def idle(self) -> bool:
        return self.received is None and self.completed is None


class EventLoop:
    """
    Owns the handler registry and both queues.

    Only one thread may call tick(). Asynchronous workers share the registry
    (lookup only) and the completed queue (push only).
    """

    def __init__(
        self,
        config: LoopConfig | None = None,
        *,
        reporters: Sequence[LoopReporter] | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        """
        An explicit dispatcher keeps its own worker and warning settings;
        config.max_workers and config.blocking_warn_ms then have no effect.
        """
        self.config = config or LoopConfig()
        self.reporters: list[LoopReporter] = (
            [ConsoleReporter()] if reporters is None else list(reporters)
        )
        self._registry = HandlerRegistry()
        self._pending = PendingQueue()
        self._completed = CompletedQueue()
        self._executor: ThreadPoolExecutor | None = None
        if dispatcher is None:
            if self.config.max_workers is not None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.max_workers,
                    thread_name_prefix="tickloop",
                )
            dispatcher = Dispatcher(self._executor, blocking_warn_ms=self.config.blocking_warn_ms)
        elif self.config.max_workers is not None or self.config.blocking_warn_ms is not None:
            logger.warning(
                "Explicit dispatcher given; ignoring config max_workers=%s blocking_warn_ms=%s",
                self.config.max_workers,
                self.config.blocking_warn_ms,
            )
        self.dispatcher = dispatcher
        self._tick = 0

    # --- Caller API ---

    def on(self, key: str, handler: Handler) -> EventLoop:
        """Register (or replace) the handler for key. Chainable."""
        self._registry.register(key, handler)
        return self

    def dispatch(self, event: Event) -> None:
        """Enqueue an event for a later tick. Never blocks."""
        self._pending.push(event)
        logger.debug("Dispatched %s (async=%s)", event.key, event.is_async)

    def tick(self) -> TickReport:
        """
        Advance the loop by one bounded step.

        1. Pending check: pop one event, report it, run it via the dispatcher,
           report the blocking duration (or the missing handler). A synchronous
           result is reported immediately.
        2. Result check: pop one asynchronous result dispatched on an earlier
           tick and report it.
        Neither step waits on an empty queue.

        Reporter exceptions propagate to the caller. An event already popped
        in this tick is then lost: it is neither run nor put back.
        """
        self._tick += 1
        current = self._tick
        outcome: ExecutionOutcome | None = None

        event = self._pending.pop()
        if event is not None:
            self._notify("on_received", event)
            outcome = self.dispatcher.run_one(event, self._registry, self._completed, tick=current)
            if isinstance(outcome, NoHandler):
                self._notify("on_no_handler", event)
            else:
                self._notify("on_blocked", event, outcome.blocked_ms)
                if outcome.result is not None:
                    self._notify("on_output", outcome.result)

        # Results from workers started by this tick stay queued until the next one.
        completed = self._completed.pop(where=lambda r: r.dispatched_on_tick < current)
        if completed is not None:
            self._notify("on_output", completed)

        return TickReport(tick=current, received=event, outcome=outcome, completed=completed)

    # --- State ---

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def completed_count(self) -> int:
        return len(self._completed)

    @property
    def is_idle(self) -> bool:
        """True when nothing is queued and no asynchronous worker is running."""
        # Workers push before leaving in_flight, so check in_flight first.
        return self.dispatcher.in_flight == 0 and self._pending.empty() and self._completed.empty()

    def close(self) -> None:
        """Shut down the worker pool created from config, waiting for running handlers."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> EventLoop:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _notify(self, method: str, *args: object) -> None:
        for reporter in self.reporters:
            getattr(reporter, method)(*args)
