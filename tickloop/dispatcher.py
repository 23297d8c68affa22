"""
Dispatcher: run one event end-to-end and measure how long the caller was blocked.

Synchronous events run on the calling thread and produce a result immediately.
Asynchronous events are handed to a worker (a new thread, or an executor when
one is configured); the worker pushes its result onto the completed queue and
never reports back to the caller.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Any

from tickloop.events import CompletedResult, Event
from tickloop.queues import CompletedQueue
from tickloop.registry import Handler, HandlerRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Handled:
    """
    A handler was found and invoked (sync) or scheduled (async).

    blocked_ms covers only the time the calling thread was occupied.
    result is set for the synchronous path and None for the asynchronous one.
    """

    key: str
    is_async: bool
    blocked_ms: float
    result: CompletedResult | None = None


@dataclass(frozen=True)
class NoHandler:
    """No handler registered for the event key; the event is dropped."""

    key: str


ExecutionOutcome = Handled | NoHandler


def _describe(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


def invoke(key: str, handler: Handler, payload: Any, *, tick: int = 0) -> CompletedResult:
    """Call handler with payload; a raised exception becomes a failed result."""
    try:
        value = handler(payload)
    except Exception as e:  # noqa: BLE001
        logger.exception("Handler for %s failed", key)
        return CompletedResult(key=key, value=None, error=_describe(e), dispatched_on_tick=tick)
    return CompletedResult(key=key, value=value, dispatched_on_tick=tick)


class Dispatcher:
    """
    Executes single events for the loop.

    Without an executor every asynchronous event gets its own daemon thread
    and the number of live workers is unbounded. Passing a
    concurrent.futures.Executor bounds it; the loop thread still never waits.
    """

    def __init__(
        self,
        executor: Executor | None = None,
        *,
        clock: Callable[[], float] = time.perf_counter,
        blocking_warn_ms: float | None = None,
    ) -> None:
        self._executor = executor
        self._clock = clock
        self.blocking_warn_ms = blocking_warn_ms
        self._in_flight = 0
        self._in_flight_lock = threading.Lock()

    @property
    def in_flight(self) -> int:
        """Asynchronous workers scheduled but not yet finished."""
        with self._in_flight_lock:
            return self._in_flight

    def run_one(
        self,
        event: Event,
        registry: HandlerRegistry,
        completed: CompletedQueue,
        *,
        tick: int = 0,
    ) -> ExecutionOutcome:
        """
        Execute one event.

        Parameters
        ----------
        event : Event
            The event popped from the pending queue.
        registry : HandlerRegistry
            Handler lookup; shared with the worker for the async path.
        completed : CompletedQueue
            Where the async worker delivers its result.
        tick : int
            Sequence number of the calling tick, stamped on results.

        Returns
        -------
        Handled or NoHandler
        """
        handler = registry.lookup(event.key)
        if handler is None:
            logger.warning("No handler registered for %s", event.key)
            return NoHandler(key=event.key)

        start = self._clock()
        if event.is_async:
            self._schedule(event, registry, completed, tick)
            result = None
        else:
            result = invoke(event.key, handler, event.payload, tick=tick)
        blocked_ms = max(0.0, (self._clock() - start) * 1000.0)

        if (
            not event.is_async
            and self.blocking_warn_ms is not None
            and blocked_ms > self.blocking_warn_ms
        ):
            logger.warning(
                "Synchronous handler for %s blocked the loop for %.1f ms (threshold %.1f ms)",
                event.key,
                blocked_ms,
                self.blocking_warn_ms,
            )
        return Handled(key=event.key, is_async=event.is_async, blocked_ms=blocked_ms, result=result)

    def _schedule(
        self,
        event: Event,
        registry: HandlerRegistry,
        completed: CompletedQueue,
        tick: int,
    ) -> None:
        """Hand the event to a worker without waiting for it."""
        with self._in_flight_lock:
            self._in_flight += 1

        def work() -> None:
            try:
                handler = registry.lookup(event.key)
                if handler is None:
                    result = CompletedResult(
                        key=event.key,
                        value=None,
                        error=f"LookupError: no handler for {event.key}",
                        dispatched_on_tick=tick,
                    )
                else:
                    result = invoke(event.key, handler, event.payload, tick=tick)
                completed.push(result)
            finally:
                with self._in_flight_lock:
                    self._in_flight -= 1

        try:
            if self._executor is not None:
                self._executor.submit(work)
            else:
                threading.Thread(target=work, name=f"tickloop-{event.key}", daemon=True).start()
        except Exception:
            with self._in_flight_lock:
                self._in_flight -= 1
            raise
        logger.debug("Scheduled %s on a worker", event.key)
