"""
tickloop: a minimal single-threaded dispatch loop.

Handlers are bound to event keys; each tick runs at most one pending event,
either on the loop thread (blocking it) or on a worker, and surfaces at most
one completed result.
"""

__version__ = "0.1.0"

from tickloop.config import LoopConfig
from tickloop.dispatcher import Dispatcher, ExecutionOutcome, Handled, NoHandler
from tickloop.event_loop import EventLoop, TickReport
from tickloop.events import CompletedResult, Event, event_key
from tickloop.queues import CompletedQueue, FifoQueue, PendingQueue
from tickloop.registry import Handler, HandlerRegistry
from tickloop.reporting import ConsoleReporter, LoopReporter

__all__ = [
    "CompletedQueue",
    "CompletedResult",
    "ConsoleReporter",
    "Dispatcher",
    "Event",
    "EventLoop",
    "ExecutionOutcome",
    "FifoQueue",
    "Handled",
    "Handler",
    "HandlerRegistry",
    "LoopConfig",
    "LoopReporter",
    "NoHandler",
    "PendingQueue",
    "TickReport",
    "event_key",
]
