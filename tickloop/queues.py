"""
Unbounded FIFO queues for pending events and completed results.

push never blocks; pop returns None instead of waiting. Each operation is
atomic on its own; no lock is held across operations.
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable
from typing import Generic, TypeVar

from tickloop.events import CompletedResult, Event

T = TypeVar("T")


class FifoQueue(Generic[T]):
    """Thread-safe unbounded FIFO with a non-blocking pop."""

    def __init__(self) -> None:
        self._items: deque[T] = deque()
        self._lock = threading.Lock()

    def push(self, item: T) -> None:
        """Append item to the tail."""
        with self._lock:
            self._items.append(item)

    def pop(self, where: Callable[[T], bool] | None = None) -> T | None:
        """
        Remove and return the head, or None if the queue is empty.

        With where given, the head is only removed if where(head) is true;
        later items are never considered ahead of it.
        """
        with self._lock:
            if not self._items:
                return None
            if where is not None and not where(self._items[0]):
                return None
            return self._items.popleft()

    def empty(self) -> bool:
        with self._lock:
            return not self._items

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class PendingQueue(FifoQueue[Event]):
    """Dispatched events not yet run by a tick."""


class CompletedQueue(FifoQueue[CompletedResult]):
    """Results from asynchronous handlers awaiting output."""
