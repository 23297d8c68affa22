"""
HandlerRegistry: event key -> handler.

Last write wins. Shared read-only with asynchronous workers, so every
operation is guarded by a lock.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Handler = Callable[[Any], str]


class HandlerRegistry:
    """Mapping from event key to handler. Entries are never removed."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}
        self._lock = threading.Lock()

    def register(self, key: str, handler: Handler) -> HandlerRegistry:
        """Store handler under key, replacing any previous one. Returns self for chaining."""
        with self._lock:
            replaced = key in self._handlers
            self._handlers[key] = handler
        logger.debug(
            "%s handler for %s: %s",
            "Replaced" if replaced else "Registered",
            key,
            getattr(handler, "__name__", str(handler)),
        )
        return self

    def lookup(self, key: str) -> Handler | None:
        """Handler registered under key, or None."""
        with self._lock:
            return self._handlers.get(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._handlers

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)
