"""
Event types for the tick loop.

Events and completed results are immutable data carriers. The loop moves them
between queues; handlers compute values from payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def event_key(kind: str, sequence: int) -> str:
    """Build a unique event key of the form "<kind>-<sequence>"."""
    return f"{kind}-{sequence}"


@dataclass(frozen=True)
class Event:
    """One unit of work: handler key, opaque payload, execution mode."""

    key: str
    payload: Any = None
    is_async: bool = False


@dataclass(frozen=True)
class CompletedResult:
    """
    Value produced by a handler for one event.

    On failure value is None and error carries "<ExceptionType>: <message>".
    dispatched_on_tick is the tick that ran the originating event.
    """

    key: str
    value: str | None
    error: str | None = None
    dispatched_on_tick: int = 0

    @property
    def failed(self) -> bool:
        return self.error is not None
