"""
Loop configuration.

Values come from constructor arguments or from the environment
(TICKLOOP_MAX_WORKERS, TICKLOOP_BLOCKING_WARN_MS). Unset or empty means
"not configured".
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

# Positive integer: run async handlers on a bounded thread pool of this size.
# Unset: one thread per asynchronous event.
MAX_WORKERS_ENV = "TICKLOOP_MAX_WORKERS"
# Milliseconds: log a warning when a synchronous handler blocks longer than this.
BLOCKING_WARN_MS_ENV = "TICKLOOP_BLOCKING_WARN_MS"


@dataclass(frozen=True)
class LoopConfig:
    """Settings for EventLoop. Defaults reproduce thread-per-task with no warnings."""

    max_workers: int | None = None
    blocking_warn_ms: float | None = None

    def __post_init__(self) -> None:
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be a positive integer, got {self.max_workers}")
        if self.blocking_warn_ms is not None and self.blocking_warn_ms < 0:
            raise ValueError(f"blocking_warn_ms must be >= 0, got {self.blocking_warn_ms}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LoopConfig:
        """Build a config from environment variables (os.environ by default)."""
        env = os.environ if environ is None else environ
        return cls(
            max_workers=_parse(env, MAX_WORKERS_ENV, int),
            blocking_warn_ms=_parse(env, BLOCKING_WARN_MS_ENV, float),
        )


def _parse(env: Mapping[str, str], name: str, convert: type) -> int | float | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return convert(raw)
    except ValueError:
        raise ValueError(f"{name} must be a valid {convert.__name__}, got {raw!r}") from None
