"""
Blocking metrics: how much loop time handlers consumed.

Percentiles use linear interpolation (numpy default).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from profiling.recorder import BlockingSample


@dataclass
class BlockingMetrics:
    """Summary of blocking cost over a set of samples. Times in milliseconds."""

    events: int
    sync_events: int
    async_events: int
    failures: int
    missing_handlers: int
    total_blocked_ms: float
    mean_blocked_ms: float
    p95_blocked_ms: float
    max_blocked_ms: float
    mean_sync_blocked_ms: float
    mean_async_blocked_ms: float
    mean_turnaround_ms: float


def _mean(values: np.ndarray) -> float:
    return float(np.mean(values)) if values.size else 0.0


def compute_metrics(
    samples: Sequence[BlockingSample],
    *,
    missing_handlers: int = 0,
) -> BlockingMetrics:
    """
    Compute blocking metrics from recorded samples.

    Parameters
    ----------
    samples : sequence of BlockingSample
        Typically BlockingRecorder.samples.
    missing_handlers : int
        Number of events dropped for lack of a handler (not in samples).

    Returns
    -------
    BlockingMetrics
        All-zero timings when samples is empty.
    """
    if not samples:
        return BlockingMetrics(
            events=0,
            sync_events=0,
            async_events=0,
            failures=0,
            missing_handlers=missing_handlers,
            total_blocked_ms=0.0,
            mean_blocked_ms=0.0,
            p95_blocked_ms=0.0,
            max_blocked_ms=0.0,
            mean_sync_blocked_ms=0.0,
            mean_async_blocked_ms=0.0,
            mean_turnaround_ms=0.0,
        )

    blocked = np.array([s.blocked_ms for s in samples], dtype=float)
    turnaround = np.array([s.turnaround_ms for s in samples], dtype=float)
    is_async = np.array([s.is_async for s in samples], dtype=bool)
    failed = np.array([s.failed for s in samples], dtype=bool)

    return BlockingMetrics(
        events=len(samples),
        sync_events=int(np.count_nonzero(~is_async)),
        async_events=int(np.count_nonzero(is_async)),
        failures=int(np.count_nonzero(failed)),
        missing_handlers=missing_handlers,
        total_blocked_ms=float(np.sum(blocked)),
        mean_blocked_ms=_mean(blocked),
        p95_blocked_ms=float(np.percentile(blocked, 95)),
        max_blocked_ms=float(np.max(blocked)),
        mean_sync_blocked_ms=_mean(blocked[~is_async]),
        mean_async_blocked_ms=_mean(blocked[is_async]),
        mean_turnaround_ms=_mean(turnaround),
    )
