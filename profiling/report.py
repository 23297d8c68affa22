"""
Blocking report: print a summary from a BlockingRecorder.
"""

from __future__ import annotations

from profiling.metrics import BlockingMetrics, compute_metrics
from profiling.recorder import BlockingRecorder


def print_report(recorder: BlockingRecorder) -> BlockingMetrics:
    """
    Compute metrics from the recorder and print a summary.

    Returns
    -------
    BlockingMetrics
        The computed metrics (e.g. for programmatic use).
    """
    metrics = compute_metrics(recorder.samples, missing_handlers=len(recorder.missing_handlers))
    print("--- Event Loop Blocking ---")
    print(f"Events:           {metrics.events} ({metrics.sync_events} sync, {metrics.async_events} async)")
    print(f"Failures:         {metrics.failures}")
    print(f"Missing handlers: {metrics.missing_handlers}")
    print(f"Total blocked:    {metrics.total_blocked_ms:,.2f} ms")
    print(f"Mean blocked:     {metrics.mean_blocked_ms:,.2f} ms")
    print(f"p95 blocked:      {metrics.p95_blocked_ms:,.2f} ms")
    print(f"Max blocked:      {metrics.max_blocked_ms:,.2f} ms")
    print(f"Mean sync:        {metrics.mean_sync_blocked_ms:,.2f} ms")
    print(f"Mean async:       {metrics.mean_async_blocked_ms:,.2f} ms")
    print(f"Mean turnaround:  {metrics.mean_turnaround_ms:,.2f} ms")
    print("---------------------------")
    return metrics
