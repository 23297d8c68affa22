"""
Blocking-cost analysis on top of tickloop.

Records what each event cost the loop thread through the reporter hook;
computes metrics; prints a summary.
"""

from profiling.metrics import BlockingMetrics, compute_metrics
from profiling.recorder import BlockingRecorder, BlockingSample
from profiling.report import print_report

__all__ = [
    "BlockingMetrics",
    "BlockingRecorder",
    "BlockingSample",
    "compute_metrics",
    "print_report",
]
