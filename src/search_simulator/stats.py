"""
Batch statistics over per-run records.
"""

from statistics import mean, stdev
from typing import List, Optional, Sequence

from search_simulator.models import BatchMode, BatchSummary, MetricSummary, RunStatistics

def summarize_metric(values: Sequence[float]) -> MetricSummary:
    """Mean, sample standard deviation, min and max; zeros for an empty sequence."""
    if not values:
        return MetricSummary()
    return MetricSummary(
        mean=mean(values),
        stddev=stdev(values) if len(values) > 1 else 0.0,
        min=min(values),
        max=max(values),
    )

def summarize(runs: List[RunStatistics], mode: Optional[BatchMode] = None) -> BatchSummary:
    if not runs:
        return BatchSummary(mode=mode)

    successes = sum(1 for run in runs if run.success)
    return BatchSummary(
        strategy=runs[0].strategy,
        network_type=runs[0].network_type,
        mode=mode,
        runs=len(runs),
        total_time=summarize_metric([run.total_time for run in runs]),
        total_messages=summarize_metric([run.total_messages for run in runs]),
        total_links=summarize_metric([run.total_links for run in runs]),
        nodes_visited=summarize_metric([run.nodes_visited for run in runs]),
        success_rate=100.0 * successes / len(runs),
    )
