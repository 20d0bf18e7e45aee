"""
Driftline Stages: orchestration over the core engines.

    timeseries:  analyze_series (everything for one nightly metric)
    comparison:  compare_ranges, compare_by_threshold (two-group tests)
    events:      analyze_events (apnea durations, events per night, survival)
"""

from driftline.stages.timeseries import SeriesAnalysis, analyze_series, trend_curves
from driftline.stages.comparison import (
    GroupComparison,
    compare_by_threshold,
    compare_groups,
    compare_ranges,
    range_mask,
)
from driftline.stages.events import EventAnalysis, analyze_events, select_events

__all__ = [
    'SeriesAnalysis',
    'analyze_series',
    'trend_curves',
    'GroupComparison',
    'compare_by_threshold',
    'compare_groups',
    'compare_ranges',
    'range_mask',
    'EventAnalysis',
    'analyze_events',
    'select_events',
]
