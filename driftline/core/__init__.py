"""
Driftline Core
==============

Statistical engines for daily (date, value) series. Engines compute and
return plain results; they never raise on thin or missing data, they
return NaN or empty results instead.

Structure:
    rolling.py          - Calendar-window mean/median/compliance with CIs
    breaks.py           - Short/long rolling-mean crossovers
    changepoint.py      - Penalized least-squares segmentation
    decompose.py        - Trend + weekly seasonal + residual
    autocorrelation.py  - ACF / PACF with pair counts
    smoothing.py        - LOESS and running-quantile scatter smoothers
    hypothesis.py       - Mann-Whitney U with exact small-sample p-values
    survival.py         - Kaplan-Meier with log-log Greenwood bounds
    events.py           - Event duration quantiles and events per night
    adherence.py        - Streaks, night counts, first/last means, calendar heatmap
    results.py          - Result dataclasses
"""

from driftline.core.results import (
    AutocorrelationResult,
    Decomposition,
    EventStats,
    LagCorrelation,
    MannWhitneyResult,
    RollingResult,
    RollingWindow,
    Segment,
    SurvivalCurve,
)

from driftline.core.rolling import compute_usage_rolling, median_ci_ranks
from driftline.core.breaks import crossover_indices, detect_usage_breakpoints
from driftline.core.changepoint import (
    change_point_indices,
    detect_change_points,
    segment_summary,
)
from driftline.core.decompose import stl_decompose
from driftline.core.autocorrelation import (
    acf_confidence,
    compute_autocorrelation,
    compute_partial_autocorrelation,
)
from driftline.core.smoothing import evaluation_grid, loess_smooth, running_quantile_xy
from driftline.core.hypothesis import mann_whitney_u_test
from driftline.core.survival import km_survival
from driftline.core.events import event_duration_stats, events_per_night
from driftline.core.adherence import (
    adherence_metrics,
    calendar_heatmap,
    compute_adherence_streaks,
    first_last_means,
    longest_streak,
    night_counts,
)

__all__ = [
    # Results
    'AutocorrelationResult',
    'Decomposition',
    'EventStats',
    'LagCorrelation',
    'MannWhitneyResult',
    'RollingResult',
    'RollingWindow',
    'Segment',
    'SurvivalCurve',
    # Rolling
    'compute_usage_rolling',
    'median_ci_ranks',
    # Breaks
    'crossover_indices',
    'detect_usage_breakpoints',
    # Change points
    'change_point_indices',
    'detect_change_points',
    'segment_summary',
    # Decomposition
    'stl_decompose',
    # Autocorrelation
    'acf_confidence',
    'compute_autocorrelation',
    'compute_partial_autocorrelation',
    # Smoothing
    'evaluation_grid',
    'loess_smooth',
    'running_quantile_xy',
    # Hypothesis
    'mann_whitney_u_test',
    # Survival
    'km_survival',
    # Events
    'event_duration_stats',
    'events_per_night',
    # Adherence
    'adherence_metrics',
    'calendar_heatmap',
    'compute_adherence_streaks',
    'first_last_means',
    'longest_streak',
    'night_counts',
]
