"""
Driftline: statistics for daily (date, value) series.

Public API:
    from driftline import analyze_series, load_settings
    analysis = analyze_series(dates, hours, load_settings(profile='usage'))

Layers:
    driftline.primitives  Math: numpy in, numbers out (quantiles, correlation, OLS)
    driftline.core        Engines: rolling windows, crossovers, change points,
                          decomposition, ACF/PACF, smoothers, Mann-Whitney,
                          Kaplan-Meier, adherence summaries
    driftline.stages      Orchestration: analyze_series, compare_ranges, analyze_events

Also:
    driftline.config      Defaults and settings.yaml profiles
    driftline.validation  Series coercion and opt-in strict checks
    driftline.io          CSV/Parquet reads and writes (polars)
    driftline.run         CLI (python -m driftline)
"""

from driftline.config import AnalysisSettings, ConfigError, load_settings
from driftline.core import (
    calendar_heatmap,
    compute_adherence_streaks,
    compute_autocorrelation,
    compute_partial_autocorrelation,
    compute_usage_rolling,
    detect_change_points,
    detect_usage_breakpoints,
    km_survival,
    loess_smooth,
    mann_whitney_u_test,
    running_quantile_xy,
    stl_decompose,
)
from driftline.primitives import partial_correlation, pearson, quantile, rank, spearman
from driftline.stages import analyze_events, analyze_series, compare_by_threshold, compare_ranges
from driftline.validation import ValidationError, validate_series

__version__ = "0.1.0"

__all__ = [
    'AnalysisSettings',
    'ConfigError',
    'load_settings',
    'calendar_heatmap',
    'compute_adherence_streaks',
    'compute_autocorrelation',
    'compute_partial_autocorrelation',
    'compute_usage_rolling',
    'detect_change_points',
    'detect_usage_breakpoints',
    'km_survival',
    'loess_smooth',
    'mann_whitney_u_test',
    'running_quantile_xy',
    'stl_decompose',
    'partial_correlation',
    'pearson',
    'quantile',
    'rank',
    'spearman',
    'analyze_events',
    'analyze_series',
    'compare_by_threshold',
    'compare_ranges',
    'ValidationError',
    'validate_series',
]
