"""
Series Analysis Entry Point
===========================

Thin orchestrator over the core engines for one nightly metric:

1. Sort points by date (rows without a date are dropped)
2. Rolling windows and short/long crossovers
3. Change points and segment means (when a penalty is configured)
4. Weekly decomposition, ACF and PACF
5. LOESS and running-median trend curves over calendar days
6. Summary statistics, streaks, night counts and first/last means
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from driftline.config.loader import AnalysisSettings
from driftline.core.adherence import adherence_metrics, first_last_means, night_counts
from driftline.core.autocorrelation import (
    compute_autocorrelation,
    compute_partial_autocorrelation,
)
from driftline.core.breaks import detect_usage_breakpoints
from driftline.core.changepoint import change_point_indices, segment_summary
from driftline.core.decompose import stl_decompose
from driftline.core.results import (
    AutocorrelationResult,
    Decomposition,
    RollingResult,
    Segment,
    json_array,
    json_float,
)
from driftline.core.rolling import compute_usage_rolling
from driftline.core.smoothing import evaluation_grid, loess_smooth, running_quantile_xy
from driftline.primitives.individual.statistics import summarize
from driftline.validation.series import prepare_series

logger = logging.getLogger(__name__)


def _iso(dates: np.ndarray) -> List[str]:
    return [str(d) for d in np.asarray(dates, dtype='datetime64[D]')]


@dataclass
class SeriesAnalysis:
    """Everything computed for one series, indexed by the sorted dates."""

    dates: np.ndarray
    values: np.ndarray
    settings: AnalysisSettings
    rolling: RollingResult
    breakpoints: np.ndarray
    change_points: np.ndarray
    segments: List[Segment]
    decomposition: Decomposition
    acf: AutocorrelationResult
    pacf: AutocorrelationResult
    trend: Dict[str, np.ndarray]
    summary: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.dates)

    def rolling_table(self) -> Dict[str, np.ndarray]:
        """Column dict: date, value, then the flat rolling columns."""
        table = {'date': self.dates, 'value': self.values}
        table.update(self.rolling.to_dict())
        return table

    def decomposition_table(self) -> Dict[str, np.ndarray]:
        return {
            'date': self.dates,
            'value': self.values,
            'trend': self.decomposition.trend,
            'seasonal': self.decomposition.seasonal,
            'residual': self.decomposition.residual,
        }

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view: ISO dates, None for missing numbers."""
        return {
            'n_points': len(self),
            'start': str(self.dates[0]) if len(self) else None,
            'end': str(self.dates[-1]) if len(self) else None,
            'settings': self.settings.to_dict(),
            'summary': {
                k: (json_float(v) if isinstance(v, float) else v)
                for k, v in self.summary.items()
            },
            'rolling': {k: json_array(v) for k, v in self.rolling.to_dict().items()},
            'breakpoints': _iso(self.breakpoints),
            'change_points': _iso(self.change_points),
            'segments': [s.to_dict() for s in self.segments],
            'decomposition': self.decomposition.to_dict(),
            'acf': self.acf.to_dict(),
            'pacf': self.pacf.to_dict(),
            'trend': {
                'x': _iso(self.trend['x']),
                'loess': json_array(self.trend['loess']),
                'median': json_array(self.trend['median']),
            },
        }


def trend_curves(days: np.ndarray, values: np.ndarray, settings: AnalysisSettings) -> Dict[str, np.ndarray]:
    """LOESS and running-median curves over calendar days on an even grid."""
    grid = evaluation_grid(days, settings.loess_steps)
    loess = loess_smooth(days, values, grid, settings.loess_alpha)
    median = running_quantile_xy(days, values, grid, 0.5, settings.quantile_neighbors)

    # Calendar days on the grid, rounded to whole dates for display
    x = np.rint(grid).astype(np.int64).astype('datetime64[D]')
    return {'x': x, 'loess': loess, 'median': median}


def analyze_series(dates, values, settings: Optional[AnalysisSettings] = None) -> SeriesAnalysis:
    """
    Run every engine over one (date, value) series.

    Args:
        dates: One date per value, any order
        values: Nightly values; NaN marks a missing night
        settings: AnalysisSettings (defaults when None)

    Returns:
        SeriesAnalysis with all arrays in ascending date order
    """
    settings = settings or AnalysisSettings()

    series = prepare_series(dates, values)
    dropped = series.size - len(series.order)
    if dropped:
        logger.warning(f"analyze_series: dropped {dropped} row(s) without a usable date")

    d = series.dates[series.order]
    v = series.values[series.order]
    days = series.days[series.order]
    logger.info(f"analyze_series: {len(d)} points, {int(np.isfinite(v).sum())} finite")

    # Rolling windows and crossovers
    rolling = compute_usage_rolling(
        d, v,
        windows=settings.rolling_windows,
        threshold=settings.compliance_threshold,
        z=settings.confidence_z,
    )

    short, long = settings.short_window, settings.long_window
    if short != long:
        breakpoints = detect_usage_breakpoints(
            rolling[short].avg, rolling[long].avg, d, settings.breakpoint_min_delta
        )
    else:
        breakpoints = []

    # Change points
    if settings.change_point_penalty is not None:
        cp_idx = change_point_indices(v, settings.change_point_penalty)
    else:
        cp_idx = []
    segments = segment_summary(v, cp_idx)

    # Structure
    decomposition = stl_decompose(v, settings.season_length)
    acf = compute_autocorrelation(v, settings.max_lag, settings.confidence_z)
    pacf = compute_partial_autocorrelation(v, settings.max_lag, settings.confidence_z)

    trend = trend_curves(days, v, settings)

    # Scalars
    summary = summarize(v)
    adherence = adherence_metrics(
        v, rolling,
        compliance_threshold=settings.compliance_threshold,
        strict_threshold=settings.strict_threshold,
        long_window=long,
    )
    summary['longest_compliance'] = adherence['longest_compliance']
    summary['longest_strict'] = adherence['longest_strict']
    summary.update(night_counts(
        v,
        compliance_threshold=settings.compliance_threshold,
        strict_threshold=settings.strict_threshold,
        alert_threshold=settings.alert_threshold,
    ))
    summary.update(first_last_means(d, v))
    summary['n_breakpoints'] = len(breakpoints)
    summary['n_change_points'] = len(cp_idx)

    return SeriesAnalysis(
        dates=d,
        values=v,
        settings=settings,
        rolling=rolling,
        breakpoints=np.array(breakpoints, dtype='datetime64[D]'),
        change_points=d[np.array(cp_idx, dtype=np.int64)],
        segments=segments,
        decomposition=decomposition,
        acf=acf,
        pacf=pacf,
        trend=trend,
        summary=summary,
    )
