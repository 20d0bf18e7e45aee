"""
Adherence Summaries

Compliance streaks, threshold night counts, first/last-period means and the
calendar heatmap grid shown next to the rolling charts.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np

from driftline.config.defaults import (
    DAYS_PER_WEEK,
    FIRST_LAST_COUNT,
    HEATMAP_MAX_WEEKS,
    ROLLING_WINDOW_LONG_DAYS,
    USAGE_COMPLIANCE_THRESHOLD_HOURS,
    USAGE_STRICT_THRESHOLD_HOURS,
)
from driftline.core.results import RollingResult
from driftline.validation.series import as_values, prepare_series

logger = logging.getLogger(__name__)

# 1970-01-01 was a Thursday; weekday() with Sunday = 0 is (day + 4) % 7
_EPOCH_WEEKDAY = 4


def longest_streak(values, threshold: float) -> int:
    """Longest run of consecutive values >= threshold. Missing breaks a run."""
    y = as_values(values)
    hit = np.concatenate([[False], np.isfinite(y) & (y >= threshold), [False]])
    edges = np.flatnonzero(np.diff(hit.astype(np.int8)))
    if len(edges) == 0:
        return 0
    return int(np.max(edges[1::2] - edges[0::2]))


def compute_adherence_streaks(
    values,
    thresholds: Iterable[float] = (USAGE_COMPLIANCE_THRESHOLD_HOURS, USAGE_STRICT_THRESHOLD_HOURS),
) -> Dict[float, int]:
    """
    Longest compliant streak for each threshold.

    Args:
        values: Nightly values in time order
        thresholds: Streak thresholds

    Returns:
        {threshold: longest run of consecutive values >= threshold}
    """
    return {float(th): longest_streak(values, th) for th in thresholds}


def adherence_metrics(
    values,
    rolling: Optional[RollingResult] = None,
    compliance_threshold: float = USAGE_COMPLIANCE_THRESHOLD_HOURS,
    strict_threshold: float = USAGE_STRICT_THRESHOLD_HOURS,
    long_window: int = ROLLING_WINDOW_LONG_DAYS,
) -> Dict[str, Any]:
    """
    Streaks plus the long-window compliance series.

    Returns:
        dict with longest_compliance, longest_strict and compliance_series
        (None when rolling has no long window or used another threshold)
    """
    streaks = compute_adherence_streaks(values, (compliance_threshold, strict_threshold))

    series = None
    if rolling is not None and long_window in rolling:
        if rolling.threshold == float(compliance_threshold):
            series = rolling[long_window].compliance
        else:
            logger.debug(
                f"adherence_metrics: rolling compliance uses threshold {rolling.threshold}, "
                f"not {compliance_threshold}"
            )

    return {
        'longest_compliance': streaks[float(compliance_threshold)],
        'longest_strict': streaks[float(strict_threshold)],
        'compliance_series': series,
    }


def night_counts(
    values,
    compliance_threshold: float = USAGE_COMPLIANCE_THRESHOLD_HOURS,
    strict_threshold: float = USAGE_STRICT_THRESHOLD_HOURS,
    alert_threshold: Optional[float] = None,
) -> Dict[str, Optional[int]]:
    """
    Count nights on each side of the thresholds. Missing nights are not counted.

    Returns:
        dict with nights_compliant (>= compliance), nights_strict (>= strict),
        nights_short (< compliance) and nights_above_alert (> alert; None
        when no alert threshold is set)
    """
    y = as_values(values)
    y = y[np.isfinite(y)]

    return {
        'nights_compliant': int(np.sum(y >= compliance_threshold)),
        'nights_strict': int(np.sum(y >= strict_threshold)),
        'nights_short': int(np.sum(y < compliance_threshold)),
        'nights_above_alert': None if alert_threshold is None else int(np.sum(y > alert_threshold)),
    }


def _finite_mean(y: np.ndarray) -> float:
    y = y[np.isfinite(y)]
    return float(np.mean(y)) if len(y) else np.nan


def first_last_means(dates, values, count: int = FIRST_LAST_COUNT) -> Dict[str, float]:
    """
    Mean of the first and of the last `count` rows in date order.

    The rows are taken first and missing values dropped after, so a
    missing night still uses up one of the `count` slots.

    Returns:
        dict with first_mean, last_mean and their difference delta
        (last - first). A mean is NaN when its rows hold no finite value.
    """
    series = prepare_series(dates, values)
    y = series.values[series.order]
    count = max(1, int(count))

    first = _finite_mean(y[:count])
    last = _finite_mean(y[-count:])
    return {'first_mean': first, 'last_mean': last, 'delta': last - first}


def calendar_heatmap(
    dates,
    values,
    labels: Optional[Sequence[str]] = None,
    days_per_week: int = DAYS_PER_WEEK,
    week_start_offset: int = 0,
    max_weeks: int = HEATMAP_MAX_WEEKS,
) -> Dict[str, Any]:
    """
    Weekday x week grid of values.

    Args:
        dates: One date per value
        values: Values to place on the grid
        labels: Row labels; defaults to '0' .. str(days_per_week - 1)
        days_per_week: Rows per column
        week_start_offset: Added to the Sunday = 0 weekday; 6 starts weeks
                           on Monday
        max_weeks: Cap on columns, counted from the first week

    Returns:
        {'x': week start dates (datetime64[D]), 'y': row labels,
         'z': rows x weeks list of lists, None where there is no value}.
        When a day appears twice the later value wins.
    """
    y_labels: List[str] = list(labels) if labels else [str(i) for i in range(days_per_week)]

    series = prepare_series(dates, values)
    if len(series.order) == 0:
        return {'x': np.array([], dtype='datetime64[D]'), 'y': y_labels, 'z': [[] for _ in y_labels]}

    days = series.days
    by_day: Dict[int, Optional[float]] = {}
    for i in np.flatnonzero(series.valid_dates):
        v = series.values[i]
        by_day[int(days[i])] = float(v) if np.isfinite(v) else None

    def week_start(day: int) -> int:
        dow = ((day + _EPOCH_WEEKDAY) % 7 + week_start_offset) % days_per_week
        return day - dow

    first = week_start(int(days[series.order[0]]))
    last = week_start(int(days[series.order[-1]]))

    starts = []
    w = first
    while w <= last and len(starts) < max_weeks:
        starts.append(w)
        w += days_per_week

    z = [
        [by_day.get(ws + row) for ws in starts]
        for row in range(len(y_labels))
    ]

    return {
        'x': np.array(starts, dtype='datetime64[D]'),
        'y': y_labels,
        'z': z,
    }
