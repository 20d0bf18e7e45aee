"""
Calendar Rolling Engine.

Rolling mean, median and compliance over the last `w` calendar days
(inclusive of the current day), for each requested window length.

Windows are defined by dates, not by row counts: a gap in the record shrinks
the population inside the window instead of being padded. Two pointers walk
the date-sorted series, so each window update is incremental.

Per window and per point:
    avg, avg_ci_low, avg_ci_high          mean and normal-approx CI
    median, median_ci_low, median_ci_high median and order-statistic CI
    compliance                            % of in-window values >= threshold
"""

import bisect
import logging
from typing import Iterable, List

import numpy as np

from driftline.config.defaults import (
    DEFAULT_ROLLING_WINDOWS,
    NORMAL_CONFIDENCE_Z,
    USAGE_COMPLIANCE_THRESHOLD_HOURS,
)
from driftline.core.results import RollingResult, RollingWindow
from driftline.validation.series import prepare_series

logger = logging.getLogger(__name__)


def median_ci_ranks(n: int, z: float = NORMAL_CONFIDENCE_Z):
    """
    Order-statistic ranks bounding the median.

    Binomial(n, 1/2) normal approximation:
        k_lower = max(0, floor(n/2 - z*sqrt(n/4)))
        k_upper = min(n-1, ceil(n/2 + z*sqrt(n/4)))

    Returns 0-based positions into the sorted window.
    """
    s = np.sqrt(n / 4.0)
    k_lower = max(0, int(np.floor(n / 2.0 - z * s)))
    k_upper = min(n - 1, int(np.ceil(n / 2.0 + z * s)))
    return k_lower, k_upper


def _median_of_sorted(sorted_vals: List[float]) -> float:
    n = len(sorted_vals)
    mid = (n - 1) // 2
    if n % 2 == 1:
        return sorted_vals[mid]
    return (sorted_vals[mid] + sorted_vals[mid + 1]) / 2.0


def _valid_windows(windows) -> List[int]:
    if np.ndim(windows) == 0:
        windows = [windows]
    out = []
    for w in windows:
        try:
            fw = float(w)
        except (TypeError, ValueError):
            fw = np.nan
        if isinstance(w, (bool, np.bool_)) or not np.isfinite(fw) or not fw.is_integer() or fw <= 0:
            logger.warning(f"Skipping rolling window {w!r}: must be a positive whole number of days")
            continue
        w = int(fw)
        if w not in out:
            out.append(w)
    return out


def _roll_window(
    days: np.ndarray,
    values: np.ndarray,
    order: np.ndarray,
    n: int,
    w: int,
    threshold: float,
    z: float,
) -> RollingWindow:
    """Two-pointer pass over date-sorted positions for one window length."""
    result = RollingWindow.empty(w, n)

    total = 0.0
    total_sq = 0.0
    compliant = 0
    window_vals: List[float] = []
    start = 0

    for j, idx in enumerate(order):
        v = values[idx]
        if np.isfinite(v):
            total += v
            total_sq += v * v
            compliant += v >= threshold
            bisect.insort(window_vals, v)

        cutoff = days[idx] - (w - 1)
        while start <= j and days[order[start]] < cutoff:
            old = values[order[start]]
            if np.isfinite(old):
                total -= old
                total_sq -= old * old
                compliant -= old >= threshold
                del window_vals[bisect.bisect_left(window_vals, old)]
            start += 1

        count = len(window_vals)
        if count == 0:
            continue

        mean = total / count
        result.avg[idx] = mean
        result.compliance[idx] = 100.0 * compliant / count

        if count >= 2:
            variance = max(0.0, (total_sq - total * total / count) / (count - 1))
            se = np.sqrt(variance / count)
            result.avg_ci_low[idx] = mean - z * se
            result.avg_ci_high[idx] = mean + z * se

        result.median[idx] = _median_of_sorted(window_vals)
        k_lower, k_upper = median_ci_ranks(count, z)
        result.median_ci_low[idx] = window_vals[k_lower]
        result.median_ci_high[idx] = window_vals[k_upper]

    return result


def compute_usage_rolling(
    dates,
    values,
    windows: Iterable[int] = DEFAULT_ROLLING_WINDOWS,
    threshold: float = USAGE_COMPLIANCE_THRESHOLD_HOURS,
    z: float = NORMAL_CONFIDENCE_Z,
) -> RollingResult:
    """
    Date-aware rolling statistics for each window length.

    Args:
        dates: One date per value (any order; sorted internally)
        values: Nightly values; NaN/None are skipped, not counted as zero
        windows: Window lengths in calendar days, or a single length
        threshold: Compliance threshold (value >= threshold counts)
        z: Normal critical value for both confidence intervals

    Returns:
        RollingResult keyed by window length. Every array has the input
        length and is indexed like the input. Points with no finite value in
        their window, and points without a usable date, are NaN throughout.

    Example:
        r = compute_usage_rolling(dates, hours)
        r[7].avg, r[30].compliance
        r.to_dict()['compliance4_30']
    """
    series = prepare_series(dates, values)
    n = series.size

    windows = _valid_windows(windows)
    result = RollingResult(windows={}, threshold=float(threshold))

    if n == 0:
        for w in windows:
            result.windows[w] = RollingWindow.empty(w, 0)
        return result

    if not series.is_sorted:
        logger.debug("compute_usage_rolling: dates out of order, sorting")

    for w in windows:
        result.windows[w] = _roll_window(
            series.days, series.values, series.order, n, w, float(threshold), z
        )

    return result
