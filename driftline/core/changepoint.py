"""
Penalized Least-Squares Change Points

Optimal partitioning of a series into constant-mean segments:

    F[0] = -penalty
    F[t] = min_{k < t}  F[k] + SSE(k .. t-1) + penalty

Segment SSE comes from prefix sums of v and v^2 in O(1), so the search is
O(n^2) time and O(n) memory. The inner minimisation over k is vectorised.
Ties go to the smallest k. Backtracking from t = n yields the first index
of every segment after the first: those are the change points.

A larger penalty yields fewer change points; penalty is in squared units of
the series.
"""

import logging
from typing import Any, List

import numpy as np

from driftline.config.defaults import CHANGEPOINT_PENALTY
from driftline.core.results import Segment

logger = logging.getLogger(__name__)


def _segment(values: np.ndarray, penalty: float) -> List[int]:
    """Change indices into a fully finite array."""
    n = len(values)
    if n == 0:
        return []

    s = np.concatenate([[0.0], np.cumsum(values)])
    s2 = np.concatenate([[0.0], np.cumsum(values * values)])

    F = np.zeros(n + 1)
    F[0] = -penalty
    prev = np.full(n + 1, -1, dtype=np.int64)

    for t in range(1, n + 1):
        k = np.arange(t)
        length = t - k
        seg_sum = s[t] - s[:t]
        sse = (s2[t] - s2[:t]) - seg_sum * seg_sum / length
        cost = F[:t] + sse + penalty
        best = int(np.argmin(cost))
        F[t] = cost[best]
        prev[t] = best

    cps = []
    t = n
    while t > 0:
        k = int(prev[t])
        if k <= 0:
            break
        cps.append(k)
        t = k
    cps.reverse()
    return cps


def change_point_indices(series, penalty: float = CHANGEPOINT_PENALTY) -> List[int]:
    """
    Caller indices where a new segment begins.

    Non-finite values are dropped before segmenting; the returned indices
    point back into the original series.
    """
    y = np.asarray(series, dtype=np.float64).ravel()
    if len(y) == 0:
        return []
    if not np.isfinite(penalty):
        logger.warning(f"change_point_indices: non-finite penalty {penalty!r}, no segmentation")
        return []

    keep = np.flatnonzero(np.isfinite(y))
    if len(keep) < len(y):
        logger.debug(f"change_point_indices: dropped {len(y) - len(keep)} missing value(s)")

    return [int(keep[k]) for k in _segment(y[keep], float(penalty))]


def detect_change_points(series, dates=None, penalty: float = CHANGEPOINT_PENALTY) -> List[Any]:
    """
    Change points of a series.

    Args:
        series: Values in time order
        dates: Dates aligned with series; None returns indices instead
        penalty: Cost added per segment

    Returns:
        The caller's date objects where a new segment starts (or indices).
        Empty for empty input.
    """
    idx = change_point_indices(series, penalty)
    if dates is None:
        return idx
    dates = list(dates)
    return [dates[i] for i in idx if i < len(dates)]


def segment_summary(series, change_indices) -> List[Segment]:
    """
    Describe the segments delimited by change indices.

    Args:
        series: Values in time order
        change_indices: First index of each segment after the first

    Returns:
        One Segment per stretch with its inclusive bounds, finite-value
        mean and count. strength is |mean - previous mean| (NaN for the
        first segment).
    """
    y = np.asarray(series, dtype=np.float64).ravel()
    n = len(y)
    if n == 0:
        return []

    bounds = sorted({int(i) for i in change_indices if 0 < int(i) < n})
    starts = [0] + bounds
    ends = bounds + [n]

    segments = []
    prev_mean = np.nan
    for a, b in zip(starts, ends):
        chunk = y[a:b]
        chunk = chunk[np.isfinite(chunk)]
        mean = float(np.mean(chunk)) if len(chunk) else np.nan
        segments.append(Segment(
            start=a,
            end=b - 1,
            mean=mean,
            count=int(len(chunk)),
            strength=abs(mean - prev_mean),
        ))
        prev_mean = mean

    return segments
