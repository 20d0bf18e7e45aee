"""
Rolling Crossover Break Detection

Flags the points where a short rolling mean crosses a long rolling mean by
a meaningful margin: the short-term level has moved away from the long-term
baseline, in either direction.

A crossover at index i needs:
    prev = short[i-1] - long[i-1]
    curr = short[i]   - long[i]
    (prev <= 0 and curr > 0) or (prev >= 0 and curr < 0)
    |curr| >= min_delta

A prev of exactly zero counts as a crossing in whichever direction curr
moves. Pairs where either difference is missing are skipped.
"""

from typing import Any, List

import numpy as np

from driftline.config.defaults import BREAKPOINT_MIN_DELTA


def crossover_indices(short, long, min_delta: float = BREAKPOINT_MIN_DELTA) -> np.ndarray:
    """
    Indices of qualifying crossovers.

    Args:
        short: Short-window rolling mean
        long: Long-window rolling mean, aligned with short
        min_delta: Minimum |short - long| after the crossing

    Returns:
        Sorted int array of indices i >= 1
    """
    s = np.asarray(short, dtype=np.float64).ravel()
    l = np.asarray(long, dtype=np.float64).ravel()
    n = min(len(s), len(l))
    if n < 2:
        return np.array([], dtype=np.int64)

    diff = s[:n] - l[:n]
    prev = diff[:-1]
    curr = diff[1:]

    valid = np.isfinite(prev) & np.isfinite(curr)
    crossed = ((prev <= 0) & (curr > 0)) | ((prev >= 0) & (curr < 0))
    big = np.abs(curr) >= min_delta

    return np.flatnonzero(valid & crossed & big) + 1


def detect_usage_breakpoints(
    short,
    long,
    dates=None,
    min_delta: float = BREAKPOINT_MIN_DELTA,
) -> List[Any]:
    """
    Dates where the short rolling mean crosses the long one.

    Args:
        short: Short-window rolling mean (e.g. 7-day)
        long: Long-window rolling mean (e.g. 30-day)
        dates: Dates aligned with the means; None returns indices instead
        min_delta: Minimum post-crossing gap

    Returns:
        The caller's date objects at each crossover (or int indices)
    """
    idx = crossover_indices(short, long, min_delta)
    if dates is None:
        return [int(i) for i in idx]
    dates = list(dates)
    return [dates[i] for i in idx if i < len(dates)]
