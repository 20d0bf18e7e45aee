"""
Range Comparison Entry Point
============================

Compare two periods of the same metric (e.g. before/after a mask change),
or two groups of nights split on a second metric (e.g. AHI on low vs high
pressure nights), with means and a Mann-Whitney U test.

Group A is always the reference: delta is mean(B) - mean(A) and a positive
effect means B tends to be larger.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np

from driftline.config.defaults import (
    EPAP_SPLIT_THRESHOLD,
    MANN_WHITNEY_EXACT_MAX_N,
    NORMAL_CONFIDENCE_Z,
)
from driftline.core.hypothesis import mann_whitney_u_test
from driftline.core.results import MannWhitneyResult, json_float
from driftline.primitives.pairwise.correlation import aligned_pairs, pearson
from driftline.validation.series import as_dates, prepare_series

logger = logging.getLogger(__name__)

DateRange = Tuple[Any, Any]


@dataclass
class GroupComparison:
    """Two groups, their means and the rank test between them."""

    count_a: int = 0
    count_b: int = 0
    mean_a: float = np.nan
    mean_b: float = np.nan
    delta: float = np.nan
    test: MannWhitneyResult = field(default_factory=MannWhitneyResult)
    # Pearson r between the split metric and the values (threshold splits only)
    correlation: float = np.nan

    def to_dict(self) -> Dict[str, Any]:
        return {
            'count_a': self.count_a,
            'count_b': self.count_b,
            'mean_a': json_float(self.mean_a),
            'mean_b': json_float(self.mean_b),
            'delta': json_float(self.delta),
            'test': self.test.to_dict(),
            'correlation': json_float(self.correlation),
        }


def _mean(y: np.ndarray) -> float:
    return float(np.mean(y)) if len(y) else np.nan


def compare_groups(
    a,
    b,
    exact_max_n: int = MANN_WHITNEY_EXACT_MAX_N,
    z: float = NORMAL_CONFIDENCE_Z,
) -> GroupComparison:
    """Means, delta (B - A) and Mann-Whitney U over the finite values."""
    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    a = a[np.isfinite(a)]
    b = b[np.isfinite(b)]

    mean_a, mean_b = _mean(a), _mean(b)
    return GroupComparison(
        count_a=int(len(a)),
        count_b=int(len(b)),
        mean_a=mean_a,
        mean_b=mean_b,
        delta=mean_b - mean_a,
        test=mann_whitney_u_test(a, b, exact_max_n=exact_max_n, z=z),
    )


def _bound(value) -> Optional[np.datetime64]:
    if value is None:
        return None
    d = as_dates([value])[0]
    return None if np.isnat(d) else d


def range_mask(dates: np.ndarray, date_range: Optional[DateRange]) -> np.ndarray:
    """
    Rows whose date falls inside an inclusive (start, end) range.

    Either bound may be None for an open end; rows without a date never match.
    """
    dates = np.asarray(dates, dtype='datetime64[D]')
    mask = ~np.isnat(dates)
    if date_range is None:
        return mask

    start, end = date_range
    start, end = _bound(start), _bound(end)
    if start is not None:
        mask &= dates >= start
    if end is not None:
        mask &= dates <= end
    return mask


def compare_ranges(
    dates,
    values,
    range_a: Optional[DateRange],
    range_b: Optional[DateRange],
    exact_max_n: int = MANN_WHITNEY_EXACT_MAX_N,
    z: float = NORMAL_CONFIDENCE_Z,
) -> GroupComparison:
    """
    Compare the values inside two date ranges.

    Args:
        dates: One date per value
        values: Values to compare
        range_a: (start, end) of the reference period, inclusive
        range_b: (start, end) of the comparison period, inclusive
        exact_max_n: Passed to the Mann-Whitney test
        z: Critical value for the effect interval

    Returns:
        GroupComparison. Empty ranges give zero counts, NaN means and a
        test with method 'NA'.
    """
    series = prepare_series(dates, values)
    a = series.values[range_mask(series.dates, range_a)]
    b = series.values[range_mask(series.dates, range_b)]

    logger.debug(f"compare_ranges: {len(a)} row(s) in A, {len(b)} row(s) in B")
    return compare_groups(a, b, exact_max_n=exact_max_n, z=z)


def compare_by_threshold(
    by,
    values,
    split: float = EPAP_SPLIT_THRESHOLD,
    exact_max_n: int = MANN_WHITNEY_EXACT_MAX_N,
    z: float = NORMAL_CONFIDENCE_Z,
) -> GroupComparison:
    """
    Split values on a second metric and compare the two groups.

    Group A holds the values where by < split, group B where by >= split.
    Pairs with a missing member are dropped. correlation is the Pearson r
    between by and values over the same pairs.
    """
    x, y = aligned_pairs(by, values)
    low = x < split
    result = compare_groups(y[low], y[~low], exact_max_n=exact_max_n, z=z)
    result.correlation = pearson(x, y)
    return result
