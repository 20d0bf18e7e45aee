"""
Individual Statistics Primitives

Order statistics and summaries over one array of values.
"""

import numpy as np
from typing import Dict, Any


def finite(values) -> np.ndarray:
    """
    Coerce to a flat float64 array and keep only finite entries.

    Parameters
    ----------
    values : array-like
        Input values. ``None`` becomes NaN and is dropped.

    Returns
    -------
    np.ndarray
        Finite values in their original order
    """
    y = np.asarray(values, dtype=np.float64).ravel()
    return y[np.isfinite(y)]


def quantile(values, q: float) -> float:
    """
    Linear-interpolation quantile.

    Parameters
    ----------
    values : array-like
        Input values; non-finite entries are ignored
    q : float
        Quantile in [0, 1]

    Returns
    -------
    float
        Order statistic at position (n - 1) * q, interpolated between
        neighbours. NaN for empty input or q outside [0, 1].

    Notes
    -----
    Equivalent to numpy's default 'linear' method: q=0.5 is the textbook
    median (exact middle for odd n, midpoint of the central pair for even n).
    """
    y = finite(values)
    if len(y) == 0 or not (0.0 <= q <= 1.0):
        return np.nan
    return float(np.quantile(y, q))


def summarize(values) -> Dict[str, Any]:
    """
    Five-number summary with Tukey outlier counts.

    Parameters
    ----------
    values : array-like
        Input values; non-finite entries are counted as missing

    Returns
    -------
    dict
        count, missing, mean, min, max, median, p25, p75, iqr,
        outlier_low, outlier_high (values beyond 1.5 * IQR from the quartiles)
    """
    raw = np.asarray(values, dtype=np.float64).ravel()
    y = raw[np.isfinite(raw)]

    if len(y) == 0:
        return {
            'count': 0,
            'missing': int(len(raw)),
            'mean': np.nan,
            'min': np.nan,
            'max': np.nan,
            'median': np.nan,
            'p25': np.nan,
            'p75': np.nan,
            'iqr': np.nan,
            'outlier_low': 0,
            'outlier_high': 0,
        }

    p25 = quantile(y, 0.25)
    p75 = quantile(y, 0.75)
    iqr = p75 - p25

    return {
        'count': int(len(y)),
        'missing': int(len(raw) - len(y)),
        'mean': float(np.mean(y)),
        'min': float(np.min(y)),
        'max': float(np.max(y)),
        'median': quantile(y, 0.5),
        'p25': p25,
        'p75': p75,
        'iqr': iqr,
        'outlier_low': int(np.sum(y < p25 - 1.5 * iqr)),
        'outlier_high': int(np.sum(y > p75 + 1.5 * iqr)),
    }
