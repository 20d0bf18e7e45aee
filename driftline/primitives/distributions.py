"""
Distribution Primitives

Standard normal CDF/quantile and the Wilson score interval.
"""

import numpy as np
from scipy.stats import norm
from typing import Tuple


def normal_cdf(z: float) -> float:
    """Standard normal cumulative distribution at z."""
    return float(norm.cdf(z))


def normal_quantile(p: float) -> float:
    """Standard normal quantile (inverse CDF). NaN outside [0, 1]."""
    return float(norm.ppf(p))


def two_sided_p(z: float) -> float:
    """Two-sided tail probability 2 * (1 - Phi(|z|))."""
    if not np.isfinite(z):
        return np.nan
    return float(2.0 * norm.sf(abs(z)))


def wilson_interval(p: float, n: float, z: float = 1.96) -> Tuple[float, float]:
    """
    Wilson score interval for a proportion.

    Parameters
    ----------
    p : float
        Observed proportion
    n : float
        Number of trials
    z : float
        Normal critical value (1.96 for 95%)

    Returns
    -------
    tuple of float
        (low, high) clamped to [0, 1]; (NaN, NaN) for invalid p or n <= 0
    """
    if not np.isfinite(p) or not np.isfinite(n) or n <= 0:
        return np.nan, np.nan

    z2 = z * z
    denom = 1.0 + z2 / n
    center = (p + z2 / (2.0 * n)) / denom
    half = z * np.sqrt(max(0.0, p * (1.0 - p)) / n + z2 / (4.0 * n * n)) / denom
    return float(max(0.0, center - half)), float(min(1.0, center + half))
