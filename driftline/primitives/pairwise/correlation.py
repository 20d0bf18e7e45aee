"""
Pairwise Correlation Primitives

Pearson and Spearman correlation with pairwise deletion of missing values.
"""

import numpy as np
from scipy.stats import rankdata
from typing import Tuple


def aligned_pairs(x, y) -> Tuple[np.ndarray, np.ndarray]:
    """
    Align two arrays to the shorter length and keep pairwise-finite entries.

    Parameters
    ----------
    x, y : array-like
        Input signals

    Returns
    -------
    tuple of np.ndarray
        (x, y) restricted to indices where both values are finite
    """
    x = np.asarray(x, dtype=np.float64).ravel()
    y = np.asarray(y, dtype=np.float64).ravel()

    n = min(len(x), len(y))
    x, y = x[:n], y[:n]

    mask = np.isfinite(x) & np.isfinite(y)
    return x[mask], y[mask]


def pearson(x, y) -> float:
    """
    Pearson correlation coefficient over pairwise-finite elements.

    Parameters
    ----------
    x, y : array-like
        Input signals. Indices where either value is non-finite are skipped.

    Returns
    -------
    float
        Correlation in [-1, 1]. NaN with fewer than 2 valid pairs or when
        either side has zero variance.

    Notes
    -----
    r = cov(x, y) / (std(x) * std(y)), population moments.
    """
    x, y = aligned_pairs(x, y)

    if len(x) < 2:
        return np.nan
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return np.nan

    dx = x - np.mean(x)
    dy = y - np.mean(y)
    denom = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if not np.isfinite(denom) or denom == 0:
        return np.nan

    return float(np.clip(np.sum(dx * dy) / denom, -1.0, 1.0))


def rank(values) -> np.ndarray:
    """
    1-based ranks with ties sharing their average rank.

    Parameters
    ----------
    values : array-like
        Input values

    Returns
    -------
    np.ndarray
        Ranks of the finite values; non-finite entries keep a NaN rank
    """
    y = np.asarray(values, dtype=np.float64).ravel()
    ranks = np.full(len(y), np.nan)
    mask = np.isfinite(y)
    if mask.any():
        ranks[mask] = rankdata(y[mask], method='average')
    return ranks


def spearman(x, y) -> float:
    """
    Spearman rank correlation.

    Pairwise-finite filter first, then average ranks, then Pearson on ranks.
    """
    x, y = aligned_pairs(x, y)
    if len(x) < 2:
        return np.nan
    return pearson(rank(x), rank(y))
