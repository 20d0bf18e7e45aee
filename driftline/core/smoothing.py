"""
Local Regression Smoothers

Scatter smoothers for (x, y) clouds, evaluated at arbitrary points xs:

    loess_smooth         local linear fit, tricube weights, span alpha
    running_quantile_xy  q-quantile of the y values of the k nearest x

Both use the same neighbour search: sort the pairwise-finite points by x,
binary-search the insertion point of x0, then grow a contiguous window one
point at a time toward the nearer side (ties go left).
"""

import logging
from typing import Tuple

import numpy as np

from driftline.config.defaults import (
    LOESS_ALPHA,
    LOESS_SAMPLE_STEPS,
    RUNNING_QUANTILE_NEIGHBORS,
)
from driftline.primitives.individual.statistics import quantile
from driftline.primitives.pairwise.correlation import aligned_pairs

logger = logging.getLogger(__name__)

# Relative size below which the weighted normal equations count as singular
_DEGENERATE_TOL = 1e-12


def _sorted_points(x, y) -> Tuple[np.ndarray, np.ndarray]:
    px, py = aligned_pairs(x, y)
    order = np.argsort(px, kind='stable')
    return px[order], py[order]


def nearest_window(xs_sorted: np.ndarray, x0: float, m: int) -> Tuple[int, int]:
    """
    Slice [lo, hi) of the m points nearest x0 in a sorted array.

    Expands from the insertion point; on equal distance the left point is
    taken first.
    """
    n = len(xs_sorted)
    right = int(np.searchsorted(xs_sorted, x0, side='left'))
    left = right - 1
    taken = 0

    while taken < m and (left >= 0 or right < n):
        dl = abs(xs_sorted[left] - x0) if left >= 0 else np.inf
        dr = abs(xs_sorted[right] - x0) if right < n else np.inf
        if dl <= dr:
            left -= 1
        else:
            right += 1
        taken += 1

    return left + 1, right


def tricube(u: np.ndarray) -> np.ndarray:
    """(1 - |u|^3)^3 on |u| < 1, zero outside."""
    t = np.clip(1.0 - np.abs(u) ** 3, 0.0, None)
    return t ** 3


def _local_linear(dx: np.ndarray, y: np.ndarray, w: np.ndarray):
    """
    Intercept of the weighted line y = a + b*dx, or None when singular.

    dx is centered on the evaluation point, so the intercept is the fit there.
    """
    sw = np.sum(w)
    if sw <= 0:
        return None

    swx = np.sum(w * dx)
    swy = np.sum(w * y)
    swxx = np.sum(w * dx * dx)
    swxy = np.sum(w * dx * y)

    den = sw * swxx - swx * swx
    if swxx <= 0 or den <= _DEGENERATE_TOL * sw * swxx:
        return None

    b = (sw * swxy - swx * swy) / den
    return (swy - b * swx) / sw


def loess_smooth(x, y, xs, alpha: float = LOESS_ALPHA) -> np.ndarray:
    """
    Locally weighted linear regression.

    Parameters
    ----------
    x, y : array-like
        Observed points; pairs with a non-finite member are dropped
    xs : array-like
        Evaluation points
    alpha : float
        Span in (0, 1]: each fit uses max(2, floor(alpha * N)) neighbours

    Returns
    -------
    np.ndarray
        Fitted value at each xs (same length as xs). All NaN when no valid
        point exists; empty when xs is empty.

    Notes
    -----
    Weights are tricube of distance / (largest neighbour distance), with the
    scale set to 1 when every neighbour sits on x0. If the weighted fit is
    singular (e.g. only one neighbour carries weight) the fit is retried
    with uniform weights over the neighbours, and failing that the weighted
    mean is returned. Exactly linear data is reproduced exactly.
    """
    xs = np.asarray(xs, dtype=np.float64).ravel()
    out = np.full(len(xs), np.nan)
    if len(xs) == 0:
        return out

    if not (0.0 < alpha <= 1.0):
        logger.warning(f"loess_smooth: alpha {alpha!r} outside (0, 1], using {LOESS_ALPHA}")
        alpha = LOESS_ALPHA

    px, py = _sorted_points(x, y)
    n = len(px)
    if n == 0:
        logger.debug("loess_smooth: no finite (x, y) pairs")
        return out

    m = max(2, int(np.floor(alpha * n)))

    for i, x0 in enumerate(xs):
        if not np.isfinite(x0):
            continue

        lo, hi = nearest_window(px, x0, m)
        dx = px[lo:hi] - x0
        ny = py[lo:hi]

        scale = np.max(np.abs(dx))
        if scale == 0:
            scale = 1.0
        w = tricube(dx / scale)

        fit = _local_linear(dx, ny, w)
        if fit is None:
            fit = _local_linear(dx, ny, np.ones_like(dx))
        if fit is None:
            sw = np.sum(w)
            fit = np.sum(w * ny) / sw if sw > 0 else np.mean(ny)

        out[i] = fit

    return out


def running_quantile_xy(
    x,
    y,
    xs,
    q: float = 0.5,
    k: int = RUNNING_QUANTILE_NEIGHBORS,
) -> np.ndarray:
    """
    q-quantile of y among the nearest neighbours in x.

    Uses max(3, min(k, N)) neighbours (fewer when N < 3). Output has the
    length of xs; NaN where nothing can be computed.
    """
    xs = np.asarray(xs, dtype=np.float64).ravel()
    out = np.full(len(xs), np.nan)
    if len(xs) == 0:
        return out

    px, py = _sorted_points(x, y)
    n = len(px)
    if n == 0:
        return out

    nn = max(3, min(int(k), n))

    for i, x0 in enumerate(xs):
        if not np.isfinite(x0):
            continue
        lo, hi = nearest_window(px, x0, nn)
        out[i] = quantile(py[lo:hi], q)

    return out


def evaluation_grid(x, steps: int = LOESS_SAMPLE_STEPS) -> np.ndarray:
    """
    Evenly spaced evaluation points across the finite range of x.

    Returns `steps` points from min(x) to max(x) inclusive, a single point
    when the range is zero, and an empty array when x has no finite value.
    """
    y = np.asarray(x, dtype=np.float64).ravel()
    y = y[np.isfinite(y)]
    if len(y) == 0:
        return np.array([], dtype=np.float64)

    lo, hi = float(np.min(y)), float(np.max(y))
    if hi == lo:
        return np.array([lo])
    return np.linspace(lo, hi, max(2, int(steps)))
