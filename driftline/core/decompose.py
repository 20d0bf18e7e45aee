"""
Seasonal-Trend Decomposition

Additive split of a series into trend + seasonal + residual with a fixed
season length (7 = weekly cycle of nightly data):

    1. trend     centered moving average over the finite values in
                 [i - L//2, i + L//2], clipped at the series ends
    2. detrend   value - trend
    3. seasonal  mean detrended value per phase (i mod L), centered so the
                 phase means sum to zero, tiled over the series
    4. residual  value - trend - seasonal

This is a single pass, not the iterated loess-based STL: the trend is a
plain moving average and the seasonal component is a per-phase mean.
"""

import logging

import numpy as np

from driftline.config.defaults import STL_SEASON_LENGTH
from driftline.core.results import Decomposition
from driftline.validation.series import as_values, prepare_series

logger = logging.getLogger(__name__)


def centered_moving_average(values: np.ndarray, season_length: int) -> np.ndarray:
    """
    Mean of the finite values in [i - L//2, i + L//2] for each i.

    NaN where the window holds no finite value.
    """
    y = np.asarray(values, dtype=np.float64)
    n = len(y)
    half = season_length // 2

    ok = np.isfinite(y)
    csum = np.concatenate([[0.0], np.cumsum(np.where(ok, y, 0.0))])
    ccount = np.concatenate([[0], np.cumsum(ok)])

    idx = np.arange(n)
    lo = np.clip(idx - half, 0, n)
    hi = np.clip(idx + half + 1, 0, n)

    total = csum[hi] - csum[lo]
    count = ccount[hi] - ccount[lo]

    out = np.full(n, np.nan)
    has = count > 0
    out[has] = total[has] / count[has]
    return out


def seasonal_component(detrended: np.ndarray, season_length: int) -> np.ndarray:
    """
    Tiled per-phase means of the finite detrended values, centered to zero.

    Phases without any finite value contribute 0.
    """
    d = np.asarray(detrended, dtype=np.float64)
    n = len(d)
    phase = np.arange(n) % season_length

    ok = np.isfinite(d)
    sums = np.bincount(phase[ok], weights=d[ok], minlength=season_length)
    counts = np.bincount(phase[ok], minlength=season_length)

    means = np.zeros(season_length)
    has = counts > 0
    means[has] = sums[has] / counts[has]
    if has.any():
        means[has] -= means[has].mean()

    return means[phase]


def _decompose(y: np.ndarray, season_length: int) -> Decomposition:
    n = len(y)
    if n < season_length or n <= 1 or season_length < 2:
        logger.debug(
            f"stl_decompose: degenerate input (n={n}, season_length={season_length})"
        )
        return Decomposition(trend=y.copy(), seasonal=np.zeros(n), residual=np.zeros(n))

    trend = centered_moving_average(y, season_length)
    seasonal = seasonal_component(y - trend, season_length)
    residual = y - trend - seasonal

    return Decomposition(trend=trend, seasonal=seasonal, residual=residual)


def stl_decompose(values, season_length: int = STL_SEASON_LENGTH, dates=None) -> Decomposition:
    """
    Decompose a series into trend, seasonal and residual components.

    Args:
        values: Series values; NaN marks a missing point
        season_length: Period of the seasonal cycle in samples
        dates: Optional dates; when given, the series is decomposed in date
               order and the components come back in the caller's order
               (rows without a usable date are NaN)

    Returns:
        Decomposition with three arrays of the input length. Residual is
        NaN where the value is missing. For a series shorter than one season
        (or n <= 1, or season_length < 2) the trend is a copy of the values
        and the other two components are zero.
    """
    season_length = int(season_length)

    if dates is None:
        return _decompose(as_values(values), season_length)

    series = prepare_series(dates, values)
    n = series.size
    order = series.order

    part = _decompose(series.values[order], season_length)

    out = Decomposition(
        trend=np.full(n, np.nan),
        seasonal=np.full(n, np.nan),
        residual=np.full(n, np.nan),
    )
    out.trend[order] = part.trend
    out.seasonal[order] = part.seasonal
    out.residual[order] = part.residual
    return out
