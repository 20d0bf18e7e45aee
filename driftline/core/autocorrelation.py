"""
Autocorrelation Engine

ACF: Pearson correlation between v[i] and v[i-k] over every i where both
are finite (pairwise deletion), with the number of pairs actually used.

PACF: at lag 1 equal to the ACF; at lag k > 1 the partial correlation of
v[i] and v[i-k] controlling for v[i-1] .. v[i-k+1] (OLS residuals, rows
with any missing entry dropped).

The "no autocorrelation" band is +/- z / sqrt(n_finite).
"""

import logging

import numpy as np

from driftline.config.defaults import DEFAULT_MAX_LAG, NORMAL_CONFIDENCE_Z
from driftline.core.results import AutocorrelationResult, LagCorrelation
from driftline.primitives.matrix.ols import partial_correlation
from driftline.primitives.pairwise.correlation import pearson
from driftline.validation.series import as_values

logger = logging.getLogger(__name__)


def acf_confidence(values, z: float = NORMAL_CONFIDENCE_Z) -> float:
    """Half-width z / sqrt(n) of the white-noise band, n = finite count."""
    n = int(np.sum(np.isfinite(as_values(values))))
    if n == 0:
        return np.nan
    return float(z / np.sqrt(n))


def _clamp_lag(max_lag, n: int, n_finite: int) -> int:
    try:
        lag = int(max_lag)
    except (TypeError, ValueError):
        logger.warning(f"max_lag {max_lag!r} is not a number, using {DEFAULT_MAX_LAG}")
        lag = DEFAULT_MAX_LAG
    return max(1, min(lag, n_finite - 1, n - 1))


def _lag_pair(y: np.ndarray, k: int):
    """(v[i], v[i-k]) for i = k .. n-1."""
    return y[k:], y[:len(y) - k]


def compute_autocorrelation(
    values,
    max_lag: int = DEFAULT_MAX_LAG,
    z: float = NORMAL_CONFIDENCE_Z,
) -> AutocorrelationResult:
    """
    Autocorrelation function for lags 0..max_lag.

    Args:
        values: Series in time order; NaN marks a missing point
        max_lag: Largest lag, clamped to [1, min(n_finite - 1, n - 1)]
        z: Critical value for the confidence band

    Returns:
        AutocorrelationResult. Lag 0 is 1.0 when the series has variance
        (NaN otherwise). Fewer than 2 finite values gives an empty result
        with NaN confidence.
    """
    y = as_values(values)
    n = len(y)
    ok = np.isfinite(y)
    n_finite = int(ok.sum())

    if n_finite < 2:
        logger.debug(f"compute_autocorrelation: {n_finite} finite value(s), nothing to correlate")
        return AutocorrelationResult(values=[], confidence=np.nan)

    lag_max = _clamp_lag(max_lag, n, n_finite)

    finite_vals = y[ok]
    lag0 = 1.0 if np.ptp(finite_vals) > 0 else np.nan
    entries = [LagCorrelation(lag=0, value=lag0, pairs=n_finite)]

    for k in range(1, lag_max + 1):
        cur, lagged = _lag_pair(y, k)
        pairs = int(np.sum(np.isfinite(cur) & np.isfinite(lagged)))
        entries.append(LagCorrelation(lag=k, value=pearson(cur, lagged), pairs=pairs))

    return AutocorrelationResult(values=entries, confidence=float(z / np.sqrt(n_finite)))


def compute_partial_autocorrelation(
    values,
    max_lag: int = DEFAULT_MAX_LAG,
    z: float = NORMAL_CONFIDENCE_Z,
) -> AutocorrelationResult:
    """
    Partial autocorrelation function for lags 1..max_lag.

    Args:
        values: Series in time order; NaN marks a missing point
        max_lag: Largest lag, clamped like compute_autocorrelation
        z: Critical value for the confidence band

    Returns:
        AutocorrelationResult with partial=True. pairs counts the complete
        rows (target, lagged value and every intermediate lag finite).
    """
    y = as_values(values)
    n = len(y)
    n_finite = int(np.sum(np.isfinite(y)))

    if n_finite < 2:
        logger.debug(f"compute_partial_autocorrelation: {n_finite} finite value(s)")
        return AutocorrelationResult(values=[], confidence=np.nan, partial=True)

    lag_max = _clamp_lag(max_lag, n, n_finite)
    entries = []

    for k in range(1, lag_max + 1):
        cur, lagged = _lag_pair(y, k)
        m = len(cur)

        if k == 1:
            pairs = int(np.sum(np.isfinite(cur) & np.isfinite(lagged)))
            entries.append(LagCorrelation(lag=1, value=pearson(cur, lagged), pairs=pairs))
            continue

        # Columns v[i-1] .. v[i-k+1] for i = k .. n-1
        controls = np.column_stack([y[k - j:k - j + m] for j in range(1, k)])
        complete = np.isfinite(cur) & np.isfinite(lagged) & np.all(np.isfinite(controls), axis=1)

        entries.append(LagCorrelation(
            lag=k,
            value=partial_correlation(cur, lagged, controls),
            pairs=int(complete.sum()),
        ))

    return AutocorrelationResult(
        values=entries,
        confidence=float(z / np.sqrt(n_finite)),
        partial=True,
    )
