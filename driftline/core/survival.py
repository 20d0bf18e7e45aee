"""
Kaplan-Meier Survival

Product-limit estimate for fully observed (uncensored) durations, e.g.
how long runs of compliant nights last before they break.

    S(t_j) = prod_{i <= j} (1 - d_i / n_i)

with Greenwood variance and log-log confidence bounds:

    G_j  = sum_{i <= j} d_i / (n_i (n_i - d_i))      (terms with n_i = d_i skipped)
    se_j = sqrt(G_j) / |log S_j|
    CI   = exp(-exp(log(-log S_j) +/- z * se_j))

Bounds are NaN where S is 0 or 1.
"""

import logging

import numpy as np

from driftline.config.defaults import NORMAL_CONFIDENCE_Z
from driftline.core.results import SurvivalCurve
from driftline.validation.series import as_values

logger = logging.getLogger(__name__)


def km_survival(durations, z: float = NORMAL_CONFIDENCE_Z) -> SurvivalCurve:
    """
    Kaplan-Meier curve at each distinct duration.

    Args:
        durations: Observed durations; non-finite and negative entries are
                   ignored
        z: Critical value for the confidence band

    Returns:
        SurvivalCurve with times, survival, lower, upper, at_risk and
        events arrays of equal length. Empty for empty input.
    """
    d = as_values(durations)
    d = d[np.isfinite(d) & (d >= 0)]
    if len(d) == 0:
        logger.debug("km_survival: no usable durations")
        return SurvivalCurve()

    times, events = np.unique(d, return_counts=True)
    n = len(d)
    at_risk = n - np.concatenate([[0], np.cumsum(events)[:-1]])

    survival = np.cumprod(1.0 - events / at_risk)

    usable = at_risk > events
    terms = np.zeros(len(times))
    terms[usable] = events[usable] / (at_risk[usable] * (at_risk[usable] - events[usable]))
    greenwood = np.cumsum(terms)

    lower = np.full(len(times), np.nan)
    upper = np.full(len(times), np.nan)

    inside = (survival > 0) & (survival < 1)
    with np.errstate(divide='ignore', invalid='ignore'):
        log_s = np.log(np.where(inside, survival, 0.5))
        abs_log_s = np.abs(log_s)
        ok = inside & (abs_log_s > 1e-12) & np.isfinite(abs_log_s)

        se = np.sqrt(greenwood[ok]) / abs_log_s[ok]
        loglog = np.log(-log_s[ok])
        lower[ok] = np.exp(-np.exp(loglog + z * se))
        upper[ok] = np.exp(-np.exp(loglog - z * se))

    return SurvivalCurve(
        times=times.astype(np.float64),
        survival=survival,
        lower=lower,
        upper=upper,
        at_risk=at_risk.astype(np.int64),
        events=events.astype(np.int64),
    )
