"""
Least-Squares Primitives

Gauss-Jordan inversion, OLS residuals and partial correlation.
"""

import logging

import numpy as np
from typing import Optional

from driftline.primitives.pairwise.correlation import pearson

logger = logging.getLogger(__name__)

SINGULAR_PIVOT = 1e-12


def invert_matrix(a) -> Optional[np.ndarray]:
    """
    Invert a square matrix by Gauss-Jordan elimination with partial pivoting.

    Parameters
    ----------
    a : array-like
        Square matrix (k, k)

    Returns
    -------
    np.ndarray or None
        Inverse matrix, or None when a pivot falls below 1e-12 (singular)
    """
    a = np.array(a, dtype=np.float64)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"invert_matrix needs a square matrix, got shape {a.shape}")

    k = a.shape[0]
    m = np.hstack([a, np.eye(k)])

    for col in range(k):
        pivot = col + int(np.argmax(np.abs(m[col:, col])))
        pv = m[pivot, col]
        if abs(pv) < SINGULAR_PIVOT:
            return None

        if pivot != col:
            m[[col, pivot]] = m[[pivot, col]]

        m[col] /= pv
        factors = m[:, col].copy()
        factors[col] = 0.0
        m -= np.outer(factors, m[col])

    return m[:, k:]


def _design(controls: np.ndarray) -> np.ndarray:
    """Intercept-augmented design matrix [1, controls]."""
    return np.column_stack([np.ones(len(controls)), controls])


def _residualize(y: np.ndarray, design: np.ndarray, xtx_inv: np.ndarray) -> np.ndarray:
    beta = xtx_inv @ (design.T @ y)
    return y - design @ beta


def _as_columns(controls, n: int) -> np.ndarray:
    """Controls as an (n, p) matrix; an empty input is zero columns, not zero rows."""
    c = np.asarray(controls, dtype=np.float64)
    if c.size == 0:
        return np.empty((n, 0))
    if c.ndim == 1:
        c = c[:, None]
    if c.ndim != 2:
        raise ValueError(f"controls must be 1-D or 2-D, got {c.ndim} dimensions")
    return c[:n]


def ols_residuals(y, controls) -> np.ndarray:
    """
    Residuals of y regressed on [1, controls].

    Parameters
    ----------
    y : array-like
        Response (n,)
    controls : array-like
        Control columns (n, p); a 1-D array is one column

    Returns
    -------
    np.ndarray
        y - X @ beta. A copy of y when there are no controls or X'X is
        singular.
    """
    y = np.asarray(y, dtype=np.float64).ravel()
    c = _as_columns(controls, len(y))
    if len(y) == 0 or c.shape[1] == 0:
        return y.copy()

    design = _design(c)
    xtx_inv = invert_matrix(design.T @ design)
    if xtx_inv is None:
        logger.debug("ols_residuals: singular design, returning response unchanged")
        return y.copy()

    return _residualize(y, design, xtx_inv)


def partial_correlation(x, y, controls) -> float:
    """
    Correlation of x and y after removing the linear effect of controls.

    Parameters
    ----------
    x, y : array-like
        Signals (n,)
    controls : array-like or None
        Control columns, rows aligned with x and y

    Returns
    -------
    float
        Pearson correlation of the OLS residuals. Plain Pearson when there
        are no controls or the controls are collinear. NaN with fewer than
        3 complete rows.

    Notes
    -----
    Rows with any non-finite entry (x, y or a control) are dropped first.
    """
    x = np.asarray(x, dtype=np.float64).ravel()
    y = np.asarray(y, dtype=np.float64).ravel()
    n = min(len(x), len(y))
    if n < 3:
        return np.nan

    if controls is None:
        return pearson(x[:n], y[:n])

    c = _as_columns(controls, n)
    if c.shape[1] == 0:
        return pearson(x[:n], y[:n])

    n = min(n, len(c))
    x, y, c = x[:n], y[:n], c[:n]

    mask = np.isfinite(x) & np.isfinite(y) & np.all(np.isfinite(c), axis=1)
    if mask.sum() < 3:
        return np.nan
    x, y, c = x[mask], y[mask], c[mask]

    design = _design(c)
    xtx_inv = invert_matrix(design.T @ design)
    if xtx_inv is None:
        logger.debug("partial_correlation: collinear controls, falling back to pearson")
        return pearson(x, y)

    return pearson(_residualize(x, design, xtx_inv), _residualize(y, design, xtx_inv))
