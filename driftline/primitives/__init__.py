"""
Primitives Library

Atomic functions, numpy in, numbers out:

Individual: single-array computations
- statistics: finite, quantile, summarize

Pairwise: two-array computations
- correlation: aligned_pairs, pearson, rank, spearman

Matrix: least squares
- ols: invert_matrix, ols_residuals, partial_correlation

Distributions:
- normal_cdf, normal_quantile, two_sided_p, wilson_interval
"""

from .individual import finite, quantile, summarize
from .pairwise import aligned_pairs, pearson, rank, spearman
from .matrix import invert_matrix, ols_residuals, partial_correlation
from .distributions import normal_cdf, normal_quantile, two_sided_p, wilson_interval

__all__ = [
    # Individual
    'finite',
    'quantile',
    'summarize',
    # Pairwise
    'aligned_pairs',
    'pearson',
    'rank',
    'spearman',
    # Matrix
    'invert_matrix',
    'ols_residuals',
    'partial_correlation',
    # Distributions
    'normal_cdf',
    'normal_quantile',
    'two_sided_p',
    'wilson_interval',
]
