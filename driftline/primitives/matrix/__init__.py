"""
Matrix Primitives

Least squares: matrix inversion, OLS residuals, partial correlation.
"""

from .ols import invert_matrix, ols_residuals, partial_correlation

__all__ = ['invert_matrix', 'ols_residuals', 'partial_correlation']
