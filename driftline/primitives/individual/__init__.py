"""
Individual Signal Primitives

Single-array computations: quantiles and summaries.
"""

from .statistics import finite, quantile, summarize

__all__ = ['finite', 'quantile', 'summarize']
