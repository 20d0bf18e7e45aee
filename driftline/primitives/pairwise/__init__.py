"""
Pairwise Signal Primitives

Two-array computations: Pearson and Spearman correlation.
"""

from .correlation import aligned_pairs, pearson, rank, spearman

__all__ = ['aligned_pairs', 'pearson', 'rank', 'spearman']
