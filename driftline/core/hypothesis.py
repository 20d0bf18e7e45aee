"""
Mann-Whitney U Test

Two-sided rank-sum test of group A against group B, with a rank-biserial
effect size and its confidence interval.

Small pooled samples (n1 + n2 <= exact_max_n) get an exact p-value from the
permutation distribution of the rank sum, built by subset-sum dynamic
programming over doubled ranks (so tied half-ranks stay integer). Larger
samples use the tie-corrected normal approximation.

Effect: 2 * CL - 1 with CL = U2 / (n1 * n2) = P(B > A) (ties count half).
Positive effect means B tends to be larger. Swapping A and B negates the
effect and leaves p unchanged.
"""

import logging
import math
import warnings

import numpy as np
from scipy.stats import rankdata

from driftline.config.defaults import MANN_WHITNEY_EXACT_MAX_N, NORMAL_CONFIDENCE_Z
from driftline.core.results import MannWhitneyResult
from driftline.primitives.distributions import two_sided_p, wilson_interval
from driftline.primitives.individual.statistics import finite

logger = logging.getLogger(__name__)

_INT64_SAFE = 2 ** 62


def tie_correction(pooled: np.ndarray) -> float:
    """1 - sum(t^3 - t) / (n^3 - n) over tie groups of size t."""
    n = len(pooled)
    if n < 2:
        return 0.0
    _, counts = np.unique(pooled, return_counts=True)
    counts = counts.astype(np.float64)
    return float(1.0 - np.sum(counts * (counts * counts - 1.0)) / (n * (n * n - 1.0)))


def rank_sum_distribution(doubled_ranks: np.ndarray, k: int) -> np.ndarray:
    """
    Number of k-subsets of the pooled sample per doubled rank sum.

    Parameters
    ----------
    doubled_ranks : np.ndarray
        2 * rank for every pooled observation (integers)
    k : int
        Subset size (size of group A)

    Returns
    -------
    np.ndarray
        counts[s] = number of k-subsets whose doubled ranks sum to s.
        Sums to C(n, k).
    """
    doubled_ranks = np.asarray(doubled_ranks, dtype=np.int64)
    n = len(doubled_ranks)
    total = int(doubled_ranks.sum())

    dtype = np.int64 if math.comb(n, k) < _INT64_SAFE else object
    dp = np.zeros((k + 1, total + 1), dtype=dtype)
    dp[0, 0] = 1

    for r in doubled_ranks:
        r = int(r)
        # RHS copied: each observation joins a subset at most once
        dp[1:, r:] += dp[:-1, :total + 1 - r].copy()

    return dp[k]


def _exact_p(doubled_ranks: np.ndarray, n1: int, rank_sum1: float) -> float:
    n = len(doubled_ranks)
    dist = rank_sum_distribution(doubled_ranks, n1)

    mean_scaled = n1 * (n + 1)
    obs = int(round(2.0 * rank_sum1))
    sums = np.arange(len(dist))

    extreme = np.abs(sums - mean_scaled) >= abs(obs - mean_scaled)
    count = int(sum(int(c) for c in dist[extreme]))
    return min(1.0, count / math.comb(n, n1))


def mann_whitney_u_test(
    a,
    b,
    exact_max_n: int = MANN_WHITNEY_EXACT_MAX_N,
    z: float = NORMAL_CONFIDENCE_Z,
) -> MannWhitneyResult:
    """
    Two-sided Mann-Whitney U test.

    Args:
        a: Group A values; non-finite entries are dropped
        b: Group B values; non-finite entries are dropped
        exact_max_n: Largest n1 + n2 that gets the exact distribution
        z: Critical value for the effect-size interval

    Returns:
        MannWhitneyResult. method is 'exact', 'normal', or 'NA' (all NaN)
        when either group is empty.
    """
    x = finite(a)
    y = finite(b)
    n1, n2 = len(x), len(y)

    if n1 == 0 or n2 == 0:
        logger.debug(f"mann_whitney_u_test: empty group (n1={n1}, n2={n2})")
        return MannWhitneyResult()

    pooled = np.concatenate([x, y])
    n = n1 + n2
    ranks = rankdata(pooled, method='average')
    rank_sum1 = float(np.sum(ranks[:n1]))

    u1 = rank_sum1 - n1 * (n1 + 1) / 2.0
    u2 = n1 * n2 - u1
    u = min(u1, u2)
    mu = n1 * n2 / 2.0

    tie_corr = tie_correction(pooled)
    sigma = np.sqrt(n1 * n2 * (n + 1) / 12.0) * np.sqrt(max(0.0, tie_corr))
    z_stat = (u - mu) / sigma if sigma > 0 else 0.0

    method = 'normal'
    if n <= exact_max_n:
        try:
            doubled = np.rint(2.0 * ranks).astype(np.int64)
            p = _exact_p(doubled, n1, rank_sum1)
            method = 'exact'
        except MemoryError as e:
            warnings.warn(
                f"mann_whitney_u_test: exact distribution for n={n} failed ({type(e).__name__}), "
                f"using the normal approximation",
                RuntimeWarning, stacklevel=2,
            )
    if method == 'normal':
        p = two_sided_p(z_stat)

    n_pairs = n1 * n2
    cl = u2 / n_pairs
    cl_low, cl_high = wilson_interval(cl, n_pairs, z)

    return MannWhitneyResult(
        u=float(u),
        u1=float(u1),
        u2=float(u2),
        z=float(z_stat),
        p=float(p),
        effect=float(2.0 * cl - 1.0),
        effect_ci_low=float(2.0 * cl_low - 1.0),
        effect_ci_high=float(2.0 * cl_high - 1.0),
        method=method,
    )
