"""
Tests for the Mann-Whitney U test.
"""

import math

import numpy as np
import pytest
from scipy.stats import mannwhitneyu

from driftline.core.hypothesis import (
    mann_whitney_u_test,
    rank_sum_distribution,
    tie_correction,
)


class TestExact:
    """Small samples use the exact rank-sum distribution."""

    def test_fully_separated_pair(self):
        r = mann_whitney_u_test([1, 2], [3, 4])

        assert r.method == 'exact'
        assert r.effect == 1.0
        assert r.u == 0.0
        assert r.u1 == 0.0
        assert r.u2 == 4.0
        assert r.p == pytest.approx(1 / 3)

    def test_matches_scipy_exact_without_ties(self):
        rng = np.random.default_rng(0)
        a = rng.normal(size=8)
        b = rng.normal(0.8, 1, size=9)

        r = mann_whitney_u_test(a, b)
        ref = mannwhitneyu(a, b, alternative='two-sided', method='exact')

        assert r.method == 'exact'
        assert r.p == pytest.approx(ref.pvalue, rel=1e-9)
        assert r.u1 == pytest.approx(ref.statistic)

    def test_distribution_counts_all_subsets(self):
        doubled = 2 * np.arange(1, 9)
        dist = rank_sum_distribution(doubled, 3)
        assert int(dist.sum()) == math.comb(8, 3)

    def test_ties_handled_with_half_ranks(self):
        r = mann_whitney_u_test([1, 2, 2], [2, 3, 4])
        assert r.method == 'exact'
        assert 0.0 < r.p <= 1.0

    def test_identical_groups(self):
        r = mann_whitney_u_test([5, 5, 5], [5, 5, 5])
        assert r.p == 1.0
        assert r.z == 0.0
        assert r.effect == 0.0


class TestNormal:
    """Large samples use the tie-corrected normal approximation."""

    def test_method_switch(self):
        a = np.arange(14.0)
        assert mann_whitney_u_test(a, a + 0.5).method == 'exact'
        assert mann_whitney_u_test(a, np.arange(15.0) + 0.5).method == 'normal'

    def test_matches_scipy_asymptotic(self):
        rng = np.random.default_rng(1)
        a = rng.normal(size=60)
        b = rng.normal(0.5, 1, size=70)

        r = mann_whitney_u_test(a, b)
        ref = mannwhitneyu(a, b, alternative='two-sided', method='asymptotic', use_continuity=False)

        assert r.method == 'normal'
        assert r.p == pytest.approx(ref.pvalue, rel=1e-6)

    def test_exact_failure_falls_back(self, monkeypatch):
        import driftline.core.hypothesis as hyp

        def boom(*args):
            raise MemoryError()

        monkeypatch.setattr(hyp, '_exact_p', boom)
        with pytest.warns(RuntimeWarning, match="normal approximation"):
            r = mann_whitney_u_test([1.0, 2.0, 3.0], [4.0, 5.0, 6.0])

        assert r.method == 'normal'
        assert 0.0 < r.p < 1.0

    def test_tie_correction(self):
        assert tie_correction(np.array([1.0, 2.0, 3.0])) == 1.0
        # one tie group of 2 in n = 4: 1 - 6 / 60
        assert tie_correction(np.array([1.0, 1.0, 2.0, 3.0])) == pytest.approx(0.9)


class TestSymmetry:
    """Swapping groups negates the effect and keeps p."""

    @pytest.mark.parametrize('n1,n2', [(3, 4), (10, 12), (40, 35)])
    def test_swap(self, n1, n2):
        rng = np.random.default_rng(n1 * 100 + n2)
        a = np.round(rng.normal(size=n1), 1)
        b = np.round(rng.normal(0.3, 1, size=n2), 1)

        ab = mann_whitney_u_test(a, b)
        ba = mann_whitney_u_test(b, a)

        assert ab.method == ba.method
        assert ab.p == pytest.approx(ba.p)
        assert ab.effect == pytest.approx(-ba.effect)
        assert ab.effect_ci_low == pytest.approx(-ba.effect_ci_high)

    def test_effect_ci_contains_effect(self):
        r = mann_whitney_u_test([1.0, 3.0, 5.0, 7.0], [2.0, 4.0, 6.0, 8.0, 9.0])
        assert r.effect_ci_low <= r.effect <= r.effect_ci_high


class TestDegenerate:
    """Empty groups give NaN and method 'NA'."""

    def test_empty_group(self):
        r = mann_whitney_u_test([], [1, 2, 3])
        assert r.method == 'NA'
        assert np.isnan(r.p)
        assert np.isnan(r.effect)

    def test_missing_values_dropped(self):
        r = mann_whitney_u_test([1.0, np.nan, 2.0], [3.0, 4.0, np.inf])
        assert r.p == pytest.approx(1 / 3)

    def test_to_dict_keys(self):
        d = mann_whitney_u_test([], []).to_dict()
        assert d['method'] == 'NA'
        assert d['U'] is None
