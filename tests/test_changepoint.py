"""
Tests for penalized least-squares change points.
"""

import numpy as np
import pytest

from driftline.core.changepoint import (
    change_point_indices,
    detect_change_points,
    segment_summary,
)


class TestChangePoints:
    """Optimal partitioning on piecewise-constant series."""

    def test_single_step(self):
        """30 ones then 30 fives: exactly one change, at index 30."""
        series = [1.0] * 30 + [5.0] * 30
        dates = np.datetime64('2024-01-01') + np.arange(60)

        cps = detect_change_points(series, dates, penalty=8)

        assert len(cps) == 1
        assert cps[0] == np.datetime64('2024-01-31')

    def test_indices_without_dates(self):
        series = [1.0] * 30 + [5.0] * 30
        assert detect_change_points(series, penalty=8) == [30]

    def test_multiple_regimes(self):
        series = np.concatenate([np.full(20, 0.0), np.full(20, 10.0), np.full(20, 4.0)])
        assert change_point_indices(series, penalty=5) == [20, 40]

    def test_constant_series_has_none(self):
        assert change_point_indices(np.full(50, 3.0), penalty=1) == []

    def test_huge_penalty_suppresses_changes(self):
        series = [1.0] * 10 + [2.0] * 10
        assert change_point_indices(series, penalty=1e6) == []

    def test_noisy_step(self):
        rng = np.random.default_rng(1)
        series = np.concatenate([rng.normal(2, 0.3, 80), rng.normal(6, 0.3, 80)])

        cps = change_point_indices(series, penalty=10)
        assert len(cps) == 1
        assert abs(cps[0] - 80) <= 2

    def test_missing_values_map_back_to_caller_indices(self):
        series = [1.0] * 10 + [np.nan, np.nan] + [9.0] * 10
        assert change_point_indices(series, penalty=5) == [12]

    def test_empty(self):
        assert detect_change_points([], penalty=10) == []
        assert change_point_indices([np.nan, np.nan]) == []


class TestSegmentSummary:
    """Per-segment means and shift strength."""

    def test_segments(self):
        series = [1.0] * 5 + [4.0] * 5
        segs = segment_summary(series, [5])

        assert len(segs) == 2
        assert (segs[0].start, segs[0].end) == (0, 4)
        assert (segs[1].start, segs[1].end) == (5, 9)
        assert segs[0].mean == pytest.approx(1.0)
        assert segs[1].mean == pytest.approx(4.0)
        assert np.isnan(segs[0].strength)
        assert segs[1].strength == pytest.approx(3.0)

    def test_no_changes_is_one_segment(self):
        segs = segment_summary([1.0, 2.0, 3.0], [])
        assert len(segs) == 1
        assert segs[0].count == 3
        assert segs[0].to_dict()['strength'] is None

    def test_empty(self):
        assert segment_summary([], [3]) == []
