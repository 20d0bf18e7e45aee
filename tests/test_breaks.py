"""
Tests for Rolling Crossover Break Detection.

Short/long rolling-mean crossings with a minimum post-crossing gap.
"""

import numpy as np
import pytest

from driftline.core.breaks import crossover_indices, detect_usage_breakpoints
from driftline.core.rolling import compute_usage_rolling


class TestCrossovers:
    """Crossing rules on hand-built mean pairs."""

    def test_upward_crossing(self):
        short = [1.0, 1.0, 3.0]
        long = [2.0, 2.0, 2.0]
        assert detect_usage_breakpoints(short, long, min_delta=0.75) == [2]

    def test_downward_crossing(self):
        short = [3.0, 3.0, 1.0]
        long = [2.0, 2.0, 2.0]
        assert detect_usage_breakpoints(short, long, min_delta=0.75) == [2]

    def test_small_crossing_ignored(self):
        """Crossing by less than min_delta is not a break."""
        short = [1.9, 2.5]
        long = [2.0, 2.0]
        assert detect_usage_breakpoints(short, long, min_delta=0.75) == []

    def test_zero_then_move_counts(self):
        short = [2.0, 3.0]
        long = [2.0, 2.0]
        assert detect_usage_breakpoints(short, long, min_delta=0.5) == [1]

    def test_staying_on_one_side_is_not_a_crossing(self):
        short = [3.0, 5.0, 4.0]
        long = [2.0, 2.0, 2.0]
        assert detect_usage_breakpoints(short, long, min_delta=0.1) == []

    def test_missing_pair_skipped(self):
        short = [1.0, np.nan, 3.0]
        long = [2.0, 2.0, 2.0]
        assert len(crossover_indices(short, long, 0.5)) == 0

    def test_returns_dates(self):
        dates = ['2024-01-01', '2024-01-02', '2024-01-03']
        out = detect_usage_breakpoints([1, 1, 3], [2, 2, 2], dates=dates, min_delta=0.5)
        assert out == ['2024-01-03']

    def test_short_input(self):
        assert detect_usage_breakpoints([1.0], [2.0]) == []
        assert detect_usage_breakpoints([], []) == []


class TestOnRollingMeans:
    """Crossovers of 7- and 30-day means on a synthetic usage record."""

    def test_level_drop_detected_after_change(self):
        """Usage drops from 8h to 1h: the 7-day mean crosses below the 30-day mean."""
        dates = np.datetime64('2024-01-01') + np.arange(90)
        hours = np.concatenate([np.full(60, 8.0), np.full(30, 1.0)])
        rolling = compute_usage_rolling(dates, hours, windows=[7, 30])

        idx = crossover_indices(rolling[7].avg, rolling[30].avg, 0.75)
        # First mixed window: 7 * (1/7 - 1/30) = 0.77 below the long mean
        assert list(idx) == [60]

    def test_constant_usage_has_no_breaks(self):
        dates = np.datetime64('2024-01-01') + np.arange(60)
        rolling = compute_usage_rolling(dates, np.full(60, 6.0), windows=[7, 30])

        assert detect_usage_breakpoints(rolling[7].avg, rolling[30].avg, dates) == []
