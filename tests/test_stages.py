"""
Tests for the series analysis and comparison stages.
"""

import json

import numpy as np
import pytest

from driftline.config import load_settings
from driftline.stages import (
    analyze_series,
    compare_by_threshold,
    compare_groups,
    compare_ranges,
)
from driftline.stages.comparison import range_mask


def step_series(n=120, at=60, before=7.0, after=3.0, noise=0.3, seed=0):
    rng = np.random.default_rng(seed)
    dates = np.datetime64('2024-01-01') + np.arange(n)
    values = np.where(np.arange(n) < at, before, after) + noise * rng.normal(size=n)
    return dates, values


class TestAnalyzeSeries:
    """End-to-end run over one synthetic series."""

    def test_finds_level_shift(self):
        dates, values = step_series()
        a = analyze_series(dates, values)

        assert len(a) == 120
        assert list(a.change_points) == [dates[60]]
        assert len(a.segments) == 2
        assert a.segments[0].mean == pytest.approx(7.0, abs=0.2)
        assert a.segments[1].mean == pytest.approx(3.0, abs=0.2)
        assert a.summary['n_change_points'] == 1
        assert a.summary['n_breakpoints'] == len(a.breakpoints)

    def test_sorts_input(self):
        dates, values = step_series(n=40, at=20)
        perm = np.random.default_rng(1).permutation(40)

        a = analyze_series(dates[perm], values[perm])
        np.testing.assert_array_equal(a.dates, dates)
        np.testing.assert_allclose(a.values, values)

    def test_drops_rows_without_date(self, caplog):
        dates = ['2024-01-01', 'nope', '2024-01-02', '2024-01-03']
        a = analyze_series(dates, [1.0, 2.0, 3.0, 4.0])

        assert len(a) == 3
        assert "dropped 1 row" in caplog.text

    def test_shapes(self):
        dates, values = step_series(n=90)
        settings = load_settings(loess_steps=25, max_lag=10)
        a = analyze_series(dates, values, settings)

        table = a.rolling_table()
        assert {'date', 'value', 'avg7', 'avg30', 'compliance4_30'} <= set(table)
        assert all(len(col) == 90 for col in table.values())
        assert len(a.decomposition.trend) == 90
        assert len(a.acf) == 11
        assert len(a.pacf) == 10
        assert len(a.trend['x']) == 25
        assert len(a.trend['loess']) == 25

    def test_summary_fields(self):
        dates, values = step_series()
        s = analyze_series(dates, values).summary

        for key in ('count', 'mean', 'median', 'longest_compliance', 'longest_strict',
                    'first_mean', 'last_mean', 'delta'):
            assert key in s
        assert s['delta'] == pytest.approx(-4.0, abs=0.3)
        assert s['longest_compliance'] == 60

    def test_night_counts_in_summary(self):
        dates, values = step_series()
        s = analyze_series(dates, values).summary

        assert s['nights_compliant'] + s['nights_short'] == s['count']
        assert s['nights_strict'] <= s['nights_compliant']
        assert s['nights_above_alert'] is None

    def test_alert_count_with_ahi_profile(self):
        dates = np.datetime64('2024-01-01') + np.arange(42)
        ahi = np.tile([1.2, 6.0, 4.9, 5.0, 12.5, np.nan], 7)
        s = analyze_series(dates, ahi, load_settings(profile='ahi')).summary
        assert s['nights_above_alert'] == 14

    def test_to_dict_is_strict_json(self):
        dates, values = step_series(n=50)
        values[[3, 17]] = np.nan

        d = analyze_series(dates, values).to_dict()
        text = json.dumps(d, allow_nan=False)

        assert d['start'] == '2024-01-01'
        assert d['end'] == '2024-02-19'
        assert all(isinstance(s, str) for s in d['change_points'])
        assert '"avg7"' in text
        assert d['summary']['missing'] == 2

    def test_penalty_disabled(self):
        dates, values = step_series()
        settings = load_settings()
        settings.change_point_penalty = None

        a = analyze_series(dates, values, settings)
        assert len(a.change_points) == 0
        assert len(a.segments) == 1

    def test_empty(self):
        a = analyze_series([], [])
        assert len(a) == 0
        assert a.to_dict()['start'] is None


class TestCompareRanges:
    def setup_method(self):
        self.dates = np.datetime64('2024-01-01') + np.arange(20)
        self.values = np.arange(20, dtype=float)

    def test_two_periods(self):
        c = compare_ranges(
            self.dates, self.values,
            ('2024-01-01', '2024-01-05'),
            ('2024-01-10', None),
        )

        assert c.count_a == 5
        assert c.count_b == 11
        assert c.mean_a == 2.0
        assert c.mean_b == 14.0
        assert c.delta == 12.0
        assert c.test.method == 'exact'
        assert c.test.effect == 1.0

    def test_empty_range(self):
        c = compare_ranges(self.dates, self.values, ('2030-01-01', None), None)

        assert c.count_a == 0
        assert c.count_b == 20
        assert np.isnan(c.mean_a)
        assert c.test.method == 'NA'
        json.dumps(c.to_dict(), allow_nan=False)

    def test_range_mask_inclusive(self):
        mask = range_mask(self.dates, ('2024-01-02', '2024-01-04'))
        assert np.flatnonzero(mask).tolist() == [1, 2, 3]


class TestCompareByThreshold:
    def test_split(self):
        c = compare_by_threshold([5, 6, 7, 8, np.nan], [1, 2, 3, 4, 5])

        assert c.count_a == 2
        assert c.count_b == 2
        assert c.delta == 2.0
        assert c.correlation == pytest.approx(1.0)
        assert c.to_dict()['correlation'] == pytest.approx(1.0)

    def test_custom_split(self):
        c = compare_by_threshold([1, 2, 3, 4], [10, 20, 30, 40], split=2)
        assert c.count_a == 1
        assert c.mean_b == 30.0

    def test_compare_groups_drops_missing(self):
        c = compare_groups([1.0, np.nan], [2.0, np.inf, 3.0])
        assert (c.count_a, c.count_b) == (1, 2)
        assert c.to_dict()['correlation'] is None
