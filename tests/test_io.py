"""
Tests for polars-backed reads and writes.
"""

import datetime
import json

import numpy as np
import polars as pl
import pytest

from driftline.io import (
    columns_to_frame,
    list_columns,
    load_events,
    load_series,
    read_table,
    write_analysis,
    write_events,
    write_table,
)
from driftline.stages import analyze_events, analyze_series


@pytest.fixture
def events_csv(tmp_path):
    path = tmp_path / 'details.csv'
    path.write_text(
        "Event,DateTime,Data/Duration\n"
        "Obstructive,2024-01-01 23:40:00,14.0\n"
        "Hypopnea,2024-01-02 01:05:00,22.0\n"
        "ClearAirway,,35.0\n"
        "Mixed,2024-01-02 03:20:00,\n"
    )
    return path


@pytest.fixture
def nights_csv(tmp_path):
    path = tmp_path / 'nights.csv'
    path.write_text(
        "date,usage,ahi\n"
        "2024-01-03,5.5,2.0\n"
        "2024-01-01,6.5,1.5\n"
        "2024-01-02,,3.0\n"
    )
    return path


class TestReader:
    def test_load_series_sorts(self, nights_csv):
        dates, values = load_series(nights_csv, value_column='usage')

        assert dates.dtype == np.dtype('datetime64[D]')
        np.testing.assert_array_equal(
            dates, np.array(['2024-01-01', '2024-01-02', '2024-01-03'], dtype='datetime64[D]')
        )
        assert values[0] == 6.5
        assert np.isnan(values[1])
        assert values[2] == 5.5

    def test_parquet(self, tmp_path):
        path = tmp_path / 'nights.parquet'
        pl.DataFrame({
            'day': [datetime.date(2024, 3, 2), datetime.date(2024, 3, 1)],
            'epap': [8, 7],
        }).write_parquet(str(path))

        dates, values = load_series(path, date_column='day', value_column='epap')
        assert str(dates[0]) == '2024-03-01'
        np.testing.assert_array_equal(values, [7.0, 8.0])

    def test_datetime_column_truncated_to_day(self, tmp_path):
        path = tmp_path / 'nights.parquet'
        pl.DataFrame({
            'date': [datetime.datetime(2024, 3, 1, 23, 30)],
            'value': [1.0],
        }).write_parquet(str(path))

        dates, _ = load_series(path)
        assert dates[0] == np.datetime64('2024-03-01')

    def test_unparseable_dates_dropped(self, tmp_path):
        path = tmp_path / 'nights.csv'
        path.write_text("date,value\n2024-01-01,1\nsoon,2\n2024-01-02,3\n")

        dates, values = load_series(path)
        assert len(dates) == 2
        np.testing.assert_array_equal(values, [1.0, 3.0])

    def test_missing_column(self, nights_csv):
        with pytest.raises(KeyError, match="pressure"):
            load_series(nights_csv, value_column='pressure')

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_table(tmp_path / 'nope.csv')

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / 'nights.txt'
        path.write_text("date,value\n")
        with pytest.raises(ValueError, match="Unsupported"):
            read_table(path)

    def test_list_columns(self, nights_csv):
        assert list_columns(nights_csv) == ['date', 'usage', 'ahi']


class TestWriter:
    def test_columns_to_frame_dates(self):
        df = columns_to_frame({
            'date': np.array(['2024-01-01', '2024-01-02'], dtype='datetime64[D]'),
            'x': np.array([1.0, np.nan]),
        })
        assert df.schema['date'] == pl.Date
        assert df['date'][1] == datetime.date(2024, 1, 2)

    def test_write_table_skips_empty(self, tmp_path):
        assert write_table(pl.DataFrame(), tmp_path / 'x.parquet', verbose=False) is None

    def test_write_table_bad_suffix(self, tmp_path):
        with pytest.raises(ValueError):
            write_table(pl.DataFrame({'a': [1]}), tmp_path / 'x.json', verbose=False)

    @pytest.mark.parametrize('fmt', ['parquet', 'csv'])
    def test_write_analysis(self, tmp_path, fmt):
        dates = np.datetime64('2024-01-01') + np.arange(21)
        values = 5.0 + np.sin(np.arange(21))
        analysis = analyze_series(dates, values)

        paths = write_analysis(analysis, tmp_path / 'out', fmt=fmt, verbose=False)

        rolling = read_table(paths['rolling'])
        assert len(rolling) == 21
        assert 'avg7' in rolling.columns
        assert 'compliance4_30' in rolling.columns

        decomposition = read_table(paths['decomposition'])
        assert decomposition.columns == ['date', 'value', 'trend', 'seasonal', 'residual']

        with open(paths['summary']) as f:
            summary = json.load(f)
        assert summary['n_points'] == 21
        assert summary['start'] == '2024-01-01'

    def test_write_analysis_bad_format(self, tmp_path):
        analysis = analyze_series(['2024-01-01'], [1.0])
        with pytest.raises(ValueError):
            write_analysis(analysis, tmp_path, fmt='xlsx', verbose=False)


class TestEvents:
    def test_load_events(self, events_csv):
        rows = load_events(events_csv)

        assert list(rows['types']) == ['Obstructive', 'Hypopnea', 'ClearAirway', 'Mixed']
        np.testing.assert_array_equal(rows['durations'][:3], [14.0, 22.0, 35.0])
        assert np.isnan(rows['durations'][3])
        assert rows['dates'][0] == np.datetime64('2024-01-01')
        assert rows['dates'][1] == np.datetime64('2024-01-02')
        assert np.isnat(rows['dates'][2])

    def test_load_events_without_types(self, events_csv):
        rows = load_events(events_csv, type_column=None)
        assert rows['types'] is None
        assert len(rows['durations']) == 4

    def test_load_events_missing_column(self, events_csv):
        with pytest.raises(KeyError):
            load_events(events_csv, duration_column='Duration')

    @pytest.mark.parametrize('fmt', ['parquet', 'csv'])
    def test_write_events(self, events_csv, tmp_path, fmt):
        rows = load_events(events_csv)
        analysis = analyze_events(rows['durations'], rows['dates'], rows['types'])

        paths = write_events(analysis, tmp_path / 'out', fmt=fmt, verbose=False)

        survival = read_table(paths['survival'])
        assert survival.columns == ['duration', 'survival', 'lower', 'upper', 'at_risk', 'events']
        assert len(survival) == 2

        with open(paths['events']) as f:
            events = json.load(f)
        # the Mixed row has no duration but still counts for its night
        assert events['stats']['total_events'] == 2
        assert events['stats']['nights'] == ['2024-01-01', '2024-01-02']
        assert events['stats']['events_per_night'] == [1, 1]
