"""
Reader: all table reads go through here.

No other module should call pl.read_csv / pl.read_parquet directly.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import polars as pl

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = ('.csv', '.parquet')

# Timestamp layouts accepted in string date columns, besides plain YYYY-MM-DD
_DATETIME_FORMATS = ('%Y-%m-%d %H:%M:%S', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M')


def read_table(path) -> pl.DataFrame:
    """Read a CSV or Parquet file into a DataFrame."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"No such input file: {p}")

    suffix = p.suffix.lower()
    if suffix == '.parquet':
        return pl.read_parquet(str(p))
    if suffix == '.csv':
        return pl.read_csv(str(p), try_parse_dates=True, infer_schema_length=10000)

    raise ValueError(
        f"Unsupported input format '{p.suffix}' ({p}); expected one of {', '.join(SUPPORTED_SUFFIXES)}"
    )


def list_columns(path) -> List[str]:
    return read_table(path).columns


def _date_expr(df: pl.DataFrame, column: str) -> pl.Expr:
    """Expression turning the date column into pl.Date, nulls where unparseable."""
    dtype = df.schema[column]
    col = pl.col(column)

    if dtype == pl.Date:
        return col
    if dtype == pl.Datetime:
        return col.dt.date()
    if dtype == pl.String:
        return pl.coalesce(
            col.str.to_date('%Y-%m-%d', strict=False),
            *(col.str.to_datetime(fmt, strict=False).dt.date() for fmt in _DATETIME_FORMATS),
        )

    raise ValueError(f"Column '{column}' has type {dtype}, expected a date or date string")


def load_series(path, date_column: str = 'date', value_column: str = 'value') -> Tuple[np.ndarray, np.ndarray]:
    """
    Load one (date, value) series from a CSV or Parquet file.

    Args:
        path: Input file
        date_column: Column holding dates (Date, Datetime or ISO strings)
        value_column: Column holding the numeric metric

    Returns:
        (dates, values): datetime64[D] and float64 arrays sorted by date.
        Rows with an unparseable date are dropped; unparseable values
        become NaN.

    Raises:
        FileNotFoundError: path does not exist
        KeyError: a requested column is missing
    """
    df = read_table(path)

    missing = [c for c in (date_column, value_column) if c not in df.columns]
    if missing:
        raise KeyError(
            f"Column(s) {', '.join(missing)} not in {path}. Available: {', '.join(df.columns)}"
        )

    df = df.select(
        _date_expr(df, date_column).alias('date'),
        pl.col(value_column).cast(pl.Float64, strict=False).alias('value'),
    )

    n_bad = df['date'].null_count()
    if n_bad:
        logger.warning(f"load_series: dropped {n_bad} row(s) with an unparseable date in {path}")
        df = df.filter(pl.col('date').is_not_null())

    df = df.sort('date', maintain_order=True)

    dates = df['date'].cast(pl.Int32).to_numpy().astype(np.int64).astype('datetime64[D]')
    values = df['value'].fill_null(float('nan')).to_numpy().astype(np.float64)

    logger.debug(f"load_series: {len(dates)} row(s) from {path}")
    return dates, values


def load_events(
    path,
    duration_column: str = 'Data/Duration',
    time_column: str = 'DateTime',
    type_column: Optional[str] = 'Event',
) -> Dict[str, np.ndarray]:
    """
    Load per-event detail rows (one row per apnea or other respiratory event).

    Rows are kept even when their timestamp or duration is unusable; the
    event engine decides which column each row contributes to.

    Args:
        path: Input file
        duration_column: Event duration in seconds
        time_column: Event timestamp (Date, Datetime or ISO strings)
        type_column: Event label column; None when the file has no labels

    Returns:
        dict with 'durations' (float64, NaN where missing), 'dates'
        (datetime64[D], NaT where missing) and 'types' (object array of
        labels, or None)

    Raises:
        FileNotFoundError: path does not exist
        KeyError: a requested column is missing
    """
    df = read_table(path)

    wanted = [c for c in (duration_column, time_column, type_column) if c is not None]
    missing = [c for c in wanted if c not in df.columns]
    if missing:
        raise KeyError(
            f"Column(s) {', '.join(missing)} not in {path}. Available: {', '.join(df.columns)}"
        )

    columns = [
        pl.col(duration_column).cast(pl.Float64, strict=False).alias('duration'),
        _date_expr(df, time_column).alias('date'),
    ]
    if type_column is not None:
        columns.append(pl.col(type_column).cast(pl.String).alias('type'))
    df = df.select(columns)

    no_date = df['date'].is_null().to_numpy()
    day = df['date'].cast(pl.Int32).fill_null(0).to_numpy().astype(np.int64)
    dates = day.astype('datetime64[D]')
    dates[no_date] = np.datetime64('NaT')

    out = {
        'durations': df['duration'].fill_null(float('nan')).to_numpy().astype(np.float64),
        'dates': dates,
        'types': df['type'].to_numpy().astype(object) if type_column is not None else None,
    }
    logger.debug(f"load_events: {len(df)} row(s) from {path}")
    return out
