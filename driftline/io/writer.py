"""
Writer: all output writes go through here.

Tables are written with polars (Parquet or CSV); the scalar summary is JSON.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import polars as pl

OUTPUT_FORMATS = ('parquet', 'csv')


def columns_to_frame(columns: Dict[str, np.ndarray]) -> pl.DataFrame:
    """Column dict to DataFrame; datetime64 columns become pl.Date, NaN stays NaN."""
    data = {}
    for name, col in columns.items():
        arr = np.asarray(col)
        if np.issubdtype(arr.dtype, np.datetime64):
            data[name] = pl.Series(name, arr.astype('datetime64[D]').astype(np.int64)).cast(pl.Int32).cast(pl.Date)
        else:
            data[name] = pl.Series(name, arr)
    return pl.DataFrame(data)


def write_table(df: pl.DataFrame, path, verbose: bool = True) -> Optional[Path]:
    """
    Write a DataFrame as Parquet or CSV, chosen by the path suffix.

    Returns the written path, or None when df has no columns.
    """
    path = Path(path)
    if df is None or len(df.columns) == 0:
        if verbose:
            print(f"  !! Skipped {path} (empty schema, 0 columns)")
        return None

    path.parent.mkdir(parents=True, exist_ok=True)

    suffix = path.suffix.lower()
    if suffix == '.parquet':
        df.write_parquet(str(path))
    elif suffix == '.csv':
        df.write_csv(str(path))
    else:
        raise ValueError(f"Unsupported output format '{path.suffix}' ({path})")

    if verbose:
        print(f"  -> {path} ({len(df)} rows)")
    return path


def write_json(payload: Dict[str, Any], path, verbose: bool = True) -> Path:
    """Write a JSON document (NaN must already be replaced by None)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(payload, f, indent=2, allow_nan=False)

    if verbose:
        print(f"  -> {path}")
    return path


def write_analysis(analysis, output_dir, fmt: str = 'parquet', verbose: bool = True) -> Dict[str, Path]:
    """
    Write a SeriesAnalysis: rolling table, decomposition table, summary JSON.

    Args:
        analysis: driftline.stages.SeriesAnalysis
        output_dir: Directory to write into (created if needed)
        fmt: 'parquet' or 'csv' for the tables
        verbose: Print paths on write

    Returns:
        {'rolling': path, 'decomposition': path, 'summary': path}
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"fmt must be one of {OUTPUT_FORMATS}, got {fmt!r}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {
        'rolling': write_table(
            columns_to_frame(analysis.rolling_table()),
            output_dir / f'rolling.{fmt}',
            verbose=verbose,
        ),
        'decomposition': write_table(
            columns_to_frame(analysis.decomposition_table()),
            output_dir / f'decomposition.{fmt}',
            verbose=verbose,
        ),
        'summary': write_json(analysis.to_dict(), output_dir / 'summary.json', verbose=verbose),
    }
    return paths


def write_events(analysis, output_dir, fmt: str = 'parquet', verbose: bool = True) -> Dict[str, Path]:
    """
    Write an EventAnalysis: survival table and event statistics JSON.

    Returns:
        {'survival': path or None, 'events': path}
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"fmt must be one of {OUTPUT_FORMATS}, got {fmt!r}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    return {
        'survival': write_table(
            columns_to_frame(analysis.survival_table()),
            output_dir / f'event_survival.{fmt}',
            verbose=verbose,
        ),
        'events': write_json(analysis.to_dict(), output_dir / 'events.json', verbose=verbose),
    }
