"""
Driftline Runner
================

Load one nightly metric from a CSV/Parquet file, run every engine over it
and write the results. Pure orchestration, no computation here.

Output (in --output, default: <input stem>_driftline/ next to the input):
    rolling.parquet        date, value and the rolling window columns
    decomposition.parquet  date, value, trend, seasonal, residual
    summary.json           scalars, crossovers, change points, ACF/PACF, trend curves

With --events (per-event detail rows), also:
    event_survival.parquet Kaplan-Meier curve of apnea event durations
    events.json            duration quantiles, long-event counts, events per night

Usage:
    python -m driftline nights.csv --value-column usage_hours --profile usage
    python -m driftline nights.parquet --value-column ahi --profile ahi --format csv
    python -m driftline nights.csv --value-column ahi --config my_settings.yaml -q
    python -m driftline nights.csv --value-column ahi --events details.csv
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from driftline.config.loader import ConfigError, load_settings
from driftline.io.reader import load_events, load_series
from driftline.io.writer import OUTPUT_FORMATS, write_analysis, write_events
from driftline.stages.events import analyze_events
from driftline.stages.timeseries import SeriesAnalysis, analyze_series
from driftline.validation.input_validation import validate_series


def run(
    input_path: str,
    value_column: str,
    date_column: str = 'date',
    output_dir: Optional[str] = None,
    profile: Optional[str] = None,
    config_path: Optional[str] = None,
    fmt: str = 'parquet',
    events_path: Optional[str] = None,
    verbose: bool = True,
) -> SeriesAnalysis:
    """
    Analyze one series end to end.

    Args:
        input_path: CSV or Parquet file
        value_column: Metric column to analyze
        date_column: Date column
        output_dir: Where to write outputs
        profile: Settings profile (usage, ahi, epap, ...)
        config_path: Settings YAML replacing the shipped one
        fmt: Table format, 'parquet' or 'csv'
        events_path: Optional per-event detail file (Event, DateTime,
                     Data/Duration columns)
        verbose: Print progress

    Returns:
        The SeriesAnalysis that was written
    """
    input_path = Path(input_path)
    if not input_path.exists():
        raise FileNotFoundError(f"input not found: {input_path}")

    output_dir = Path(output_dir) if output_dir else input_path.parent / f"{input_path.stem}_driftline"
    settings = load_settings(config_path, profile=profile)

    if verbose:
        print("=" * 70)
        print("DRIFTLINE")
        print("=" * 70)
        print(f"Input:   {input_path}")
        print(f"Column:  {value_column}")
        print(f"Profile: {profile or 'defaults'}")
        print(f"Output:  {output_dir}")
        print()

    start = time.time()
    dates, values = load_series(input_path, date_column=date_column, value_column=value_column)
    rows = load_events(events_path) if events_path else None

    report = validate_series(dates, values)
    if verbose:
        print(f"Loaded {report.total_points} nights ({report.finite_values} with a value)")
        for w in report.warnings:
            print(f"  Warning: {w}")

    analysis = analyze_series(dates, values, settings)

    if verbose:
        s = analysis.summary
        print(f"Crossovers:    {s['n_breakpoints']}")
        print(f"Change points: {s['n_change_points']}")
        print(f"Mean:          {s['mean']:.3f}")
        print()
        print("--- Writing outputs ---")

    write_analysis(analysis, output_dir, fmt=fmt, verbose=verbose)

    if rows is not None:
        events = analyze_events(rows['durations'], rows['dates'], rows['types'], z=settings.confidence_z)
        if verbose:
            st = events.stats
            print()
            print(f"Apnea events:  {st.total_events} over {len(st.nights)} nights")
        write_events(events, output_dir, fmt=fmt, verbose=verbose)

    if verbose:
        print()
        print(f"Done in {time.time() - start:.2f}s")

    return analysis


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Driftline: trend, change-point and adherence analysis of a nightly metric",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Usage:
  python -m driftline nights.csv --value-column usage_hours --profile usage
  python -m driftline nights.parquet --value-column ahi --profile ahi
"""
    )
    parser.add_argument('input', help='CSV or Parquet file with one row per night')
    parser.add_argument('--value-column', required=True, help='Metric column to analyze')
    parser.add_argument('--date-column', default='date', help='Date column (default: date)')
    parser.add_argument('--profile', help='Settings profile (usage, ahi, epap)')
    parser.add_argument('--config', help='Settings YAML (default: shipped settings.yaml)')
    parser.add_argument('--output', help='Output directory')
    parser.add_argument('--events', help='Per-event detail file (Event, DateTime, Data/Duration)')
    parser.add_argument('--format', choices=OUTPUT_FORMATS, default='parquet', help='Table format')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging level')
    parser.add_argument('-q', '--quiet', action='store_true', help='Suppress output')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        run(
            input_path=args.input,
            value_column=args.value_column,
            date_column=args.date_column,
            output_dir=args.output,
            profile=args.profile,
            config_path=args.config,
            fmt=args.format,
            events_path=args.events,
            verbose=not args.quiet,
        )
    except (ConfigError, FileNotFoundError, KeyError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
