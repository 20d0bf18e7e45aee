"""
Driftline I/O: polars-backed table reads and writes.
"""

from driftline.io.reader import list_columns, load_events, load_series, read_table
from driftline.io.writer import (
    columns_to_frame,
    write_analysis,
    write_events,
    write_json,
    write_table,
)

__all__ = [
    'list_columns',
    'load_events',
    'load_series',
    'read_table',
    'columns_to_frame',
    'write_analysis',
    'write_events',
    'write_json',
    'write_table',
]
