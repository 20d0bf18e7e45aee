"""
Series Coercion

Turns caller-supplied (dates, values) array-likes into aligned numpy arrays
and a date ordering. Every engine that takes dates goes through here.

PRINCIPLE: never validate upfront, never mutate caller input. Unparseable
dates become NaT and unparseable values become NaN; the engines decide what
a missing entry means at the point of use.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np


def as_dates(dates) -> np.ndarray:
    """
    Coerce to a datetime64[D] array.

    Accepts date/datetime objects, numpy datetime64, ISO 'YYYY-MM-DD'
    strings and ISO timestamps (truncated to the day). Entries that cannot
    be parsed become NaT.
    """
    if dates is None:
        return np.array([], dtype='datetime64[D]')
    try:
        return np.asarray(dates, dtype='datetime64[D]').ravel()
    except (ValueError, TypeError):
        pass

    out = np.empty(len(dates), dtype='datetime64[D]')
    for i, d in enumerate(dates):
        try:
            out[i] = np.datetime64(d, 'D')
            continue
        except (ValueError, TypeError):
            pass
        # Timestamps such as '2024-01-01 23:30:00' parse at their own unit only
        try:
            out[i] = np.datetime64(d).astype('datetime64[D]')
        except (ValueError, TypeError):
            out[i] = np.datetime64('NaT')
    return out


def as_values(values) -> np.ndarray:
    """
    Coerce to a float64 array. None and unparseable entries become NaN.
    """
    if values is None:
        return np.array([], dtype=np.float64)
    try:
        return np.array(values, dtype=np.float64).ravel()
    except (ValueError, TypeError):
        pass

    out = np.empty(len(values), dtype=np.float64)
    for i, v in enumerate(values):
        try:
            out[i] = float(v)
        except (ValueError, TypeError):
            out[i] = np.nan
    return out


def day_numbers(dates: np.ndarray) -> np.ndarray:
    """Whole days since the Unix epoch. NaT maps to the int64 minimum."""
    return dates.astype('datetime64[D]').astype(np.int64)


@dataclass
class PreparedSeries:
    """
    Aligned view over a (date, value) series.

    Attributes:
        dates: datetime64[D] in caller order
        days: calendar day numbers in caller order
        values: float64 in caller order
        order: caller indices with a valid date, sorted ascending by day
               (stable, so same-day points keep their input order)
        source_dates: the caller's date objects, truncated to the aligned length
    """
    dates: np.ndarray
    days: np.ndarray
    values: np.ndarray
    order: np.ndarray
    source_dates: Optional[List[Any]] = None

    @property
    def size(self) -> int:
        return len(self.values)

    @property
    def valid_dates(self) -> np.ndarray:
        return ~np.isnat(self.dates)

    @property
    def is_sorted(self) -> bool:
        """True when the valid dates already appear in ascending order."""
        valid = self.days[self.valid_dates]
        return bool(np.all(np.diff(valid) >= 0))

    def full_order(self) -> np.ndarray:
        """Date ordering over every row; rows without a date go last."""
        return np.argsort(self.dates, kind='stable')

    def date_at(self, index: int):
        """The caller's own date object at a caller index."""
        if self.source_dates is not None:
            return self.source_dates[index]
        return self.dates[index]


def prepare_series(dates, values) -> PreparedSeries:
    """
    Align dates and values to the shorter length and compute date order.

    Args:
        dates: Date-likes, one per value
        values: Numeric values

    Returns:
        PreparedSeries
    """
    d = as_dates(dates)
    v = as_values(values)

    n = min(len(d), len(v))
    d, v = d[:n], v[:n]

    days = day_numbers(d)
    valid = np.flatnonzero(~np.isnat(d))
    order = valid[np.argsort(days[valid], kind='stable')]

    source = list(dates)[:n] if dates is not None else None

    return PreparedSeries(dates=d, days=days, values=v, order=order, source_dates=source)
