"""
Event Statistics

Summaries of individual apnea events: how long they last and how many
happen per night.

    durations  -> quantiles, long-event counts, Tukey outlier events
    dates      -> events per calendar night -> quantiles, low/high outlier nights

Durations and dates come from the same event rows but are used
independently: a row with a missing duration still counts toward its night,
and a row without a date still contributes its duration.
"""

import logging
from typing import Iterable, Tuple

import numpy as np

from driftline.config.defaults import LONG_EVENT_SECONDS
from driftline.core.results import EventStats
from driftline.primitives.individual.statistics import finite, quantile
from driftline.validation.series import as_dates, as_values

logger = logging.getLogger(__name__)


def events_per_night(event_dates) -> Tuple[np.ndarray, np.ndarray]:
    """
    Count events on each calendar night.

    Args:
        event_dates: One timestamp or date per event; unparseable entries
                     are skipped

    Returns:
        (nights, counts): ascending datetime64[D] nights that had at least one
        event, and the number of events on each
    """
    d = as_dates(event_dates)
    d = d[~np.isnat(d)]
    nights, counts = np.unique(d, return_counts=True)
    return nights.astype('datetime64[D]'), counts.astype(np.int64)


def event_duration_stats(
    durations,
    event_dates=None,
    long_marks: Iterable[float] = LONG_EVENT_SECONDS,
) -> EventStats:
    """
    Duration and per-night frequency statistics for a set of events.

    Args:
        durations: Event durations; non-finite entries are dropped
        event_dates: Optional timestamps of the same events, for the
                     per-night counts
        long_marks: Durations to count events beyond (strictly longer)

    Returns:
        EventStats. With no finite duration, only durations and
        total_events (0) are set, matching an empty report.
    """
    y = finite(as_values(durations))
    stats = EventStats(durations=y, total_events=int(len(y)))

    if len(y) == 0:
        logger.debug("event_duration_stats: no events")
        return stats

    stats.p25 = quantile(y, 0.25)
    stats.median = quantile(y, 0.5)
    stats.p75 = quantile(y, 0.75)
    stats.p95 = quantile(y, 0.95)
    stats.iqr = stats.p75 - stats.p25
    stats.max = float(np.max(y))
    stats.count_over = {float(m): int(np.sum(y > m)) for m in long_marks}
    stats.outlier_events = int(np.sum(y >= stats.p75 + 1.5 * stats.iqr))

    if event_dates is None:
        return stats

    nights, counts = events_per_night(event_dates)
    stats.nights = nights
    stats.events_per_night = counts
    if len(counts) == 0:
        return stats

    c = counts.astype(np.float64)
    stats.night_p25 = quantile(c, 0.25)
    stats.night_median = quantile(c, 0.5)
    stats.night_p75 = quantile(c, 0.75)
    stats.night_iqr = stats.night_p75 - stats.night_p25
    stats.night_min = float(np.min(c))
    stats.night_max = float(np.max(c))
    stats.night_outliers_high = int(np.sum(c >= stats.night_p75 + 1.5 * stats.night_iqr))
    stats.night_outliers_low = int(np.sum(c <= stats.night_p25 - 1.5 * stats.night_iqr))

    return stats
