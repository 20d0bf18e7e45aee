"""
Apnea Event Entry Point
=======================

Thin orchestrator for the per-event detail rows of a therapy log:

1. Keep the rows whose event type is an apnea (clear airway, obstructive, mixed)
2. Duration quantiles, long-event counts and outlier events
3. Events per night and their quantiles
4. Kaplan-Meier curve of event durations
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable

import numpy as np

from driftline.config.defaults import (
    APNEA_EVENT_TYPES,
    LONG_EVENT_SECONDS,
    NORMAL_CONFIDENCE_Z,
)
from driftline.core.events import event_duration_stats
from driftline.core.results import EventStats, SurvivalCurve
from driftline.core.survival import km_survival

logger = logging.getLogger(__name__)


@dataclass
class EventAnalysis:
    """Duration and frequency statistics plus the duration survival curve."""

    stats: EventStats = field(default_factory=EventStats)
    survival: SurvivalCurve = field(default_factory=SurvivalCurve)

    def survival_table(self) -> Dict[str, np.ndarray]:
        return {
            'duration': self.survival.times,
            'survival': self.survival.survival,
            'lower': self.survival.lower,
            'upper': self.survival.upper,
            'at_risk': self.survival.at_risk,
            'events': self.survival.events,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stats': self.stats.to_dict(),
            'survival': self.survival.to_dict(),
        }


def select_events(event_types, kinds: Iterable[str] = APNEA_EVENT_TYPES) -> np.ndarray:
    """Boolean mask of rows whose event type is one of kinds."""
    types = np.asarray(event_types, dtype=object).ravel()
    wanted = set(kinds)
    return np.array([t in wanted for t in types], dtype=bool)


def analyze_events(
    durations,
    event_dates=None,
    event_types=None,
    kinds: Iterable[str] = APNEA_EVENT_TYPES,
    long_marks: Iterable[float] = LONG_EVENT_SECONDS,
    z: float = NORMAL_CONFIDENCE_Z,
) -> EventAnalysis:
    """
    Analyze apnea events.

    Args:
        durations: One duration (seconds) per row
        event_dates: Optional timestamp per row, for the per-night counts
        event_types: Optional event label per row; when given only rows
                     whose label is in kinds are used
        kinds: Event labels to keep
        long_marks: Durations to count events beyond
        z: Critical value for the survival confidence band

    Returns:
        EventAnalysis
    """
    kinds = tuple(kinds)
    durations = np.asarray(durations, dtype=object).ravel()
    if event_dates is not None:
        event_dates = np.asarray(event_dates, dtype=object).ravel()

    if event_types is not None:
        keep = select_events(event_types, kinds)
        n = min(len(keep), len(durations))
        if event_dates is not None:
            n = min(n, len(event_dates))
        keep = keep[:n]
        logger.debug(f"analyze_events: {int(keep.sum())} of {n} row(s) are {', '.join(kinds)}")
        durations = durations[:n][keep]
        if event_dates is not None:
            event_dates = event_dates[:n][keep]

    stats = event_duration_stats(durations, event_dates, long_marks)
    logger.info(f"analyze_events: {stats.total_events} event(s) over {len(stats.nights)} night(s)")

    return EventAnalysis(stats=stats, survival=km_survival(stats.durations, z))
