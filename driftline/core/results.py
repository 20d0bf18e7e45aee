"""
Result Types

Plain dataclasses returned by the engines. Arrays are numpy, scalars are
Python floats with NaN as the missing marker. Every type has to_dict() for
the flat, JSON-friendly shape that downstream charts consume.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np


def json_float(x) -> Optional[float]:
    x = float(x)
    return x if np.isfinite(x) else None


def json_array(a: np.ndarray) -> List[Optional[float]]:
    return [json_float(v) for v in np.asarray(a, dtype=np.float64)]


def threshold_label(threshold: float) -> str:
    """4.0 -> '4', 4.5 -> '4.5'."""
    return f"{float(threshold):g}"


# ============================================================
# ROLLING
# ============================================================

@dataclass
class RollingWindow:
    """Rolling statistics for one window length, parallel to the input."""

    window: int
    avg: np.ndarray
    avg_ci_low: np.ndarray
    avg_ci_high: np.ndarray
    median: np.ndarray
    median_ci_low: np.ndarray
    median_ci_high: np.ndarray
    compliance: np.ndarray

    @classmethod
    def empty(cls, window: int, n: int) -> 'RollingWindow':
        return cls(window, *(np.full(n, np.nan) for _ in range(7)))

    def __len__(self) -> int:
        return len(self.avg)


@dataclass
class RollingResult:
    """
    Rolling statistics keyed by window length.

    result[7].avg, result[30].compliance, ...
    """

    windows: Dict[int, RollingWindow]
    threshold: float

    def __getitem__(self, window: int) -> RollingWindow:
        return self.windows[window]

    def __contains__(self, window: int) -> bool:
        return window in self.windows

    def __iter__(self):
        return iter(self.windows)

    def to_dict(self) -> Dict[str, np.ndarray]:
        """Flat shape: avg7, avg7_ci_low, ..., median30_ci_high, compliance4_30."""
        label = threshold_label(self.threshold)
        out = {}
        for w, r in self.windows.items():
            out[f'avg{w}'] = r.avg
            out[f'avg{w}_ci_low'] = r.avg_ci_low
            out[f'avg{w}_ci_high'] = r.avg_ci_high
            out[f'median{w}'] = r.median
            out[f'median{w}_ci_low'] = r.median_ci_low
            out[f'median{w}_ci_high'] = r.median_ci_high
            out[f'compliance{label}_{w}'] = r.compliance
        return out


# ============================================================
# DECOMPOSITION
# ============================================================

@dataclass
class Decomposition:
    """Additive trend + seasonal + residual split of a series."""

    trend: np.ndarray
    seasonal: np.ndarray
    residual: np.ndarray

    def to_dict(self) -> Dict[str, List[Optional[float]]]:
        return {
            'trend': json_array(self.trend),
            'seasonal': json_array(self.seasonal),
            'residual': json_array(self.residual),
        }


# ============================================================
# AUTOCORRELATION
# ============================================================

@dataclass
class LagCorrelation:
    """Correlation at one lag and the number of complete pairs behind it."""

    lag: int
    value: float
    pairs: int

    def to_dict(self, key: str = 'autocorrelation') -> Dict[str, Any]:
        return {'lag': self.lag, key: json_float(self.value), 'pairs': self.pairs}


@dataclass
class AutocorrelationResult:
    """ACF or PACF: one entry per lag plus the +/- confidence half-width."""

    values: List[LagCorrelation]
    confidence: float
    partial: bool = False

    @property
    def key(self) -> str:
        return 'partial_autocorrelation' if self.partial else 'autocorrelation'

    @property
    def lags(self) -> np.ndarray:
        return np.array([v.lag for v in self.values], dtype=np.int64)

    @property
    def correlations(self) -> np.ndarray:
        return np.array([v.value for v in self.values], dtype=np.float64)

    def __len__(self) -> int:
        return len(self.values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'values': [v.to_dict(self.key) for v in self.values],
            'confidence': json_float(self.confidence),
        }


# ============================================================
# HYPOTHESIS TESTS
# ============================================================

@dataclass
class MannWhitneyResult:
    """
    Mann-Whitney U test between group A and group B.

    effect is the rank-biserial correlation 2*P(B > A) - 1, so a positive
    effect means B tends to be larger.
    """

    u: float = np.nan
    u1: float = np.nan
    u2: float = np.nan
    z: float = np.nan
    p: float = np.nan
    effect: float = np.nan
    effect_ci_low: float = np.nan
    effect_ci_high: float = np.nan
    method: str = 'NA'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'U': json_float(self.u),
            'U1': json_float(self.u1),
            'U2': json_float(self.u2),
            'z': json_float(self.z),
            'p': json_float(self.p),
            'effect': json_float(self.effect),
            'effect_ci_low': json_float(self.effect_ci_low),
            'effect_ci_high': json_float(self.effect_ci_high),
            'method': self.method,
        }


# ============================================================
# SURVIVAL
# ============================================================

@dataclass
class SurvivalCurve:
    """Kaplan-Meier step function at each distinct event time."""

    times: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.float64))
    survival: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.float64))
    lower: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.float64))
    upper: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.float64))
    at_risk: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.int64))
    events: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.int64))

    def __len__(self) -> int:
        return len(self.times)

    def survival_at(self, t: float) -> float:
        """S(t) as a right-continuous step function; 1.0 before the first time."""
        if not np.isfinite(t):
            return np.nan
        idx = int(np.searchsorted(self.times, t, side='right')) - 1
        return 1.0 if idx < 0 else float(self.survival[idx])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'times': json_array(self.times),
            'survival': json_array(self.survival),
            'lower': json_array(self.lower),
            'upper': json_array(self.upper),
            'at_risk': [int(v) for v in self.at_risk],
            'events': [int(v) for v in self.events],
        }


# ============================================================
# EVENTS
# ============================================================

@dataclass
class EventStats:
    """
    Durations of individual events and their per-night frequency.

    Duration quantiles are in the units given (seconds for apnea events).
    count_over maps each duration mark to the number of events strictly
    longer than it. Outliers use the Tukey fences, inclusive: events at or
    above p75 + 1.5 * IQR, nights at or beyond either fence.
    """

    durations: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.float64))
    total_events: int = 0
    p25: float = np.nan
    median: float = np.nan
    p75: float = np.nan
    p95: float = np.nan
    iqr: float = np.nan
    max: float = np.nan
    count_over: Dict[float, int] = field(default_factory=dict)
    outlier_events: int = 0

    nights: np.ndarray = field(default_factory=lambda: np.array([], dtype='datetime64[D]'))
    events_per_night: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.int64))
    night_p25: float = np.nan
    night_median: float = np.nan
    night_p75: float = np.nan
    night_iqr: float = np.nan
    night_min: float = np.nan
    night_max: float = np.nan
    night_outliers_high: int = 0
    night_outliers_low: int = 0

    def to_dict(self) -> Dict[str, Any]:
        out = {
            'total_events': self.total_events,
            'p25': json_float(self.p25),
            'median': json_float(self.median),
            'p75': json_float(self.p75),
            'p95': json_float(self.p95),
            'iqr': json_float(self.iqr),
            'max': json_float(self.max),
        }
        for mark, count in self.count_over.items():
            out[f'count_over_{threshold_label(mark)}'] = count
        out.update({
            'outlier_events': self.outlier_events,
            'nights': [str(d) for d in self.nights],
            'events_per_night': [int(c) for c in self.events_per_night],
            'night_p25': json_float(self.night_p25),
            'night_median': json_float(self.night_median),
            'night_p75': json_float(self.night_p75),
            'night_iqr': json_float(self.night_iqr),
            'night_min': json_float(self.night_min),
            'night_max': json_float(self.night_max),
            'night_outliers_high': self.night_outliers_high,
            'night_outliers_low': self.night_outliers_low,
        })
        return out


# ============================================================
# SEGMENTS
# ============================================================

@dataclass
class Segment:
    """A constant-mean stretch between change points (inclusive indices)."""

    start: int
    end: int
    mean: float
    count: int
    strength: float = np.nan

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start': self.start,
            'end': self.end,
            'mean': json_float(self.mean),
            'count': self.count,
            'strength': json_float(self.strength),
        }
