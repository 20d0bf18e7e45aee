"""
Engine Defaults

Single source of truth for the numeric parameters the engines fall back to
when a caller passes nothing. settings.yaml mirrors these values.
"""

from typing import Tuple

# ============================================================
# CONFIDENCE
# ============================================================

NORMAL_CONFIDENCE_Z: float = 1.96

# ============================================================
# ROLLING WINDOWS (calendar days)
# ============================================================

ROLLING_WINDOW_SHORT_DAYS: int = 7
ROLLING_WINDOW_LONG_DAYS: int = 30
DEFAULT_ROLLING_WINDOWS: Tuple[int, ...] = (ROLLING_WINDOW_SHORT_DAYS, ROLLING_WINDOW_LONG_DAYS)

# Nightly usage hours at or above which a night counts as compliant
USAGE_COMPLIANCE_THRESHOLD_HOURS: float = 4.0
USAGE_STRICT_THRESHOLD_HOURS: float = 6.0

# ============================================================
# BREAKS AND CHANGE POINTS
# ============================================================

BREAKPOINT_MIN_DELTA: float = 0.75
CHANGEPOINT_PENALTY: float = 10.0

# ============================================================
# DECOMPOSITION AND AUTOCORRELATION
# ============================================================

STL_SEASON_LENGTH: int = 7
DEFAULT_MAX_LAG: int = 30
MIN_LAG: int = 1
MAX_LAG: int = 120

# ============================================================
# SMOOTHING
# ============================================================

LOESS_ALPHA: float = 0.3
LOESS_SAMPLE_STEPS: int = 60
RUNNING_QUANTILE_NEIGHBORS: int = 25

# ============================================================
# HYPOTHESIS TESTS
# ============================================================

# Largest pooled sample for which the exact rank-sum distribution is built
MANN_WHITNEY_EXACT_MAX_N: int = 28

# ============================================================
# ADHERENCE SUMMARIES
# ============================================================

FIRST_LAST_COUNT: int = 30
HEATMAP_MAX_WEEKS: int = 52
DAYS_PER_WEEK: int = 7

# Pressure (cmH2O) splitting nights into low and high groups for comparison
EPAP_SPLIT_THRESHOLD: float = 7.0

# ============================================================
# APNEA EVENTS
# ============================================================

# Event labels counted as apneas; other rows (hypopneas, flow limits) are ignored
APNEA_EVENT_TYPES: Tuple[str, ...] = ('ClearAirway', 'Obstructive', 'Mixed')

# Duration marks (seconds) for long-event counts
LONG_EVENT_SECONDS: Tuple[float, ...] = (30.0, 60.0)
