"""
Driftline Settings Loader
=========================

Load analysis settings from settings.yaml.

Profile values override defaults; keyword overrides win over both.

Usage:
    from driftline.config.loader import load_settings

    settings = load_settings()                   # shipped defaults
    settings = load_settings(profile='ahi')      # AHI profile
    settings = load_settings('my.yaml', max_lag=14)
"""

import logging
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

import yaml

from driftline.config import defaults as D

logger = logging.getLogger(__name__)

SETTINGS_PATH = Path(__file__).parent / 'settings.yaml'


class ConfigError(ValueError):
    """Raised for malformed or unknown settings."""


@dataclass
class AnalysisSettings:
    """Parameters for one series analysis."""

    rolling_windows: Tuple[int, ...] = field(default_factory=lambda: D.DEFAULT_ROLLING_WINDOWS)
    compliance_threshold: float = D.USAGE_COMPLIANCE_THRESHOLD_HOURS
    strict_threshold: float = D.USAGE_STRICT_THRESHOLD_HOURS
    alert_threshold: Optional[float] = None
    change_point_penalty: Optional[float] = D.CHANGEPOINT_PENALTY
    breakpoint_min_delta: float = D.BREAKPOINT_MIN_DELTA
    season_length: int = D.STL_SEASON_LENGTH
    loess_alpha: float = D.LOESS_ALPHA
    loess_steps: int = D.LOESS_SAMPLE_STEPS
    quantile_neighbors: int = D.RUNNING_QUANTILE_NEIGHBORS
    max_lag: int = D.DEFAULT_MAX_LAG
    confidence_z: float = D.NORMAL_CONFIDENCE_Z
    exact_max_n: int = D.MANN_WHITNEY_EXACT_MAX_N

    def __post_init__(self):
        self.rolling_windows = tuple(int(w) for w in self.rolling_windows)

        if not self.rolling_windows:
            raise ConfigError("rolling_windows must name at least one window")
        if any(w <= 0 for w in self.rolling_windows):
            raise ConfigError(f"rolling_windows must be positive, got {self.rolling_windows}")
        if not (0.0 < self.loess_alpha <= 1.0):
            raise ConfigError(f"loess_alpha must be in (0, 1], got {self.loess_alpha}")
        if self.season_length < 1:
            raise ConfigError(f"season_length must be >= 1, got {self.season_length}")
        if not (D.MIN_LAG <= self.max_lag <= D.MAX_LAG):
            raise ConfigError(
                f"max_lag must be in [{D.MIN_LAG}, {D.MAX_LAG}], got {self.max_lag}"
            )
        if self.confidence_z <= 0:
            raise ConfigError(f"confidence_z must be positive, got {self.confidence_z}")

    @property
    def short_window(self) -> int:
        return min(self.rolling_windows)

    @property
    def long_window(self) -> int:
        return max(self.rolling_windows)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out['rolling_windows'] = list(self.rolling_windows)
        return out


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return raw


def _check_keys(section: Dict[str, Any], where: str) -> None:
    known = {f.name for f in fields(AnalysisSettings)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(f"Unknown setting(s) in {where}: {', '.join(unknown)}")


def load_raw_config(path: Optional[Path] = None, profile: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the merged settings dict from YAML.

    Args:
        path: Settings file (defaults to the shipped settings.yaml)
        profile: Profile name under `profiles:`; None for defaults only

    Returns:
        Dict of defaults with the profile's keys merged over them
    """
    path = Path(path) if path is not None else SETTINGS_PATH
    all_config = _read_yaml(path)

    base = all_config.get('defaults') or {}
    _check_keys(base, f"{path.name}:defaults")

    if profile is None:
        return dict(base)

    profiles = all_config.get('profiles') or {}
    if profile not in profiles:
        raise ConfigError(
            f"Unknown profile '{profile}' in {path.name}. "
            f"Available: {', '.join(sorted(profiles)) or 'none'}"
        )

    section = profiles[profile] or {}
    _check_keys(section, f"{path.name}:profiles.{profile}")

    # Merge: profile overrides defaults
    return {**base, **section}


def load_settings(path: Optional[Path] = None, profile: Optional[str] = None, **overrides) -> AnalysisSettings:
    """
    Build AnalysisSettings from YAML plus keyword overrides.

    Raises:
        ConfigError: Unknown keys, unknown profile or out-of-range values
        FileNotFoundError: An explicit path that does not exist
    """
    merged = load_raw_config(path, profile)

    overrides = {k: v for k, v in overrides.items() if v is not None}
    _check_keys(overrides, "overrides")
    merged.update(overrides)

    logger.debug(f"settings (profile={profile}): {merged}")

    try:
        return AnalysisSettings(**merged)
    except ConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid settings: {e}") from e


def list_profiles(path: Optional[Path] = None) -> list:
    """List all configured profiles."""
    path = Path(path) if path is not None else SETTINGS_PATH
    return list((_read_yaml(path).get('profiles') or {}).keys())
