"""
Driftline configuration: numeric defaults and YAML-backed settings.
"""

from driftline.config.loader import (
    AnalysisSettings,
    ConfigError,
    list_profiles,
    load_raw_config,
    load_settings,
)

__all__ = [
    'AnalysisSettings',
    'ConfigError',
    'list_profiles',
    'load_raw_config',
    'load_settings',
]
