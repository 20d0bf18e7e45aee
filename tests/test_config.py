"""
Tests for the settings loader.
"""

import pytest

from driftline.config import (
    AnalysisSettings,
    ConfigError,
    list_profiles,
    load_raw_config,
    load_settings,
)


class TestShippedSettings:
    def test_defaults(self):
        s = load_settings()

        assert s.rolling_windows == (7, 30)
        assert s.short_window == 7
        assert s.long_window == 30
        assert s.compliance_threshold == 4.0
        assert s.change_point_penalty == 10.0
        assert s.exact_max_n == 28

    def test_profile_overrides_defaults(self):
        s = load_settings(profile='epap')

        assert s.max_lag == 14
        assert s.breakpoint_min_delta == 0.5
        assert s.season_length == 7

    def test_keyword_overrides_win(self):
        s = load_settings(profile='ahi', change_point_penalty=2.5, max_lag=None)
        assert s.change_point_penalty == 2.5
        assert s.max_lag == 30

    def test_alert_threshold(self):
        assert load_settings().alert_threshold is None
        assert load_settings(profile='ahi').alert_threshold == 5.0

    def test_list_profiles(self):
        assert set(list_profiles()) == {'usage', 'ahi', 'epap'}

    def test_unknown_profile(self):
        with pytest.raises(ConfigError, match="Unknown profile"):
            load_settings(profile='nope')

    def test_unknown_override(self):
        with pytest.raises(ConfigError, match="bogus"):
            load_settings(bogus=1)


class TestCustomFile:
    def test_reads_file(self, tmp_path):
        path = tmp_path / 'settings.yaml'
        path.write_text(
            "defaults:\n"
            "  rolling_windows: [14, 60]\n"
            "  change_point_penalty: null\n"
            "profiles:\n"
            "  fast:\n"
            "    loess_alpha: 0.5\n"
        )

        s = load_settings(path, profile='fast')
        assert s.rolling_windows == (14, 60)
        assert s.change_point_penalty is None
        assert s.loess_alpha == 0.5
        assert s.max_lag == 30

    def test_raw_config(self, tmp_path):
        path = tmp_path / 'settings.yaml'
        path.write_text("defaults:\n  max_lag: 10\n")
        assert load_raw_config(path) == {'max_lag': 10}

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / 'settings.yaml'
        path.write_text("")
        assert load_settings(path) == AnalysisSettings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / 'missing.yaml')

    def test_unknown_key_in_file(self, tmp_path):
        path = tmp_path / 'settings.yaml'
        path.write_text("defaults:\n  windows: [7]\n")
        with pytest.raises(ConfigError, match="windows"):
            load_settings(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / 'settings.yaml'
        path.write_text("defaults: [unclosed\n")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / 'settings.yaml'
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError):
            load_settings(path)


class TestValidation:
    @pytest.mark.parametrize('kwargs', [
        {'rolling_windows': []},
        {'rolling_windows': [0, 30]},
        {'loess_alpha': 0.0},
        {'loess_alpha': 1.5},
        {'season_length': 0},
        {'max_lag': 0},
        {'max_lag': 500},
        {'confidence_z': -1.0},
    ])
    def test_out_of_range(self, kwargs):
        with pytest.raises(ConfigError):
            AnalysisSettings(**kwargs)

    def test_bad_type_becomes_config_error(self):
        with pytest.raises(ConfigError):
            load_settings(rolling_windows=['a'])

    def test_to_dict(self):
        d = AnalysisSettings().to_dict()
        assert d['rolling_windows'] == [7, 30]
        assert d['loess_alpha'] == 0.3
