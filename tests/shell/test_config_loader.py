"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
from unittest.mock import patch

import pytest

from stormrelay.core.config import ChannelConfig, Config
from stormrelay.core.formatter import DEFAULT_COMPASS_NAMES
from stormrelay.core.geo import BoundingBox, GeoPoint
from stormrelay.shell.config_loader import (
    _parse_bounds,
    _parse_channel,
    _resolve_value,
    load_config,
    load_config_from_dict,
    load_config_from_env,
)


SAMPLE_YAML = """
reference_point:
  latitude: 49.22
  longitude: 18.74

lightning_bounds:
  min_latitude: 48.5
  max_latitude: 49.8
  min_longitude: 17.8
  max_longitude: 19.6

compass_names:
  N: North

storm:
  threshold: 5
  tick_interval_seconds: 300

forecast:
  alarm_time: "6:45"
  chunk_bytes: 100
  fold_diacritics: false

mesh:
  host: "${TEST_MESH_HOST}"
  pacing_seconds: 5

channels:
  alerts:
    name: Alerts
    max_bytes: 200
"""


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None

    def test_returns_plain_string_unchanged(self):
        assert _resolve_value("ARES") == "ARES"

    def test_resolves_env_var_placeholder(self):
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert _resolve_value("${TEST_VAR}") == "test_value"

    def test_returns_placeholder_if_env_var_not_set(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"


class TestParsers:
    """Tests for section parsers."""

    def test_parse_bounds(self):
        bounds = _parse_bounds({
            "min_latitude": 1,
            "max_latitude": 2,
            "min_longitude": "3",
            "max_longitude": 4,
        })

        assert bounds == BoundingBox(1.0, 2.0, 3.0, 4.0)

    def test_parse_bounds_missing_key_raises(self):
        with pytest.raises(KeyError):
            _parse_bounds({"min_latitude": 1})

    def test_parse_channel_defaults(self):
        default = ChannelConfig(name="ARES")

        assert _parse_channel(None, default) is default
        assert _parse_channel({"name": "Other"}, default) == ChannelConfig(name="Other", max_bytes=155)

    def test_parse_channel_resolves_env(self):
        with patch.dict(os.environ, {"ALERTS_NAME": "Storm"}):
            channel = _parse_channel({"name": "${ALERTS_NAME}"}, ChannelConfig(name="ARES"))

        assert channel.name == "Storm"


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict()."""

    def test_empty_dict_gives_defaults(self):
        assert load_config_from_dict({}) == Config()

    def test_partial_compass_names_keep_defaults(self):
        config = load_config_from_dict({"compass_names": {"N": "North"}})

        assert config.compass_names["N"] == "North"
        assert config.compass_names["S"] == DEFAULT_COMPASS_NAMES["S"]

    def test_weekday_names_become_tuple(self):
        names = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

        config = load_config_from_dict({"forecast": {"weekday_names": names}})

        assert config.forecast.weekday_names == tuple(names)

    def test_alarm_time_is_string(self):
        config = load_config_from_dict({"forecast": {"alarm_time": "7:23"}})

        assert config.forecast.alarm_time == "7:23"


class TestLoadConfig:
    """Tests for load_config()."""

    def test_loads_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(SAMPLE_YAML, encoding="utf-8")

        with patch.dict(os.environ, {"TEST_MESH_HOST": "radio.local"}):
            config = load_config(path)

        assert config.reference_point == GeoPoint(lat=49.22, lon=18.74)
        assert config.lightning_bounds.max_longitude == 19.6
        assert config.compass_names["N"] == "North"
        assert config.storm.threshold == 5
        assert config.storm.bucket_width_km == 10
        assert config.storm.tick_interval_seconds == 300
        assert config.forecast.alarm_time == "6:45"
        assert config.forecast.chunk_bytes == 100
        assert config.forecast.fold_diacritics is False
        assert config.mesh.host == "radio.local"
        assert config.mesh.pacing_seconds == 5.0
        assert config.alert_channel == ChannelConfig(name="Alerts", max_bytes=200)
        assert config.weather_channel == ChannelConfig(name="Omega", max_bytes=155)

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") == Config()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == Config()

    def test_uses_config_path_env(self, tmp_path):
        path = tmp_path / "from_env.yaml"
        path.write_text("alarm_check_seconds: 10\n", encoding="utf-8")

        with patch.dict(os.environ, {"CONFIG_PATH": str(path)}):
            config = load_config()

        assert config.alarm_check_seconds == 10


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env()."""

    def test_reads_environment(self):
        env = {
            "MESH_HOST": "radio.local",
            "REFERENCE_POINT": "49.22, 18.74",
            "LIGHTNING_BOUNDS": "48.5,49.8,17.8,19.6",
            "ALERT_CHANNEL": "Alerts",
            "WEATHER_CHANNEL": "Weather",
        }

        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()

        assert config.mesh.host == "radio.local"
        assert config.reference_point == GeoPoint(lat=49.22, lon=18.74)
        assert config.lightning_bounds == BoundingBox(48.5, 49.8, 17.8, 19.6)
        assert config.alert_channel.name == "Alerts"
        assert config.weather_channel.name == "Weather"

    def test_wrong_bounds_count_is_ignored(self):
        with patch.dict(os.environ, {"LIGHTNING_BOUNDS": "1,2,3"}, clear=True):
            config = load_config_from_env()

        assert config.lightning_bounds == Config().lightning_bounds

    def test_empty_environment_gives_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            assert load_config_from_env() == Config()
