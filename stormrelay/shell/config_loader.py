"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, ChannelConfig, ...) are defined in stormrelay/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from stormrelay.core.config import (
    ChannelConfig,
    Config,
    ForecastConfig,
    MeshConfig,
    MqttConfig,
    StormConfig,
    WarningsConfig,
)
from stormrelay.core.geo import BoundingBox, GeoPoint


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"


def _resolve_value(value: Any) -> Any:
    """Resolve a value that may be a ${VAR} environment placeholder.

    Args:
        value: Value to resolve

    Returns:
        The environment value, or the original value if it is not a
        placeholder or the variable is not set
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a config section with placeholders resolved."""
    section = data.get(name) or {}
    return {key: _resolve_value(value) for key, value in section.items()}


def _parse_point(data: dict[str, Any]) -> GeoPoint:
    """Parse a reference point from config data."""
    return GeoPoint(
        lat=float(data["latitude"]),
        lon=float(data["longitude"]),
    )


def _parse_bounds(data: dict[str, Any]) -> BoundingBox:
    """Parse a bounding box from config data."""
    return BoundingBox(
        min_latitude=float(data["min_latitude"]),
        max_latitude=float(data["max_latitude"]),
        min_longitude=float(data["min_longitude"]),
        max_longitude=float(data["max_longitude"]),
    )


def _parse_channel(data: dict[str, Any] | None, default: ChannelConfig) -> ChannelConfig:
    """Parse a radio channel from config data."""
    if not data:
        return default

    return ChannelConfig(
        name=str(_resolve_value(data.get("name", default.name))),
        max_bytes=int(data.get("max_bytes", default.max_bytes)),
    )


def _parse_storm(data: dict[str, Any]) -> StormConfig:
    """Parse lightning aggregation settings."""
    defaults = StormConfig()
    return StormConfig(
        threshold=int(data.get("threshold", defaults.threshold)),
        bucket_width_km=int(data.get("bucket_width_km", defaults.bucket_width_km)),
        tick_interval_seconds=int(data.get("tick_interval_seconds", defaults.tick_interval_seconds)),
    )


def _parse_warnings(data: dict[str, Any]) -> WarningsConfig:
    """Parse warning page settings."""
    defaults = WarningsConfig()
    return WarningsConfig(
        url=data.get("url", defaults.url),
        language=data.get("language", defaults.language),
        poll_interval_seconds=int(data.get("poll_interval_seconds", defaults.poll_interval_seconds)),
    )


def _parse_forecast(data: dict[str, Any]) -> ForecastConfig:
    """Parse daily forecast settings."""
    defaults = ForecastConfig()
    return ForecastConfig(
        url=data.get("url", defaults.url),
        alarm_time=str(data.get("alarm_time", defaults.alarm_time)),
        chunk_bytes=int(data.get("chunk_bytes", defaults.chunk_bytes)),
        header_template=data.get("header_template", defaults.header_template),
        weekday_names=tuple(data.get("weekday_names", defaults.weekday_names)),
        fold_diacritics=bool(data.get("fold_diacritics", defaults.fold_diacritics)),
    )


def _parse_mesh(data: dict[str, Any]) -> MeshConfig:
    """Parse radio connection settings."""
    defaults = MeshConfig()
    return MeshConfig(
        device=data.get("device", defaults.device),
        host=data.get("host", defaults.host),
        pacing_seconds=float(data.get("pacing_seconds", defaults.pacing_seconds)),
    )


def _parse_mqtt(data: dict[str, Any]) -> MqttConfig:
    """Parse lightning feed subscription settings."""
    defaults = MqttConfig()
    return MqttConfig(
        host=data.get("host", defaults.host),
        port=int(data.get("port", defaults.port)),
        topic=data.get("topic", defaults.topic),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    defaults = Config()
    channels = data.get("channels") or {}

    reference_point = defaults.reference_point
    if "reference_point" in data:
        reference_point = _parse_point(data["reference_point"])

    lightning_bounds = defaults.lightning_bounds
    if "lightning_bounds" in data:
        lightning_bounds = _parse_bounds(data["lightning_bounds"])

    # Partial overrides keep the remaining default names
    compass_names = dict(defaults.compass_names)
    compass_names.update({
        str(k): str(v) for k, v in (data.get("compass_names") or {}).items()
    })

    return Config(
        reference_point=reference_point,
        lightning_bounds=lightning_bounds,
        compass_names=compass_names,
        storm=_parse_storm(_section(data, "storm")),
        warnings=_parse_warnings(_section(data, "warnings")),
        forecast=_parse_forecast(_section(data, "forecast")),
        alarm_check_seconds=int(data.get("alarm_check_seconds", defaults.alarm_check_seconds)),
        mesh=_parse_mesh(_section(data, "mesh")),
        alert_channel=_parse_channel(channels.get("alerts"), defaults.alert_channel),
        weather_channel=_parse_channel(channels.get("weather"), defaults.weather_channel),
        mqtt=_parse_mqtt(_section(data, "mqtt")),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: reference %.2f,%.2f, alerts on %s, forecast on %s at %s",
        config.reference_point.lat,
        config.reference_point.lon,
        config.alert_channel.name,
        config.weather_channel.name,
        config.forecast.alarm_time,
    )

    return config


def load_config_from_env() -> Config:
    """Load minimal configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        MESH_DEVICE: Serial device of the radio
        MESH_HOST: Hostname of a network-attached radio
        REFERENCE_POINT: Comma-separated lat,lon
        LIGHTNING_BOUNDS: Comma-separated bounds (min_lat,max_lat,min_lon,max_lon)
        ALERT_CHANNEL: Channel name for alerts
        WEATHER_CHANNEL: Channel name for the daily forecast

    Returns:
        Config object from environment
    """
    config = Config()

    if os.environ.get("MESH_HOST"):
        config.mesh.host = os.environ["MESH_HOST"]
    if os.environ.get("MESH_DEVICE"):
        config.mesh.device = os.environ["MESH_DEVICE"]

    point_str = os.environ.get("REFERENCE_POINT")
    if point_str:
        parts = [float(p.strip()) for p in point_str.split(",")]
        if len(parts) == 2:
            config.reference_point = GeoPoint(lat=parts[0], lon=parts[1])
        else:
            logger.warning("REFERENCE_POINT must be lat,lon; ignoring %r", point_str)

    bounds_str = os.environ.get("LIGHTNING_BOUNDS")
    if bounds_str:
        parts = [float(p.strip()) for p in bounds_str.split(",")]
        if len(parts) == 4:
            config.lightning_bounds = BoundingBox(
                min_latitude=parts[0],
                max_latitude=parts[1],
                min_longitude=parts[2],
                max_longitude=parts[3],
            )
        else:
            logger.warning("LIGHTNING_BOUNDS needs 4 values; ignoring %r", bounds_str)

    if os.environ.get("ALERT_CHANNEL"):
        config.alert_channel.name = os.environ["ALERT_CHANNEL"]
    if os.environ.get("WEATHER_CHANNEL"):
        config.weather_channel.name = os.environ["WEATHER_CHANNEL"]

    return config
