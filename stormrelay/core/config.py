"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from stormrelay.core.aggregator import DEFAULT_BUCKET_WIDTH_KM, DEFAULT_STORM_THRESHOLD
from stormrelay.core.alarm import AlarmTime
from stormrelay.core.formatter import (
    DEFAULT_COMPASS_NAMES,
    DEFAULT_FORECAST_HEADER,
    DEFAULT_WEEKDAY_NAMES,
)
from stormrelay.core.geo import OCTANTS, BoundingBox, GeoPoint


DEFAULT_WARNINGS_URL = "https://www.meteoblue.com/sk/počasie/warnings/bratislava_slovensko_3060972"
DEFAULT_FORECAST_URL = "https://www.shmu.sk/sk/?page=1&id=meteo_tpredpoved_ba"


@dataclass
class ChannelConfig:
    """A radio channel alerts are sent to.

    Attributes:
        name: Channel name on the radio
        max_bytes: Per-message byte ceiling for this channel
    """
    name: str
    max_bytes: int = 155


@dataclass
class StormConfig:
    """Lightning aggregation settings.

    Attributes:
        threshold: Strikes per bucket and window needed to alert
        bucket_width_km: Width of a distance bucket
        tick_interval_seconds: Length of an aggregation window
    """
    threshold: int = DEFAULT_STORM_THRESHOLD
    bucket_width_km: int = DEFAULT_BUCKET_WIDTH_KM
    tick_interval_seconds: int = 600


@dataclass
class WarningsConfig:
    """Warning page settings.

    Attributes:
        url: Warning page URL
        language: Value of the page's defaultlang attribute to pick
        poll_interval_seconds: How often to poll the page
    """
    url: str = DEFAULT_WARNINGS_URL
    language: str = "sk"
    poll_interval_seconds: int = 600


@dataclass
class ForecastConfig:
    """Daily forecast settings.

    Attributes:
        url: Forecast page URL
        alarm_time: Time of day to send the forecast ("H:MM")
        chunk_bytes: Byte budget per forecast chunk
        header_template: First chunk, with a {date} placeholder
        weekday_names: Localized weekday names, Monday first
        fold_diacritics: Strip diacritics from the scraped text
    """
    url: str = DEFAULT_FORECAST_URL
    alarm_time: str = "7:23"
    chunk_bytes: int = 130
    header_template: str = DEFAULT_FORECAST_HEADER
    weekday_names: tuple[str, ...] = DEFAULT_WEEKDAY_NAMES
    fold_diacritics: bool = True


@dataclass
class MeshConfig:
    """Radio connection settings.

    Attributes:
        device: Serial device path (used when host is not set)
        host: Hostname of a network-attached radio
        pacing_seconds: Minimum delay between two sends
    """
    device: str | None = "/dev/ttyACM0"
    host: str | None = None
    pacing_seconds: float = 15.0


@dataclass
class MqttConfig:
    """Lightning feed subscription settings."""
    host: str = "blitzortung.ha.sed.pl"
    port: int = 1883
    topic: str = "blitzortung/1.1/#"


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        reference_point: Location bearings and distances are measured from
        lightning_bounds: Strikes outside this box are dropped
        compass_names: Display name per octant code
        storm: Lightning aggregation settings
        warnings: Warning page settings
        forecast: Daily forecast settings
        alarm_check_seconds: How often the daily alarm is checked
        mesh: Radio connection settings
        alert_channel: Channel for warnings and storm alerts
        weather_channel: Channel for the daily forecast
        mqtt: Lightning feed subscription settings
    """
    reference_point: GeoPoint = field(default_factory=lambda: GeoPoint(lat=48.14, lon=17.11))
    lightning_bounds: BoundingBox = field(default_factory=lambda: BoundingBox(
        min_latitude=47.51,
        max_latitude=48.76,
        min_longitude=15.54,
        max_longitude=18.62,
    ))
    compass_names: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COMPASS_NAMES))
    storm: StormConfig = field(default_factory=StormConfig)
    warnings: WarningsConfig = field(default_factory=WarningsConfig)
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    alarm_check_seconds: int = 30
    mesh: MeshConfig = field(default_factory=MeshConfig)
    alert_channel: ChannelConfig = field(default_factory=lambda: ChannelConfig(name="ARES"))
    weather_channel: ChannelConfig = field(default_factory=lambda: ChannelConfig(name="Omega"))
    mqtt: MqttConfig = field(default_factory=MqttConfig)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def validate_bounds(bounds: BoundingBox, field_name: str) -> list[ValidationError]:
    """Validate a bounding box.

    Pure function.

    Args:
        bounds: Bounding box to validate
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    # Validate individual coordinates
    errors.extend(validate_coordinates(
        bounds.min_latitude, bounds.min_longitude,
        f"{field_name}.min",
    ))
    errors.extend(validate_coordinates(
        bounds.max_latitude, bounds.max_longitude,
        f"{field_name}.max",
    ))

    # Check min < max
    if bounds.min_latitude > bounds.max_latitude:
        errors.append(ValidationError(
            field=field_name,
            message=f"min_latitude ({bounds.min_latitude}) > max_latitude ({bounds.max_latitude})",
        ))

    if bounds.min_longitude > bounds.max_longitude:
        errors.append(ValidationError(
            field=field_name,
            message=f"min_longitude ({bounds.min_longitude}) > max_longitude ({bounds.max_longitude})",
        ))

    return errors


def _validate_positive(value: float, field_name: str) -> list[ValidationError]:
    """Require a strictly positive number."""
    if value > 0:
        return []
    return [ValidationError(
        field=field_name,
        message=f"Must be positive, got {value}",
    )]


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    ref = config.reference_point
    errors.extend(validate_coordinates(ref.lat, ref.lon, "reference_point"))
    errors.extend(validate_bounds(config.lightning_bounds, "lightning_bounds"))

    if not config.lightning_bounds.contains(ref.lat, ref.lon):
        errors.append(ValidationError(
            field="reference_point",
            message="Reference point lies outside lightning_bounds",
            severity="warning",
        ))

    # Every octant needs a display name
    missing = [o for o in OCTANTS if not config.compass_names.get(o)]
    if missing:
        errors.append(ValidationError(
            field="compass_names",
            message=f"Missing display names for: {', '.join(missing)}",
        ))

    errors.extend(_validate_positive(config.storm.threshold, "storm.threshold"))
    errors.extend(_validate_positive(config.storm.bucket_width_km, "storm.bucket_width_km"))
    errors.extend(_validate_positive(
        config.storm.tick_interval_seconds, "storm.tick_interval_seconds",
    ))
    errors.extend(_validate_positive(
        config.warnings.poll_interval_seconds, "warnings.poll_interval_seconds",
    ))
    errors.extend(_validate_positive(config.alarm_check_seconds, "alarm_check_seconds"))
    errors.extend(_validate_positive(config.forecast.chunk_bytes, "forecast.chunk_bytes"))
    errors.extend(_validate_positive(config.alert_channel.max_bytes, "channels.alerts.max_bytes"))
    errors.extend(_validate_positive(config.weather_channel.max_bytes, "channels.weather.max_bytes"))

    if config.mesh.pacing_seconds < 0:
        errors.append(ValidationError(
            field="mesh.pacing_seconds",
            message=f"Must not be negative, got {config.mesh.pacing_seconds}",
        ))

    try:
        AlarmTime.parse(config.forecast.alarm_time)
    except ValueError as e:
        errors.append(ValidationError(field="forecast.alarm_time", message=str(e)))

    if len(config.forecast.weekday_names) != 7:
        errors.append(ValidationError(
            field="forecast.weekday_names",
            message=f"Expected 7 weekday names, got {len(config.forecast.weekday_names)}",
        ))

    if "{date}" not in config.forecast.header_template:
        errors.append(ValidationError(
            field="forecast.header_template",
            message="Header template has no {date} placeholder",
            severity="warning",
        ))

    if config.forecast.chunk_bytes > config.weather_channel.max_bytes:
        errors.append(ValidationError(
            field="forecast.chunk_bytes",
            message=(
                f"Forecast chunks ({config.forecast.chunk_bytes} bytes) exceed the "
                f"weather channel limit ({config.weather_channel.max_bytes} bytes)"
            ),
            severity="warning",
        ))

    if not config.mesh.device and not config.mesh.host:
        errors.append(ValidationError(
            field="mesh",
            message="Either mesh.device or mesh.host must be set",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
