"""Message formatting - Pure functions.

This module formats warnings, storm buckets and the forecast header into
the short plain-text messages sent over the radio.
All functions are pure with no side effects.
"""

from datetime import date

from stormrelay.core.warning import WarningRecord


STORM_PREFIX = "[STORM]: "

# Slovak display names
DEFAULT_COMPASS_NAMES = {
    "N": "Severne",
    "NE": "Severo-Vychodne",
    "E": "Vychodne",
    "SE": "Juho-Vychodne",
    "S": "Juzne",
    "SW": "Juho-Zapadne",
    "W": "Zapadne",
    "NW": "Severo-Zapadne",
}

# Monday first, as returned by date.weekday()
DEFAULT_WEEKDAY_NAMES = (
    "pondelok",
    "utorok",
    "streda",
    "štvrtok",
    "piatok",
    "sobota",
    "nedeľa",
)

DEFAULT_FORECAST_HEADER = "Pocasie pre {date}:"


def format_warning_alert(warning: WarningRecord) -> str:
    """Format a warning as "[severity][type]: text".

    Pure function.
    """
    return f"[{warning.severity}][{warning.type}]: {warning.text}"


def format_storm_part(
    octant: str,
    distance_index: int,
    compass_names: dict[str, str],
    bucket_width_km: int = 10,
) -> str:
    """Format one storm bucket as "<distance>km <direction>".

    Pure function.

    Args:
        octant: Compass octant code (e.g., 'NE')
        distance_index: Bucket index, floor(distance / bucket_width_km)
        compass_names: Display name per octant code
        bucket_width_km: Width of a distance bucket

    Returns:
        e.g. "20km Severo-Vychodne"
    """
    name = compass_names.get(octant, octant)
    return f"{distance_index * bucket_width_km}km {name}"


def format_storm_alert(parts: list[str]) -> str:
    """Join storm bucket parts into one alert line.

    Pure function.
    """
    return STORM_PREFIX + ", ".join(parts)


def format_local_date(day: date, weekday_names: tuple[str, ...] | list[str]) -> str:
    """Format a date as "<weekday> <d>. <m>. <yyyy>".

    Pure function.
    """
    weekday = weekday_names[day.weekday()]
    return f"{weekday} {day.day}. {day.month}. {day.year}"


def format_forecast_header(
    day: date,
    template: str = DEFAULT_FORECAST_HEADER,
    weekday_names: tuple[str, ...] | list[str] = DEFAULT_WEEKDAY_NAMES,
) -> str:
    """Format the first chunk of the daily forecast.

    Pure function.

    Args:
        day: Date the forecast is for
        template: Header template with a {date} placeholder
        weekday_names: Localized weekday names, Monday first

    Returns:
        e.g. "Pocasie pre streda 21. 10. 2026:"
    """
    return template.format(date=format_local_date(day, weekday_names))
