"""Weather warning data models and parsing - Pure functions.

This module turns raw records scraped from the warning page into typed
WarningRecord objects. All functions are pure with no side effects.
"""

import hashlib
from dataclasses import dataclass
from typing import Any


REQUIRED_FIELDS = ("type", "severity", "text", "start_time", "end_time")

# ASCII unit separator, absent from scraped page text
IDENTITY_SEPARATOR = "\x1f"


@dataclass(frozen=True)
class WarningRecord:
    """Immutable weather warning.

    Attributes:
        type: Warning type (e.g., 'thunderstorm', 'wind')
        severity: Severity level as published (e.g., '2', 'orange')
        text: Human-readable headline
        start_time: Validity start, as published
        end_time: Validity end, as published
    """
    type: str
    severity: str
    text: str
    start_time: str
    end_time: str


def warning_identity(record: WarningRecord) -> str:
    """Compute the dedup identity of a warning.

    Pure function. The text is deliberately excluded: a warning whose
    headline is reworded is still the same warning.

    Returns:
        SHA-1 hex digest of type, severity, start and end time
    """
    key = IDENTITY_SEPARATOR.join(
        (record.type, record.severity, record.start_time, record.end_time)
    )
    return hashlib.sha1(key.encode("utf-8")).hexdigest()


def parse_warning(data: dict[str, Any]) -> WarningRecord | None:
    """Parse a single raw warning dict into a WarningRecord.

    Pure function: takes raw dict, returns typed WarningRecord or None if a
    required field is missing or empty.

    Args:
        data: Raw record from the warning client

    Returns:
        WarningRecord or None if the record is malformed
    """
    try:
        raw = {name: data[name] for name in REQUIRED_FIELDS}
    except (KeyError, TypeError):
        return None

    if any(value is None for value in raw.values()):
        return None

    values = {name: str(value).strip() for name, value in raw.items()}
    if not all(values[name] for name in ("type", "severity", "text")):
        return None

    return WarningRecord(**values)


def parse_warnings(raw_records: list[dict[str, Any]]) -> list[WarningRecord]:
    """Parse raw warning dicts, dropping malformed ones.

    Pure function. Feed order is preserved.

    Args:
        raw_records: Records as returned by the warning client

    Returns:
        List of valid WarningRecord objects
    """
    warnings = []

    for data in raw_records:
        record = parse_warning(data)
        if record is not None:
            warnings.append(record)

    return warnings
