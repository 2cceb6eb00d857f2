"""Daily alarm time - Pure functions."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AlarmTime:
    """Wall-clock time of day at which a daily job runs.

    Attributes:
        hour: Hour, 0-23
        minute: Minute, 0-59
    """
    hour: int
    minute: int

    @classmethod
    def parse(cls, value: str) -> "AlarmTime":
        """Parse "H:MM" or "HH:MM".

        Raises:
            ValueError: If the value is not a valid time of day
        """
        hours, sep, minutes = str(value).strip().partition(":")
        if not sep:
            raise ValueError(f"Invalid alarm time {value!r}, expected HH:MM")

        alarm = cls(hour=int(hours), minute=int(minutes))
        if not (0 <= alarm.hour <= 23 and 0 <= alarm.minute <= 59):
            raise ValueError(f"Alarm time {value!r} out of range")
        return alarm

    def is_due(self, now: datetime) -> bool:
        """Check whether now falls within the alarm minute."""
        return now.hour == self.hour and now.minute == self.minute

    def __str__(self) -> str:
        return f"{self.hour}:{self.minute:02d}"
