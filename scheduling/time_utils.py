"""
Time Arithmetic

Pure helpers over wall-clock "HH:MM" strings and "YYYY-MM-DD" date keys.

Everything lives on a single 24 h clock face: adding minutes and measuring
the distance between two times are both modulo 1440, so
add_minutes(a, minutes_between(a, b)) == b for any valid a, b. Nothing
here ever moves a value to another calendar date.
"""

import re
from datetime import date, datetime

from scheduling.errors import InvalidFormat

MINUTES_PER_DAY = 24 * 60
END_OF_DAY = "23:59"

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_time(value) -> bool:
    """True iff value is HH:MM with hours 00-23 and minutes 00-59."""
    if not value or not isinstance(value, str):
        return False
    return _TIME_RE.match(value) is not None


def is_valid_date(value) -> bool:
    """True iff value is YYYY-MM-DD and names a real calendar day."""
    if not value or not isinstance(value, str):
        return False
    if not _DATE_RE.match(value):
        return False
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return False
    return parsed.isoformat() == value


def require_time(value, field: str = "time") -> str:
    if not is_valid_time(value):
        raise InvalidFormat(f"{field} must be in 24-hour HH:MM format")
    return value


def require_date(value, field: str = "date") -> str:
    if not is_valid_date(value):
        raise InvalidFormat(f"{field} must be a valid YYYY-MM-DD date")
    return value


def to_minutes(value: str) -> int:
    """Minutes since midnight."""
    require_time(value)
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    total %= MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def compare_times(a: str, b: str) -> int:
    """Negative if a < b, zero if equal, positive if a > b."""
    return to_minutes(a) - to_minutes(b)


def add_minutes(value: str, minutes: int) -> str:
    """Adds (or subtracts) minutes, wrapping around midnight on the same clock face."""
    return from_minutes(to_minutes(value) + minutes)


def minutes_between(start: str, end: str) -> int:
    """
    Minutes from start to end.

    If end is earlier than start it is read as the next day's time, so
    the result is always in [0, 1440).
    """
    return (to_minutes(end) - to_minutes(start)) % MINUTES_PER_DAY


def fits_in_day(start: str, minutes: int) -> bool:
    """True if start + minutes ends on the same day, strictly after start."""
    return 0 < minutes and to_minutes(start) + minutes < MINUTES_PER_DAY


def format_clock(moment: datetime) -> str:
    return moment.strftime("%H:%M")


def format_date_key(day) -> str:
    if isinstance(day, (date, datetime)):
        return day.strftime("%Y-%m-%d")
    return require_date(day)


def compact_date(day: str) -> str:
    """YYYY-MM-DD -> YYYYMMDD"""
    return require_date(day).replace("-", "")
