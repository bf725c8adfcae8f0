"""
Calendar arithmetic for the Health Engine.

Every analytics rule in this package is phrased in calendar days ("a reading
today", "three days without exercise", "a dose every 7 days"). This module is
the single place where datetimes are truncated to local midnight, shifted by
whole days and compared by calendar day.

Design Principles:
- One timezone per calendar: "local midnight" means midnight in that zone
- Naive datetimes are interpreted in the calendar's zone
- Aware datetimes are converted into the calendar's zone before any math
- Day arithmetic is wall-clock arithmetic, so DST shifts keep 08:00 at 08:00

Usage:
    from health_engine.core.datetime_utils import LocalCalendar

    calendar = LocalCalendar(ZoneInfo("Europe/Berlin"))
    today = calendar.start_of_day(now)
    yesterday = calendar.add_days(today, -1)
    calendar.same_day(now, today)  # True
"""
import logging
import math
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

# A clock is any zero-argument callable returning the current instant.
Clock = Callable[[], datetime]

TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


# =============================================================================
# CORE UTILITIES
# =============================================================================

def utc_now() -> datetime:
    """
    Get current datetime in UTC with timezone info.

    This is the default clock. Services take a clock so tests can pin "now".
    """
    return datetime.now(timezone.utc)


def fixed_clock(instant: datetime) -> Clock:
    """Return a clock that always reports ``instant``."""
    return lambda: instant


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string with UTC timezone.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00Z'
    """
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# TIME OF DAY
# =============================================================================

def is_valid_time_of_day(value: str) -> bool:
    """Check that ``value`` is a 24-hour "HH:MM" string."""
    return bool(TIME_OF_DAY_PATTERN.fullmatch(value))


def parse_time_of_day(value: str) -> Tuple[int, int]:
    """
    Parse a 24-hour "HH:MM" string into (hour, minute).

    Raises:
        ValueError: If the string is not in HH:MM form.

    Example:
        >>> parse_time_of_day("08:30")
        (8, 30)
    """
    match = TIME_OF_DAY_PATTERN.fullmatch(value)
    if not match:
        raise ValueError(f"Invalid time of day: '{value}'")
    return int(match.group(1)), int(match.group(2))


# =============================================================================
# LOCAL CALENDAR
# =============================================================================

class LocalCalendar:
    """
    Day-level arithmetic in a single timezone.

    Instances are immutable and hold no state beyond the timezone, so one
    calendar can be shared across requests.
    """

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or timezone.utc

    def __repr__(self) -> str:
        return f"LocalCalendar(tz={self.tz!r})"

    def localize(self, dt: datetime) -> datetime:
        """Interpret naive datetimes in this zone and convert aware ones into it."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=self.tz)
        return dt.astimezone(self.tz)

    def start_of_day(self, dt: datetime) -> datetime:
        """Local midnight of the calendar day containing ``dt``."""
        return self.localize(dt).replace(hour=0, minute=0, second=0, microsecond=0)

    def add_days(self, dt: datetime, days: int) -> datetime:
        """Shift by whole calendar days, keeping the local wall-clock time."""
        return self.localize(dt) + timedelta(days=days)

    def day_of(self, dt: datetime) -> date:
        """The local calendar date of ``dt``."""
        return self.localize(dt).date()

    def same_day(self, a: datetime, b: datetime) -> bool:
        return self.day_of(a) == self.day_of(b)

    def difference_in_days(self, later: datetime, earlier: datetime) -> int:
        """Whole days elapsed between two instants, truncated toward zero."""
        elapsed = self.localize(later) - self.localize(earlier)
        return math.trunc(elapsed / timedelta(days=1))

    def at_time_of_day(self, day: datetime, time_of_day: str) -> datetime:
        """Apply an "HH:MM" string to the calendar day of ``day``."""
        hour, minute = parse_time_of_day(time_of_day)
        return self.start_of_day(day).replace(hour=hour, minute=minute)
