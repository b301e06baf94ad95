# File: utils/dt_utils.py
"""Date and time utilities for HabitQuest.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Every calendar-day decision in the integration (completion bucketing, streaks,
penalty days, the catch-up cursor) goes through the day key helpers below.
A day key is the ISO date string (YYYY-MM-DD) of a LOCAL calendar day. UTC
timestamps are always converted to the local zone before the date is taken,
never sliced.

Functions:
    - set_default_timezone / get_default_timezone: Viewer's local timezone
    - dt_now_local, dt_now_utc, dt_today_local, dt_today_key: Current time/day
    - as_local: Convert datetimes to the local zone
    - dt_parse: Normalize timestamp inputs to aware datetimes
    - day_key: Bucket a timestamp into its local day key
    - parse_day_key, add_days, compare_day_keys, days_between, iter_day_keys
    - timestamp_for_day: Build a completion timestamp on a given local day
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, date, datetime
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Comparison results
DAY_BEFORE = -1
DAY_EQUAL = 0
DAY_AFTER = 1


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware).

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info)


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Example:
        datetime.date(2025, 4, 7)
    """
    return dt_now_local(tz).date()


def dt_today_key(tz: ZoneInfo | None = None) -> str:
    """Return today's local day key.

    Example:
        "2025-04-07"
    """
    return dt_today_local(tz).isoformat()


# ==============================================================================
# Timezone Conversion / Parsing
# ==============================================================================


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are treated as UTC, which is how completion timestamps
    were written by older exports.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def dt_parse(dt_input: str | datetime | None) -> datetime | None:
    """Normalize a timestamp input to a timezone-aware datetime.

    Args:
        dt_input: ISO 8601 string or datetime, or None

    Returns:
        Aware datetime (naive input assumed UTC), or None if the input
        could not be parsed.
    """
    if not dt_input:
        return None

    if isinstance(dt_input, datetime):
        result = dt_input
    elif isinstance(dt_input, str):
        try:
            # "Z" suffix is accepted by fromisoformat on 3.11+
            result = datetime.fromisoformat(dt_input)
        except ValueError:
            _LOGGER.debug("Unparseable timestamp: %s", dt_input)
            return None
    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=UTC)
    return result


# ==============================================================================
# Day Keys
# ==============================================================================


def day_key(timestamp: str | datetime | date, tz: ZoneInfo | None = None) -> str:
    """Bucket a timestamp into its local calendar day key.

    Args:
        timestamp: ISO string, datetime or date. A bare ISO date string or
            a `date` is already a calendar day and is returned unchanged.
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Day key string "YYYY-MM-DD"

    Raises:
        ValueError: If the timestamp cannot be parsed.

    Example:
        With tz=America/Los_Angeles, "2025-04-08T03:30:00+00:00" -> "2025-04-07"
    """
    if isinstance(timestamp, date) and not isinstance(timestamp, datetime):
        return timestamp.isoformat()

    if isinstance(timestamp, str):
        try:
            # Calendar dates in any ISO form ("2026-01-05", "20260105") carry
            # no time of day and are never shifted by the timezone
            return parse_day_key(timestamp).isoformat()
        except ValueError:
            pass

    parsed = dt_parse(timestamp)
    if parsed is None:
        raise ValueError(f"Invalid timestamp: {timestamp!r}")
    return as_local(parsed, tz).date().isoformat()


def parse_day_key(key: str | date) -> date:
    """Parse a day key into a `datetime.date`.

    Raises:
        ValueError: If the key is not a valid ISO date.
    """
    if isinstance(key, date) and not isinstance(key, datetime):
        return key
    if not isinstance(key, str):
        raise ValueError(f"Invalid day key: {key!r}")
    return date.fromisoformat(key)


def add_days(key: str, days: int) -> str:
    """Return the day key `days` calendar days after `key` (negative for before)."""
    return (parse_day_key(key) + relativedelta(days=days)).isoformat()


def compare_day_keys(first: str, second: str) -> int:
    """Compare two day keys.

    Returns:
        DAY_BEFORE (-1) if first < second, DAY_EQUAL (0) if equal,
        DAY_AFTER (1) if first > second.
    """
    first_date = parse_day_key(first)
    second_date = parse_day_key(second)
    if first_date == second_date:
        return DAY_EQUAL
    return DAY_AFTER if first_date > second_date else DAY_BEFORE


def days_between(start: str, end: str) -> int:
    """Return the number of calendar days from `start` to `end` (negative if end is earlier)."""
    return (parse_day_key(end) - parse_day_key(start)).days


def iter_day_keys(start: str, end: str) -> Iterator[str]:
    """Yield every day key from `start` through `end` inclusive, ascending.

    Yields nothing when `end` is before `start`.
    """
    current = parse_day_key(start)
    last = parse_day_key(end)
    while current <= last:
        yield current.isoformat()
        current = current + relativedelta(days=1)


def timestamp_for_day(key: str, tz: ZoneInfo | None = None) -> str:
    """Return an ISO timestamp that falls on the local day `key`.

    Uses the current local time of day so a completion recorded on today's
    key carries the real wall-clock time, while a debug-selected day still
    buckets back to that day.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    now_local = dt_now_local(tz_info)
    day = parse_day_key(key)
    stamped = datetime.combine(day, now_local.time())
    return stamped.replace(tzinfo=tz_info).isoformat()
