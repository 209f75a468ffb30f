# File: utils/dt_utils.py
"""Date and time utilities for Nomor.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Day boundaries are defined by the local calendar date (the configured Home
Assistant time zone), not by elapsed time since the last completion.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_today_iso: Get today's date as ISO string
    - dt_now_local: Get current datetime in local timezone
    - dt_now_utc: Get current datetime in UTC
    - dt_parse_date: Parse date strings
    - dt_parse_datetime: Parse ISO datetime strings to aware UTC datetimes
    - is_today: Check whether a date is the local calendar date
    - was_yesterday: Check whether a date is the day before today
    - next_local_midnight: Next reset boundary as an aware datetime
    - time_until_next_reset: (hours, minutes) until the next local midnight
"""

from __future__ import annotations

from datetime import UTC, date, datetime
import logging
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")


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

    Returns:
        Current datetime in the specified timezone.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info)


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Example:
        datetime.date(2026, 4, 7)
    """
    return dt_now_local(tz).date()


def dt_today_iso(tz: ZoneInfo | None = None) -> str:
    """Return today's date in local timezone as ISO string (YYYY-MM-DD)."""
    return dt_today_local(tz).isoformat()


# ==============================================================================
# Parsing
# ==============================================================================


def dt_parse_date(date_input: str | date | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts an ISO date ("2026-04-07"), an ISO datetime (the date part is used)
    or an existing `date`. Anything else yields None.

    Args:
        date_input: Date string, date, or None

    Returns:
        datetime.date or None if parsing fails.
    """
    if isinstance(date_input, datetime):
        return date_input.date()
    if isinstance(date_input, date):
        return date_input
    if not date_input or not isinstance(date_input, str):
        return None

    try:
        return date.fromisoformat(date_input)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(date_input).date()
    except ValueError:
        _LOGGER.debug("Unparseable date value: %s", date_input)
        return None


def dt_parse_datetime(dt_str: str | None) -> datetime | None:
    """Parse an ISO datetime string into an aware UTC datetime.

    Naive values are assumed to be in DEFAULT_TIME_ZONE.

    Returns:
        Aware UTC datetime, or None if the input is empty or invalid.
    """
    if not dt_str or not isinstance(dt_str, str):
        return None
    try:
        parsed = datetime.fromisoformat(dt_str)
    except ValueError:
        _LOGGER.debug("Unparseable datetime value: %s", dt_str)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=DEFAULT_TIME_ZONE)
    return parsed.astimezone(UTC)


# ==============================================================================
# Day Boundary Checks
# ==============================================================================


def is_today(value: str | date | None, today: date | None = None) -> bool:
    """Return True if value is the current local calendar date.

    Never raises: absent or unparseable input is simply not today.

    Args:
        value: ISO date string, date, or None
        today: Optional override for the current local date (testing)
    """
    parsed = dt_parse_date(value)
    if parsed is None:
        return False
    return parsed == (today or dt_today_local())


def was_yesterday(value: str | date | None, today: date | None = None) -> bool:
    """Return True if value is exactly one local calendar day before today.

    Args:
        value: ISO date string, date, or None
        today: Optional override for the current local date (testing)
    """
    parsed = dt_parse_date(value)
    if parsed is None:
        return False
    return parsed == (today or dt_today_local()) - relativedelta(days=1)


# ==============================================================================
# Reset Countdown
# ==============================================================================


def next_local_midnight(now: datetime | None = None) -> datetime:
    """Return the next local midnight after now (timezone-aware).

    Args:
        now: Optional aware datetime; defaults to the current local time.
    """
    local_now = (now or dt_now_local()).astimezone(DEFAULT_TIME_ZONE)
    tomorrow = local_now.date() + relativedelta(days=1)
    return datetime(
        tomorrow.year, tomorrow.month, tomorrow.day, tzinfo=DEFAULT_TIME_ZONE
    )


def time_until_next_reset(now: datetime | None = None) -> tuple[int, int]:
    """Return the time remaining until local midnight as (hours, minutes).

    Both components are floor-truncated, so 59 seconds left reports (0, 0).
    Elapsed time is measured in UTC, so days with a DST change report
    23 or 25 hours at midnight.

    Examples:
        23:00:00 local → (1, 0)
        22:14:30 local → (1, 45)
    """
    local_now = (now or dt_now_local()).astimezone(DEFAULT_TIME_ZONE)
    midnight_utc = next_local_midnight(local_now).astimezone(UTC)
    remaining = midnight_utc - local_now.astimezone(UTC)
    total_minutes = max(int(remaining.total_seconds()) // 60, 0)
    return total_minutes // 60, total_minutes % 60
