"""
Timezone and call-window utilities.

Call times are stored as local wall-clock strings plus an IANA timezone name,
so every comparison happens in the call's own timezone. The predicates here
fail closed: anything that cannot be parsed makes them return False.
"""

import logging
import re
from datetime import date, datetime, time, timedelta
from email.utils import parsedate_to_datetime

import pytz

from .config import get_default_timezone
from .constants import (
    CANONICAL_DATE_FORMAT,
    FALLBACK_DATE_FORMATS,
    JOIN_LEAD_TIME,
    TIME_FORMATS,
)

logger = logging.getLogger(__name__)

# "9:30am" -> "9:30 am" so it matches the meridiem formats
_MERIDIEM_PATTERN = re.compile(r"(\d)\s*([ap]m)$", re.IGNORECASE)


def normalize_date(value) -> date | None:
    """
    Normalize a call date to a calendar day.

    Accepts date/datetime objects, canonical YYYY-MM-DD strings and a few
    non-canonical forms (ISO datetimes such as "2024-01-10T00:00:00.000Z",
    "01/10/2024", RFC 2822). Datetimes keep the calendar day as written.

    Returns:
        The calendar day, or None if the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return datetime.strptime(text, CANONICAL_DATE_FORMAT).date()
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        return parsedate_to_datetime(text).date()
    except (TypeError, ValueError, IndexError):
        return None


def parse_call_time(value) -> time | None:
    """
    Parse a wall-clock time string using the ordered TIME_FORMATS list.

    The first format that parses wins, even when a later one would also
    match (e.g. "08:30" is taken by "H:mm" before "HH:mm" is tried).
    """
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        return None

    text = _MERIDIEM_PATTERN.sub(r"\1 \2", " ".join(value.split()))
    for _label, pattern in TIME_FORMATS:
        try:
            return datetime.strptime(text, pattern).time()
        except ValueError:
            continue
    return None


def resolve_timezone(tz_name: str | None):
    """Return a pytz timezone, the default one for empty names, None if unknown."""
    try:
        return pytz.timezone(tz_name or get_default_timezone())
    except pytz.UnknownTimeZoneError:
        return None


def localize_wall_clock(day: date, wall_time: time, tz) -> datetime:
    """
    Attach a timezone to a local wall-clock time.

    Ambiguous times (DST fall-back) resolve to the first occurrence.
    Non-existent times (DST spring-forward gap) shift forward past the gap.
    """
    naive = datetime.combine(day, wall_time)
    try:
        return tz.localize(naive, is_dst=None)
    except pytz.AmbiguousTimeError:
        return tz.localize(naive, is_dst=True)
    except pytz.NonExistentTimeError:
        return tz.normalize(tz.localize(naive, is_dst=False))


def get_call_window(
    call_date,
    start_time,
    end_time,
    tz_name: str | None,
) -> tuple[datetime, datetime] | None:
    """
    Resolve a call's start and end instants in its own timezone.

    An end time earlier than the start time is taken to be on the next day.

    Returns:
        (start, end) timezone-aware datetimes, or None if anything fails to parse
    """
    day = normalize_date(call_date)
    if day is None:
        return None

    tz = resolve_timezone(tz_name)
    if tz is None:
        logger.warning(f"Unknown timezone for call window: {tz_name}")
        return None

    start = parse_call_time(start_time)
    end = parse_call_time(end_time)
    if start is None or end is None:
        return None

    start_dt = localize_wall_clock(day, start, tz)
    end_day = day if end >= start else day + timedelta(days=1)
    end_dt = localize_wall_clock(end_day, end, tz)
    return start_dt, end_dt


def resolve_now(now: datetime | None) -> datetime:
    """Current time when None; naive datetimes are treated as UTC."""
    if now is None:
        return datetime.now(pytz.UTC)
    if now.tzinfo is None:
        return pytz.UTC.localize(now)
    return now


def is_joinable(
    call_date,
    start_time,
    end_time,
    tz_name: str | None,
    now: datetime | None = None,
) -> bool:
    """True when now is within [start - 10 minutes, end], both ends inclusive."""
    window = get_call_window(call_date, start_time, end_time, tz_name)
    if window is None:
        return False
    start, end = window
    return start - JOIN_LEAD_TIME <= resolve_now(now) <= end


def is_ongoing(
    call_date,
    start_time,
    end_time,
    tz_name: str | None,
    now: datetime | None = None,
) -> bool:
    """True when now is within [start, end], both ends inclusive."""
    window = get_call_window(call_date, start_time, end_time, tz_name)
    if window is None:
        return False
    start, end = window
    return start <= resolve_now(now) <= end


def format_time_range(call_date, start_time, end_time, tz_name: str | None) -> str | None:
    """Format a call's times as "9:00 am - 10:00 am", or None if unparseable."""
    window = get_call_window(call_date, start_time, end_time, tz_name)
    if window is None:
        return None
    start, end = window
    return f"{_format_clock(start)} - {_format_clock(end)}"


def time_until_start(
    call_date,
    start_time,
    tz_name: str | None,
    now: datetime | None = None,
) -> str | None:
    """
    Describe how long until a call starts.

    Returns:
        "in 1d 3h", "in 2h 5m", "in 5m", "Starting now" once the start has
        passed, or None if the call time cannot be parsed
    """
    window = get_call_window(call_date, start_time, start_time, tz_name)
    if window is None:
        return None

    remaining = window[0] - resolve_now(now)
    if remaining <= timedelta(0):
        return "Starting now"

    days = remaining.days
    hours, seconds = divmod(remaining.seconds, 3600)
    minutes = seconds // 60
    if days > 0:
        return f"in {days}d {hours}h"
    if hours > 0:
        return f"in {hours}h {minutes}m"
    return f"in {minutes}m"


def _format_clock(dt: datetime) -> str:
    return dt.strftime("%I:%M %p").lstrip("0").lower()


def format_datetime_in_timezone(
    utc_dt: datetime,
    tz_name: str,
) -> str:
    """
    Format a UTC datetime in the user's local timezone with explicit offset.

    Args:
        utc_dt: Datetime in UTC (naive datetimes treated as UTC)
        tz_name: Timezone string (e.g., "America/New_York")

    Returns:
        Formatted string like "Wednesday at 3:00 PM (UTC-5)"
    """
    local_dt = _to_local(utc_dt, tz_name)

    day_name = local_dt.strftime("%A")
    time_str = local_dt.strftime("%I:%M %p").lstrip("0")  # "3:00 PM" not "03:00 PM"

    # "+0530" -> "UTC+5:30", "+0700" -> "UTC+7"
    offset = local_dt.strftime("%z")
    if offset:
        hours = int(offset[:3])
        minutes = int(offset[0] + offset[3:5])
        if minutes == 0:
            offset_str = f"UTC{hours:+d}" if hours != 0 else "UTC"
        else:
            offset_str = f"UTC{hours:+d}:{abs(minutes):02d}"
    else:
        offset_str = "UTC"

    return f"{day_name} at {time_str} ({offset_str})"


def format_date_in_timezone(
    utc_dt: datetime,
    tz_name: str,
) -> str:
    """
    Format a UTC datetime as just a date in the user's local timezone.

    Returns:
        Formatted string like "Wednesday, January 10"
    """
    local_dt = _to_local(utc_dt, tz_name)
    return local_dt.strftime("%A, %B %d").replace(" 0", " ")


def _to_local(utc_dt: datetime, tz_name: str) -> datetime:
    """Convert to tz_name, falling back to UTC for unknown zones."""
    if utc_dt.tzinfo is None:
        utc_dt = pytz.UTC.localize(utc_dt)
    try:
        return utc_dt.astimezone(pytz.timezone(tz_name))
    except pytz.UnknownTimeZoneError:
        return utc_dt.astimezone(pytz.UTC)
