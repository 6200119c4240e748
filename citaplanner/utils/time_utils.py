# citaplanner/utils/time_utils.py
"""
Date and wall-clock helpers.

Every place that needs "which calendar day is this timestamp on" goes through
to_calendar_day() so the day-granularity rule is applied the same way for
schedule exceptions, availability queries and appointment listings.
"""
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

WALL_CLOCK_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

Timestamp = Union[str, date, datetime]


def get_zone(name: Optional[Union[str, tzinfo]]) -> tzinfo:
    """Resolve an IANA zone name (or tzinfo) into a tzinfo, defaulting to UTC."""
    if name is None:
        return timezone.utc
    if isinstance(name, tzinfo):
        return name
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown time zone: {name}")


def parse_timestamp(value: Timestamp) -> Union[date, datetime]:
    """
    Parse an ISO-8601 date or date-time.

    Plain dates ("2025-03-17") stay dates; anything with a time component
    becomes a datetime. A trailing "Z" is accepted as UTC.
    """
    if isinstance(value, (date, datetime)):
        return value

    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_calendar_day(value: Timestamp, tz: Optional[Union[str, tzinfo]] = None) -> date:
    """
    Normalize a timestamp to the calendar day it falls on in ``tz``.

    Aware datetimes are converted into the zone first; naive datetimes and
    plain dates are taken as already expressed in that zone.
    """
    parsed = parse_timestamp(value)
    if isinstance(parsed, datetime):
        if parsed.tzinfo is not None and tz is not None:
            parsed = parsed.astimezone(get_zone(tz))
        return parsed.date()
    return parsed


def day_of_week(day: date) -> int:
    """Day index with 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def parse_wall_clock(value: str) -> int:
    """Parse "HH:MM" into minutes after midnight."""
    match = WALL_CLOCK_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid wall-clock time '{value}', expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_wall_clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def local_datetime(day: date, wall_clock: str, tz: Optional[Union[str, tzinfo]] = None) -> datetime:
    """Combine a calendar day and "HH:MM" into an aware datetime in ``tz``."""
    minutes = parse_wall_clock(wall_clock)
    naive = datetime.combine(day, time(minutes // 60, minutes % 60))
    return naive.replace(tzinfo=get_zone(tz))


def day_bounds(day: date, tz: Optional[Union[str, tzinfo]] = None) -> Tuple[datetime, datetime]:
    """UTC [start, end) of a calendar day in ``tz``."""
    zone = get_zone(tz)
    start = datetime.combine(day, time.min).replace(tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min).replace(tzinfo=zone)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def ensure_utc(value: datetime, tz: Optional[Union[str, tzinfo]] = None) -> datetime:
    """
    Return ``value`` as an aware UTC datetime.

    Naive values are interpreted in ``tz`` (UTC when omitted), which also
    covers backends that drop the offset on the way back from storage.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=get_zone(tz))
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
