# ============================================================================
# FILE: citaplanner/services/availability/slot_generator.py
# Pure slot generation from a weekly schedule and exception list
# ============================================================================
"""
generate_slots() is a pure function of its inputs: it never reads the clock
or storage, so the same schedule and date always yield the same list.
"""
from datetime import date, tzinfo
from typing import Iterable, List, Optional, Union

from citaplanner.schemas.schedule import ScheduleException, WeeklySchedule
from citaplanner.utils.time_utils import day_of_week, format_wall_clock, to_calendar_day

# Candidate start times are spaced by this many minutes, independent of the
# service duration.
SLOT_STEP_MINUTES = 30


def is_blocked(target_date: date, exceptions: Iterable[ScheduleException],
               tz: Optional[Union[str, tzinfo]] = None) -> bool:
    """True when target_date falls inside any exception, both ends inclusive."""
    for exception in exceptions:
        start_day = to_calendar_day(exception.start_date, tz)
        end_day = to_calendar_day(exception.end_date, tz)
        if start_day <= target_date <= end_day:
            return True
    return False


def generate_slots(
        target_date: date,
        weekly_schedule: WeeklySchedule,
        exceptions: Iterable[ScheduleException],
        duration_minutes: int,
        tz: Optional[Union[str, tzinfo]] = None,
) -> List[str]:
    """
    Return the "HH:MM" start times on target_date at which a service of
    duration_minutes fits entirely inside one enabled time range.

    Ranges are walked in stored order and their starts concatenated. A
    blocked or disabled day yields an empty list.
    """
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")

    if is_blocked(target_date, exceptions, tz):
        return []

    day = weekly_schedule.day(day_of_week(target_date))
    if not day.is_enabled:
        return []

    slots = []
    for time_range in day.slots:
        cursor = time_range.start_minutes
        while cursor + duration_minutes <= time_range.end_minutes:
            slots.append(format_wall_clock(cursor))
            cursor += SLOT_STEP_MINUTES

    return slots
