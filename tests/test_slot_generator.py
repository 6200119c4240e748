"""Tests for pure slot generation from weekly schedules and exceptions."""

from datetime import date

import pytest

from citaplanner.schemas.schedule import ScheduleException, WeeklySchedule
from citaplanner.services.availability.slot_generator import (
    SLOT_STEP_MINUTES,
    generate_slots,
    is_blocked,
)
from citaplanner.utils.time_utils import parse_wall_clock
from tests.conftest import SCENARIO_SCHEDULE, make_weekly

MONDAY = date(2025, 3, 17)
TUESDAY = date(2025, 3, 18)
SUNDAY = date(2025, 3, 16)


def weekly(days=None) -> WeeklySchedule:
    return WeeklySchedule.from_list(make_weekly(days))


def exception(start: str, end: str, kind: str = "VACATION") -> ScheduleException:
    return ScheduleException(start_date=start, end_date=end, type=kind)


class TestScenario:

    def test_monday_split_shift_45_minutes(self):
        slots = generate_slots(MONDAY, weekly(SCENARIO_SCHEDULE), [], 45)
        assert slots == [
            "09:00", "09:30", "10:00", "10:30", "11:00", "11:30", "12:00",
            "15:00", "15:30", "16:00", "16:30", "17:00",
        ]

    def test_deterministic(self):
        schedule = weekly(SCENARIO_SCHEDULE)
        assert generate_slots(MONDAY, schedule, [], 45) == generate_slots(MONDAY, schedule, [], 45)


class TestDisabledDays:

    def test_disabled_day_is_empty(self):
        assert generate_slots(TUESDAY, weekly(SCENARIO_SCHEDULE), [], 30) == []

    def test_enabled_flag_off_ignores_ranges(self):
        raw = make_weekly(SCENARIO_SCHEDULE)
        raw[1]["is_enabled"] = False
        assert generate_slots(MONDAY, WeeklySchedule.from_list(raw), [], 30) == []

    def test_sunday_is_day_zero(self):
        schedule = weekly({0: [("10:00", "11:00")]})
        assert generate_slots(SUNDAY, schedule, [], 30) == ["10:00", "10:30"]

    def test_closed_schedule(self):
        for offset in range(7):
            day = date(2025, 3, 16 + offset)
            assert generate_slots(day, WeeklySchedule.closed(), [], 30) == []


class TestFitAndStepping:

    def test_exact_fit_range(self):
        schedule = weekly({1: [("09:00", "10:00")]})
        assert generate_slots(MONDAY, schedule, [], 60) == ["09:00"]

    def test_range_shorter_than_duration(self):
        schedule = weekly({1: [("09:00", "09:30")]})
        assert generate_slots(MONDAY, schedule, [], 45) == []

    @pytest.mark.parametrize("duration", [15, 30, 45, 60, 90, 120])
    def test_every_slot_fits_and_is_on_grid(self, duration):
        schedule = weekly(SCENARIO_SCHEDULE)
        ranges = schedule.day(1).slots
        for slot in generate_slots(MONDAY, schedule, [], duration):
            minutes = parse_wall_clock(slot)
            containing = [r for r in ranges if r.start_minutes <= minutes and minutes + duration <= r.end_minutes]
            assert len(containing) == 1
            assert (minutes - containing[0].start_minutes) % SLOT_STEP_MINUTES == 0

    def test_step_independent_of_duration(self):
        schedule = weekly({1: [("09:00", "11:00")]})
        assert generate_slots(MONDAY, schedule, [], 90) == ["09:00", "09:30"]

    def test_unaligned_range_start(self):
        schedule = weekly({1: [("09:15", "10:30")]})
        assert generate_slots(MONDAY, schedule, [], 30) == ["09:15", "09:45"]

    def test_ranges_emitted_in_stored_order(self):
        schedule = weekly({1: [("15:00", "16:00"), ("09:00", "10:00")]})
        slots = generate_slots(MONDAY, schedule, [], 30)
        assert slots == ["15:00", "15:30", "09:00", "09:30"]

    @pytest.mark.parametrize("duration", [0, -30])
    def test_non_positive_duration_rejected(self, duration):
        with pytest.raises(ValueError):
            generate_slots(MONDAY, weekly(SCENARIO_SCHEDULE), [], duration)


class TestExceptions:

    def test_exception_covering_day_blocks_it(self):
        blocked = [exception("2025-03-17", "2025-03-17")]
        assert generate_slots(MONDAY, weekly(SCENARIO_SCHEDULE), blocked, 45) == []

    def test_range_is_inclusive_on_both_ends(self):
        blocked = [exception("2025-03-10", "2025-03-17")]
        assert generate_slots(MONDAY, weekly(SCENARIO_SCHEDULE), blocked, 45) == []
        blocked = [exception("2025-03-17", "2025-03-24")]
        assert generate_slots(MONDAY, weekly(SCENARIO_SCHEDULE), blocked, 45) == []

    def test_exception_on_other_day_leaves_availability(self):
        blocked = [exception("2025-03-18", "2025-03-20")]
        assert generate_slots(MONDAY, weekly(SCENARIO_SCHEDULE), blocked, 45) != []

    def test_partial_day_exception_blocks_whole_day(self):
        blocked = [exception("2025-03-17T14:00:00", "2025-03-17T15:00:00", "UNAVAILABLE")]
        assert generate_slots(MONDAY, weekly(SCENARIO_SCHEDULE), blocked, 45) == []

    def test_exception_day_uses_operating_zone(self):
        # 02:00 UTC on the 18th is still the 17th in Mexico City
        blocked = [exception("2025-03-18T02:00:00Z", "2025-03-18T03:00:00Z")]
        assert is_blocked(MONDAY, blocked, "America/Mexico_City")
        assert not is_blocked(MONDAY, blocked, "UTC")

    def test_exceptions_never_add_availability(self):
        holiday = [exception("2025-03-18", "2025-03-18", "HOLIDAY")]
        assert generate_slots(TUESDAY, weekly(SCENARIO_SCHEDULE), holiday, 30) == []
