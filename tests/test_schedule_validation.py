"""Schedule parsing and the professional schedule endpoints."""

import pytest

from citaplanner.core.exceptions import InvalidScheduleData
from citaplanner.schemas.schedule import WeeklySchedule
from citaplanner.services.schedule.schedule_service import ScheduleService
from tests.conftest import SCENARIO_SCHEDULE, auth_headers, make_weekly


def vacation(start="2025-04-14", end="2025-04-18", reason="Semana Santa"):
    return {"start_date": start, "end_date": end, "type": "VACATION", "reason": reason}


class TestParseWeeklySchedule:

    def test_valid_schedule(self):
        weekly = ScheduleService.parse_weekly_schedule(make_weekly(SCENARIO_SCHEDULE))
        assert isinstance(weekly, WeeklySchedule)
        assert weekly.day(1).is_enabled
        assert [(r.start, r.end) for r in weekly.day(1).slots] == SCENARIO_SCHEDULE[1]

    def test_days_in_any_order(self):
        raw = list(reversed(make_weekly(SCENARIO_SCHEDULE)))
        weekly = ScheduleService.parse_weekly_schedule(raw)
        assert [d.day_of_week for d in weekly.days] == list(range(7))

    def test_missing_day_rejected(self):
        with pytest.raises(InvalidScheduleData):
            ScheduleService.parse_weekly_schedule(make_weekly()[:6])

    def test_duplicate_day_rejected(self):
        raw = make_weekly()
        raw[6] = dict(raw[5])
        with pytest.raises(InvalidScheduleData):
            ScheduleService.parse_weekly_schedule(raw)

    def test_not_a_list_rejected(self):
        with pytest.raises(InvalidScheduleData):
            ScheduleService.parse_weekly_schedule({"monday": []})

    @pytest.mark.parametrize("start,end", [("10:00", "09:00"), ("09:00", "09:00")])
    def test_range_must_be_ordered(self, start, end):
        with pytest.raises(InvalidScheduleData):
            ScheduleService.parse_weekly_schedule(make_weekly({1: [(start, end)]}))

    @pytest.mark.parametrize("value", ["9am", "25:00", "12:60", "", "12"])
    def test_malformed_time_rejected(self, value):
        with pytest.raises(InvalidScheduleData):
            ScheduleService.parse_weekly_schedule(make_weekly({1: [(value, "18:00")]}))

    def test_overlapping_ranges_rejected(self):
        with pytest.raises(InvalidScheduleData) as exc_info:
            ScheduleService.parse_weekly_schedule(make_weekly({1: [("09:00", "12:00"), ("11:00", "14:00")]}))
        assert exc_info.value.kind == "invalid_schedule"

    def test_adjacent_ranges_allowed(self):
        weekly = ScheduleService.parse_weekly_schedule(make_weekly({1: [("09:00", "12:00"), ("12:00", "14:00")]}))
        assert len(weekly.day(1).slots) == 2

    def test_round_trip(self):
        raw = make_weekly(SCENARIO_SCHEDULE)
        assert ScheduleService.parse_weekly_schedule(raw).to_list() == raw


class TestParseExceptions:

    def test_valid_exceptions(self):
        parsed = ScheduleService.parse_exceptions([vacation(), vacation("2025-12-25", "2025-12-25")])
        assert [e.type.value for e in parsed] == ["VACATION", "VACATION"]
        assert all(e.id for e in parsed)

    def test_end_before_start_rejected(self):
        with pytest.raises(InvalidScheduleData):
            ScheduleService.parse_exceptions([vacation("2025-04-18", "2025-04-14")])

    def test_same_day_with_times_allowed(self):
        parsed = ScheduleService.parse_exceptions([vacation("2025-04-14T15:00:00", "2025-04-14T10:00:00")])
        assert len(parsed) == 1

    def test_unknown_type_rejected(self):
        with pytest.raises(InvalidScheduleData):
            ScheduleService.parse_exceptions([{"start_date": "2025-04-14", "end_date": "2025-04-14", "type": "PARTY"}])

    def test_bad_date_rejected(self):
        with pytest.raises(InvalidScheduleData):
            ScheduleService.parse_exceptions([vacation("14/04/2025", "2025-04-18")])

    def test_empty(self):
        assert ScheduleService.parse_exceptions(None) == []


class TestScheduleEndpoint:

    def url(self, world):
        return f"/api/professionals/{world.bella_pro.id}"

    def test_put_then_get_round_trip(self, client, world, settings):
        weekly = make_weekly({1: [("08:00", "12:00")], 3: [("10:00", "14:00"), ("16:00", "19:00")]})
        exceptions = [vacation()]
        headers = auth_headers(world.bella_admin, settings, "bella")

        response = client.put(self.url(world), json={"weekly_schedule": weekly, "exceptions": exceptions}, headers=headers)
        assert response.status_code == 200

        listing = client.get("/api/professionals", headers=headers).json()
        stored = next(p for p in listing if p["id"] == str(world.bella_pro.id))
        assert stored["weekly_schedule"] == weekly
        assert len(stored["exceptions"]) == 1
        saved = stored["exceptions"][0]
        assert (saved["start_date"], saved["end_date"], saved["type"], saved["reason"]) == (
            "2025-04-14", "2025-04-18", "VACATION", "Semana Santa"
        )

    def test_invalid_schedule_leaves_stored_value(self, client, world, settings):
        before = list(world.bella_pro.weekly_schedule)
        bad = make_weekly({1: [("12:00", "09:00")]})

        response = client.put(
            self.url(world),
            json={"weekly_schedule": bad, "exceptions": []},
            headers=auth_headers(world.bella_admin, settings, "bella")
        )

        assert response.status_code == 422
        assert response.json()["error"] == "invalid_schedule"
        assert world.store.get_professional(world.bella.id, world.bella_pro.id).weekly_schedule == before

    def test_invalid_exception_leaves_schedule(self, client, world, settings):
        before = list(world.bella_pro.weekly_schedule)

        response = client.put(
            self.url(world),
            json={"weekly_schedule": make_weekly({2: [("09:00", "10:00")]}),
                  "exceptions": [vacation("2025-04-18", "2025-04-14")]},
            headers=auth_headers(world.bella_admin, settings, "bella")
        )

        assert response.status_code == 422
        assert world.store.get_professional(world.bella.id, world.bella_pro.id).weekly_schedule == before

    def test_professional_role_cannot_edit(self, client, world, settings):
        response = client.put(
            self.url(world),
            json={"weekly_schedule": make_weekly(), "exceptions": []},
            headers=auth_headers(world.bella_pro_user, settings, "bella")
        )
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_create_without_schedule_is_closed(self, client, world, settings):
        response = client.post(
            "/api/professionals",
            json={"name": "Luis", "service_ids": [str(world.bella_service.id)]},
            headers=auth_headers(world.bella_admin, settings, "bella")
        )
        assert response.status_code == 201
        body = response.json()
        assert len(body["weekly_schedule"]) == 7
        assert not any(day["is_enabled"] for day in body["weekly_schedule"])

    def test_create_with_foreign_service_rejected(self, client, world, settings):
        response = client.post(
            "/api/professionals",
            json={"name": "Luis", "service_ids": [str(world.otra_service.id)]},
            headers=auth_headers(world.bella_admin, settings, "bella")
        )
        assert response.status_code == 404
