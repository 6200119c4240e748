# ============================================================================
# FILE: citaplanner/services/schedule/schedule_service.py
# Validation and persistence of professional schedules
# ============================================================================
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from citaplanner.core.exceptions import InvalidScheduleData
from citaplanner.models import Professional
from citaplanner.schemas.schedule import ScheduleException, WeeklySchedule
from citaplanner.utils.time_utils import to_calendar_day

logger = logging.getLogger(__name__)


def _error_details(error: ValidationError, prefix: str) -> List[Dict[str, Any]]:
    return [
        {"loc": [prefix] + [str(part) for part in item["loc"]], "msg": item["msg"]}
        for item in error.errors()
    ]


class ScheduleService:
    """Parses raw schedule payloads; nothing invalid ever reaches storage."""

    @staticmethod
    def parse_weekly_schedule(raw: Any) -> WeeklySchedule:
        if isinstance(raw, WeeklySchedule):
            return raw
        if not isinstance(raw, (list, tuple)):
            raise InvalidScheduleData("weekly_schedule must be a list of 7 day entries")
        try:
            return WeeklySchedule.from_list(list(raw))
        except ValidationError as e:
            raise InvalidScheduleData(
                "Invalid weekly schedule",
                details={"errors": _error_details(e, "weekly_schedule")}
            )

    @staticmethod
    def parse_exceptions(raw: Optional[List[Any]], tz: Optional[str] = None) -> List[ScheduleException]:
        """Parse and validate exceptions; start must not fall after end (by calendar day in tz)."""
        parsed = []
        for index, item in enumerate(raw or []):
            try:
                exception = item if isinstance(item, ScheduleException) else ScheduleException.model_validate(item)
            except ValidationError as e:
                raise InvalidScheduleData(
                    "Invalid schedule exception",
                    details={"errors": _error_details(e, f"exceptions.{index}")}
                )

            if to_calendar_day(exception.start_date, tz) > to_calendar_day(exception.end_date, tz):
                raise InvalidScheduleData(
                    "Schedule exception starts after it ends",
                    details={"errors": [{
                        "loc": [f"exceptions.{index}", "end_date"],
                        "msg": "end_date must not be before start_date",
                    }]}
                )
            parsed.append(exception)
        return parsed

    @staticmethod
    def load(professional: Professional) -> Tuple[WeeklySchedule, List[ScheduleException]]:
        """Typed view of a stored professional's schedule."""
        raw_schedule = professional.weekly_schedule
        weekly = WeeklySchedule.from_list(raw_schedule) if raw_schedule else WeeklySchedule.closed()
        exceptions = [ScheduleException.model_validate(item) for item in (professional.exceptions or [])]
        return weekly, exceptions

    @staticmethod
    def apply(professional: Professional, raw_schedule: Any, raw_exceptions: Optional[List[Any]],
              tz: Optional[str] = None) -> Professional:
        """
        Validate both parts first, then assign them together so a failure
        leaves the professional unchanged.
        """
        weekly = ScheduleService.parse_weekly_schedule(raw_schedule)
        exceptions = ScheduleService.parse_exceptions(raw_exceptions, tz)

        professional.weekly_schedule = weekly.to_list()
        professional.exceptions = [e.model_dump(mode="json") for e in exceptions]

        logger.info(
            f"Schedule updated for professional '{professional.name}': "
            f"{sum(1 for d in weekly.days if d.is_enabled)} enabled days, {len(exceptions)} exceptions"
        )
        return professional
