"""
Pydantic types for professional schedules.

A WeeklySchedule is always a fixed 7-tuple of DaySchedule entries indexed by
day of week (0=Sunday .. 6=Saturday), so a "missing day" cannot be
represented. Exceptions are independent date-range blockers.
"""
import enum
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from citaplanner.utils.time_utils import parse_timestamp, parse_wall_clock


class ExceptionType(str, enum.Enum):
    VACATION = "VACATION"
    HOLIDAY = "HOLIDAY"
    UNAVAILABLE = "UNAVAILABLE"


class TimeRange(BaseModel):
    """Same-day wall-clock range, start < end."""
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_wall_clock(cls, v: str) -> str:
        parse_wall_clock(v)
        return v

    @model_validator(mode="after")
    def validate_order(self):
        if self.start_minutes >= self.end_minutes:
            raise ValueError(f"Time range start {self.start} must be before end {self.end}")
        return self

    @property
    def start_minutes(self) -> int:
        return parse_wall_clock(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_wall_clock(self.end)


class DaySchedule(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6)
    is_enabled: bool = False
    slots: List[TimeRange] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_no_overlap(self):
        ordered = sorted(self.slots, key=lambda r: r.start_minutes)
        for previous, current in zip(ordered, ordered[1:]):
            if current.start_minutes < previous.end_minutes:
                raise ValueError(
                    f"Overlapping time ranges on day {self.day_of_week}: "
                    f"{previous.start}-{previous.end} and {current.start}-{current.end}"
                )
        return self


DayTuple = Tuple[
    DaySchedule, DaySchedule, DaySchedule, DaySchedule, DaySchedule, DaySchedule, DaySchedule
]


class WeeklySchedule(BaseModel):
    days: DayTuple

    @field_validator("days", mode="before")
    @classmethod
    def order_by_day(cls, v: Any) -> Any:
        if not isinstance(v, (list, tuple)):
            return v

        def key(entry):
            if isinstance(entry, DaySchedule):
                return entry.day_of_week
            if isinstance(entry, dict) and isinstance(entry.get("day_of_week"), int):
                return entry["day_of_week"]
            return 99

        return sorted(v, key=key)

    @model_validator(mode="after")
    def validate_days(self):
        for index, day in enumerate(self.days):
            if day.day_of_week != index:
                raise ValueError("Weekly schedule must contain each day of week (0-6) exactly once")
        return self

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> "WeeklySchedule":
        return cls(days=data)

    @classmethod
    def closed(cls) -> "WeeklySchedule":
        """Schedule with every day disabled."""
        return cls(days=[DaySchedule(day_of_week=i) for i in range(7)])

    def day(self, day_of_week: int) -> DaySchedule:
        return self.days[day_of_week]

    def to_list(self) -> List[Dict[str, Any]]:
        return [day.model_dump(mode="json") for day in self.days]


class ScheduleException(BaseModel):
    """Date range (inclusive, whole days) during which a professional is unavailable."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    start_date: str
    end_date: str
    type: ExceptionType
    reason: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def validate_timestamp(cls, v: Any) -> str:
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        if not isinstance(v, str):
            raise ValueError("Exception dates must be ISO-8601 strings")
        parse_timestamp(v)
        return v
