import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from shiftplanner.services.scheduling.types import (
    Holiday,
    HolidayKind,
    OpeningHours,
    ShiftType,
    StoreSettings,
    TimeTemplate,
    WorkRole,
)


class CamelModel(BaseModel):
    """Store settings travel as camelCase JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OpeningHoursSchema(CamelModel):
    morning_start: datetime.time = datetime.time(10, 0)
    morning_end: datetime.time = datetime.time(14, 0)
    afternoon_start: datetime.time = datetime.time(17, 0)
    afternoon_end: datetime.time = datetime.time(21, 0)


class HolidaySchema(CamelModel):
    date: datetime.date
    type: Literal["full", "afternoon", "closed_afternoon"] = "full"

    def to_holiday(self) -> Holiday:
        kind = HolidayKind.FULL if self.type == "full" else HolidayKind.AFTERNOON_ONLY
        return Holiday(date=self.date, kind=kind)


class TimeTemplateSchema(CamelModel):
    shift_type: ShiftType
    start_time: Optional[datetime.time] = None
    end_time: Optional[datetime.time] = None
    morning_end_time: Optional[datetime.time] = None
    afternoon_start_time: Optional[datetime.time] = None


class StoreSettingsSchema(CamelModel):
    establishment_id: str
    opening_hours: OpeningHoursSchema = Field(default_factory=OpeningHoursSchema)
    holidays: list[HolidaySchema] = Field(default_factory=list)
    open_sundays: list[datetime.date] = Field(default_factory=list)
    role_schedules: dict[WorkRole, TimeTemplateSchema] = Field(default_factory=dict)
    individual_meeting_start_time: Optional[datetime.time] = None
    early_morning_start: datetime.time = datetime.time(9, 0)
    early_morning_end: datetime.time = datetime.time(14, 0)

    @field_validator("holidays", mode="before")
    @classmethod
    def normalise_holidays(cls, value: list[Union[str, dict]]) -> list[dict]:
        # Plain date strings are full-day closures
        return [{"date": h} if isinstance(h, str) else h for h in value or []]

    def to_settings(self) -> StoreSettings:
        return StoreSettings(
            establishment_id=self.establishment_id,
            opening_hours=OpeningHours(**self.opening_hours.model_dump()),
            holidays=tuple(h.to_holiday() for h in self.holidays),
            open_sundays=frozenset(self.open_sundays),
            role_schedules={
                role: TimeTemplate(**template.model_dump())
                for role, template in self.role_schedules.items()
            },
            individual_meeting_start_time=self.individual_meeting_start_time,
            early_morning_start=self.early_morning_start,
            early_morning_end=self.early_morning_end,
        )

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> "StoreSettingsSchema":
        hours = settings.opening_hours
        return cls(
            establishment_id=settings.establishment_id,
            opening_hours=OpeningHoursSchema(
                morning_start=hours.morning_start,
                morning_end=hours.morning_end,
                afternoon_start=hours.afternoon_start,
                afternoon_end=hours.afternoon_end,
            ),
            holidays=[
                HolidaySchema(date=h.date, type="full" if h.kind == HolidayKind.FULL else "afternoon")
                for h in settings.holidays
            ],
            open_sundays=sorted(settings.open_sundays),
            role_schedules={
                role: TimeTemplateSchema(
                    shift_type=t.shift_type,
                    start_time=t.start_time,
                    end_time=t.end_time,
                    morning_end_time=t.morning_end_time,
                    afternoon_start_time=t.afternoon_start_time,
                )
                for role, t in settings.role_schedules.items()
            },
            individual_meeting_start_time=settings.individual_meeting_start_time,
            early_morning_start=settings.early_morning_start,
            early_morning_end=settings.early_morning_end,
        )
