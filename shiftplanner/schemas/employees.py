import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shiftplanner.services.scheduling.employees import WEEKLY_HOURS_LADDER
from shiftplanner.services.scheduling.types import (
    EmployeeCategory,
    HistoryEventType,
    PermanentRequest,
    PermanentRequestType,
    TimeOffType,
)


class TemporaryHoursSchema(BaseModel):
    id: Optional[str] = None
    start: datetime.date
    end: datetime.date
    hours: int

    model_config = ConfigDict(from_attributes=True)


class HistoryEntrySchema(BaseModel):
    date: datetime.date
    event: HistoryEventType
    reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class EmployeeBase(BaseModel):
    name: str
    weekly_hours: int
    category: EmployeeCategory = EmployeeCategory.EMPLOYEE
    establishment_id: Optional[str] = None
    initials: Optional[str] = None
    active: bool = True
    seniority_date: Optional[datetime.date] = None
    birth_date: Optional[datetime.date] = None

    @field_validator("weekly_hours")
    @classmethod
    def check_weekly_hours(cls, value: int) -> int:
        if value not in WEEKLY_HOURS_LADDER:
            raise ValueError(f"weekly_hours must be one of {list(WEEKLY_HOURS_LADDER)}")
        return value


class EmployeeCreate(EmployeeBase):
    history: list[HistoryEntrySchema] = Field(default_factory=list)


class EmployeeResponse(EmployeeBase):
    id: str
    hours_debt: float
    temp_hours: list[TemporaryHoursSchema]
    history: list[HistoryEntrySchema]

    model_config = ConfigDict(from_attributes=True)


class VacationCreate(BaseModel):
    start_date: datetime.date
    end_date: datetime.date


class TimeOffRequestResponse(BaseModel):
    id: str
    employee_id: str
    type: TimeOffType
    dates: list[datetime.date]
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("dates", mode="before")
    @classmethod
    def sort_dates(cls, value) -> list:
        return sorted(value)


class PermanentRequestCreate(BaseModel):
    type: PermanentRequestType
    days: list[int] = Field(default_factory=list)
    value: Optional[int] = None
    cycle_weeks: list[list[int]] = Field(default_factory=list)
    reference_date: Optional[datetime.date] = None
    exceptions: list[datetime.date] = Field(default_factory=list)

    def to_request(self, employee_id: str) -> PermanentRequest:
        return PermanentRequest(
            employee_id=employee_id,
            type=self.type,
            days=frozenset(self.days),
            value=self.value,
            cycle_weeks=tuple(frozenset(w) for w in self.cycle_weeks),
            reference_date=self.reference_date,
            exceptions=frozenset(self.exceptions),
        )


class PermanentRequestResponse(BaseModel):
    id: str
    employee_id: str
    type: PermanentRequestType
    days: list[int]
    value: Optional[int] = None
    cycle_weeks: list[list[int]]
    reference_date: Optional[datetime.date] = None
    exceptions: list[datetime.date]

    model_config = ConfigDict(from_attributes=True)

    @field_validator("days", "exceptions", mode="before")
    @classmethod
    def sort_values(cls, value) -> list:
        return sorted(value)

    @field_validator("cycle_weeks", mode="before")
    @classmethod
    def sort_cycle_weeks(cls, value) -> list:
        return [sorted(w) for w in value]
