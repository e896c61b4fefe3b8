import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from shiftplanner.services.scheduling.types import (
    ApprovalStatus,
    ModificationStatus,
    ScheduleStatus,
    Severity,
    ShiftType,
    WorkRole,
)


class ShiftResponse(BaseModel):
    id: str
    employee_id: str
    date: datetime.date
    type: ShiftType
    start_time: Optional[datetime.time] = None
    end_time: Optional[datetime.time] = None
    morning_end_time: Optional[datetime.time] = None
    afternoon_start_time: Optional[datetime.time] = None
    role: Optional[WorkRole] = None
    is_opening: bool = False
    is_closing: bool = False
    is_individual_meeting: bool = False

    model_config = ConfigDict(from_attributes=True)


class ShiftUpdate(BaseModel):
    type: Optional[ShiftType] = None
    start_time: Optional[datetime.time] = None
    end_time: Optional[datetime.time] = None
    morning_end_time: Optional[datetime.time] = None
    afternoon_start_time: Optional[datetime.time] = None
    role: Optional[WorkRole] = None
    is_opening: Optional[bool] = None
    is_closing: Optional[bool] = None
    is_individual_meeting: Optional[bool] = None

    @field_validator("type", "is_opening", "is_closing", "is_individual_meeting", mode="before")
    @classmethod
    def reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class ScheduleCreate(BaseModel):
    establishment_id: str
    week_start: datetime.date
    force: bool = False
    seed: Optional[int] = None


class ScheduleResponse(BaseModel):
    id: str
    establishment_id: str
    week_start: datetime.date
    status: ScheduleStatus
    approval_status: ApprovalStatus
    modification_status: ModificationStatus
    supervisor_notes: Optional[str] = None
    modification_reason: Optional[str] = None
    is_locked: bool
    shifts: list[ShiftResponse]

    model_config = ConfigDict(from_attributes=True)


class ViolationResponse(BaseModel):
    code: str
    message: str
    severity: Severity
    employee_id: Optional[str] = None
    date: Optional[datetime.date] = None

    model_config = ConfigDict(from_attributes=True)


class WeeklyBalanceResponse(BaseModel):
    employee_id: str
    worked_hours: float
    contract_hours: int
    reduction_units: float
    target_hours: float
    delta: float

    model_config = ConfigDict(from_attributes=True)


class ScheduleResultResponse(BaseModel):
    schedule: ScheduleResponse
    warnings: list[str]
    violations: list[ViolationResponse]
    balances: list[WeeklyBalanceResponse]

    model_config = ConfigDict(from_attributes=True)


class PublishRequest(BaseModel):
    acknowledge_warnings: bool = False


class ApprovalDecision(BaseModel):
    approved: bool
    notes: Optional[str] = None


class ModificationRequest(BaseModel):
    reason: str


class ModificationDecision(BaseModel):
    approved: bool
    notes: Optional[str] = None
