"""
Employee-level rules: contract ladder, employment history, temporary hour
overrides and permanent request preconditions.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Sequence

from .dates import ranges_overlap
from .errors import (
    InvalidDateRangeError,
    InvalidRestrictionError,
    OverlappingRangeError,
    ScheduleLockedError,
)
from .types import (
    Employee,
    HistoryEventType,
    PermanentRequest,
    PermanentRequestType,
    Schedule,
    TemporaryHours,
)


logger = logging.getLogger(__name__)

WEEKLY_HOURS_LADDER = tuple(range(12, 41, 2))
FULL_TIME_HOURS = 40


def validate_weekly_hours(hours: int) -> None:
    if hours not in WEEKLY_HOURS_LADDER:
        raise ValueError(f"Weekly hours must be one of {WEEKLY_HOURS_LADDER}, got {hours}")


def is_active_on(employee: Employee, day: date) -> bool:
    """
    Active state at a date, from the latest history event at or before it.
    Without history the employee's active flag is used.
    """
    if not employee.history:
        return employee.active

    past = [h for h in employee.history if h.date <= day]
    if not past:
        return False
    latest = max(past, key=lambda h: h.date)
    return latest.event != HistoryEventType.TERMINATED


def active_employees(employees: Iterable[Employee], day: date) -> list[Employee]:
    return [e for e in employees if is_active_on(e, day)]


def add_temporary_hours(
    employee: Employee,
    adjustment: TemporaryHours,
    schedules: Sequence[Schedule] = (),
) -> Employee:
    """
    New employee with the override added, kept ordered by start date.

    Overrides may not overlap each other nor touch a week whose schedule
    is locked for review.
    """
    if adjustment.end < adjustment.start:
        raise InvalidDateRangeError(f"Override end {adjustment.end} is before its start {adjustment.start}")

    for temp in employee.temp_hours:
        if temp.id != adjustment.id and ranges_overlap(temp.start, temp.end, adjustment.start, adjustment.end):
            raise OverlappingRangeError(
                f"Override {adjustment.start} - {adjustment.end} overlaps {temp.start} - {temp.end} for {employee.name}"
            )

    for schedule in schedules:
        if schedule.is_locked and ranges_overlap(
            schedule.week_start, schedule.week_end, adjustment.start, adjustment.end
        ):
            raise ScheduleLockedError(
                f"Hours cannot change in the week of {schedule.week_start}: its schedule is locked"
            )

    others = [t for t in employee.temp_hours if t.id != adjustment.id]
    temp_hours = sorted([*others, adjustment], key=lambda t: t.start)
    logger.info(f"Temporary hours {adjustment.hours}h set for {employee.name}: {adjustment.start} - {adjustment.end}")
    return replace(employee, temp_hours=temp_hours)


def check_permanent_request(request: PermanentRequest, employee: Employee) -> None:
    """Raise InvalidRestrictionError when the request cannot apply to the employee."""
    if request.employee_id != employee.id:
        raise InvalidRestrictionError("Request does not belong to this employee")

    if request.type == PermanentRequestType.FIXED_ROTATING_SHIFT:
        if employee.weekly_hours < FULL_TIME_HOURS:
            raise InvalidRestrictionError("Fixed rotating shifts only apply to 40h employees")
        if request.reference_date is None:
            raise InvalidRestrictionError("Fixed rotating shifts need a reference week")
        if request.value is not None and not 1 <= request.value <= 6:
            raise InvalidRestrictionError("Fixed rotating shifts start on a day between Monday and Saturday")

    if request.type == PermanentRequestType.ROTATING_DAYS_OFF:
        if request.reference_date is None:
            raise InvalidRestrictionError("Rotating days off need a reference week")
        if not request.cycle_weeks:
            raise InvalidRestrictionError("Rotating days off need at least one cycle week")

    if request.reference_date is not None and request.reference_date.weekday() != 0:
        raise InvalidRestrictionError(f"Reference date {request.reference_date} is not a Monday")

    if any(not 0 <= d <= 6 for d in request.days):
        raise InvalidRestrictionError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")


def add_permanent_request(
    requests: Sequence[PermanentRequest],
    request: PermanentRequest,
    employee: Employee,
) -> list[PermanentRequest]:
    """New request list with the validated request appended."""
    check_permanent_request(request, employee)
    return [*requests, request]
