"""
Time-off requests: vacation planning rules and per-day request checks.
"""

import logging
from datetime import date
from typing import Iterable, Sequence

from .dates import expand_range, ranges_overlap
from .errors import InvalidDateRangeError, OverlappingRangeError, VacationLimitError
from .types import (
    Employee,
    Schedule,
    Severity,
    TimeOffRequest,
    TimeOffType,
    Violation,
)


logger = logging.getLogger(__name__)

MAX_VACATION_DAYS_PER_YEAR = 31


def vacation_request(employee_id: str, start: date, end: date) -> TimeOffRequest:
    """Vacation range with its days expanded."""
    return TimeOffRequest(
        employee_id=employee_id,
        type=TimeOffType.VACATION,
        dates=frozenset(expand_range(start, end)),
        start_date=start,
        end_date=end,
    )


def request_days(request: TimeOffRequest) -> set[date]:
    days = set(request.dates)
    if request.start_date and request.end_date:
        days.update(expand_range(request.start_date, request.end_date))
    return days


def vacation_days_in_year(requests: Iterable[TimeOffRequest], employee_id: str, year: int) -> int:
    days = set()
    for r in requests:
        if r.employee_id == employee_id and r.type == TimeOffType.VACATION:
            days.update(d for d in request_days(r) if d.year == year)
    return len(days)


def check_vacation_range(
    existing: Sequence[TimeOffRequest],
    employee_id: str,
    start: date,
    end: date,
) -> None:
    """Raise if the range is inverted, overlaps or exceeds the yearly limit."""
    if end < start:
        raise InvalidDateRangeError(f"Vacation end {end} is before its start {start}")

    for r in existing:
        if r.employee_id != employee_id or r.type != TimeOffType.VACATION:
            continue
        first, last = r.first_day, r.last_day
        if first and last and ranges_overlap(start, end, first, last):
            raise OverlappingRangeError(
                f"Vacation {start} - {end} overlaps existing vacation {first} - {last}"
            )

    new_days = expand_range(start, end)
    for year in sorted({d.year for d in new_days}):
        used = vacation_days_in_year(existing, employee_id, year)
        added = sum(1 for d in new_days if d.year == year)
        if used + added > MAX_VACATION_DAYS_PER_YEAR:
            raise VacationLimitError(
                f"Vacation total for {year} would be {used + added} days "
                f"(limit {MAX_VACATION_DAYS_PER_YEAR})"
            )


def add_vacation(
    existing: Sequence[TimeOffRequest],
    employee_id: str,
    start: date,
    end: date,
) -> list[TimeOffRequest]:
    """New request list with the vacation appended. The input is left untouched."""
    check_vacation_range(existing, employee_id, start, end)
    logger.info(f"Vacation added for employee {employee_id}: {start} - {end}")
    return [*existing, vacation_request(employee_id, start, end)]


def requests_in_week(requests: Iterable[TimeOffRequest], week_dates: Sequence[date]) -> list[TimeOffRequest]:
    return [r for r in requests if any(r.covers(d) for d in week_dates)]


def collect_time_off_violations(
    schedule: Schedule,
    requests: Iterable[TimeOffRequest],
    employees: Iterable[Employee],
) -> list[Violation]:
    """Explicit day/morning/afternoon-off requests that the schedule ignores."""
    emp_map = {e.id: e for e in employees}
    violations = []

    for req in requests_in_week(requests, schedule.week_dates):
        emp = emp_map.get(req.employee_id)
        if emp is None:
            continue
        for day in schedule.week_dates:
            if not req.covers(day):
                continue
            shift = schedule.shift_for(emp.id, day)
            if shift is None or not shift.is_worked:
                continue

            if req.type == TimeOffType.DAY_OFF:
                label = "a DAY OFF"
            elif req.type == TimeOffType.MORNING_OFF and shift.type.covers_morning:
                label = "a MORNING OFF"
            elif req.type == TimeOffType.AFTERNOON_OFF and shift.type.covers_afternoon:
                label = "an AFTERNOON OFF"
            else:
                continue

            violations.append(Violation(
                code=req.type.value,
                message=f"Request violated: {emp.name} asked for {label} on {day.isoformat()} but has a {shift.type.value} shift.",
                severity=Severity.BLOCKER,
                employee_id=emp.id,
                date=day,
            ))
    return violations


def validate_time_off_requests(
    schedule: Schedule,
    requests: Iterable[TimeOffRequest],
    employees: Iterable[Employee],
) -> list[str]:
    return [v.message for v in collect_time_off_violations(schedule, requests, employees)]
