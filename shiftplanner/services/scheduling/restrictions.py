"""
Permanent restriction checks.

Evaluates a schedule week against each employee's standing requests
(fixed and rotating days off, shift-type limits, preferences).
"""

from datetime import date, time
from typing import Iterable, Optional

from .dates import day_name, sorted_weekdays, weeks_between
from .types import (
    Employee,
    PermanentRequest,
    PermanentRequestType,
    Schedule,
    Severity,
    Shift,
    ShiftType,
    StoreSettings,
    Violation,
)


DEFAULT_MAX_AFTERNOONS = 3
ROTATION_DAYS = 6  # fixed rotation walks Monday..Saturday
DEFAULT_EARLY_START = time(9, 0)


def applies_to_week(request: PermanentRequest, week_start: date, ignore_exceptions: bool = False) -> bool:
    return ignore_exceptions or week_start not in request.exceptions


def requests_for_employee(
    requests: Iterable[PermanentRequest],
    employee_id: str,
    week_start: date,
    ignore_exceptions: bool = False,
) -> list[PermanentRequest]:
    return [
        r for r in requests
        if r.employee_id == employee_id and applies_to_week(r, week_start, ignore_exceptions)
    ]


def rotation_week_index(request: PermanentRequest, week_start: date) -> Optional[int]:
    """Index of the active cycle week, None before the reference week."""
    if not request.cycle_weeks or request.reference_date is None:
        return None
    offset = weeks_between(request.reference_date, week_start)
    if offset < 0:
        return None
    return offset % len(request.cycle_weeks)


def fixed_rotation_day_off(request: PermanentRequest, week_start: date) -> Optional[int]:
    """Weekday off this week for a fixed rotating shift (1=Monday .. 6=Saturday)."""
    if request.reference_date is None:
        return None
    offset = weeks_between(request.reference_date, week_start)
    if offset < 0:
        return None
    start_day = request.value or 1
    return 1 + ((start_day - 1 + offset) % ROTATION_DAYS)


def required_days_off(request: PermanentRequest, week_start: date) -> frozenset[int]:
    """Weekdays the request keeps free this week."""
    if request.type == PermanentRequestType.SPECIFIC_DAYS_OFF:
        return request.days
    if request.type == PermanentRequestType.ROTATING_DAYS_OFF:
        index = rotation_week_index(request, week_start)
        return request.cycle_weeks[index] if index is not None else frozenset()
    if request.type == PermanentRequestType.FIXED_ROTATING_SHIFT:
        day = fixed_rotation_day_off(request, week_start)
        return frozenset({day}) if day is not None else frozenset()
    return frozenset()


def max_afternoons(request: PermanentRequest) -> int:
    return request.value if request.value is not None else DEFAULT_MAX_AFTERNOONS


def count_afternoons(shifts: Iterable[Shift]) -> int:
    """Afternoon shifts, each split counting as one afternoon."""
    return sum(1 for s in shifts if s.type.covers_afternoon)


def _worked_on(shifts: Iterable[Shift], weekday: int) -> Optional[Shift]:
    for s in shifts:
        if s.weekday == weekday and s.is_worked:
            return s
    return None


def _check_days_off(emp: Employee, request: PermanentRequest, shifts: list[Shift], week_start: date) -> list[Violation]:
    violations = []
    days = required_days_off(request, week_start)

    if request.type == PermanentRequestType.ROTATING_DAYS_OFF:
        index = rotation_week_index(request, week_start)
        label = f"rotating days off, week {index + 1} of the cycle" if index is not None else "rotating days off"
    elif request.type == PermanentRequestType.FIXED_ROTATING_SHIFT:
        label = "fixed rotating shift"
    else:
        label = "fixed day off"

    for weekday in sorted_weekdays(days):
        shift = _worked_on(shifts, weekday)
        if shift:
            violations.append(Violation(
                code=request.type.value,
                message=f"Restriction violated ({label}): {emp.name} must be off on {day_name(weekday)} but has a {shift.type.value} shift.",
                employee_id=emp.id,
                date=shift.date,
            ))
    return violations


def _check_half_only(emp: Employee, request: PermanentRequest, shifts: list[Shift]) -> list[Violation]:
    morning_only = request.type == PermanentRequestType.MORNING_ONLY
    label = "mornings only" if morning_only else "afternoons only"
    forbidden = (ShiftType.AFTERNOON, ShiftType.SPLIT) if morning_only else (ShiftType.MORNING, ShiftType.SPLIT)

    violations = []
    for s in shifts:
        if not s.is_worked:
            continue
        applies_to_day = not request.days or s.weekday in request.days
        if not applies_to_day:
            violations.append(Violation(
                code=request.type.value,
                message=f"Restriction violated: {emp.name} works on {day_name(s.weekday)}, outside the days set for '{label}'.",
                employee_id=emp.id,
                date=s.date,
            ))
        elif s.type in forbidden:
            violations.append(Violation(
                code=request.type.value,
                message=f"Restriction violated: {emp.name} has '{label}' on {day_name(s.weekday)} but a {s.type.value} shift.",
                employee_id=emp.id,
                date=s.date,
            ))
    return violations


def _check_max_afternoons(emp: Employee, request: PermanentRequest, shifts: list[Shift]) -> list[Violation]:
    limit = max_afternoons(request)
    count = count_afternoons(shifts)
    if count <= limit:
        return []
    return [Violation(
        code=request.type.value,
        message=f"Restriction violated: {emp.name} exceeds the maximum of {limit} afternoons per week ({count}).",
        employee_id=emp.id,
    )]


def _check_no_split(emp: Employee, request: PermanentRequest, shifts: list[Shift]) -> list[Violation]:
    return [
        Violation(
            code=request.type.value,
            message=f"Restriction violated: {emp.name} does not work split shifts but has one on {day_name(s.weekday)}.",
            employee_id=emp.id,
            date=s.date,
        )
        for s in shifts if s.type == ShiftType.SPLIT
    ]


def _check_full_days(emp: Employee, request: PermanentRequest, shifts: list[Shift]) -> list[Violation]:
    """
    Best-effort: a single half-shift next to another worked day wastes a
    rest day that a split could have freed.
    """
    worked_dates = {s.date for s in shifts if s.is_worked}
    violations = []
    for s in sorted(shifts, key=lambda s: s.date):
        if s.type not in (ShiftType.MORNING, ShiftType.AFTERNOON):
            continue
        neighbours = [d for d in worked_dates if abs((d - s.date).days) == 1]
        if neighbours:
            violations.append(Violation(
                code=request.type.value,
                message=f"Preference: {emp.name} prefers full days but has only a {s.type.value} shift on {day_name(s.weekday)}.",
                severity=Severity.ADVISORY,
                employee_id=emp.id,
                date=s.date,
            ))
    return violations


def _check_early_morning(
    emp: Employee,
    request: PermanentRequest,
    shifts: list[Shift],
    settings: Optional[StoreSettings],
) -> list[Violation]:
    early_start = settings.early_morning_start if settings else DEFAULT_EARLY_START
    violations = []
    for s in shifts:
        if not s.type.covers_morning or s.start_time is None:
            continue
        if s.start_time != early_start:
            violations.append(Violation(
                code=request.type.value,
                message=f"Preference: {emp.name} starts early ({early_start:%H:%M}) but starts at {s.start_time:%H:%M} on {day_name(s.weekday)}.",
                severity=Severity.ADVISORY,
                employee_id=emp.id,
                date=s.date,
            ))
    return violations


def collect_restriction_violations(
    schedule: Schedule,
    requests: Iterable[PermanentRequest],
    employees: Iterable[Employee],
    strict: bool = False,
    settings: Optional[StoreSettings] = None,
) -> list[Violation]:
    """
    Check every permanent request against the schedule week.

    With strict=True requests are enforced even in their exception weeks.
    Requests for employees not in `employees` are skipped.
    """
    emp_map = {e.id: e for e in employees}
    violations: list[Violation] = []

    for req in requests:
        emp = emp_map.get(req.employee_id)
        if emp is None:
            continue
        if not applies_to_week(req, schedule.week_start, ignore_exceptions=strict):
            continue

        shifts = schedule.shifts_for(emp.id)

        if req.type in (
            PermanentRequestType.SPECIFIC_DAYS_OFF,
            PermanentRequestType.ROTATING_DAYS_OFF,
            PermanentRequestType.FIXED_ROTATING_SHIFT,
        ):
            violations.extend(_check_days_off(emp, req, shifts, schedule.week_start))
        elif req.type in (PermanentRequestType.MORNING_ONLY, PermanentRequestType.AFTERNOON_ONLY):
            violations.extend(_check_half_only(emp, req, shifts))
        elif req.type == PermanentRequestType.MAX_AFTERNOONS_PER_WEEK:
            violations.extend(_check_max_afternoons(emp, req, shifts))
        elif req.type == PermanentRequestType.NO_SPLIT:
            violations.extend(_check_no_split(emp, req, shifts))
        elif req.type == PermanentRequestType.FORCE_FULL_DAYS:
            violations.extend(_check_full_days(emp, req, shifts))
        elif req.type == PermanentRequestType.EARLY_MORNING_SHIFT:
            violations.extend(_check_early_morning(emp, req, shifts, settings))

    return violations


def validate_permanent_restrictions(
    schedule: Schedule,
    requests: Iterable[PermanentRequest],
    employees: Iterable[Employee],
    strict: bool = False,
    settings: Optional[StoreSettings] = None,
) -> list[str]:
    """Messages for every permanent restriction the schedule breaks."""
    return [
        v.message
        for v in collect_restriction_violations(schedule, requests, employees, strict, settings)
    ]
