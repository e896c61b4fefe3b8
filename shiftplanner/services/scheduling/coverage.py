"""
Store-level coverage checks: daily staffing, opening/closing responsibility
and register presence.
"""

from datetime import date
from typing import Iterable

from .dates import day_name, weekday_index
from .types import (
    Employee,
    Schedule,
    Severity,
    Shift,
    StoreSettings,
    ValidationMode,
    Violation,
    WorkRole,
)


SLOT_HOURS = 4
MIN_DAILY_HOURS = 48
MIN_DAILY_HOURS_AFTERNOON_CLOSED = 24
REGISTER_ROLES = (WorkRole.SALES_REGISTER, WorkRole.PURCHASE_REGISTER)


def daily_coverage_hours(shifts: Iterable[Shift]) -> int:
    """Staffed hours for a day, counting 4h per covered half."""
    mornings = sum(1 for s in shifts if s.type.covers_morning)
    afternoons = sum(1 for s in shifts if s.type.covers_afternoon)
    return SLOT_HOURS * (mornings + afternoons)


def required_daily_hours(settings: StoreSettings, day: date) -> int:
    if settings.is_afternoon_closure(day):
        return MIN_DAILY_HOURS_AFTERNOON_CLOSED
    return MIN_DAILY_HOURS


def _label(day: date) -> str:
    return f"{day_name(weekday_index(day))} {day.isoformat()}"


def _check_responsibility(
    day: date,
    shifts: list[Shift],
    emp_map: dict[str, Employee],
    flag: str,
) -> list[Violation]:
    marked = [s for s in shifts if getattr(s, f"is_{flag}")]
    code = flag

    if not marked:
        return [Violation(
            code=f"missing_{code}",
            message=f"Missing {flag} on {_label(day)}: nobody is responsible for {flag} the store.",
            severity=Severity.BLOCKER,
            date=day,
        )]

    violations = []
    if len(marked) > 1:
        violations.append(Violation(
            code=f"duplicate_{code}",
            message=f"Duplicate {flag} on {_label(day)}: {len(marked)} shifts are marked.",
            severity=Severity.BLOCKER,
            date=day,
        ))

    for s in marked:
        emp = emp_map.get(s.employee_id)
        if emp is None or not emp.is_responsible:
            name = emp.name if emp else s.employee_id
            violations.append(Violation(
                code=f"unqualified_{code}",
                message=f"{flag.capitalize()} without a responsible employee on {_label(day)}: {name} cannot handle {flag}.",
                severity=Severity.BLOCKER,
                employee_id=s.employee_id,
                date=day,
            ))
    return violations


def collect_register_violations(schedule: Schedule, settings: StoreSettings) -> list[Violation]:
    """Each open half-day needs a sales and a purchase register."""
    violations = []
    for day in schedule.week_dates:
        if not settings.is_open(day):
            continue
        worked = [s for s in schedule.shifts_on(day) if s.is_worked]

        halves = [("morning", lambda t: t.covers_morning)]
        if not settings.is_afternoon_closure(day):
            halves.append(("afternoon", lambda t: t.covers_afternoon))

        for half, covers in halves:
            for role in REGISTER_ROLES:
                if any(s.role == role and covers(s.type) for s in worked):
                    continue
                violations.append(Violation(
                    code=f"missing_{role.value}",
                    message=f"No {role.value.replace('_', ' ')} in the {half} of {_label(day)}.",
                    severity=Severity.BLOCKER,
                    date=day,
                ))
    return violations


def validate_register_coverage(schedule: Schedule, settings: StoreSettings) -> list[str]:
    return [v.message for v in collect_register_violations(schedule, settings)]


def collect_coverage_violations(
    schedule: Schedule,
    settings: StoreSettings,
    employees: Iterable[Employee],
    mode: ValidationMode = ValidationMode.SOFT,
) -> list[Violation]:
    """
    Daily staffing warnings, plus opening/closing and register blockers
    in publish mode. Closed Sundays and full holidays are skipped.
    """
    emp_map = {e.id: e for e in employees}
    violations: list[Violation] = []

    for day in schedule.week_dates:
        if not settings.is_open(day):
            continue

        worked = [s for s in schedule.shifts_on(day) if s.is_worked]
        total = daily_coverage_hours(worked)
        required = required_daily_hours(settings, day)
        if total < required:
            violations.append(Violation(
                code="low_coverage",
                message=f"Low coverage on {_label(day)}: {total}h scheduled, {required}h needed.",
                severity=Severity.WARNING,
                date=day,
            ))

        if mode == ValidationMode.PUBLISH:
            violations.extend(_check_responsibility(day, worked, emp_map, "opening"))
            violations.extend(_check_responsibility(day, worked, emp_map, "closing"))

    if mode == ValidationMode.PUBLISH:
        violations.extend(collect_register_violations(schedule, settings))

    return violations


def validate_coverage(
    schedule: Schedule,
    settings: StoreSettings,
    employees: Iterable[Employee],
    mode: ValidationMode = ValidationMode.SOFT,
) -> list[str]:
    return [v.message for v in collect_coverage_violations(schedule, settings, employees, mode)]
