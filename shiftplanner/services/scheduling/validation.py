"""
Full schedule validation: every rule in one report.
"""

from .coverage import collect_coverage_violations
from .employees import is_active_on
from .hours import calculate_weekly_balances
from .restrictions import collect_restriction_violations
from .time_off import collect_time_off_violations
from .types import (
    Employee,
    Schedule,
    ScheduleContext,
    ScheduleResult,
    Severity,
    ValidationMode,
    Violation,
    WeeklyBalance,
)


def store_employees(schedule: Schedule, employees: list[Employee]) -> list[Employee]:
    """Employees of the schedule's store that are active at week start."""
    return [
        e for e in employees
        if (e.establishment_id is None or e.establishment_id == schedule.establishment_id)
        and is_active_on(e, schedule.week_start)
    ]


def balance_violation(employee: Employee, balance: WeeklyBalance) -> Violation:
    if balance.delta > 0:
        message = f"{employee.name}: {balance.delta:.1f}h over target (added to hours debt)."
    else:
        message = f"{employee.name}: {abs(balance.delta):.1f}h under target (subtracted from hours debt)."
    return Violation(
        code="hours_imbalance",
        message=message,
        severity=Severity.WARNING,
        employee_id=employee.id,
    )


def validate_full_schedule(
    context: ScheduleContext,
    schedule: Schedule,
    mode: ValidationMode = ValidationMode.SOFT,
) -> ScheduleResult:
    """
    Run restriction, time-off, hours and coverage checks on a schedule.

    In publish mode coverage also checks opening/closing and registers.
    The returned balances are what approval would apply to hours debt.
    """
    employees = store_employees(schedule, context.employees)
    emp_map = {e.id: e for e in employees}

    violations: list[Violation] = []
    violations.extend(collect_restriction_violations(
        schedule, context.permanent_requests, employees, settings=context.settings
    ))
    violations.extend(collect_time_off_violations(schedule, context.time_off_requests, employees))

    balances = calculate_weekly_balances(schedule, employees, context.settings, context.time_off_requests)
    violations.extend(balance_violation(emp_map[b.employee_id], b) for b in balances)

    violations.extend(collect_coverage_violations(schedule, context.settings, context.employees, mode))

    return ScheduleResult(
        schedule=schedule,
        warnings=[v.message for v in violations],
        violations=violations,
        balances=balances,
    )
