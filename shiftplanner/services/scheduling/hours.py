"""
Hours debt calculation.

Compares the hours an employee worked in a week with the week's target.
The target starts from the contract (or a temporary override) and is
reduced for holidays and absences using a fixed policy table.
"""

from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from .dates import round1, round_half_up, week_dates
from .types import (
    Employee,
    Holiday,
    HolidayKind,
    Schedule,
    Shift,
    ShiftType,
    StoreSettings,
    TimeOffRequest,
    WeeklyBalance,
)


# Reduced weekly target per contract, for 0.5, 1, 1.5, 2 and 3 days of reduction.
REDUCTION_LEVELS = (0.5, 1.0, 1.5, 2.0, 3.0)
REDUCTION_TABLE: dict[int, tuple[int, ...]] = {
    40: (36, 32, 28, 24, 16),
    36: (33, 30, 27, 23, 18),
    32: (30, 27, 24, 21, 16),
    28: (25, 23, 21, 19, 14),
    24: (22, 20, 18, 16, 12),
    20: (18, 17, 15, 13, 10),
    16: (14, 13, 12, 10, 8),
}
FULL_WEEK_REDUCTION = 5
HALF_DAY_CONTRACT = 40  # only 40h contracts lose half a day on afternoon closures


def calculate_employee_hours(shifts: Iterable[Shift], employee_id: str) -> float:
    """Calculate total hours worked by an employee."""
    return sum(s.duration_hours for s in shifts if s.employee_id == employee_id)


def contract_hours_for_week(employee: Employee, week_start: date) -> int:
    """Contracted hours, or the temporary override active at week start."""
    for temp in employee.temp_hours:
        if temp.covers(week_start):
            return temp.hours
    return employee.weekly_hours


def is_absent(employee_id: str, day: date, absences: Iterable[TimeOffRequest]) -> bool:
    return any(
        r.employee_id == employee_id and r.type.is_absence and r.covers(day)
        for r in absences
    )


def reduction_units(
    employee_id: str,
    contract_hours: int,
    week_start: date,
    holidays: Sequence[Holiday],
    absences: Iterable[TimeOffRequest],
) -> float:
    """Days (in halves) that reduce this week's target."""
    by_date = {h.date: h for h in holidays}
    absences = list(absences)

    units = 0.0
    for day in week_dates(week_start):
        holiday = by_date.get(day)
        if (holiday and holiday.kind == HolidayKind.FULL) or is_absent(employee_id, day, absences):
            units += 1
        elif holiday and holiday.kind == HolidayKind.AFTERNOON_ONLY and contract_hours == HALF_DAY_CONTRACT:
            units += 0.5
    return round1(units)


def reduced_target(contract_hours: int, units: float) -> float:
    """Apply the reduction table to a contract."""
    if units <= 0:
        return contract_hours

    row = REDUCTION_TABLE.get(contract_hours)
    if row is None:
        return linear_target(contract_hours, units)

    if units in REDUCTION_LEVELS:
        return row[REDUCTION_LEVELS.index(units)]
    if units >= FULL_WEEK_REDUCTION:
        return 0
    if units > REDUCTION_LEVELS[-1]:
        return linear_target(contract_hours, units)
    # untabled levels below 3 days (e.g. 2.5) keep the contract
    return contract_hours


def linear_target(contract_hours: int, units: float) -> int:
    return max(0, contract_hours - round_half_up(contract_hours / 5 * units))


def target_hours_for_week(
    employee: Employee,
    week_start: date,
    holidays: Sequence[Holiday],
    absences: Iterable[TimeOffRequest],
) -> float:
    contract = contract_hours_for_week(employee, week_start)
    units = reduction_units(employee.id, contract, week_start, holidays, absences)
    return reduced_target(contract, units)


def is_full_absence(shifts: Iterable[Shift]) -> bool:
    """Every non-off shift of the week is vacation or sick leave."""
    relevant = [s for s in shifts if s.type not in (ShiftType.OFF, ShiftType.HOLIDAY)]
    return bool(relevant) and all(
        s.type in (ShiftType.VACATION, ShiftType.SICK_LEAVE) for s in relevant
    )


def compute_weekly_balance(
    employee: Employee,
    week_start: date,
    shifts: Iterable[Shift],
    holidays: Sequence[Holiday],
    absences: Iterable[TimeOffRequest],
) -> WeeklyBalance:
    """
    Worked vs target hours for one employee and week.

    Positive delta = surplus credited to the employee's debt balance,
    negative = deficit. Applying it is up to the caller.
    """
    employee_shifts = [s for s in shifts if s.employee_id == employee.id]
    worked = calculate_employee_hours(employee_shifts, employee.id)

    contract = contract_hours_for_week(employee, week_start)
    units = reduction_units(employee.id, contract, week_start, holidays, absences)
    target = reduced_target(contract, units)

    delta = round1(worked - target)
    if is_full_absence(employee_shifts):
        delta = 0.0

    return WeeklyBalance(
        employee_id=employee.id,
        worked_hours=round1(worked),
        contract_hours=contract,
        reduction_units=units,
        target_hours=target,
        delta=delta,
    )


def calculate_weekly_balances(
    schedule: Schedule,
    employees: Iterable[Employee],
    settings: StoreSettings,
    absences: Iterable[TimeOffRequest],
) -> list[WeeklyBalance]:
    """Balances with a non-zero delta for the given employees."""
    absences = list(absences)
    balances = []
    for emp in employees:
        balance = compute_weekly_balance(
            emp, schedule.week_start, schedule.shifts, settings.holidays, absences
        )
        if balance.delta != 0:
            balances.append(balance)
    return balances


def apply_hours_debt(employee: Employee, balance: Optional[WeeklyBalance]) -> Employee:
    """New employee with the balance delta added to the debt accumulator."""
    if balance is None or balance.employee_id != employee.id:
        return employee
    return replace(employee, hours_debt=round1(employee.hours_debt + balance.delta))
