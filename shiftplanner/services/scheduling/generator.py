"""
Weekly shift generator using a load-balancing greedy pass.

Strategy:
1. Sort active employees: full-time first, then by contract hours
2. Work out each employee's target hours and mandatory days off
3. Force one Mon-Sat rest day, keeping leaders' days off spread
4. Place 4h slots: splits for high-hours employees, then the least loaded halves
5. Fill whatever is left on any free day
6. Set times, mark opening/closing and hand out register roles
"""

import logging
import random
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Optional

from .dates import (
    SATURDAY,
    SUNDAY,
    ensure_monday,
    round_half_up,
    week_dates,
    weekday_index,
)
from .employees import FULL_TIME_HOURS, is_active_on
from .hours import contract_hours_for_week, target_hours_for_week
from .restrictions import max_afternoons, requests_for_employee, required_days_off
from .types import (
    Employee,
    EmployeeCategory,
    PermanentRequest,
    PermanentRequestType,
    Schedule,
    ScheduleContext,
    Shift,
    ShiftType,
    StoreSettings,
    TimeOffRequest,
    TimeOffType,
    WorkRole,
)


logger = logging.getLogger(__name__)

SLOT_HOURS = 4
EARLY_MORNING_DAYS = 4  # early blocks per week for a permanent early-morning request
EARLY_MORNING_MIN_TARGET = 20
LEADER_OFF_PENALTY = 1000
UNLIMITED_AFTERNOONS = 99
REGISTER_ROLES = (WorkRole.SALES_REGISTER, WorkRole.PURCHASE_REGISTER)

MORNING = ShiftType.MORNING
AFTERNOON = ShiftType.AFTERNOON
SPLIT = ShiftType.SPLIT


@dataclass
class _Preferences:
    """An employee's permanent requests in effect for the week."""
    morning_only: Optional[PermanentRequest] = None
    afternoon_only: Optional[PermanentRequest] = None
    max_afternoons: int = UNLIMITED_AFTERNOONS
    no_split: bool = False
    force_full_days: bool = False
    early_morning: bool = False
    days_off: frozenset[int] = frozenset()

    def day_blocked(self, weekday: int) -> bool:
        """Restricted to certain weekdays and this is not one of them."""
        for req in (self.morning_only, self.afternoon_only):
            if req is not None and req.days and weekday not in req.days:
                return True
        return False

    def morning_only_on(self, weekday: int) -> bool:
        req = self.morning_only
        return req is not None and (not req.days or weekday in req.days)

    def afternoon_only_on(self, weekday: int) -> bool:
        req = self.afternoon_only
        return req is not None and (not req.days or weekday in req.days)


class ShiftGenerator:
    """
    Greedy generator for one store week.

    Deterministic for the same input; pass a seed to shuffle tie-breaks.
    """

    def __init__(self, context: ScheduleContext, seed: Optional[int] = None):
        self.context = context
        self.settings: StoreSettings = context.settings
        self.days = week_dates(context.week_start)
        self.rng = random.Random(seed) if seed is not None else None
        self.shifts: list[Shift] = []
        self.coverage: dict[date, dict[ShiftType, int]] = {
            d: {MORNING: 0, AFTERNOON: 0} for d in self.days
        }
        self.employees = {e.id: e for e in context.employees}

    def generate(self) -> Schedule:
        """
        Main generation method.

        Returns:
            Draft Schedule with one shift per employee and day
        """
        logger.info(f"Generating schedule for {self.context.establishment_id}, week of {self.context.week_start}")

        #1: Plan each employee in priority order
        for emp in self._sorted_employees():
            self._plan_employee(emp)
        #2: Opening and closing
        self._mark_responsibility()
        #3: Roles and role templates
        self._assign_roles()

        logger.info(f"Generated {sum(1 for s in self.shifts if s.is_worked)} worked shifts for week of {self.context.week_start}")
        return Schedule(
            establishment_id=self.context.establishment_id,
            week_start=self.context.week_start,
            shifts=tuple(self.shifts),
        )

    def _tiebreak(self, keys: list) -> dict:
        """Tie-break rank per key: input order, or random when seeded."""
        if self.rng is None:
            return {k: i for i, k in enumerate(keys)}
        return {k: self.rng.random() for k in keys}

    def _sorted_employees(self) -> list[Employee]:
        active = [
            e for e in self.context.employees
            if is_active_on(e, self.context.week_start)
        ]
        active.sort(key=lambda e: (e.name, e.id))
        ties = self._tiebreak([e.id for e in active])

        def priority(emp: Employee) -> tuple:
            hours = contract_hours_for_week(emp, self.context.week_start)
            return (hours < FULL_TIME_HOURS, -hours, ties[emp.id])

        return sorted(active, key=priority)

    def _time_off_types(self, employee_id: str, day: date) -> set[TimeOffType]:
        return {
            r.type for r in self.context.time_off_requests
            if r.employee_id == employee_id and r.covers(day)
        }

    def _preferences(self, emp: Employee) -> _Preferences:
        prefs = _Preferences()
        days_off = set()
        for req in requests_for_employee(self.context.permanent_requests, emp.id, self.context.week_start):
            if req.type == PermanentRequestType.MORNING_ONLY:
                prefs.morning_only = req
            elif req.type == PermanentRequestType.AFTERNOON_ONLY:
                prefs.afternoon_only = req
            elif req.type == PermanentRequestType.MAX_AFTERNOONS_PER_WEEK:
                prefs.max_afternoons = max_afternoons(req)
            elif req.type == PermanentRequestType.NO_SPLIT:
                prefs.no_split = True
            elif req.type == PermanentRequestType.FORCE_FULL_DAYS:
                prefs.force_full_days = True
            elif req.type == PermanentRequestType.EARLY_MORNING_SHIFT:
                prefs.early_morning = True
            days_off |= required_days_off(req, self.context.week_start)
        prefs.days_off = frozenset(days_off)
        return prefs

    def _day_status(self, emp: Employee, contract: int, prefs: _Preferences, day: date) -> Optional[ShiftType]:
        """Non-work type forced on the day, None when the employee can work."""
        requested = self._time_off_types(emp.id, day)

        if TimeOffType.SICK_LEAVE in requested:
            return ShiftType.SICK_LEAVE
        if TimeOffType.MATERNITY_PATERNITY in requested:
            return ShiftType.MATERNITY_PATERNITY
        if TimeOffType.VACATION in requested:
            return ShiftType.VACATION
        if self.settings.is_full_holiday(day):
            return ShiftType.HOLIDAY
        if TimeOffType.DAY_OFF in requested:
            return ShiftType.OFF
        partial = {TimeOffType.MORNING_OFF, TimeOffType.AFTERNOON_OFF}
        if requested & partial and contract >= FULL_TIME_HOURS:
            return ShiftType.OFF
        if weekday_index(day) in prefs.days_off:
            return ShiftType.OFF
        if self.settings.is_closed_sunday(day):
            return ShiftType.OFF
        return None

    def _can_work(self, emp: Employee, prefs: _Preferences, day: date, half: ShiftType) -> bool:
        weekday = weekday_index(day)
        if prefs.day_blocked(weekday):
            return False
        requested = self._time_off_types(emp.id, day)
        if half == MORNING:
            return TimeOffType.MORNING_OFF not in requested and not prefs.afternoon_only_on(weekday)
        return (
            TimeOffType.AFTERNOON_OFF not in requested
            and not prefs.morning_only_on(weekday)
            and not self.settings.is_afternoon_closure(day)
        )

    def _can_split(self, emp: Employee, prefs: _Preferences, day: date) -> bool:
        return (
            not prefs.no_split
            and self._can_work(emp, prefs, day, MORNING)
            and self._can_work(emp, prefs, day, AFTERNOON)
        )

    def _total_load(self, day: date) -> int:
        return self.coverage[day][MORNING] + self.coverage[day][AFTERNOON]

    def _leaders_off(self, day: date) -> int:
        off_types = (ShiftType.OFF, ShiftType.HOLIDAY, ShiftType.VACATION)
        count = 0
        for s in self.shifts:
            emp = self.employees.get(s.employee_id)
            if emp and emp.is_responsible and s.date == day and s.type in off_types:
                count += 1
        return count

    def _pick_rest_day(self, emp: Employee, available: list[date]) -> Optional[date]:
        """Busiest Mon-Sat day, avoiding days other leaders already have off."""
        candidates = [d for d in available if weekday_index(d) != SUNDAY]
        if not candidates:
            return None
        ties = self._tiebreak(candidates)

        def score(day: date) -> tuple:
            value = self._total_load(day)
            if emp.is_responsible:
                value -= self._leaders_off(day) * LEADER_OFF_PENALTY
            return (-value, ties[day])

        return min(candidates, key=score)

    def _slot_score(self, day: date, half: ShiftType) -> float:
        """Lower is better: current load plus balance and weekday penalties."""
        morning = self.coverage[day][MORNING]
        afternoon = self.coverage[day][AFTERNOON]
        diff = morning - afternoon

        if half == MORNING:
            penalty = -50 if diff < 0 else (2 if diff > 0 else 0)
        else:
            penalty = 10 if diff < 0 else (-2 if diff > 0 else 0)

        weekday = weekday_index(day)
        if weekday == SATURDAY:
            penalty += 0.2
        elif weekday == SUNDAY:
            penalty += 1.0

        if half == MORNING and self.settings.is_afternoon_closure(day):
            penalty -= 100

        return self.coverage[day][half] + penalty

    def _assign(self, assigned: dict[date, ShiftType], day: date, half: ShiftType) -> None:
        current = assigned.get(day)
        assigned[day] = SPLIT if current is not None and current != half else half
        self.coverage[day][half] += 1

    def _plan_employee(self, emp: Employee) -> None:
        week_start = self.context.week_start
        contract = contract_hours_for_week(emp, week_start)
        target = target_hours_for_week(emp, week_start, self.settings.holidays, self.context.time_off_requests)
        prefs = self._preferences(emp)

        status: dict[date, ShiftType] = {}
        available: list[date] = []
        for day in self.days:
            forced = self._day_status(emp, contract, prefs, day)
            if forced is not None:
                status[day] = forced
            else:
                available.append(day)

        # Mandatory rest day
        mon_to_sat = self.days[:6]
        has_rest = any(
            d in status or prefs.day_blocked(weekday_index(d))
            for d in mon_to_sat
        )
        if not has_rest:
            rest_day = self._pick_rest_day(emp, available)
            if rest_day is not None:
                status[rest_day] = ShiftType.OFF
                available.remove(rest_day)
                logger.debug(f"Rest day for {emp.name}: {rest_day}")

        slots = round_half_up(target / SLOT_HOURS)
        if prefs.early_morning and target >= EARLY_MORNING_MIN_TARGET:
            slots -= 1
        slots = max(0, slots)

        assigned: dict[date, ShiftType] = {}
        afternoons = 0
        high_hours = contract >= FULL_TIME_HOURS or prefs.force_full_days

        # Splits first for high-hours employees
        if high_hours:
            full_days = [
                d for d in available
                if not self._time_off_types(emp.id, d) & {TimeOffType.MORNING_OFF, TimeOffType.AFTERNOON_OFF}
            ]
            ties = self._tiebreak(full_days)
            full_days.sort(key=lambda d: (self._total_load(d), ties[d]))
            for day in full_days:
                if slots < 2 or afternoons >= prefs.max_afternoons:
                    break
                if not self._can_split(emp, prefs, day):
                    continue
                self._assign(assigned, day, MORNING)
                self._assign(assigned, day, AFTERNOON)
                slots -= 2
                afternoons += 1

        # Single halves on the least loaded slots
        if slots > 0:
            candidates = [
                (day, half)
                for day in available if day not in assigned
                for half in (MORNING, AFTERNOON)
                if self._can_work(emp, prefs, day, half)
            ]
            ties = self._tiebreak(candidates)
            candidates.sort(key=lambda c: (self._slot_score(*c), ties[c]))

            for day, half in candidates:
                if slots <= 0:
                    break
                if half == AFTERNOON and afternoons >= prefs.max_afternoons:
                    continue
                current = assigned.get(day)
                if current is None:
                    self._assign(assigned, day, half)
                elif high_hours and current != SPLIT and current != half and self._can_split(emp, prefs, day):
                    self._assign(assigned, day, half)
                else:
                    continue
                slots -= 1
                if half == AFTERNOON:
                    afternoons += 1

        # Fallback: any free half on any workable day
        for day in self.days:
            if slots <= 0:
                break
            if day in status:
                continue
            for half in (MORNING, AFTERNOON):
                if slots <= 0:
                    break
                current = assigned.get(day)
                if current in (half, SPLIT):
                    continue
                if not self._can_work(emp, prefs, day, half):
                    continue
                if current is not None and prefs.no_split:
                    continue
                if half == AFTERNOON:
                    if afternoons >= prefs.max_afternoons:
                        continue
                    afternoons += 1
                self._assign(assigned, day, half)
                slots -= 1

        if slots > 0:
            logger.debug(f"{emp.name}: {slots} slot(s) left unplaced")

        early_days = self._early_morning_days(prefs, assigned, status)
        for day in self.days:
            shift_type = assigned.get(day) or status.get(day) or ShiftType.OFF
            early = day in early_days or TimeOffType.EARLY_MORNING_SHIFT in self._time_off_types(emp.id, day)
            self.shifts.append(self._build_shift(emp.id, day, shift_type, early))

        logger.debug(f"Planned {emp.name}: target {target}h, {sum(1 for t in assigned.values() if t.is_worked)} days")

    def _early_morning_days(
        self,
        prefs: _Preferences,
        assigned: dict[date, ShiftType],
        status: dict[date, ShiftType],
    ) -> set[date]:
        """Up to four spread-out morning days for the early block."""
        if not prefs.early_morning:
            return set()
        mornings = [
            d for d in self.days
            if assigned.get(d) in (MORNING, SPLIT) and d not in status
        ]
        if len(mornings) <= EARLY_MORNING_DAYS:
            return set(mornings)
        step = (len(mornings) - 1) / (EARLY_MORNING_DAYS - 1)
        return {mornings[round_half_up(i * step)] for i in range(EARLY_MORNING_DAYS)}

    def _build_shift(self, employee_id: str, day: date, shift_type: ShiftType, early: bool) -> Shift:
        if not shift_type.is_worked:
            return Shift(employee_id=employee_id, date=day, type=shift_type)

        hours = self.settings.opening_hours
        if early:
            morning_start, morning_end = self.settings.early_morning_start, self.settings.early_morning_end
        else:
            morning_start, morning_end = hours.morning_start, hours.morning_end

        if shift_type == MORNING:
            return Shift(employee_id=employee_id, date=day, type=shift_type,
                         start_time=morning_start, end_time=morning_end)
        if shift_type == AFTERNOON:
            return Shift(employee_id=employee_id, date=day, type=shift_type,
                         start_time=hours.afternoon_start, end_time=hours.afternoon_end)
        return Shift(
            employee_id=employee_id,
            date=day,
            type=shift_type,
            start_time=morning_start,
            morning_end_time=morning_end,
            afternoon_start_time=hours.afternoon_start,
            end_time=hours.afternoon_end,
        )

    def _mark_responsibility(self) -> None:
        """Earliest responsible start opens, latest responsible end closes."""
        by_day: dict[date, list[int]] = defaultdict(list)
        for i, s in enumerate(self.shifts):
            emp = self.employees.get(s.employee_id)
            if s.is_worked and emp and emp.is_responsible and s.start_time and s.end_time:
                by_day[s.date].append(i)

        for indexes in by_day.values():
            def seniority(i: int) -> int:
                return self.employees[self.shifts[i].employee_id].category.priority

            opener = min(indexes, key=lambda i: (self.shifts[i].start_time, -seniority(i), i))
            closer = max(indexes, key=lambda i: (self.shifts[i].end_time, seniority(i), -i))
            self.shifts[opener] = replace(self.shifts[opener], is_opening=True)
            self.shifts[closer] = replace(self.shifts[closer], is_closing=True)

    def _assign_roles(self) -> None:
        for i, s in enumerate(self.shifts):
            emp = self.employees.get(s.employee_id)
            if s.is_worked and emp and emp.category == EmployeeCategory.CLEANING:
                self.shifts[i] = replace(s, role=WorkRole.CLEANING)

        for day in self.days:
            halves = [MORNING]
            if not self.settings.is_afternoon_closure(day):
                halves.append(AFTERNOON)

            for half in halves:
                for role in REGISTER_ROLES:
                    indexes = [
                        i for i, s in enumerate(self.shifts)
                        if s.date == day and s.is_worked and _covers(s.type, half)
                    ]
                    if any(self.shifts[i].role == role for i in indexes):
                        continue
                    free = [i for i in indexes if self.shifts[i].role is None]
                    if not free:
                        continue
                    chosen = min(free, key=lambda i: (
                        self.shifts[i].type != SPLIT,
                        self.employees[self.shifts[i].employee_id].is_responsible,
                        i,
                    ))
                    self.shifts[chosen] = self._apply_template(replace(self.shifts[chosen], role=role))

        for i, s in enumerate(self.shifts):
            if s.role == WorkRole.CLEANING:
                self.shifts[i] = self._apply_template(s)

    def _apply_template(self, shift: Shift) -> Shift:
        template = self.settings.role_schedules.get(shift.role)
        if template is None or template.shift_type != shift.type:
            return shift
        changes = {
            name: getattr(template, name)
            for name in ("start_time", "end_time", "morning_end_time", "afternoon_start_time")
            if getattr(template, name) is not None
        }
        return replace(shift, **changes)


def _covers(shift_type: ShiftType, half: ShiftType) -> bool:
    return shift_type.covers_morning if half == MORNING else shift_type.covers_afternoon


def generate_schedule(
    establishment_id: str,
    week_start: date,
    employees: Iterable[Employee],
    settings: StoreSettings,
    restrictions: Iterable[PermanentRequest] = (),
    absences: Iterable[TimeOffRequest] = (),
    seed: Optional[int] = None,
) -> Schedule:
    """
    Generate a draft schedule for one store week.

    Args:
        establishment_id: Store the schedule belongs to
        week_start: Monday of the week
        employees: Employees of the store; inactive ones are skipped
        settings: Store settings (opening hours, holidays, templates)
        restrictions: Permanent requests
        absences: Time-off requests
        seed: Shuffle tie-breaks with this seed

    Returns:
        Draft Schedule
    """
    ensure_monday(week_start)
    context = ScheduleContext(
        establishment_id=establishment_id,
        week_start=week_start,
        employees=list(employees),
        settings=settings,
        permanent_requests=list(restrictions),
        time_off_requests=list(absences),
    )
    return ShiftGenerator(context, seed=seed).generate()
