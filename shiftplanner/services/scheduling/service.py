"""
Schedule service: loads data from a repository, runs the engine and
persists the outcome.

Callers serialise operations per store week; the service itself keeps
no state besides its repository.
"""

import logging
from datetime import date
from typing import Any, Optional

from . import lifecycle
from .dates import ensure_monday
from .employees import (
    active_employees,
    add_permanent_request,
    add_temporary_hours,
    validate_weekly_hours,
)
from .errors import (
    AlreadyExistsError,
    EmployeeNotFoundError,
    NoEmployeesError,
    PublishBlockedError,
    ScheduleLockedError,
    ScheduleNotFoundError,
)
from .generator import generate_schedule
from .hours import apply_hours_debt
from .repository import ScheduleRepository
from .time_off import add_vacation
from .types import (
    Employee,
    PermanentRequest,
    Schedule,
    ScheduleContext,
    ScheduleResult,
    Severity,
    StoreSettings,
    TemporaryHours,
    TimeOffRequest,
    ValidationMode,
)
from .validation import validate_full_schedule


logger = logging.getLogger(__name__)


class ScheduleService:
    def __init__(self, repository: ScheduleRepository):
        self.repository = repository

    def load_context(self, establishment_id: str, week_start: date) -> ScheduleContext:
        """Load everything the engine needs for one store week."""
        ensure_monday(week_start)
        return ScheduleContext(
            establishment_id=establishment_id,
            week_start=week_start,
            employees=self.repository.get_employees(establishment_id),
            settings=self.repository.get_settings(establishment_id),
            permanent_requests=self.repository.get_permanent_requests(establishment_id),
            time_off_requests=self.repository.get_time_off_requests(establishment_id),
        )

    def get_schedule(self, schedule_id: str) -> Schedule:
        schedule = self.repository.get_schedule(schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(f"Schedule {schedule_id} not found")
        return schedule

    def get_employee(self, employee_id: str) -> Employee:
        employee = self.repository.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(f"Employee {employee_id} not found")
        return employee

    def create_schedule(
        self,
        establishment_id: str,
        week_start: date,
        force: bool = False,
        seed: Optional[int] = None,
    ) -> ScheduleResult:
        """
        Generate and store the schedule for a week.

        Args:
            establishment_id: Store to plan
            week_start: Monday of the week
            force: Replace an existing schedule for the week
            seed: Shuffle generator tie-breaks

        Returns:
            ScheduleResult with the stored schedule and its soft warnings
        """
        ensure_monday(week_start)
        existing = self.repository.find_schedule(establishment_id, week_start)
        if existing is not None:
            if not force:
                raise AlreadyExistsError(
                    f"A schedule already exists for {establishment_id}, week of {week_start}"
                )
            if existing.is_locked:
                raise ScheduleLockedError(f"Schedule {existing.id} is locked and cannot be regenerated")

        context = self.load_context(establishment_id, week_start)
        if not active_employees(context.employees, week_start):
            raise NoEmployeesError(f"No active employees for {establishment_id} in week of {week_start}")

        schedule = generate_schedule(
            establishment_id,
            week_start,
            context.employees,
            context.settings,
            context.permanent_requests,
            context.time_off_requests,
            seed=seed,
        )

        with self.repository.transaction():
            if existing is not None:
                logger.info(f"Replacing schedule {existing.id} for week of {week_start}")
                self.repository.delete_schedule(existing.id)
            self.repository.save_schedule(schedule)
        logger.info(f"Created schedule {schedule.id} for {establishment_id}, week of {week_start}")

        return validate_full_schedule(context, schedule, ValidationMode.SOFT)

    def validate_schedule(self, schedule_id: str, mode: ValidationMode = ValidationMode.SOFT) -> ScheduleResult:
        schedule = self.get_schedule(schedule_id)
        context = self.load_context(schedule.establishment_id, schedule.week_start)
        return validate_full_schedule(context, schedule, mode)

    def update_shift(self, schedule_id: str, shift_id: str, changes: dict[str, Any]) -> ScheduleResult:
        schedule = self.get_schedule(schedule_id)
        context = self.load_context(schedule.establishment_id, schedule.week_start)
        updated = lifecycle.update_shift(schedule, shift_id, changes, context.settings)
        self.repository.save_schedule(updated)
        return validate_full_schedule(context, updated, ValidationMode.SOFT)

    def publish_schedule(self, schedule_id: str, acknowledge_warnings: bool = False) -> ScheduleResult:
        """
        Publish a schedule for supervisor review.

        Raises PublishBlockedError while warnings or blockers remain and the
        caller has not acknowledged them.
        """
        schedule = self.get_schedule(schedule_id)
        context = self.load_context(schedule.establishment_id, schedule.week_start)
        report = validate_full_schedule(context, schedule, ValidationMode.PUBLISH)

        pending = [v.message for v in report.violations if v.severity != Severity.ADVISORY]
        if pending and not acknowledge_warnings:
            raise PublishBlockedError(pending)

        published = lifecycle.publish(schedule)
        self.repository.save_schedule(published)
        report.schedule = published
        return report

    def decide_approval(self, schedule_id: str, approved: bool, notes: Optional[str] = None) -> Schedule:
        """Approve or reject; approval applies the week's balances to hours debt."""
        schedule = self.get_schedule(schedule_id)
        decided = lifecycle.decide_approval(schedule, approved, notes)

        updates = []
        if approved:
            context = self.load_context(schedule.establishment_id, schedule.week_start)
            report = validate_full_schedule(context, decided, ValidationMode.SOFT)
            employees = {e.id: e for e in context.employees}
            for balance in report.balances:
                employee = employees.get(balance.employee_id)
                if employee is not None:
                    updates.append((apply_hours_debt(employee, balance), balance.delta))

        with self.repository.transaction():
            for employee, _ in updates:
                self.repository.save_employee(employee)
            saved = self.repository.save_schedule(decided)

        for employee, delta in updates:
            logger.info(f"Hours debt for {employee.name} adjusted by {delta:+.1f}h")
        return saved

    def request_modification(self, schedule_id: str, reason: str) -> Schedule:
        schedule = self.get_schedule(schedule_id)
        return self.repository.save_schedule(lifecycle.request_modification(schedule, reason))

    def decide_modification(self, schedule_id: str, approved: bool, notes: Optional[str] = None) -> Schedule:
        schedule = self.get_schedule(schedule_id)
        return self.repository.save_schedule(lifecycle.decide_modification(schedule, approved, notes))

    def add_vacation(self, employee_id: str, start: date, end: date) -> TimeOffRequest:
        employee = self.get_employee(employee_id)
        existing = [
            r for r in self.repository.get_time_off_requests(employee.establishment_id)
            if r.employee_id == employee_id
        ]
        requests = add_vacation(existing, employee_id, start, end)
        return self.repository.save_time_off_request(requests[-1])

    def add_temporary_hours(self, employee_id: str, start: date, end: date, hours: int) -> Employee:
        employee = self.get_employee(employee_id)
        schedules = self.repository.list_schedules(employee.establishment_id)
        updated = add_temporary_hours(employee, TemporaryHours(start=start, end=end, hours=hours), schedules)
        return self.repository.save_employee(updated)

    def add_permanent_request(self, request: PermanentRequest) -> PermanentRequest:
        employee = self.get_employee(request.employee_id)
        existing = self.repository.get_permanent_requests(employee.establishment_id)
        add_permanent_request(existing, request, employee)
        return self.repository.save_permanent_request(request)

    def create_employee(self, employee: Employee) -> Employee:
        validate_weekly_hours(employee.weekly_hours)
        logger.info(f"Adding employee {employee.name} ({employee.category.value}, {employee.weekly_hours}h)")
        return self.repository.save_employee(employee)

    def get_settings(self, establishment_id: str) -> StoreSettings:
        return self.repository.get_settings(establishment_id)

    def save_settings(self, settings: StoreSettings) -> StoreSettings:
        logger.info(f"Saving settings for {settings.establishment_id}")
        return self.repository.save_settings(settings)
