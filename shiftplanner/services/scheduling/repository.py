"""
Persistence interface used by the schedule service, plus an in-memory
implementation for tests and scripts.
"""

from contextlib import contextmanager
from datetime import date
from typing import ContextManager, Iterable, Iterator, Optional, Protocol

from .types import (
    Employee,
    PermanentRequest,
    Schedule,
    StoreSettings,
    TimeOffRequest,
)


class ScheduleRepository(Protocol):
    def get_settings(self, establishment_id: str) -> StoreSettings: ...

    def save_settings(self, settings: StoreSettings) -> StoreSettings: ...

    def get_employees(self, establishment_id: str) -> list[Employee]: ...

    def get_employee(self, employee_id: str) -> Optional[Employee]: ...

    def save_employee(self, employee: Employee) -> Employee: ...

    def get_permanent_requests(self, establishment_id: str) -> list[PermanentRequest]: ...

    def save_permanent_request(self, request: PermanentRequest) -> PermanentRequest: ...

    def get_time_off_requests(self, establishment_id: str) -> list[TimeOffRequest]: ...

    def save_time_off_request(self, request: TimeOffRequest) -> TimeOffRequest: ...

    def find_schedule(self, establishment_id: str, week_start: date) -> Optional[Schedule]: ...

    def get_schedule(self, schedule_id: str) -> Optional[Schedule]: ...

    def list_schedules(self, establishment_id: str) -> list[Schedule]: ...

    def save_schedule(self, schedule: Schedule) -> Schedule: ...

    def delete_schedule(self, schedule_id: str) -> None: ...

    def transaction(self) -> ContextManager[None]: ...


class InMemoryRepository:
    """Dict-backed repository keyed by id."""

    def __init__(
        self,
        settings: Iterable[StoreSettings] = (),
        employees: Iterable[Employee] = (),
        permanent_requests: Iterable[PermanentRequest] = (),
        time_off_requests: Iterable[TimeOffRequest] = (),
        schedules: Iterable[Schedule] = (),
    ):
        self.settings = {s.establishment_id: s for s in settings}
        self.employees = {e.id: e for e in employees}
        self.permanent_requests = {r.id: r for r in permanent_requests}
        self.time_off_requests = {r.id: r for r in time_off_requests}
        self.schedules = {s.id: s for s in schedules}

    def _employee_ids(self, establishment_id: str) -> set[str]:
        return {e.id for e in self.get_employees(establishment_id)}

    def get_settings(self, establishment_id: str) -> StoreSettings:
        return self.settings.get(establishment_id) or StoreSettings(establishment_id=establishment_id)

    def save_settings(self, settings: StoreSettings) -> StoreSettings:
        self.settings[settings.establishment_id] = settings
        return settings

    def get_employees(self, establishment_id: str) -> list[Employee]:
        return [e for e in self.employees.values() if e.establishment_id == establishment_id]

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return self.employees.get(employee_id)

    def save_employee(self, employee: Employee) -> Employee:
        self.employees[employee.id] = employee
        return employee

    def get_permanent_requests(self, establishment_id: str) -> list[PermanentRequest]:
        ids = self._employee_ids(establishment_id)
        return [r for r in self.permanent_requests.values() if r.employee_id in ids]

    def save_permanent_request(self, request: PermanentRequest) -> PermanentRequest:
        self.permanent_requests[request.id] = request
        return request

    def get_time_off_requests(self, establishment_id: str) -> list[TimeOffRequest]:
        ids = self._employee_ids(establishment_id)
        return [r for r in self.time_off_requests.values() if r.employee_id in ids]

    def save_time_off_request(self, request: TimeOffRequest) -> TimeOffRequest:
        self.time_off_requests[request.id] = request
        return request

    def find_schedule(self, establishment_id: str, week_start: date) -> Optional[Schedule]:
        for schedule in self.schedules.values():
            if schedule.establishment_id == establishment_id and schedule.week_start == week_start:
                return schedule
        return None

    def get_schedule(self, schedule_id: str) -> Optional[Schedule]:
        return self.schedules.get(schedule_id)

    def list_schedules(self, establishment_id: str) -> list[Schedule]:
        return sorted(
            (s for s in self.schedules.values() if s.establishment_id == establishment_id),
            key=lambda s: s.week_start,
        )

    def save_schedule(self, schedule: Schedule) -> Schedule:
        self.schedules[schedule.id] = schedule
        return schedule

    def delete_schedule(self, schedule_id: str) -> None:
        self.schedules.pop(schedule_id, None)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Restore every collection if the block raises."""
        snapshot = [
            dict(self.settings),
            dict(self.employees),
            dict(self.permanent_requests),
            dict(self.time_off_requests),
            dict(self.schedules),
        ]
        try:
            yield
        except Exception:
            (
                self.settings,
                self.employees,
                self.permanent_requests,
                self.time_off_requests,
                self.schedules,
            ) = snapshot
            raise
