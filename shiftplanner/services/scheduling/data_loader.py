"""
Data loader for scheduling service.
Fetches all relevant data from the database and converts to internal types,
and writes engine results back.
"""

from contextlib import contextmanager
from datetime import date, time
from typing import Iterator, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from shiftplanner.core.config import settings as app_settings
from shiftplanner.db.models.employees import Employees
from shiftplanner.db.models.establishment_settings import EstablishmentSettings
from shiftplanner.db.models.permanent_requests import PermanentRequests
from shiftplanner.db.models.schedules import Schedules
from shiftplanner.db.models.shifts import Shifts
from shiftplanner.db.models.time_off_requests import TimeOffRequests

from .types import (
    Employee,
    HistoryEntry,
    HistoryEventType,
    Holiday,
    HolidayKind,
    OpeningHours,
    PermanentRequest,
    Schedule,
    Shift,
    ShiftType,
    StoreSettings,
    TemporaryHours,
    TimeOffRequest,
    TimeTemplate,
    WorkRole,
)


def _parse_time(t: Optional[str]) -> Optional[time]:
    """Parse HH:MM string to time object."""
    if not t:
        return None
    return time.fromisoformat(t)


def _format_time(t: Optional[time]) -> Optional[str]:
    return t.strftime("%H:%M") if t else None


def default_opening_hours() -> OpeningHours:
    return OpeningHours(
        morning_start=app_settings.DEFAULT_MORNING_START,
        morning_end=app_settings.DEFAULT_MORNING_END,
        afternoon_start=app_settings.DEFAULT_AFTERNOON_START,
        afternoon_end=app_settings.DEFAULT_AFTERNOON_END,
    )


def settings_from_row(row: Optional[EstablishmentSettings], establishment_id: str) -> StoreSettings:
    """Convert a settings row; a missing row gives the configured defaults."""
    if row is None:
        return StoreSettings(
            establishment_id=establishment_id,
            opening_hours=default_opening_hours(),
            early_morning_start=app_settings.EARLY_MORNING_START,
            early_morning_end=app_settings.EARLY_MORNING_END,
        )

    defaults = default_opening_hours()
    hours = row.opening_hours or {}
    opening_hours = OpeningHours(
        morning_start=_parse_time(hours.get("morning_start")) or defaults.morning_start,
        morning_end=_parse_time(hours.get("morning_end")) or defaults.morning_end,
        afternoon_start=_parse_time(hours.get("afternoon_start")) or defaults.afternoon_start,
        afternoon_end=_parse_time(hours.get("afternoon_end")) or defaults.afternoon_end,
    )
    role_schedules = {
        WorkRole(role): TimeTemplate(
            shift_type=ShiftType(t["shift_type"]),
            start_time=_parse_time(t.get("start_time")),
            end_time=_parse_time(t.get("end_time")),
            morning_end_time=_parse_time(t.get("morning_end_time")),
            afternoon_start_time=_parse_time(t.get("afternoon_start_time")),
        )
        for role, t in (row.role_schedules or {}).items()
    }
    return StoreSettings(
        establishment_id=row.establishment_id,
        opening_hours=opening_hours,
        holidays=tuple(
            Holiday(date=date.fromisoformat(h["date"]), kind=HolidayKind(h["kind"]))
            for h in row.holidays or []
        ),
        open_sundays=frozenset(date.fromisoformat(d) for d in row.open_sundays or []),
        role_schedules=role_schedules,
        individual_meeting_start_time=row.individual_meeting_start_time,
        early_morning_start=row.early_morning_start or app_settings.EARLY_MORNING_START,
        early_morning_end=row.early_morning_end or app_settings.EARLY_MORNING_END,
    )


def settings_to_row(settings: StoreSettings, row: EstablishmentSettings) -> EstablishmentSettings:
    hours = settings.opening_hours
    row.opening_hours = {
        "morning_start": _format_time(hours.morning_start),
        "morning_end": _format_time(hours.morning_end),
        "afternoon_start": _format_time(hours.afternoon_start),
        "afternoon_end": _format_time(hours.afternoon_end),
    }
    row.holidays = [{"date": h.date.isoformat(), "kind": h.kind.value} for h in settings.holidays]
    row.open_sundays = sorted(d.isoformat() for d in settings.open_sundays)
    row.role_schedules = {
        role.value: {
            "shift_type": t.shift_type.value,
            "start_time": _format_time(t.start_time),
            "end_time": _format_time(t.end_time),
            "morning_end_time": _format_time(t.morning_end_time),
            "afternoon_start_time": _format_time(t.afternoon_start_time),
        }
        for role, t in settings.role_schedules.items()
    }
    row.individual_meeting_start_time = settings.individual_meeting_start_time
    row.early_morning_start = settings.early_morning_start
    row.early_morning_end = settings.early_morning_end
    return row


def employee_from_row(row: Employees) -> Employee:
    return Employee(
        id=row.id,
        name=row.name,
        weekly_hours=row.weekly_hours,
        category=row.category,
        establishment_id=row.establishment_id,
        initials=row.initials,
        active=row.active,
        seniority_date=row.seniority_date,
        birth_date=row.birth_date,
        hours_debt=row.hours_debt,
        temp_hours=[
            TemporaryHours(
                id=t["id"],
                start=date.fromisoformat(t["start"]),
                end=date.fromisoformat(t["end"]),
                hours=t["hours"],
            )
            for t in row.temp_hours or []
        ],
        history=[
            HistoryEntry(
                date=date.fromisoformat(h["date"]),
                event=HistoryEventType(h["event"]),
                reason=h.get("reason"),
            )
            for h in row.history or []
        ],
    )


def employee_to_row(employee: Employee, row: Employees) -> Employees:
    row.id = employee.id
    row.establishment_id = employee.establishment_id
    row.name = employee.name
    row.initials = employee.initials
    row.category = employee.category
    row.weekly_hours = employee.weekly_hours
    row.active = employee.active
    row.seniority_date = employee.seniority_date
    row.birth_date = employee.birth_date
    row.hours_debt = employee.hours_debt
    row.temp_hours = [
        {"id": t.id, "start": t.start.isoformat(), "end": t.end.isoformat(), "hours": t.hours}
        for t in employee.temp_hours
    ]
    row.history = [
        {"date": h.date.isoformat(), "event": h.event.value, "reason": h.reason}
        for h in employee.history
    ]
    return row


def permanent_request_from_row(row: PermanentRequests) -> PermanentRequest:
    return PermanentRequest(
        id=row.id,
        employee_id=row.employee_id,
        type=row.type,
        days=frozenset(row.days or []),
        value=row.value,
        cycle_weeks=tuple(frozenset(w) for w in row.cycle_weeks or []),
        reference_date=row.reference_date,
        exceptions=frozenset(date.fromisoformat(d) for d in row.exceptions or []),
    )


def time_off_request_from_row(row: TimeOffRequests) -> TimeOffRequest:
    return TimeOffRequest(
        id=row.id,
        employee_id=row.employee_id,
        type=row.type,
        dates=frozenset(date.fromisoformat(d) for d in row.dates or []),
        start_date=row.start_date,
        end_date=row.end_date,
    )


def shift_from_row(row: Shifts) -> Shift:
    return Shift(
        id=row.id,
        employee_id=row.employee_id,
        date=row.date,
        type=row.type,
        start_time=row.start_time,
        end_time=row.end_time,
        morning_end_time=row.morning_end_time,
        afternoon_start_time=row.afternoon_start_time,
        role=row.role,
        is_opening=row.is_opening,
        is_closing=row.is_closing,
        is_individual_meeting=row.is_individual_meeting,
    )


def schedule_from_row(row: Schedules) -> Schedule:
    return Schedule(
        id=row.id,
        establishment_id=row.establishment_id,
        week_start=row.week_start,
        shifts=tuple(shift_from_row(s) for s in row.shifts),
        status=row.status,
        approval_status=row.approval_status,
        modification_status=row.modification_status,
        supervisor_notes=row.supervisor_notes,
        modification_reason=row.modification_reason,
    )


def _shift_to_row(shift: Shift, position: int, row: Shifts) -> Shifts:
    row.id = shift.id
    row.employee_id = shift.employee_id
    row.position = position
    row.date = shift.date
    row.type = shift.type
    row.start_time = shift.start_time
    row.end_time = shift.end_time
    row.morning_end_time = shift.morning_end_time
    row.afternoon_start_time = shift.afternoon_start_time
    row.role = shift.role
    row.is_opening = shift.is_opening
    row.is_closing = shift.is_closing
    row.is_individual_meeting = shift.is_individual_meeting
    return row


def load_employees(db: Session, establishment_id: str) -> list[Employee]:
    """Load every employee of an establishment; activity is decided per date by the engine."""
    stmt = select(Employees).where(Employees.establishment_id == establishment_id).order_by(Employees.name)
    return [employee_from_row(r) for r in db.execute(stmt).scalars().all()]


def load_permanent_requests(db: Session, employee_ids: list[str]) -> list[PermanentRequest]:
    if not employee_ids:
        return []
    stmt = select(PermanentRequests).where(PermanentRequests.employee_id.in_(employee_ids))
    return [permanent_request_from_row(r) for r in db.execute(stmt).scalars().all()]


def load_time_off_requests(db: Session, employee_ids: list[str]) -> list[TimeOffRequest]:
    if not employee_ids:
        return []
    stmt = select(TimeOffRequests).where(TimeOffRequests.employee_id.in_(employee_ids))
    return [time_off_request_from_row(r) for r in db.execute(stmt).scalars().all()]


class SqlAlchemyRepository:
    """
    Schedule repository backed by a SQLAlchemy session.

    Writes commit on their own, or once at the end of a transaction() block.
    """

    def __init__(self, db: Session):
        self.db = db
        self._in_transaction = False

    def _commit(self) -> None:
        if self._in_transaction:
            self.db.flush()
        else:
            self.db.commit()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._in_transaction:
            yield
            return

        self._in_transaction = True
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        finally:
            self._in_transaction = False

    def _employee_ids(self, establishment_id: str) -> list[str]:
        stmt = select(Employees.id).where(Employees.establishment_id == establishment_id)
        return list(self.db.execute(stmt).scalars().all())

    def get_settings(self, establishment_id: str) -> StoreSettings:
        row = self.db.get(EstablishmentSettings, establishment_id)
        return settings_from_row(row, establishment_id)

    def save_settings(self, settings: StoreSettings) -> StoreSettings:
        row = self.db.get(EstablishmentSettings, settings.establishment_id)
        if row is None:
            row = EstablishmentSettings(establishment_id=settings.establishment_id)
            self.db.add(row)
        settings_to_row(settings, row)
        self._commit()
        return settings

    def get_employees(self, establishment_id: str) -> list[Employee]:
        return load_employees(self.db, establishment_id)

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        row = self.db.get(Employees, employee_id)
        return employee_from_row(row) if row else None

    def save_employee(self, employee: Employee) -> Employee:
        row = self.db.get(Employees, employee.id)
        if row is None:
            row = Employees()
            self.db.add(row)
        employee_to_row(employee, row)
        self._commit()
        return employee

    def get_permanent_requests(self, establishment_id: str) -> list[PermanentRequest]:
        return load_permanent_requests(self.db, self._employee_ids(establishment_id))

    def save_permanent_request(self, request: PermanentRequest) -> PermanentRequest:
        row = self.db.get(PermanentRequests, request.id) or PermanentRequests(id=request.id)
        row.employee_id = request.employee_id
        row.type = request.type
        row.days = sorted(request.days)
        row.value = request.value
        row.cycle_weeks = [sorted(w) for w in request.cycle_weeks]
        row.reference_date = request.reference_date
        row.exceptions = sorted(d.isoformat() for d in request.exceptions)
        self.db.add(row)
        self._commit()
        return request

    def get_time_off_requests(self, establishment_id: str) -> list[TimeOffRequest]:
        return load_time_off_requests(self.db, self._employee_ids(establishment_id))

    def save_time_off_request(self, request: TimeOffRequest) -> TimeOffRequest:
        row = self.db.get(TimeOffRequests, request.id) or TimeOffRequests(id=request.id)
        row.employee_id = request.employee_id
        row.type = request.type
        row.dates = sorted(d.isoformat() for d in request.dates)
        row.start_date = request.start_date
        row.end_date = request.end_date
        self.db.add(row)
        self._commit()
        return request

    def find_schedule(self, establishment_id: str, week_start: date) -> Optional[Schedule]:
        stmt = select(Schedules).where(
            Schedules.establishment_id == establishment_id,
            Schedules.week_start == week_start,
        )
        row = self.db.execute(stmt).scalars().first()
        return schedule_from_row(row) if row else None

    def get_schedule(self, schedule_id: str) -> Optional[Schedule]:
        row = self.db.get(Schedules, schedule_id)
        return schedule_from_row(row) if row else None

    def list_schedules(self, establishment_id: str) -> list[Schedule]:
        stmt = select(Schedules).where(Schedules.establishment_id == establishment_id).order_by(Schedules.week_start)
        return [schedule_from_row(r) for r in self.db.execute(stmt).scalars().all()]

    def save_schedule(self, schedule: Schedule) -> Schedule:
        row = self.db.get(Schedules, schedule.id)
        if row is None:
            row = Schedules(id=schedule.id, establishment_id=schedule.establishment_id, week_start=schedule.week_start)
            self.db.add(row)

        row.status = schedule.status
        row.approval_status = schedule.approval_status
        row.modification_status = schedule.modification_status
        row.supervisor_notes = schedule.supervisor_notes
        row.modification_reason = schedule.modification_reason

        # Update shifts in place; removed ones are deleted before new ones are added
        keep = {s.id for s in schedule.shifts}
        existing = {s.id: s for s in row.shifts}
        for shift_id, shift_row in existing.items():
            if shift_id not in keep:
                row.shifts.remove(shift_row)
        self.db.flush()

        for position, shift in enumerate(schedule.shifts):
            shift_row = existing.get(shift.id)
            if shift_row is None:
                shift_row = Shifts()
                row.shifts.append(shift_row)
            _shift_to_row(shift, position, shift_row)

        self._commit()
        return schedule

    def delete_schedule(self, schedule_id: str) -> None:
        row = self.db.get(Schedules, schedule_id)
        if row is not None:
            self.db.delete(row)
            self._commit()
