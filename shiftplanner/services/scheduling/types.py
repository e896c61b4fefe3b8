"""
Internal data types for scheduling logic.
decoupled from SQLAlchemy models and pydantic schemas for cleaner logic.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, time, timedelta
from enum import Enum
from typing import Optional

from .dates import hours_between, week_dates, weekday_index


def new_id() -> str:
    return uuid.uuid4().hex


class EmployeeCategory(str, Enum):
    CLEANING = "cleaning"
    EMPLOYEE = "employee"
    SUPERVISOR = "supervisor"
    ASSISTANT_MANAGER = "assistant_manager"
    MANAGER = "manager"

    @property
    def priority(self) -> int:
        """Higher = more senior."""
        return CATEGORY_PRIORITY[self]

    @property
    def is_responsible(self) -> bool:
        """Can open/close the store."""
        return self in RESPONSIBLE_CATEGORIES


CATEGORY_PRIORITY = {
    EmployeeCategory.CLEANING: 0,
    EmployeeCategory.EMPLOYEE: 1,
    EmployeeCategory.SUPERVISOR: 2,
    EmployeeCategory.ASSISTANT_MANAGER: 3,
    EmployeeCategory.MANAGER: 4,
}

RESPONSIBLE_CATEGORIES = frozenset({
    EmployeeCategory.MANAGER,
    EmployeeCategory.ASSISTANT_MANAGER,
    EmployeeCategory.SUPERVISOR,
})


class ShiftType(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    SPLIT = "split"
    OFF = "off"
    HOLIDAY = "holiday"
    VACATION = "vacation"
    SICK_LEAVE = "sick_leave"
    MATERNITY_PATERNITY = "maternity_paternity"

    @property
    def is_worked(self) -> bool:
        return self in (ShiftType.MORNING, ShiftType.AFTERNOON, ShiftType.SPLIT)

    @property
    def covers_morning(self) -> bool:
        return self in (ShiftType.MORNING, ShiftType.SPLIT)

    @property
    def covers_afternoon(self) -> bool:
        return self in (ShiftType.AFTERNOON, ShiftType.SPLIT)


class WorkRole(str, Enum):
    SALES_REGISTER = "sales_register"
    PURCHASE_REGISTER = "purchase_register"
    SHUTTLE = "shuttle"
    CLEANING = "cleaning"


class PermanentRequestType(str, Enum):
    MORNING_ONLY = "morning_only"
    AFTERNOON_ONLY = "afternoon_only"
    SPECIFIC_DAYS_OFF = "specific_days_off"
    ROTATING_DAYS_OFF = "rotating_days_off"
    FIXED_ROTATING_SHIFT = "fixed_rotating_shift"
    MAX_AFTERNOONS_PER_WEEK = "max_afternoons_per_week"
    FORCE_FULL_DAYS = "force_full_days"
    EARLY_MORNING_SHIFT = "early_morning_shift"
    NO_SPLIT = "no_split"


class TimeOffType(str, Enum):
    DAY_OFF = "day_off"
    MORNING_OFF = "morning_off"
    AFTERNOON_OFF = "afternoon_off"
    VACATION = "vacation"
    SICK_LEAVE = "sick_leave"
    MATERNITY_PATERNITY = "maternity_paternity"
    EARLY_MORNING_SHIFT = "early_morning_shift"

    @property
    def is_absence(self) -> bool:
        """Absences reduce the weekly target."""
        return self in (TimeOffType.VACATION, TimeOffType.SICK_LEAVE, TimeOffType.MATERNITY_PATERNITY)


class HolidayKind(str, Enum):
    FULL = "full"
    AFTERNOON_ONLY = "afternoon"


class HistoryEventType(str, Enum):
    HIRED = "hired"
    REHIRED = "rehired"
    TERMINATED = "terminated"


class ScheduleStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class ApprovalStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ModificationStatus(str, Enum):
    NONE = "none"
    REQUESTED = "requested"
    APPROVED = "approved"


class Severity(str, Enum):
    ADVISORY = "advisory"
    WARNING = "warning"
    BLOCKER = "blocker"


class ValidationMode(str, Enum):
    SOFT = "soft"
    PUBLISH = "publish"


@dataclass(frozen=True)
class Holiday:
    date: date
    kind: HolidayKind = HolidayKind.FULL


@dataclass(frozen=True)
class OpeningHours:
    morning_start: time = time(10, 0)
    morning_end: time = time(14, 0)
    afternoon_start: time = time(17, 0)
    afternoon_end: time = time(21, 0)


@dataclass(frozen=True)
class TimeTemplate:
    """Default times for a role. Missing times fall back to opening hours."""
    shift_type: ShiftType
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    morning_end_time: Optional[time] = None
    afternoon_start_time: Optional[time] = None


@dataclass(frozen=True)
class StoreSettings:
    establishment_id: str
    opening_hours: OpeningHours = field(default_factory=OpeningHours)
    holidays: tuple[Holiday, ...] = ()
    open_sundays: frozenset[date] = frozenset()
    role_schedules: dict[WorkRole, TimeTemplate] = field(default_factory=dict)
    individual_meeting_start_time: Optional[time] = None
    early_morning_start: time = time(9, 0)
    early_morning_end: time = time(14, 0)

    def __post_init__(self):
        object.__setattr__(self, "holidays", tuple(self.holidays))
        object.__setattr__(self, "open_sundays", frozenset(self.open_sundays))

    def holiday_on(self, day: date) -> Optional[Holiday]:
        for holiday in self.holidays:
            if holiday.date == day:
                return holiday
        return None

    def is_full_holiday(self, day: date) -> bool:
        holiday = self.holiday_on(day)
        return holiday is not None and holiday.kind == HolidayKind.FULL

    def is_afternoon_closure(self, day: date) -> bool:
        holiday = self.holiday_on(day)
        return holiday is not None and holiday.kind == HolidayKind.AFTERNOON_ONLY

    def is_closed_sunday(self, day: date) -> bool:
        return weekday_index(day) == 0 and day not in self.open_sundays

    def is_open(self, day: date) -> bool:
        return not self.is_closed_sunday(day) and not self.is_full_holiday(day)


@dataclass(frozen=True)
class TemporaryHours:
    start: date
    end: date
    hours: int
    id: str = field(default_factory=new_id)

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class HistoryEntry:
    date: date
    event: HistoryEventType
    reason: Optional[str] = None


@dataclass
class Employee:
    id: str
    name: str
    weekly_hours: int
    category: EmployeeCategory = EmployeeCategory.EMPLOYEE
    establishment_id: Optional[str] = None
    initials: Optional[str] = None
    active: bool = True
    seniority_date: Optional[date] = None
    birth_date: Optional[date] = None
    hours_debt: float = 0.0
    temp_hours: list[TemporaryHours] = field(default_factory=list)
    history: list[HistoryEntry] = field(default_factory=list)

    @property
    def is_responsible(self) -> bool:
        return self.category.is_responsible


@dataclass(frozen=True)
class Shift:
    """One employee's assignment for one day."""
    employee_id: str
    date: date
    type: ShiftType
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    morning_end_time: Optional[time] = None
    afternoon_start_time: Optional[time] = None
    role: Optional[WorkRole] = None
    is_opening: bool = False
    is_closing: bool = False
    is_individual_meeting: bool = False
    id: str = field(default_factory=new_id)

    @property
    def is_worked(self) -> bool:
        return self.type.is_worked

    @property
    def weekday(self) -> int:
        """0=Sunday .. 6=Saturday."""
        return weekday_index(self.date)

    @property
    def duration_hours(self) -> float:
        if self.type in (ShiftType.MORNING, ShiftType.AFTERNOON):
            if self.start_time and self.end_time:
                return hours_between(self.start_time, self.end_time)
            return 4.0
        if self.type == ShiftType.SPLIT:
            if self.start_time and self.end_time and self.morning_end_time and self.afternoon_start_time:
                return (
                    hours_between(self.start_time, self.morning_end_time)
                    + hours_between(self.afternoon_start_time, self.end_time)
                )
            return 8.0
        return 0.0


@dataclass(frozen=True)
class PermanentRequest:
    employee_id: str
    type: PermanentRequestType
    days: frozenset[int] = frozenset()  # 0=Sunday
    value: Optional[int] = None
    cycle_weeks: tuple[frozenset[int], ...] = ()
    reference_date: Optional[date] = None  # Monday anchoring week 1 of a cycle
    exceptions: frozenset[date] = frozenset()  # week starts where the request is ignored
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        object.__setattr__(self, "days", frozenset(self.days))
        object.__setattr__(self, "cycle_weeks", tuple(frozenset(w) for w in self.cycle_weeks))
        object.__setattr__(self, "exceptions", frozenset(self.exceptions))


@dataclass(frozen=True)
class TimeOffRequest:
    employee_id: str
    type: TimeOffType
    dates: frozenset[date] = frozenset()
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        object.__setattr__(self, "dates", frozenset(self.dates))

    def covers(self, day: date) -> bool:
        if day in self.dates:
            return True
        if self.start_date and self.end_date:
            return self.start_date <= day <= self.end_date
        return False

    @property
    def first_day(self) -> Optional[date]:
        candidates = list(self.dates) + [d for d in (self.start_date,) if d]
        return min(candidates) if candidates else None

    @property
    def last_day(self) -> Optional[date]:
        candidates = list(self.dates) + [d for d in (self.end_date,) if d]
        return max(candidates) if candidates else None


@dataclass(frozen=True)
class Schedule:
    """A week of shifts for one establishment."""
    establishment_id: str
    week_start: date  # Monday
    shifts: tuple[Shift, ...] = ()
    status: ScheduleStatus = ScheduleStatus.DRAFT
    approval_status: ApprovalStatus = ApprovalStatus.NONE
    modification_status: ModificationStatus = ModificationStatus.NONE
    supervisor_notes: Optional[str] = None
    modification_reason: Optional[str] = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        object.__setattr__(self, "shifts", tuple(self.shifts))
        seen = set()
        for shift in self.shifts:
            key = (shift.employee_id, shift.date)
            if key in seen:
                raise ValueError(f"Duplicate shift for employee {shift.employee_id} on {shift.date}")
            seen.add(key)

    @property
    def week_end(self) -> date:
        """Sunday of the schedule week."""
        return self.week_start + timedelta(days=6)

    @property
    def week_dates(self) -> list[date]:
        return week_dates(self.week_start)

    @property
    def is_locked(self) -> bool:
        if self.approval_status == ApprovalStatus.PENDING:
            return True
        return (
            self.approval_status == ApprovalStatus.APPROVED
            and self.modification_status != ModificationStatus.APPROVED
        )

    def shifts_for(self, employee_id: str) -> list[Shift]:
        return [s for s in self.shifts if s.employee_id == employee_id]

    def shifts_on(self, day: date) -> list[Shift]:
        return [s for s in self.shifts if s.date == day]

    def shift_for(self, employee_id: str, day: date) -> Optional[Shift]:
        for s in self.shifts:
            if s.employee_id == employee_id and s.date == day:
                return s
        return None


@dataclass(frozen=True)
class Violation:
    code: str
    message: str
    severity: Severity = Severity.WARNING
    employee_id: Optional[str] = None
    date: Optional[date] = None


@dataclass(frozen=True)
class WeeklyBalance:
    employee_id: str
    worked_hours: float
    contract_hours: int
    reduction_units: float
    target_hours: float
    delta: float


@dataclass
class ScheduleContext:
    """All data needed to generate or validate a schedule for one store/week."""
    establishment_id: str
    week_start: date  # Monday
    employees: list[Employee]
    settings: StoreSettings
    permanent_requests: list[PermanentRequest] = field(default_factory=list)
    time_off_requests: list[TimeOffRequest] = field(default_factory=list)

    @property
    def week_end(self) -> date:
        """Sunday of the schedule week."""
        return self.week_start + timedelta(days=6)


@dataclass
class ScheduleResult:
    """A produced schedule together with its non-blocking warnings."""
    schedule: Schedule
    warnings: list[str] = field(default_factory=list)
    violations: list[Violation] = field(default_factory=list)
    balances: list[WeeklyBalance] = field(default_factory=list)

    @property
    def has_blockers(self) -> bool:
        return any(v.severity == Severity.BLOCKER for v in self.violations)
