import pytest
from datetime import date, time, timedelta

from shiftplanner.services.scheduling.types import (
    Employee,
    EmployeeCategory,
    Schedule,
    Shift,
    ShiftType,
    StoreSettings,
)


def get_test_monday() -> date:
    # returns a fixed Monday for deterministic tests
    return date(2025, 1, 20)


def day(offset: int) -> date:
    # 0=Monday .. 6=Sunday of the test week
    return get_test_monday() + timedelta(days=offset)


def split_shift(employee_id: str, on: date, **kwargs) -> Shift:
    return Shift(
        employee_id=employee_id, date=on, type=ShiftType.SPLIT,
        start_time=time(10, 0), morning_end_time=time(14, 0),
        afternoon_start_time=time(17, 0), end_time=time(21, 0),
        **kwargs,
    )


def morning_shift(employee_id: str, on: date, **kwargs) -> Shift:
    return Shift(employee_id=employee_id, date=on, type=ShiftType.MORNING,
                 start_time=time(10, 0), end_time=time(14, 0), **kwargs)


def afternoon_shift(employee_id: str, on: date, **kwargs) -> Shift:
    return Shift(employee_id=employee_id, date=on, type=ShiftType.AFTERNOON,
                 start_time=time(17, 0), end_time=time(21, 0), **kwargs)


@pytest.fixture
def store_settings() -> StoreSettings:
    return StoreSettings(establishment_id="store-1")


@pytest.fixture
def manager() -> Employee:
    return Employee(id="m1", name="Marta", weekly_hours=40,
                    category=EmployeeCategory.MANAGER, establishment_id="store-1")


@pytest.fixture
def full_timer() -> Employee:
    return Employee(id="e1", name="Elena", weekly_hours=40, establishment_id="store-1")


@pytest.fixture
def part_timer() -> Employee:
    return Employee(id="e2", name="Pablo", weekly_hours=24, establishment_id="store-1")


@pytest.fixture
def store_staff() -> list[Employee]:
    # 3 leaders, 4 sales staff and a cleaner
    return [
        Employee(id="m1", name="Marta", weekly_hours=40,
                 category=EmployeeCategory.MANAGER, establishment_id="store-1"),
        Employee(id="m2", name="Luis", weekly_hours=40,
                 category=EmployeeCategory.ASSISTANT_MANAGER, establishment_id="store-1"),
        Employee(id="s1", name="Sara", weekly_hours=40,
                 category=EmployeeCategory.SUPERVISOR, establishment_id="store-1"),
        Employee(id="e1", name="Elena", weekly_hours=40, establishment_id="store-1"),
        Employee(id="e2", name="Pablo", weekly_hours=32, establishment_id="store-1"),
        Employee(id="e3", name="Nuria", weekly_hours=24, establishment_id="store-1"),
        Employee(id="e4", name="Ivan", weekly_hours=20, establishment_id="store-1"),
        Employee(id="c1", name="Rosa", weekly_hours=20,
                 category=EmployeeCategory.CLEANING, establishment_id="store-1"),
    ]


@pytest.fixture
def full_week_schedule(full_timer) -> Schedule:
    # Elena: splits Monday to Friday, off Saturday and Sunday
    shifts = [split_shift(full_timer.id, day(i)) for i in range(5)]
    shifts += [Shift(employee_id=full_timer.id, date=day(i), type=ShiftType.OFF) for i in (5, 6)]
    return Schedule(establishment_id="store-1", week_start=get_test_monday(), shifts=shifts)
