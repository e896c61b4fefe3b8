"""
Seed script for the Shift Planner development database.

One store with 3 leaders, 5 sales staff and a cleaner:
- Sundays closed, Christmas and Christmas Eve afternoon as holidays
- Register role templates
- A few permanent requests (rotating days off, mornings only, max afternoons)
- One vacation
- A draft schedule for the current week

Run with: python -m scripts.seed_data
"""

import sys
from datetime import date, time, timedelta

from sqlalchemy import delete

from shiftplanner.db.database import SessionLocal, init_db
from shiftplanner.db.models import (
    Employees,
    EstablishmentSettings,
    PermanentRequests,
    Schedules,
    Shifts,
    TimeOffRequests,
)
from shiftplanner.services.scheduling.data_loader import SqlAlchemyRepository
from shiftplanner.services.scheduling.dates import week_start_for
from shiftplanner.services.scheduling.service import ScheduleService
from shiftplanner.services.scheduling.types import (
    Employee,
    EmployeeCategory,
    Holiday,
    HolidayKind,
    PermanentRequest,
    PermanentRequestType,
    ShiftType,
    StoreSettings,
    TimeTemplate,
    WorkRole,
)

STORE_ID = "store-001"


def clear_tables(db):
    """Delete all rows, children first."""
    print("Clearing tables...")

    for model in (Shifts, Schedules, TimeOffRequests, PermanentRequests, Employees, EstablishmentSettings):
        db.execute(delete(model))

    db.commit()
    print("All tables cleared.")


def seed_settings(repository: SqlAlchemyRepository, year: int):
    print("Seeding store settings...")

    settings = StoreSettings(
        establishment_id=STORE_ID,
        holidays=(
            Holiday(date=date(year, 12, 24), kind=HolidayKind.AFTERNOON_ONLY),
            Holiday(date=date(year, 12, 25)),
            Holiday(date=date(year, 12, 31), kind=HolidayKind.AFTERNOON_ONLY),
        ),
        open_sundays={date(year, 12, 21)},
        role_schedules={
            WorkRole.SALES_REGISTER: TimeTemplate(shift_type=ShiftType.MORNING, start_time=time(9, 45)),
            WorkRole.CLEANING: TimeTemplate(shift_type=ShiftType.MORNING, start_time=time(8, 0), end_time=time(12, 0)),
        },
        individual_meeting_start_time=time(9, 30),
    )
    repository.save_settings(settings)
    print("Seeded settings.")


def seed_employees(repository: SqlAlchemyRepository) -> list[Employee]:
    """Seed 9 employees: manager, assistant, supervisor, 5 sales staff, 1 cleaner."""
    print("Seeding employees...")

    employees = [
        Employee(id="emp-001", name="Marta Gil", initials="MG", weekly_hours=40,
                 category=EmployeeCategory.MANAGER, establishment_id=STORE_ID, seniority_date=date(2015, 3, 1)),
        Employee(id="emp-002", name="Luis Vera", initials="LV", weekly_hours=40,
                 category=EmployeeCategory.ASSISTANT_MANAGER, establishment_id=STORE_ID, seniority_date=date(2018, 9, 1)),
        Employee(id="emp-003", name="Sara Rey", initials="SR", weekly_hours=40,
                 category=EmployeeCategory.SUPERVISOR, establishment_id=STORE_ID, seniority_date=date(2020, 1, 15)),
        Employee(id="emp-004", name="Elena Paz", initials="EP", weekly_hours=40, establishment_id=STORE_ID),
        Employee(id="emp-005", name="Pablo Ruiz", initials="PR", weekly_hours=32, establishment_id=STORE_ID),
        Employee(id="emp-006", name="Nuria Sol", initials="NS", weekly_hours=24, establishment_id=STORE_ID),
        Employee(id="emp-007", name="Ivan Mora", initials="IM", weekly_hours=20, establishment_id=STORE_ID),
        Employee(id="emp-008", name="Ana Cruz", initials="AC", weekly_hours=16, establishment_id=STORE_ID),
        Employee(id="emp-009", name="Rosa Lis", initials="RL", weekly_hours=20,
                 category=EmployeeCategory.CLEANING, establishment_id=STORE_ID),
    ]

    for emp in employees:
        repository.save_employee(emp)
    print(f"Seeded {len(employees)} employees.")
    return employees


def seed_permanent_requests(service: ScheduleService, monday: date):
    print("Seeding permanent requests...")

    requests = [
        # Sara alternates Monday and Tuesday off
        PermanentRequest(employee_id="emp-003", type=PermanentRequestType.ROTATING_DAYS_OFF,
                         cycle_weeks=({1}, {2}), reference_date=monday),
        PermanentRequest(employee_id="emp-006", type=PermanentRequestType.MORNING_ONLY),
        PermanentRequest(employee_id="emp-005", type=PermanentRequestType.MAX_AFTERNOONS_PER_WEEK, value=2),
        PermanentRequest(employee_id="emp-008", type=PermanentRequestType.SPECIFIC_DAYS_OFF, days={3}),
        PermanentRequest(employee_id="emp-007", type=PermanentRequestType.EARLY_MORNING_SHIFT),
    ]

    for req in requests:
        service.add_permanent_request(req)
    print(f"Seeded {len(requests)} permanent requests.")


def seed_time_off(service: ScheduleService, monday: date):
    print("Seeding time off...")

    start = monday + timedelta(weeks=2)
    service.add_vacation("emp-004", start, start + timedelta(days=6))
    print("Seeded 1 vacation.")


def main():
    """Main seed function."""
    print("\n" + "="*50)
    print("Shift Planner Database Seeder")
    print("="*50 + "\n")

    response = input("This will DELETE ALL EXISTING DATA. Continue? (yes/no): ")
    if response.lower() != "yes":
        print("Aborted.")
        sys.exit(0)

    init_db()
    db = SessionLocal()
    repository = SqlAlchemyRepository(db)
    service = ScheduleService(repository)
    monday = week_start_for(date.today())

    try:
        clear_tables(db)

        seed_settings(repository, monday.year)
        seed_employees(repository)
        seed_permanent_requests(service, monday)
        seed_time_off(service, monday)

        result = service.create_schedule(STORE_ID, monday)

        print("\n" + "="*50)
        print("Seeding complete!")
        print("="*50)
        print(f"\nDraft schedule {result.schedule.id} for week of {monday}")
        print(f"  {sum(1 for s in result.schedule.shifts if s.is_worked)} worked shifts")
        print(f"  {len(result.warnings)} warning(s)")
        for warning in result.warnings[:10]:
            print(f"    - {warning}")
        print("="*50 + "\n")

    except Exception as e:
        db.rollback()
        print(f"\nError during seeding: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
