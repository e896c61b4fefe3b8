"""
Scheduling engine package.

Usage:
    from datetime import date
    from shiftplanner.services.scheduling import generate_schedule, validate_full_schedule

    schedule = generate_schedule("store-1", date(2025, 1, 20), employees, settings)

    # Or go through the service with a repository
    from shiftplanner.services.scheduling import InMemoryRepository, ScheduleService

    service = ScheduleService(InMemoryRepository(employees=employees))
    result = service.create_schedule("store-1", date(2025, 1, 20))

The SQL repository lives in data_loader and is imported from there.
"""

from .types import (
    Employee,
    EmployeeCategory,
    PermanentRequest,
    PermanentRequestType,
    Schedule,
    ScheduleContext,
    ScheduleResult,
    Severity,
    Shift,
    ShiftType,
    StoreSettings,
    TimeOffRequest,
    TimeOffType,
    ValidationMode,
    Violation,
    WeeklyBalance,
)
from .coverage import validate_coverage, validate_register_coverage
from .generator import ShiftGenerator, generate_schedule
from .hours import calculate_employee_hours, calculate_weekly_balances
from .repository import InMemoryRepository, ScheduleRepository
from .restrictions import validate_permanent_restrictions
from .service import ScheduleService
from .time_off import validate_time_off_requests
from .validation import validate_full_schedule

__all__ = [
    # Types
    "Employee",
    "EmployeeCategory",
    "PermanentRequest",
    "PermanentRequestType",
    "Schedule",
    "ScheduleContext",
    "ScheduleResult",
    "Severity",
    "Shift",
    "ShiftType",
    "StoreSettings",
    "TimeOffRequest",
    "TimeOffType",
    "ValidationMode",
    "Violation",
    "WeeklyBalance",
    # Main entry points
    "generate_schedule",
    "ShiftGenerator",
    "ScheduleService",
    # Validators
    "validate_full_schedule",
    "validate_permanent_restrictions",
    "validate_time_off_requests",
    "validate_coverage",
    "validate_register_coverage",
    # Hours
    "calculate_employee_hours",
    "calculate_weekly_balances",
    # Persistence
    "ScheduleRepository",
    "InMemoryRepository",
]
