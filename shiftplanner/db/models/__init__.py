from shiftplanner.db.database import Base

# Import models
from shiftplanner.db.models.establishment_settings import EstablishmentSettings
from shiftplanner.db.models.employees import Employees
from shiftplanner.db.models.permanent_requests import PermanentRequests
from shiftplanner.db.models.time_off_requests import TimeOffRequests
from shiftplanner.db.models.schedules import Schedules
from shiftplanner.db.models.shifts import Shifts

__all__ = [
    "Base",
    # Models
    "EstablishmentSettings",
    "Employees",
    "PermanentRequests",
    "TimeOffRequests",
    "Schedules",
    "Shifts",
]
