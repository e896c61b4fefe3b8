"""
Errors raised by the scheduling engine.
Every error aborts the requested operation before anything is persisted.
"""


class SchedulingError(Exception):
    pass


class AlreadyExistsError(SchedulingError):
    pass


class ScheduleNotFoundError(SchedulingError):
    pass


class EmployeeNotFoundError(SchedulingError):
    pass


class ShiftNotFoundError(SchedulingError):
    pass


class ScheduleLockedError(SchedulingError):
    pass


class NoEmployeesError(SchedulingError):
    pass


class InvalidShiftError(SchedulingError):
    pass


class InvalidTransitionError(SchedulingError):
    pass


class InvalidRestrictionError(SchedulingError):
    pass


class InvalidDateRangeError(SchedulingError):
    pass


class OverlappingRangeError(SchedulingError):
    pass


class VacationLimitError(SchedulingError):
    pass


class PublishBlockedError(SchedulingError):
    """Publishing needs explicit acknowledgement of the pending warnings."""

    def __init__(self, warnings: list[str]):
        self.warnings = list(warnings)
        super().__init__(
            f"Schedule has {len(self.warnings)} unacknowledged warning(s)"
        )
