"""
Schedule state transitions.

Every function returns a new Schedule and leaves its input untouched.
"""

import logging
from dataclasses import replace
from datetime import time
from typing import Any, Optional

from .errors import (
    InvalidShiftError,
    InvalidTransitionError,
    ScheduleLockedError,
    ShiftNotFoundError,
)
from .types import (
    ApprovalStatus,
    ModificationStatus,
    Schedule,
    ScheduleStatus,
    Shift,
    ShiftType,
    StoreSettings,
    WorkRole,
)


logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({
    "type",
    "start_time",
    "end_time",
    "morning_end_time",
    "afternoon_start_time",
    "role",
    "is_opening",
    "is_closing",
    "is_individual_meeting",
})
TIME_FIELDS = ("start_time", "end_time", "morning_end_time", "afternoon_start_time")
REQUIRED_FIELDS = ("type", "is_opening", "is_closing", "is_individual_meeting")


def validate_shift_times(shift: Shift) -> None:
    """Raise InvalidShiftError when the time fields do not fit the shift type."""
    if not shift.is_worked:
        if any(getattr(shift, name) is not None for name in TIME_FIELDS):
            raise InvalidShiftError(f"A {shift.type.value} shift cannot have times")
        return

    if shift.start_time is None or shift.end_time is None:
        raise InvalidShiftError(f"A {shift.type.value} shift needs a start and an end time")
    if shift.start_time >= shift.end_time:
        raise InvalidShiftError(f"Start {shift.start_time} must be before end {shift.end_time}")

    if shift.type == ShiftType.SPLIT:
        if shift.morning_end_time is None or shift.afternoon_start_time is None:
            raise InvalidShiftError("A split shift needs a morning end and an afternoon start")
        if not shift.start_time < shift.morning_end_time < shift.afternoon_start_time < shift.end_time:
            raise InvalidShiftError(
                "Split shift times must be ordered: start < morning end < afternoon start < end"
            )
    elif shift.morning_end_time is not None or shift.afternoon_start_time is not None:
        raise InvalidShiftError(f"A {shift.type.value} shift has no break")


def default_times(shift_type: ShiftType, settings: StoreSettings) -> dict[str, Optional[time]]:
    """Opening-hours times for a worked shift type."""
    hours = settings.opening_hours
    times = dict.fromkeys(TIME_FIELDS)
    if shift_type == ShiftType.MORNING:
        times.update(start_time=hours.morning_start, end_time=hours.morning_end)
    elif shift_type == ShiftType.AFTERNOON:
        times.update(start_time=hours.afternoon_start, end_time=hours.afternoon_end)
    elif shift_type == ShiftType.SPLIT:
        times.update(
            start_time=hours.morning_start,
            morning_end_time=hours.morning_end,
            afternoon_start_time=hours.afternoon_start,
            end_time=hours.afternoon_end,
        )
    return times


def _find_shift(schedule: Schedule, shift_id: str) -> int:
    for i, s in enumerate(schedule.shifts):
        if s.id == shift_id:
            return i
    raise ShiftNotFoundError(f"Shift {shift_id} not found in schedule {schedule.id}")


def update_shift(
    schedule: Schedule,
    shift_id: str,
    changes: dict[str, Any],
    settings: Optional[StoreSettings] = None,
) -> Schedule:
    """
    Apply field changes to one shift.

    Switching to a non-worked type clears times, role and opening/closing.
    Switching to a worked type without explicit times takes the store's
    opening hours. Marking an individual meeting moves the start to the store's meeting time.
    """
    if schedule.is_locked:
        raise ScheduleLockedError(f"Schedule {schedule.id} is locked for review")

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise InvalidShiftError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    nulls = [name for name in REQUIRED_FIELDS if name in changes and changes[name] is None]
    if nulls:
        raise InvalidShiftError(f"Fields cannot be cleared: {', '.join(nulls)}")

    index = _find_shift(schedule, shift_id)
    current = schedule.shifts[index]

    values = dict(changes)
    if values.get("type") is not None:
        values["type"] = ShiftType(values["type"])
    if values.get("role") is not None:
        values["role"] = WorkRole(values["role"])

    updated = replace(current, **values)

    type_changed = updated.type != current.type
    if type_changed and updated.is_worked and settings and not set(changes) & set(TIME_FIELDS):
        updated = replace(updated, **default_times(updated.type, settings))

    if not updated.is_worked:
        updated = replace(
            updated,
            start_time=None,
            end_time=None,
            morning_end_time=None,
            afternoon_start_time=None,
            role=None,
            is_opening=False,
            is_closing=False,
            is_individual_meeting=False,
        )
    elif changes.get("is_individual_meeting") and settings and settings.individual_meeting_start_time:
        updated = replace(updated, start_time=settings.individual_meeting_start_time)

    validate_shift_times(updated)

    shifts = list(schedule.shifts)
    shifts[index] = updated
    return replace(schedule, shifts=tuple(shifts))


def publish(schedule: Schedule) -> Schedule:
    if schedule.is_locked:
        raise ScheduleLockedError(f"Schedule {schedule.id} is already waiting for or past review")
    logger.info(f"Publishing schedule {schedule.id} for week of {schedule.week_start}")
    return replace(
        schedule,
        status=ScheduleStatus.PUBLISHED,
        approval_status=ApprovalStatus.PENDING,
        modification_status=ModificationStatus.NONE,
        modification_reason=None,
    )


def decide_approval(schedule: Schedule, approved: bool, notes: Optional[str] = None) -> Schedule:
    """Supervisor decision on a published schedule."""
    if schedule.approval_status != ApprovalStatus.PENDING:
        raise InvalidTransitionError(
            f"Schedule {schedule.id} is not pending approval ({schedule.approval_status.value})"
        )
    status = ApprovalStatus.APPROVED if approved else ApprovalStatus.REJECTED
    logger.info(f"Schedule {schedule.id} {status.value}")
    return replace(
        schedule,
        approval_status=status,
        modification_status=ModificationStatus.NONE,
        supervisor_notes=notes,
    )


def request_modification(schedule: Schedule, reason: str) -> Schedule:
    if schedule.approval_status != ApprovalStatus.APPROVED:
        raise InvalidTransitionError("Modifications can only be requested on approved schedules")
    if schedule.modification_status != ModificationStatus.NONE:
        raise InvalidTransitionError(
            f"Schedule {schedule.id} already has a modification {schedule.modification_status.value}"
        )
    logger.info(f"Modification requested for schedule {schedule.id}")
    return replace(
        schedule,
        modification_status=ModificationStatus.REQUESTED,
        modification_reason=reason,
    )


def decide_modification(schedule: Schedule, approved: bool, notes: Optional[str] = None) -> Schedule:
    """Approving unlocks the schedule for edits; denying returns it to none."""
    if schedule.modification_status != ModificationStatus.REQUESTED:
        raise InvalidTransitionError(f"Schedule {schedule.id} has no pending modification request")
    status = ModificationStatus.APPROVED if approved else ModificationStatus.NONE
    logger.info(f"Modification for schedule {schedule.id} {'approved' if approved else 'denied'}")
    return replace(
        schedule,
        modification_status=status,
        supervisor_notes=notes if notes is not None else schedule.supervisor_notes,
    )
