import pytest
from datetime import time

from shiftplanner.services.scheduling.errors import (
    InvalidShiftError,
    InvalidTransitionError,
    ScheduleLockedError,
    ShiftNotFoundError,
)
from shiftplanner.services.scheduling.lifecycle import (
    decide_approval,
    decide_modification,
    publish,
    request_modification,
    update_shift,
)
from shiftplanner.services.scheduling.types import (
    ApprovalStatus,
    ModificationStatus,
    Schedule,
    ScheduleStatus,
    ShiftType,
    StoreSettings,
    WorkRole,
)

from conftest import day, get_test_monday, morning_shift, split_shift


@pytest.fixture
def draft() -> Schedule:
    return Schedule(
        establishment_id="store-1",
        week_start=get_test_monday(),
        shifts=[
            morning_shift("e1", day(0)),
            split_shift("m1", day(0), is_opening=True, is_closing=True, role=WorkRole.SALES_REGISTER),
        ],
    )


def approved(schedule: Schedule) -> Schedule:
    return decide_approval(publish(schedule), approved=True)


class TestUpdateShift:

    def test_returns_new_schedule(self, draft):
        shift = draft.shifts[0]

        updated = update_shift(draft, shift.id, {"role": "purchase_register"})

        assert updated.shifts[0].role == WorkRole.PURCHASE_REGISTER
        assert draft.shifts[0].role is None
        assert updated.shifts[0].id == shift.id

    def test_unknown_shift(self, draft):
        with pytest.raises(ShiftNotFoundError):
            update_shift(draft, "missing", {"role": "shuttle"})

    def test_unknown_field_rejected(self, draft):
        with pytest.raises(InvalidShiftError):
            update_shift(draft, draft.shifts[0].id, {"employee_id": "e2"})

    @pytest.mark.parametrize("field", ["type", "is_opening", "is_closing", "is_individual_meeting"])
    def test_null_required_field_rejected(self, draft, field):
        with pytest.raises(InvalidShiftError):
            update_shift(draft, draft.shifts[0].id, {field: None})

    def test_null_times_still_allowed_on_non_worked_shift(self, draft):
        updated = update_shift(draft, draft.shifts[0].id, {"type": "off", "start_time": None, "end_time": None})

        assert updated.shifts[0].start_time is None

    def test_switch_to_off_clears_work_fields(self, draft):
        shift = draft.shifts[1]

        updated = update_shift(draft, shift.id, {"type": ShiftType.OFF}).shifts[1]

        assert updated.type == ShiftType.OFF
        assert updated.start_time is None and updated.end_time is None
        assert updated.morning_end_time is None and updated.afternoon_start_time is None
        assert updated.role is None
        assert not updated.is_opening and not updated.is_closing

    def test_type_change_takes_opening_hours(self, draft):
        settings = StoreSettings(establishment_id="store-1")

        updated = update_shift(draft, draft.shifts[0].id, {"type": "afternoon"}, settings).shifts[0]

        assert updated.type == ShiftType.AFTERNOON
        assert (updated.start_time, updated.end_time) == (time(17, 0), time(21, 0))

    def test_type_change_with_explicit_times(self, draft):
        settings = StoreSettings(establishment_id="store-1")
        changes = {"type": "afternoon", "start_time": time(16, 0), "end_time": time(20, 0)}

        updated = update_shift(draft, draft.shifts[0].id, changes, settings).shifts[0]

        assert (updated.start_time, updated.end_time) == (time(16, 0), time(20, 0))

    def test_invalid_times_rejected(self, draft):
        with pytest.raises(InvalidShiftError):
            update_shift(draft, draft.shifts[0].id, {"start_time": time(15, 0)})

    def test_split_times_must_be_ordered(self, draft):
        with pytest.raises(InvalidShiftError):
            update_shift(draft, draft.shifts[1].id, {"afternoon_start_time": time(13, 0)})

    def test_individual_meeting_moves_start(self, draft):
        settings = StoreSettings(establishment_id="store-1", individual_meeting_start_time=time(9, 30))

        updated = update_shift(draft, draft.shifts[0].id, {"is_individual_meeting": True}, settings).shifts[0]

        assert updated.is_individual_meeting
        assert updated.start_time == time(9, 30)

    def test_locked_schedule_rejects_edits(self, draft):
        locked = publish(draft)

        with pytest.raises(ScheduleLockedError):
            update_shift(locked, locked.shifts[0].id, {"role": "shuttle"})


class TestPublishAndApproval:

    def test_publish_locks(self, draft):
        published = publish(draft)

        assert published.status == ScheduleStatus.PUBLISHED
        assert published.approval_status == ApprovalStatus.PENDING
        assert published.is_locked
        assert not draft.is_locked

    def test_publish_twice_rejected(self, draft):
        with pytest.raises(ScheduleLockedError):
            publish(publish(draft))

    def test_rejected_schedule_can_be_edited_and_republished(self, draft):
        rejected = decide_approval(publish(draft), approved=False, notes="Too few closers")

        assert rejected.approval_status == ApprovalStatus.REJECTED
        assert rejected.supervisor_notes == "Too few closers"
        assert not rejected.is_locked
        assert publish(rejected).approval_status == ApprovalStatus.PENDING

    def test_approval_needs_pending(self, draft):
        with pytest.raises(InvalidTransitionError):
            decide_approval(draft, approved=True)

    def test_approved_is_locked(self, draft):
        schedule = approved(draft)

        assert schedule.approval_status == ApprovalStatus.APPROVED
        assert schedule.is_locked


class TestModifications:

    def test_request_needs_approved_schedule(self, draft):
        with pytest.raises(InvalidTransitionError):
            request_modification(draft, "Sick employee")

    def test_request_keeps_lock(self, draft):
        requested = request_modification(approved(draft), "Sick employee")

        assert requested.modification_status == ModificationStatus.REQUESTED
        assert requested.modification_reason == "Sick employee"
        assert requested.is_locked

    def test_only_one_open_request(self, draft):
        requested = request_modification(approved(draft), "Sick employee")

        with pytest.raises(InvalidTransitionError):
            request_modification(requested, "Again")

    def test_approved_modification_unlocks(self, draft):
        schedule = decide_modification(request_modification(approved(draft), "Sick employee"), approved=True)

        assert schedule.modification_status == ModificationStatus.APPROVED
        assert not schedule.is_locked
        updated = update_shift(schedule, schedule.shifts[0].id, {"type": "off"})
        assert updated.shifts[0].type == ShiftType.OFF

    def test_denied_modification_returns_to_none(self, draft):
        schedule = decide_modification(
            request_modification(approved(draft), "Sick employee"), approved=False, notes="Swap instead"
        )

        assert schedule.modification_status == ModificationStatus.NONE
        assert schedule.supervisor_notes == "Swap instead"
        assert schedule.is_locked

    def test_decision_needs_request(self, draft):
        with pytest.raises(InvalidTransitionError):
            decide_modification(approved(draft), approved=True)

    def test_republish_after_modification_resets(self, draft):
        schedule = decide_modification(request_modification(approved(draft), "Sick employee"), approved=True)

        republished = publish(schedule)

        assert republished.approval_status == ApprovalStatus.PENDING
        assert republished.modification_status == ModificationStatus.NONE
        assert republished.modification_reason is None
