import pytest
from datetime import date, timedelta

from shiftplanner.services.scheduling.errors import (
    AlreadyExistsError,
    EmployeeNotFoundError,
    InvalidRestrictionError,
    NoEmployeesError,
    OverlappingRangeError,
    PublishBlockedError,
    ScheduleLockedError,
    ScheduleNotFoundError,
)
from shiftplanner.services.scheduling.repository import InMemoryRepository
from shiftplanner.services.scheduling.service import ScheduleService
from shiftplanner.services.scheduling.types import (
    ApprovalStatus,
    Employee,
    ModificationStatus,
    PermanentRequest,
    PermanentRequestType,
    Schedule,
    ScheduleStatus,
    ShiftType,
    ValidationMode,
)

from conftest import day, get_test_monday, split_shift


@pytest.fixture
def repository(store_staff, store_settings) -> InMemoryRepository:
    return InMemoryRepository(settings=[store_settings], employees=store_staff)


@pytest.fixture
def service(repository) -> ScheduleService:
    return ScheduleService(repository)


@pytest.fixture
def short_week(repository) -> Schedule:
    # Marta works four splits: 8h short of her contract
    schedule = Schedule(
        establishment_id="store-1",
        week_start=get_test_monday(),
        shifts=[split_shift("m1", day(i), is_opening=True, is_closing=True) for i in range(4)],
    )
    return repository.save_schedule(schedule)


class TestCreateSchedule:

    def test_stores_generated_schedule(self, service, repository):
        result = service.create_schedule("store-1", get_test_monday())

        assert repository.schedules[result.schedule.id] is result.schedule
        assert result.schedule.status == ScheduleStatus.DRAFT
        assert result.warnings == [v.message for v in result.violations]

    def test_existing_week_rejected(self, service):
        service.create_schedule("store-1", get_test_monday())

        with pytest.raises(AlreadyExistsError):
            service.create_schedule("store-1", get_test_monday())

    def test_force_replaces_existing(self, service, repository):
        first = service.create_schedule("store-1", get_test_monday()).schedule

        second = service.create_schedule("store-1", get_test_monday(), force=True).schedule

        assert first.id != second.id
        assert list(repository.schedules) == [second.id]

    def test_force_refuses_locked_week(self, service):
        schedule = service.create_schedule("store-1", get_test_monday()).schedule
        service.publish_schedule(schedule.id, acknowledge_warnings=True)

        with pytest.raises(ScheduleLockedError):
            service.create_schedule("store-1", get_test_monday(), force=True)

    def test_no_active_employees(self, store_settings):
        service = ScheduleService(InMemoryRepository(settings=[store_settings]))

        with pytest.raises(NoEmployeesError):
            service.create_schedule("store-1", get_test_monday())

    def test_week_start_must_be_monday(self, service):
        with pytest.raises(ValueError):
            service.create_schedule("store-1", get_test_monday() + timedelta(days=2))

    def test_other_store_unaffected(self, service, repository):
        service.create_schedule("store-1", get_test_monday())

        assert repository.find_schedule("store-2", get_test_monday()) is None


class TestValidateAndEdit:

    def test_publish_mode_adds_blockers(self, service, short_week):
        soft = service.validate_schedule(short_week.id)
        strict = service.validate_schedule(short_week.id, ValidationMode.PUBLISH)

        assert not soft.has_blockers
        assert strict.has_blockers

    def test_unknown_schedule(self, service):
        with pytest.raises(ScheduleNotFoundError):
            service.validate_schedule("missing")

    def test_update_shift_is_persisted(self, service, repository, short_week):
        shift = short_week.shifts[0]

        result = service.update_shift(short_week.id, shift.id, {"type": "off"})

        stored = repository.get_schedule(short_week.id)
        assert stored.shifts[0].type == ShiftType.OFF
        assert result.schedule.shifts[0].type == ShiftType.OFF


class TestPublishAndApprove:

    def test_publish_needs_acknowledgement(self, service, repository, short_week):
        with pytest.raises(PublishBlockedError) as exc_info:
            service.publish_schedule(short_week.id)

        assert exc_info.value.warnings
        assert repository.get_schedule(short_week.id).status == ScheduleStatus.DRAFT

    def test_acknowledged_publish_locks(self, service, repository, short_week):
        result = service.publish_schedule(short_week.id, acknowledge_warnings=True)

        assert result.schedule.approval_status == ApprovalStatus.PENDING
        assert repository.get_schedule(short_week.id).is_locked

    def test_approval_applies_hours_debt(self, service, repository, short_week):
        service.publish_schedule(short_week.id, acknowledge_warnings=True)

        schedule = service.decide_approval(short_week.id, approved=True)

        assert schedule.approval_status == ApprovalStatus.APPROVED
        assert repository.get_employee("m1").hours_debt == -8
        # Nobody else worked: full deficits
        assert repository.get_employee("e3").hours_debt == -24

    def test_rejection_leaves_debt(self, service, repository, short_week):
        service.publish_schedule(short_week.id, acknowledge_warnings=True)

        service.decide_approval(short_week.id, approved=False, notes="Redo it")

        assert repository.get_employee("m1").hours_debt == 0
        assert repository.get_schedule(short_week.id).supervisor_notes == "Redo it"

    def test_locked_schedule_rejects_edits(self, service, short_week):
        service.publish_schedule(short_week.id, acknowledge_warnings=True)

        with pytest.raises(ScheduleLockedError):
            service.update_shift(short_week.id, short_week.shifts[0].id, {"type": "off"})

    def test_modification_flow(self, service, repository, short_week):
        service.publish_schedule(short_week.id, acknowledge_warnings=True)
        service.decide_approval(short_week.id, approved=True)

        service.request_modification(short_week.id, "Marta is sick on Thursday")
        schedule = service.decide_modification(short_week.id, approved=True)

        assert schedule.modification_status == ModificationStatus.APPROVED
        assert not repository.get_schedule(short_week.id).is_locked


class TestEmployeeOperations:

    def test_add_vacation(self, service, repository):
        request = service.add_vacation("e1", date(2025, 7, 1), date(2025, 7, 10))

        assert repository.time_off_requests[request.id] is request

        with pytest.raises(OverlappingRangeError):
            service.add_vacation("e1", date(2025, 7, 5), date(2025, 7, 8))

    def test_vacation_for_unknown_employee(self, service):
        with pytest.raises(EmployeeNotFoundError):
            service.add_vacation("ghost", date(2025, 7, 1), date(2025, 7, 10))

    def test_temporary_hours_blocked_by_locked_week(self, service, short_week):
        service.publish_schedule(short_week.id, acknowledge_warnings=True)

        with pytest.raises(ScheduleLockedError):
            service.add_temporary_hours("e3", get_test_monday(), day(13), 32)

    def test_temporary_hours_saved(self, service, repository):
        employee = service.add_temporary_hours("e3", date(2025, 3, 3), date(2025, 3, 30), 32)

        assert repository.get_employee("e3") is employee
        assert employee.temp_hours[0].hours == 32

    def test_invalid_permanent_request_not_saved(self, service, repository):
        req = PermanentRequest(employee_id="e3", type=PermanentRequestType.FIXED_ROTATING_SHIFT,
                               value=1, reference_date=get_test_monday())

        with pytest.raises(InvalidRestrictionError):
            service.add_permanent_request(req)
        assert repository.permanent_requests == {}

    def test_permanent_request_feeds_generation(self, service):
        req = PermanentRequest(employee_id="e3", type=PermanentRequestType.SPECIFIC_DAYS_OFF, days={1})
        service.add_permanent_request(req)

        schedule = service.create_schedule("store-1", get_test_monday()).schedule

        assert schedule.shift_for("e3", day(0)).type == ShiftType.OFF

    def test_create_employee_checks_hours(self, service):
        with pytest.raises(ValueError):
            service.create_employee(Employee(id="n1", name="New", weekly_hours=15, establishment_id="store-1"))


def failing_save(schedule):
    raise RuntimeError("write failed")


class TestAtomicWrites:

    def test_failed_regeneration_keeps_previous_schedule(self, service, repository, monkeypatch):
        first = service.create_schedule("store-1", get_test_monday()).schedule
        monkeypatch.setattr(repository, "save_schedule", failing_save)

        with pytest.raises(RuntimeError):
            service.create_schedule("store-1", get_test_monday(), force=True)

        assert repository.find_schedule("store-1", get_test_monday()) == first

    def test_failed_approval_applies_no_debt(self, service, repository, short_week, monkeypatch):
        service.publish_schedule(short_week.id, acknowledge_warnings=True)
        monkeypatch.setattr(repository, "save_schedule", failing_save)

        with pytest.raises(RuntimeError):
            service.decide_approval(short_week.id, approved=True)

        assert repository.get_employee("m1").hours_debt == 0
        assert repository.get_employee("e3").hours_debt == 0
        assert repository.get_schedule(short_week.id).approval_status == ApprovalStatus.PENDING
