import pytest
from datetime import date

from shiftplanner.services.scheduling.employees import (
    active_employees,
    add_permanent_request,
    add_temporary_hours,
    check_permanent_request,
    is_active_on,
    validate_weekly_hours,
)
from shiftplanner.services.scheduling.errors import (
    InvalidDateRangeError,
    InvalidRestrictionError,
    OverlappingRangeError,
    ScheduleLockedError,
)
from shiftplanner.services.scheduling.hours import contract_hours_for_week
from shiftplanner.services.scheduling.lifecycle import publish
from shiftplanner.services.scheduling.types import (
    Employee,
    HistoryEntry,
    HistoryEventType,
    PermanentRequest,
    PermanentRequestType,
    Schedule,
    TemporaryHours,
)

from conftest import get_test_monday


@pytest.fixture
def rehired() -> Employee:
    return Employee(
        id="e5", name="Olga", weekly_hours=28,
        history=[
            HistoryEntry(date=date(2024, 3, 1), event=HistoryEventType.HIRED),
            HistoryEntry(date=date(2024, 9, 1), event=HistoryEventType.TERMINATED, reason="End of contract"),
            HistoryEntry(date=date(2025, 1, 6), event=HistoryEventType.REHIRED),
        ],
    )


class TestActivity:

    def test_history_decides_activity(self, rehired):
        assert not is_active_on(rehired, date(2024, 2, 1))
        assert is_active_on(rehired, date(2024, 5, 1))
        assert not is_active_on(rehired, date(2024, 12, 1))
        assert is_active_on(rehired, get_test_monday())

    def test_without_history_uses_flag(self):
        emp = Employee(id="e6", name="Paco", weekly_hours=20, active=False)

        assert not is_active_on(emp, get_test_monday())

    def test_active_employees_filter(self, rehired, full_timer):
        assert active_employees([rehired, full_timer], date(2024, 12, 1)) == [full_timer]


class TestWeeklyHours:

    @pytest.mark.parametrize("hours", [12, 26, 40])
    def test_ladder_values_accepted(self, hours):
        validate_weekly_hours(hours)

    @pytest.mark.parametrize("hours", [10, 13, 42])
    def test_other_values_rejected(self, hours):
        with pytest.raises(ValueError):
            validate_weekly_hours(hours)


class TestTemporaryHours:

    def test_adds_sorted_override(self, part_timer):
        later = TemporaryHours(start=date(2025, 3, 1), end=date(2025, 3, 31), hours=32)
        earlier = TemporaryHours(start=date(2025, 2, 1), end=date(2025, 2, 28), hours=28)

        updated = add_temporary_hours(add_temporary_hours(part_timer, later), earlier)

        assert [t.hours for t in updated.temp_hours] == [28, 32]
        assert part_timer.temp_hours == []
        assert contract_hours_for_week(updated, date(2025, 3, 10)) == 32

    def test_overlap_rejected(self, part_timer):
        first = TemporaryHours(start=date(2025, 2, 1), end=date(2025, 2, 28), hours=28)
        overlapping = TemporaryHours(start=date(2025, 2, 20), end=date(2025, 3, 10), hours=32)

        with pytest.raises(OverlappingRangeError):
            add_temporary_hours(add_temporary_hours(part_timer, first), overlapping)

    def test_inverted_range_rejected(self, part_timer):
        with pytest.raises(InvalidDateRangeError):
            add_temporary_hours(part_timer, TemporaryHours(start=date(2025, 3, 1), end=date(2025, 2, 1), hours=28))

    def test_locked_week_rejected(self, part_timer):
        locked = publish(Schedule(establishment_id="store-1", week_start=get_test_monday()))
        adjustment = TemporaryHours(start=date(2025, 1, 22), end=date(2025, 2, 15), hours=32)

        with pytest.raises(ScheduleLockedError):
            add_temporary_hours(part_timer, adjustment, [locked])

    def test_draft_week_allowed(self, part_timer):
        draft = Schedule(establishment_id="store-1", week_start=get_test_monday())
        adjustment = TemporaryHours(start=date(2025, 1, 22), end=date(2025, 2, 15), hours=32)

        assert add_temporary_hours(part_timer, adjustment, [draft]).temp_hours == [adjustment]


class TestPermanentRequests:

    def test_fixed_rotation_needs_full_time(self, part_timer):
        req = PermanentRequest(employee_id=part_timer.id, type=PermanentRequestType.FIXED_ROTATING_SHIFT,
                               value=1, reference_date=get_test_monday())

        with pytest.raises(InvalidRestrictionError):
            check_permanent_request(req, part_timer)

    def test_reference_must_be_monday(self, full_timer):
        req = PermanentRequest(employee_id=full_timer.id, type=PermanentRequestType.ROTATING_DAYS_OFF,
                               cycle_weeks=({1},), reference_date=date(2025, 1, 21))

        with pytest.raises(InvalidRestrictionError):
            check_permanent_request(req, full_timer)

    def test_rotation_needs_cycle(self, full_timer):
        req = PermanentRequest(employee_id=full_timer.id, type=PermanentRequestType.ROTATING_DAYS_OFF,
                               reference_date=get_test_monday())

        with pytest.raises(InvalidRestrictionError):
            check_permanent_request(req, full_timer)

    def test_weekday_range(self, full_timer):
        req = PermanentRequest(employee_id=full_timer.id, type=PermanentRequestType.SPECIFIC_DAYS_OFF, days={7})

        with pytest.raises(InvalidRestrictionError):
            check_permanent_request(req, full_timer)

    def test_add_appends(self, full_timer):
        req = PermanentRequest(employee_id=full_timer.id, type=PermanentRequestType.FIXED_ROTATING_SHIFT,
                               value=2, reference_date=get_test_monday())

        assert add_permanent_request([], req, full_timer) == [req]
