import pytest
from datetime import date

from shiftplanner.services.scheduling.hours import (
    REDUCTION_TABLE,
    apply_hours_debt,
    calculate_employee_hours,
    calculate_weekly_balances,
    compute_weekly_balance,
    contract_hours_for_week,
    reduced_target,
    reduction_units,
)
from shiftplanner.services.scheduling.types import (
    Employee,
    Holiday,
    HolidayKind,
    Schedule,
    Shift,
    ShiftType,
    StoreSettings,
    TemporaryHours,
    TimeOffRequest,
    TimeOffType,
)

from conftest import day, get_test_monday, morning_shift, split_shift


class TestReducedTarget:

    @pytest.mark.parametrize("contract, units, expected", [
        (40, 0.5, 36), (40, 1.0, 32), (40, 1.5, 28), (40, 2.0, 24), (40, 3.0, 16),
        (36, 0.5, 33), (36, 1.0, 30), (36, 1.5, 27), (36, 2.0, 23), (36, 3.0, 18),
        (32, 0.5, 30), (32, 1.0, 27), (32, 1.5, 24), (32, 2.0, 21), (32, 3.0, 16),
        (28, 0.5, 25), (28, 1.0, 23), (28, 1.5, 21), (28, 2.0, 19), (28, 3.0, 14),
        (24, 0.5, 22), (24, 1.0, 20), (24, 1.5, 18), (24, 2.0, 16), (24, 3.0, 12),
        (20, 0.5, 18), (20, 1.0, 17), (20, 1.5, 15), (20, 2.0, 13), (20, 3.0, 10),
        (16, 0.5, 14), (16, 1.0, 13), (16, 1.5, 12), (16, 2.0, 10), (16, 3.0, 8),
    ])
    def test_table_values(self, contract, units, expected):
        assert reduced_target(contract, units) == expected

    def test_every_table_row_is_covered(self):
        assert sorted(REDUCTION_TABLE) == [16, 20, 24, 28, 32, 36, 40]

    @pytest.mark.parametrize("contract", [40, 32, 16])
    def test_untabled_level_below_three_days_keeps_contract(self, contract):
        assert reduced_target(contract, 2.5) == contract

    def test_two_holidays_and_afternoon_closure_keep_full_contract(self, full_timer):
        holidays = [
            Holiday(date=day(0)),
            Holiday(date=day(1)),
            Holiday(date=day(2), kind=HolidayKind.AFTERNOON_ONLY),
        ]

        assert reduction_units(full_timer.id, 40, get_test_monday(), holidays, []) == 2.5
        balance = compute_weekly_balance(full_timer, get_test_monday(), [], holidays, [])
        assert balance.target_hours == 40

    def test_untabled_contract_with_half_units_uses_linear_rule(self):
        # 30 - round(30 / 5 * 2.5)
        assert reduced_target(30, 2.5) == 15

    def test_no_reduction_keeps_contract(self):
        assert reduced_target(32, 0) == 32

    def test_full_week_in_table_is_zero(self):
        assert reduced_target(40, 5) == 0
        assert reduced_target(24, 6) == 0

    def test_contract_outside_table_uses_linear_rule(self):
        # 30 - round(30 / 5 * 1)
        assert 30 not in REDUCTION_TABLE
        assert reduced_target(30, 1.0) == 24
        # 22 - round(4.4)
        assert reduced_target(22, 1.0) == 18

    def test_units_outside_table_levels_use_linear_rule(self):
        # 4 units is not a table level: 40 - 32
        assert reduced_target(40, 4.0) == 8

    def test_never_negative(self):
        assert reduced_target(12, 7) == 0


class TestReductionUnits:

    def test_full_holiday_counts_one_day(self):
        holidays = [Holiday(date=day(2))]
        assert reduction_units("e1", 40, get_test_monday(), holidays, []) == 1.0

    def test_afternoon_closure_only_reduces_full_time(self):
        holidays = [Holiday(date=day(2), kind=HolidayKind.AFTERNOON_ONLY)]
        assert reduction_units("e1", 40, get_test_monday(), holidays, []) == 0.5
        assert reduction_units("e1", 32, get_test_monday(), holidays, []) == 0.0

    def test_absence_days_count(self):
        absences = [TimeOffRequest(employee_id="e1", type=TimeOffType.SICK_LEAVE,
                                   start_date=day(0), end_date=day(1))]
        assert reduction_units("e1", 40, get_test_monday(), [], absences) == 2.0

    def test_day_off_request_does_not_reduce(self):
        absences = [TimeOffRequest(employee_id="e1", type=TimeOffType.DAY_OFF, dates={day(0)})]
        assert reduction_units("e1", 40, get_test_monday(), [], absences) == 0.0

    def test_holiday_and_absence_on_same_day_count_once(self):
        holidays = [Holiday(date=day(1))]
        absences = [TimeOffRequest(employee_id="e1", type=TimeOffType.VACATION, dates={day(1)})]
        assert reduction_units("e1", 40, get_test_monday(), holidays, absences) == 1.0

    def test_other_employees_absence_ignored(self):
        absences = [TimeOffRequest(employee_id="e2", type=TimeOffType.VACATION, dates={day(1)})]
        assert reduction_units("e1", 40, get_test_monday(), [], absences) == 0.0


class TestWeeklyBalance:

    def test_full_week_worked_has_no_delta(self, full_timer, full_week_schedule):
        balance = compute_weekly_balance(full_timer, get_test_monday(), full_week_schedule.shifts, [], [])

        assert balance.worked_hours == 40
        assert balance.target_hours == 40
        assert balance.delta == 0

    def test_holiday_week_credits_surplus(self, full_timer, full_week_schedule):
        holidays = [Holiday(date=day(5))]
        balance = compute_weekly_balance(full_timer, get_test_monday(), full_week_schedule.shifts, holidays, [])

        assert balance.reduction_units == 1.0
        assert balance.target_hours == 32
        assert balance.delta == 8

    def test_deficit_is_negative(self, full_timer):
        shifts = [split_shift(full_timer.id, day(i)) for i in range(4)]
        balance = compute_weekly_balance(full_timer, get_test_monday(), shifts, [], [])

        assert balance.worked_hours == 32
        assert balance.delta == -8

    def test_afternoon_closure_for_full_time(self, full_timer):
        # 4 splits and a morning on the closure day: 36h against a 36h target
        holidays = [Holiday(date=day(4), kind=HolidayKind.AFTERNOON_ONLY)]
        shifts = [split_shift(full_timer.id, day(i)) for i in range(4)]
        shifts.append(morning_shift(full_timer.id, day(4)))
        balance = compute_weekly_balance(full_timer, get_test_monday(), shifts, holidays, [])

        assert balance.target_hours == 36
        assert balance.delta == 0

    def test_full_absence_week_has_no_delta(self, full_timer):
        shifts = [Shift(employee_id=full_timer.id, date=day(i), type=ShiftType.VACATION) for i in range(6)]
        shifts.append(Shift(employee_id=full_timer.id, date=day(6), type=ShiftType.OFF))
        absences = [TimeOffRequest(employee_id=full_timer.id, type=TimeOffType.VACATION,
                                   start_date=day(0), end_date=day(5))]
        balance = compute_weekly_balance(full_timer, get_test_monday(), shifts, [], absences)

        assert balance.worked_hours == 0
        assert balance.delta == 0

    def test_temporary_hours_replace_contract(self):
        emp = Employee(id="e9", name="Temp", weekly_hours=24,
                       temp_hours=[TemporaryHours(start=date(2025, 1, 1), end=date(2025, 1, 31), hours=32)])
        assert contract_hours_for_week(emp, get_test_monday()) == 32
        assert contract_hours_for_week(emp, date(2025, 2, 3)) == 24


class TestBalancesAndDebt:

    def test_balances_skip_zero_delta(self, full_timer, part_timer, full_week_schedule, store_settings):
        # Pablo has no shifts: 24h deficit
        balances = calculate_weekly_balances(full_week_schedule, [full_timer, part_timer], store_settings, [])

        assert [b.employee_id for b in balances] == [part_timer.id]
        assert balances[0].delta == -24

    def test_apply_hours_debt_accumulates(self, part_timer, store_settings):
        schedule = Schedule(establishment_id="store-1", week_start=get_test_monday())
        balance = calculate_weekly_balances(schedule, [part_timer], store_settings, [])[0]

        updated = apply_hours_debt(part_timer, balance)

        assert updated.hours_debt == -24
        assert part_timer.hours_debt == 0

    def test_apply_hours_debt_ignores_other_employee(self, full_timer, part_timer, store_settings):
        schedule = Schedule(establishment_id="store-1", week_start=get_test_monday())
        balance = calculate_weekly_balances(schedule, [part_timer], store_settings, [])[0]

        assert apply_hours_debt(full_timer, balance) is full_timer

    def test_employee_hours_only_counts_employee(self, full_week_schedule):
        assert calculate_employee_hours(full_week_schedule.shifts, "e1") == 40
        assert calculate_employee_hours(full_week_schedule.shifts, "nobody") == 0

    def test_store_settings_holidays_feed_balances(self, full_timer, full_week_schedule):
        settings = StoreSettings(establishment_id="store-1", holidays=(Holiday(date=day(2)),))
        balances = calculate_weekly_balances(full_week_schedule, [full_timer], settings, [])

        assert balances[0].delta == 8
