from __future__ import annotations

from datetime import date

import pytest

from src.zeitkonto.zeitkonto.core.exceptions import BalanceLimitError, ValidationError
from src.zeitkonto.zeitkonto.overtime.engine import recalculate
from src.zeitkonto.zeitkonto.overtime.model import DayEntry, EmployeeOvertimeSettings

SETTINGS = EmployeeOvertimeSettings(max_minus_hours=20.0, max_overtime_hours=40.0)


def _worked(day: int, start: str, end: str, *, plan: float = 8.0, pause: str = "Keine", **kwargs) -> DayEntry:
    return DayEntry(day_date=date(2025, 3, day), kommt1=start, geht1=end, pause=pause, plan_hours=plan, **kwargs)


def test_day_matching_plan_produces_no_updates():
    # 08:00-16:30 = 8.5h raw, 0.5h legal pause -> 8h net.
    result = recalculate([_worked(3, "08:00", "16:30")], SETTINGS)
    assert result.updated_days == []
    assert result.balance_hours == 0


def test_longer_day_accrues_overtime():
    result = recalculate([_worked(3, "08:00", "18:00")], SETTINGS)
    (day,) = result.updated_days
    # 10h raw - 0.75h pause = 9.25h net
    assert day.overtime_delta == pytest.approx(1.25)
    assert day.forced_overflow == 0
    assert result.balance_hours == pytest.approx(1.25)
    assert result.payout_bank_hours == 0


def test_shorter_day_draws_deficit():
    result = recalculate([_worked(3, "08:00", "14:00")], SETTINGS)
    (day,) = result.updated_days
    assert day.overtime_delta == pytest.approx(-2.0)
    assert result.balance_hours == pytest.approx(-2.0)


def test_vacation_day_credits_plan_hours():
    entry = DayEntry(day_date=date(2025, 3, 3), code="U", plan_hours=8.0)
    result = recalculate([entry], SETTINGS)
    (day,) = result.updated_days
    assert day.vacation_hours == pytest.approx(8.0)
    assert day.overtime_delta == pytest.approx(0.0)
    assert result.balance_hours == 0


def test_overflow_above_ceiling_goes_to_payout_bank():
    settings = EmployeeOvertimeSettings(max_minus_hours=10.0, max_overtime_hours=1.0)
    # 8h plan, 16.5h worked -> 8.5h surplus
    entry = _worked(3, "06:00", "23:15", pause="45min")
    result = recalculate([entry], settings)
    (day,) = result.updated_days
    assert day.overtime_delta == pytest.approx(1.0)
    assert day.forced_overflow > 0
    assert result.balance_hours <= settings.max_overtime_hours
    assert result.payout_bank_hours == pytest.approx(day.forced_overflow)


def test_deficit_drains_payout_bank_before_balance():
    settings = EmployeeOvertimeSettings(max_minus_hours=10.0, max_overtime_hours=1.0)
    entries = [
        _worked(3, "06:00", "18:45"),  # 12.75 - 0.75 = 12h net, +4h: 1h balance, 3h bank
        _worked(4, "08:00", "14:00"),  # 6h net, -2h: all from the bank
    ]
    result = recalculate(entries, settings)
    by_day = {d.day_date.day: d for d in result.updated_days}

    assert by_day[3].forced_overflow == pytest.approx(3.0)
    assert by_day[4].forced_overflow == pytest.approx(-2.0)
    assert by_day[4].overtime_delta == 0
    assert result.payout_bank_hours == pytest.approx(1.0)
    assert result.balance_hours == pytest.approx(1.0)


def test_entries_are_sorted_by_date_before_folding():
    settings = EmployeeOvertimeSettings(max_minus_hours=10.0, max_overtime_hours=1.0)
    surplus = _worked(3, "06:00", "18:45")
    deficit = _worked(4, "08:00", "14:00")
    assert recalculate([deficit, surplus], settings) == recalculate([surplus, deficit], settings)


def test_balance_limit_error_carries_limits():
    err = BalanceLimitError(max_minus_hours=5.0, balance_hours=-6.5)
    assert err.max_minus_hours == 5.0
    assert err.balance_hours == -6.5
    assert "5.00" in str(err)


def test_deficit_stops_at_minus_floor():
    settings = EmployeeOvertimeSettings(max_minus_hours=3.0, max_overtime_hours=10.0)
    result = recalculate([_worked(3, "08:00", "12:00")], settings)
    (day,) = result.updated_days
    assert day.overtime_delta == pytest.approx(-3.0)
    assert result.balance_hours == pytest.approx(-3.0)


def test_negative_settings_are_rejected():
    with pytest.raises(ValidationError):
        EmployeeOvertimeSettings(max_minus_hours=-1.0, max_overtime_hours=0.0)


def test_plan_hours_provider_fills_missing_plan():
    entry = _worked(3, "08:00", "16:30", plan=0.0)
    seen = []

    def provider(e: DayEntry) -> float:
        seen.append(e.day_date)
        return 8.0

    result = recalculate([entry], SETTINGS, plan_hours_provider=provider)
    assert seen == [date(2025, 3, 3)]
    (day,) = result.updated_days
    assert day.plan_hours == pytest.approx(8.0)
    assert day.overtime_delta == pytest.approx(0.0)


def test_plan_hours_provider_result_is_floored_at_zero():
    entry = _worked(3, "08:00", "12:00", plan=0.0)
    result = recalculate([entry], SETTINGS, plan_hours_provider=lambda e: -5.0)
    (day,) = result.updated_days
    assert day.plan_hours == 0
    assert day.overtime_delta == pytest.approx(4.0)


def test_provider_not_called_when_plan_is_stored():
    def provider(e: DayEntry) -> float:
        raise AssertionError("should not be called")

    recalculate([_worked(3, "08:00", "16:30")], SETTINGS, plan_hours_provider=provider)


def test_half_vacation_counts_half_plan():
    entry = _worked(3, "08:00", "12:00", code="UH")
    result = recalculate([entry], SETTINGS)
    (day,) = result.updated_days
    assert day.vacation_hours == pytest.approx(4.0)
    assert day.overtime_delta == pytest.approx(0.0)


@pytest.mark.parametrize("code,bucket", [("K", "sick_hours"), ("KK", "child_sick_hours")])
def test_sick_codes_credit_plan(code, bucket):
    entry = DayEntry(day_date=date(2025, 3, 3), code=code, plan_hours=7.5)
    (day,) = recalculate([entry], SETTINGS).updated_days
    assert getattr(day, bucket) == pytest.approx(7.5)
    assert day.overtime_delta == 0


@pytest.mark.parametrize("code,bucket", [("KR", "sick_hours"), ("KKR", "child_sick_hours")])
def test_reduced_sick_codes_credit_shortfall_only(code, bucket):
    entry = _worked(3, "08:00", "11:00", code=code)
    (day,) = recalculate([entry], SETTINGS).updated_days
    assert getattr(day, bucket) == pytest.approx(5.0)
    assert day.overtime_delta == 0


def test_short_work_keeps_per_day_max_and_zeroes_plan():
    entry = DayEntry(day_date=date(2025, 3, 3), code="KU", plan_hours=8.0, short_work_hours=3.0)
    (day,) = recalculate([entry], SETTINGS).updated_days
    assert day.short_work_hours == pytest.approx(8.0)
    assert day.plan_hours == 0
    assert day.overtime_delta == 0


def test_short_work_does_not_lower_existing_bucket():
    entry = DayEntry(day_date=date(2025, 3, 3), code="KU", plan_hours=4.0, short_work_hours=6.0)
    (day,) = recalculate([entry], SETTINGS).updated_days
    assert day.short_work_hours == pytest.approx(6.0)


def test_holiday_with_holiday_hours_is_neutral():
    entry = DayEntry(day_date=date(2025, 3, 3), code="FT", plan_hours=8.0, holiday_hours=8.0)
    result = recalculate([entry], SETTINGS)
    assert result.updated_days == []
    assert result.balance_hours == 0


def test_holiday_without_holiday_hours_uses_punches():
    entry = DayEntry(day_date=date(2025, 3, 3), code="FT", plan_hours=8.0)
    result = recalculate([entry], SETTINGS)
    assert result.balance_hours == pytest.approx(-8.0)


def test_unpaid_leave_is_fully_zeroed():
    entry = DayEntry(day_date=date(2025, 3, 3), code="UBF", plan_hours=8.0)
    (day,) = recalculate([entry], SETTINGS).updated_days
    assert day.plan_hours == 0
    assert day.overtime_delta == 0
    assert day.sick_hours == day.vacation_hours == 0
    assert recalculate([entry], SETTINGS).balance_hours == 0


def test_unknown_code_is_treated_as_regular_day():
    entry = _worked(3, "08:00", "18:00", code="XYZ")
    (day,) = recalculate([entry], SETTINGS).updated_days
    assert day.overtime_delta == pytest.approx(1.25)


def test_missing_pause_defaults_to_none_declared():
    entry = DayEntry(day_date=date(2025, 3, 3), kommt1="08:00", geht1="16:30", pause=None, plan_hours=8.0)
    assert recalculate([entry], SETTINGS).updated_days == []


def test_tiny_delta_within_epsilon_is_ignored():
    entry = _worked(3, "08:00", "16:30", plan=8.00005)
    result = recalculate([entry], SETTINGS)
    assert result.balance_hours == 0
    assert result.updated_days == []


def test_rerun_with_merged_updates_is_a_fixed_point():
    settings = EmployeeOvertimeSettings(max_minus_hours=5.0, max_overtime_hours=2.0)
    entries = [
        _worked(3, "06:00", "18:45"),
        _worked(4, "08:00", "14:00"),
        DayEntry(day_date=date(2025, 3, 5), code="U", plan_hours=8.0),
        _worked(6, "08:00", "12:00", code="KR"),
        _worked(7, "08:00", "11:00"),
    ]
    first = recalculate(entries, settings)
    assert first.updated_days

    by_date = {d.day_date: d for d in first.updated_days}
    merged = []
    for e in entries:
        d = by_date.get(e.day_date)
        if d is None:
            merged.append(e)
            continue
        merged.append(
            DayEntry(
                day_date=e.day_date,
                code=e.code,
                kommt1=e.kommt1,
                geht1=e.geht1,
                pause=e.pause,
                plan_hours=d.plan_hours,
                sick_hours=d.sick_hours,
                child_sick_hours=d.child_sick_hours,
                short_work_hours=d.short_work_hours,
                vacation_hours=d.vacation_hours,
                overtime_delta=d.overtime_delta,
                forced_overflow=d.forced_overflow,
            )
        )

    second = recalculate(merged, settings)
    assert second.updated_days == []
    assert second.balance_hours == pytest.approx(first.balance_hours)
    assert second.payout_bank_hours == pytest.approx(first.payout_bank_hours)


def test_deficits_past_the_floor_are_dropped_not_raised():
    settings = EmployeeOvertimeSettings(max_minus_hours=3.0, max_overtime_hours=10.0)
    entries = [_worked(day, "08:00", "12:00") for day in (3, 4, 5)]

    result = recalculate(entries, settings)

    assert [(d.day_date.day, d.overtime_delta) for d in result.updated_days] == [(3, pytest.approx(-3.0))]
    assert result.balance_hours == pytest.approx(-3.0)
