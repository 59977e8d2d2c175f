"""Overtime reconciliation.

Folds an employee's day entries, in date order, into per-day overtime
corrections and a running balance. Surpluses fill the balance up to
``max_overtime_hours`` and overflow into a payout bank; deficits drain the
payout bank first and then the balance down to ``-max_minus_hours``.

The fold is order-dependent: never split one employee's days across
parallel calls. Different employees are independent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from ..common.numbers import almost_equal, to_hours
from ..core.constants import DEFAULT_PAUSE_TOKEN, RECONCILIATION_EPSILON
from ..core.enums import AbsenceCode
from ..core.exceptions import BalanceLimitError
from ..timecalc.calculator import compute_net_hours
from .model import DayEntry, EmployeeOvertimeSettings, RecalculatedDay, RecalculationResult

PlanHoursProvider = Callable[[DayEntry], float]


@dataclass
class _DayFigures:
    net_worked: float
    delta_plan: float
    store_plan: float
    sick_hours: float
    child_sick_hours: float
    short_work_hours: float
    vacation_hours: float


def _apply_absence_code(
    code: AbsenceCode,
    figures: _DayFigures,
    *,
    plan_hours: float,
    actual_net_hours: float,
    holiday_hours: float,
) -> None:
    plan = figures.store_plan

    if code is AbsenceCode.VACATION:
        figures.net_worked = figures.delta_plan = plan
        figures.vacation_hours = plan
    elif code is AbsenceCode.HALF_VACATION:
        half = plan / 2
        figures.delta_plan = max(plan - half, 0.0)
        figures.vacation_hours = half
    elif code is AbsenceCode.SICK:
        figures.net_worked = figures.delta_plan = plan
        figures.sick_hours = plan
    elif code is AbsenceCode.CHILD_SICK:
        figures.net_worked = figures.delta_plan = plan
        figures.child_sick_hours = plan
    elif code is AbsenceCode.SICK_REDUCED:
        figures.net_worked = figures.delta_plan = plan
        figures.sick_hours = max(plan - actual_net_hours, 0.0)
    elif code is AbsenceCode.CHILD_SICK_REDUCED:
        figures.net_worked = figures.delta_plan = plan
        figures.child_sick_hours = max(plan - actual_net_hours, 0.0)
    elif code is AbsenceCode.SHORT_WORK:
        # Per-day max, not accumulated across the period.
        figures.short_work_hours = max(figures.short_work_hours, plan_hours)
        figures.net_worked = figures.delta_plan = figures.store_plan = 0.0
    elif code is AbsenceCode.HOLIDAY:
        if holiday_hours > 0:
            figures.net_worked = figures.delta_plan = plan
    elif code is AbsenceCode.UNPAID_LEAVE:
        figures.net_worked = figures.delta_plan = figures.store_plan = 0.0
    elif code is AbsenceCode.REGULAR:
        pass
    else:  # pragma: no cover - guards new enum members
        raise AssertionError(f"Unhandled absence code: {code!r}")


def _resolve_plan_hours(entry: DayEntry, provider: Optional[PlanHoursProvider]) -> float:
    stored = to_hours(entry.plan_hours)
    if stored > 0:
        return stored
    if provider is not None:
        return max(to_hours(provider(entry)), 0.0)
    return 0.0


def recalculate(
    entries: Iterable[DayEntry],
    settings: EmployeeOvertimeSettings,
    *,
    plan_hours_provider: Optional[PlanHoursProvider] = None,
) -> RecalculationResult:
    max_minus = to_hours(settings.max_minus_hours)
    max_overtime = to_hours(settings.max_overtime_hours)

    updated_days: list[RecalculatedDay] = []
    current_balance = 0.0
    payout_saldo = 0.0

    for entry in sorted(entries, key=lambda e: e.day_date):
        plan_hours = _resolve_plan_hours(entry, plan_hours_provider)
        code = AbsenceCode.parse(entry.code)
        ist = compute_net_hours(
            entry.kommt1,
            entry.geht1,
            entry.kommt2,
            entry.geht2,
            entry.pause if entry.pause is not None else DEFAULT_PAUSE_TOKEN,
        )

        previous_sick = to_hours(entry.sick_hours)
        previous_child_sick = to_hours(entry.child_sick_hours)
        previous_short_work = to_hours(entry.short_work_hours)
        previous_vacation = to_hours(entry.vacation_hours)

        figures = _DayFigures(
            net_worked=ist.net_hours,
            delta_plan=plan_hours,
            store_plan=plan_hours,
            sick_hours=previous_sick,
            child_sick_hours=previous_child_sick,
            short_work_hours=previous_short_work,
            vacation_hours=previous_vacation,
        )
        _apply_absence_code(
            code,
            figures,
            plan_hours=plan_hours,
            actual_net_hours=ist.net_hours,
            holiday_hours=to_hours(entry.holiday_hours),
        )

        delta = figures.net_worked - figures.delta_plan
        overtime_delta = 0.0
        forced = 0.0

        if delta > RECONCILIATION_EPSILON:
            room = max(0.0, max_overtime - current_balance)
            used_for_balance = min(room, delta)
            forced = max(0.0, delta - room)
            current_balance += used_for_balance
            payout_saldo += forced
            overtime_delta = used_for_balance
        elif delta < -RECONCILIATION_EPSILON:
            needed = abs(delta)
            from_payout = min(payout_saldo, needed)
            payout_saldo -= from_payout
            remaining = needed - from_payout
            allowed_minus = current_balance + max_minus
            from_balance = min(allowed_minus, remaining)
            current_balance -= from_balance
            overtime_delta = -from_balance if from_balance > 0 else 0.0
            forced = -from_payout if from_payout > 0 else 0.0
            if current_balance < -max_minus - RECONCILIATION_EPSILON:
                raise BalanceLimitError(max_minus_hours=max_minus, balance_hours=current_balance)

        changed = not (
            almost_equal(to_hours(entry.overtime_delta), overtime_delta)
            and almost_equal(to_hours(entry.forced_overflow), forced)
            and almost_equal(to_hours(entry.plan_hours), figures.store_plan)
            and almost_equal(previous_sick, figures.sick_hours)
            and almost_equal(previous_child_sick, figures.child_sick_hours)
            and almost_equal(previous_short_work, figures.short_work_hours)
            and almost_equal(previous_vacation, figures.vacation_hours)
        )
        if changed:
            updated_days.append(
                RecalculatedDay(
                    entry_id=entry.entry_id,
                    day_date=entry.day_date,
                    plan_hours=figures.store_plan,
                    overtime_delta=overtime_delta,
                    forced_overflow=forced,
                    sick_hours=figures.sick_hours,
                    child_sick_hours=figures.child_sick_hours,
                    short_work_hours=figures.short_work_hours,
                    vacation_hours=figures.vacation_hours,
                    net_hours=figures.net_worked,
                    raw_hours=ist.raw_hours,
                    effective_pause_hours=ist.effective_pause_hours,
                )
            )

    balance = min(max(current_balance, -max_minus), max_overtime)
    return RecalculationResult(
        updated_days=updated_days,
        balance_hours=balance,
        payout_bank_hours=payout_saldo,
    )
