from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from ..common.numbers import round_hours
from ..overtime.model import DayEntry
from ..timecalc.calculator import legal_pause_hours, parse_time, time_to_decimal_hours
from .model import PlanHoursInfo, ShiftPlanDay
from .repository import ShiftPlanRepository

# Checked in order; the first keyword contained in the label wins.
PLAN_LABEL_CODES: tuple[tuple[str, str], ...] = (
    ("feiertag", "FT"),
    ("urlaub", "U"),
    ("krank", "K"),
    ("kurzarbeit", "KU"),
    ("überstunden", "Ü"),
    ("ueberstunden", "Ü"),
    ("abbau", "Ü"),
)


def derive_code_from_plan_label(label: Optional[str]) -> Optional[str]:
    normalized = (label or "").strip().lower()
    if not normalized:
        return None
    for keyword, code in PLAN_LABEL_CODES:
        if keyword in normalized:
            return code
    return None


def build_plan_hours(start: Optional[str], end: Optional[str], required_pause_minutes: int = 0) -> PlanHoursInfo:
    """Plan hours of a shift: raw span minus the larger of legal and required pause."""
    start_time = parse_time(start)
    end_time = parse_time(end)
    required = max(int(required_pause_minutes or 0), 0)
    if start_time is None or end_time is None:
        return PlanHoursInfo(raw_hours=0.0, soll_hours=0.0, required_pause_minutes=required, start=start, end=end)

    raw = max(0.0, time_to_decimal_hours(end_time) - time_to_decimal_hours(start_time))
    if raw <= 0.01:
        return PlanHoursInfo(raw_hours=0.0, soll_hours=0.0, required_pause_minutes=required, start=start, end=end)

    soll = max(raw - max(legal_pause_hours(raw), required / 60), 0.0)
    return PlanHoursInfo(
        raw_hours=round_hours(raw),
        soll_hours=round_hours(soll),
        required_pause_minutes=required,
        start=start,
        end=end,
    )


class ShiftPlanService:
    def __init__(self, plans: ShiftPlanRepository):
        self._plans = plans

    def plan_info_for_day(self, *, employee_id: int, day_date: date) -> Optional[PlanHoursInfo]:
        plan_day = self._plans.get_for_employee_and_date(employee_id=int(employee_id), day_date=day_date)
        if not plan_day:
            return None
        return build_plan_hours(plan_day.start, plan_day.end, plan_day.required_pause_minutes)

    def load_plan(self, employee_id: int) -> dict[date, ShiftPlanDay]:
        return {d.day_date: d for d in self._plans.list_for_employee(employee_id=int(employee_id))}

    @staticmethod
    def plan_hours_provider(plan: dict[date, ShiftPlanDay]) -> Callable[[DayEntry], float]:
        """Build a provider for days whose stored plan hours are not positive."""

        def provider(entry: DayEntry) -> float:
            plan_day = plan.get(entry.day_date)
            if not plan_day:
                return 0.0
            return build_plan_hours(plan_day.start, plan_day.end, plan_day.required_pause_minutes).soll_hours

        return provider

    def save_day(
        self,
        *,
        employee_id: int,
        day_date: date,
        start: Optional[str],
        end: Optional[str],
        required_pause_minutes: int = 0,
        label: Optional[str] = None,
    ) -> ShiftPlanDay:
        day = ShiftPlanDay(
            employee_id=int(employee_id),
            day_date=day_date,
            start=start,
            end=end,
            required_pause_minutes=max(int(required_pause_minutes or 0), 0),
            label=(label or "").strip() or None,
        )
        self._plans.save_day(day)
        return day
