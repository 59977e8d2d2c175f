from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class DayEntry:
    """One calendar day of one employee as fed into the reconciliation engine.

    ``overtime_delta`` and ``forced_overflow`` are the previously stored
    values; they are only used for the dirty check.
    """

    day_date: date
    code: Optional[str] = None
    kommt1: Optional[str] = None
    geht1: Optional[str] = None
    kommt2: Optional[str] = None
    geht2: Optional[str] = None
    pause: Optional[str] = None
    plan_hours: float = 0.0
    sick_hours: float = 0.0
    child_sick_hours: float = 0.0
    short_work_hours: float = 0.0
    vacation_hours: float = 0.0
    holiday_hours: float = 0.0
    overtime_delta: float = 0.0
    forced_overflow: float = 0.0
    entry_id: Optional[int] = None
    shift_label: Optional[str] = None


@dataclass(frozen=True)
class EmployeeOvertimeSettings:
    max_minus_hours: float
    max_overtime_hours: float

    def __post_init__(self) -> None:
        if self.max_minus_hours < 0 or self.max_overtime_hours < 0:
            raise ValidationError("Überstunden-Grenzen dürfen nicht negativ sein")


@dataclass(frozen=True)
class RecalculatedDay:
    """Recomputed values for a day whose derived fields changed."""

    entry_id: Optional[int]
    day_date: date
    plan_hours: float
    overtime_delta: float
    forced_overflow: float
    sick_hours: float
    child_sick_hours: float
    short_work_hours: float
    vacation_hours: float
    net_hours: float
    raw_hours: float
    effective_pause_hours: float


@dataclass(frozen=True)
class RecalculationResult:
    updated_days: list[RecalculatedDay] = field(default_factory=list)
    balance_hours: float = 0.0
    payout_bank_hours: float = 0.0
