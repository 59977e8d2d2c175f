from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role
from ..overtime.model import DayEntry


@dataclass(frozen=True)
class DailyDayRecord:
    """Persisted time entry of one employee and date (natural key)."""

    day_id: Optional[int]
    employee_id: int
    day_date: date
    kommt1: Optional[str] = None
    geht1: Optional[str] = None
    kommt2: Optional[str] = None
    geht2: Optional[str] = None
    pause: Optional[str] = None
    code: Optional[str] = None
    note: Optional[str] = None
    mittag: str = "Nein"
    shift_label: str = ""
    sick_hours: float = 0.0
    child_sick_hours: float = 0.0
    short_work_hours: float = 0.0
    vacation_hours: float = 0.0
    holiday_hours: float = 0.0
    overtime_delta: float = 0.0
    plan_hours: float = 0.0
    forced_overflow: float = 0.0
    required_pause_minutes: int = 0
    admin_last_change_at: Optional[datetime] = None
    admin_last_change_by: Optional[str] = None
    admin_last_change_type: Optional[str] = None
    admin_last_change_summary: Optional[str] = None

    def to_day_entry(self) -> DayEntry:
        return DayEntry(
            entry_id=self.day_id,
            day_date=self.day_date,
            code=self.code,
            kommt1=self.kommt1,
            geht1=self.geht1,
            kommt2=self.kommt2,
            geht2=self.geht2,
            pause=self.pause,
            shift_label=self.shift_label,
            plan_hours=self.plan_hours,
            sick_hours=self.sick_hours,
            child_sick_hours=self.child_sick_hours,
            short_work_hours=self.short_work_hours,
            vacation_hours=self.vacation_hours,
            holiday_hours=self.holiday_hours,
            overtime_delta=self.overtime_delta,
            forced_overflow=self.forced_overflow,
        )


@dataclass(frozen=True)
class TimeEntryInput:
    """Time entry as submitted by the form (free-text punch fields)."""

    employee_id: int
    day_date: date
    kommt1: Optional[str] = None
    geht1: Optional[str] = None
    kommt2: Optional[str] = None
    geht2: Optional[str] = None
    pause: Optional[str] = None
    code: Optional[str] = None
    note: Optional[str] = None
    mittag: Optional[str] = None
    shift_label: Optional[str] = None


@dataclass(frozen=True)
class Actor:
    role: Role
    name: Optional[str] = None


@dataclass(frozen=True)
class AdminChange:
    at: datetime
    by: str
    change_type: str
    summary: str


@dataclass(frozen=True)
class SaveTimeEntryResult:
    day_id: int
    warnings: list[str]
    balance_hours: float
    payout_bank_hours: float
