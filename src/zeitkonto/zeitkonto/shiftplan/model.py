from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class ShiftPlanDay:
    """Planned shift for one employee and date (start/end as ``HH:MM``)."""

    employee_id: int
    day_date: date
    start: Optional[str]
    end: Optional[str]
    required_pause_minutes: int = 0
    label: Optional[str] = None


@dataclass(frozen=True)
class PlanHoursInfo:
    raw_hours: float
    soll_hours: float
    required_pause_minutes: int
    start: Optional[str]
    end: Optional[str]
