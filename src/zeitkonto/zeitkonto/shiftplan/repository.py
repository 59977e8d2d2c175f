from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ShiftPlanDay


class ShiftPlanRepository(Protocol):
    def get_for_employee_and_date(self, *, employee_id: int, day_date: date) -> Optional[ShiftPlanDay]:
        raise NotImplementedError

    def list_for_employee(
        self,
        *,
        employee_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[ShiftPlanDay]:
        raise NotImplementedError

    def save_day(self, day: ShiftPlanDay) -> None:
        """Insert or overwrite the plan of ``day.employee_id`` on ``day.day_date``."""
        raise NotImplementedError
