from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..overtime.model import RecalculatedDay
from .model import AdminChange, DailyDayRecord


class DailyDayRepository(Protocol):
    def list_for_employee(self, employee_id: int, *, limit: Optional[int] = None) -> Sequence[DailyDayRecord]:
        """Newest first."""
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, day_date: date) -> Optional[DailyDayRecord]:
        raise NotImplementedError

    def upsert(self, record: DailyDayRecord) -> int:
        raise NotImplementedError

    def apply_recalculation(self, employee_id: int, days: Sequence[RecalculatedDay]) -> int:
        """Overwrite the derived fields of the given days in one transaction."""
        raise NotImplementedError

    def delete_for_date(self, employee_id: int, day_date: date) -> bool:
        raise NotImplementedError

    def set_admin_change(self, employee_id: int, day_date: date, change: Optional[AdminChange]) -> None:
        raise NotImplementedError
