from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ClosingStatus
from .model import MonthlyClosing


class MonthlyClosingRepository(Protocol):
    def get(self, *, employee_id: int, year: int, month: int) -> Optional[MonthlyClosing]:
        raise NotImplementedError

    def upsert_status(
        self,
        *,
        employee_id: int,
        year: int,
        month: int,
        status: ClosingStatus,
        closed_at: Optional[datetime],
        closed_by: Optional[str],
    ) -> None:
        raise NotImplementedError

    def list_for_employee(self, *, employee_id: int, limit: int) -> Sequence[MonthlyClosing]:
        """Newest month first."""
        raise NotImplementedError
