from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ClosingStatus


@dataclass(frozen=True)
class MonthlyClosing:
    employee_id: int
    year: int
    month: int
    status: ClosingStatus
    closed_at: Optional[datetime] = None
    closed_by: Optional[str] = None
    closing_id: Optional[int] = None


@dataclass(frozen=True)
class MonthlyClosingState:
    status: ClosingStatus
    closed_at: Optional[datetime] = None
    closed_by: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "closed_by": self.closed_by,
        }
