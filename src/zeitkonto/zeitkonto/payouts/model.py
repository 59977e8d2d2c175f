from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PayoutRequestStatus


@dataclass(frozen=True)
class OvertimePayout:
    """Hours paid out of the payout bank for one month."""

    employee_id: int
    year: int
    month: int
    payout_hours: float


@dataclass(frozen=True)
class PayoutRequest:
    request_id: int
    employee_id: int
    year: int
    month: int
    requested_hours: float
    note: Optional[str]
    status: PayoutRequestStatus
    created_at: Optional[datetime] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "year": self.year,
            "month": self.month,
            "requested_hours": self.requested_hours,
            "note": self.note,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "decided_by": self.decided_by,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
        }
