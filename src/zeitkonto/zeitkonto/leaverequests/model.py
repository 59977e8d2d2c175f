from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..core.enums import LeaveRequestStatus, LeaveRequestType


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class LeaveRequest:
    """Vacation or overtime-reduction request over an inclusive date range."""

    request_id: int
    employee_id: int
    request_type: LeaveRequestType
    start_date: date
    end_date: date
    status: LeaveRequestStatus
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None
    admin_note: Optional[str] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    cancellation_requested: bool = False
    cancellation_requested_at: Optional[datetime] = None
    cancellation_note: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    applied_to_shift_plan: bool = False
    created_at: Optional[datetime] = None

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def dates(self) -> list[date]:
        return [self.start_date + timedelta(days=i) for i in range(self.total_days)]

    @property
    def status_label(self) -> str:
        if self.status == LeaveRequestStatus.PENDING:
            return "Offen"
        if self.status == LeaveRequestStatus.APPROVED:
            return "Storno angefragt" if self.cancellation_requested else "Genehmigt"
        return "Storniert" if self.cancelled_at else "Abgelehnt"

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "type": self.request_type.value,
            "type_label": self.request_type.plan_label,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "total_days": self.total_days,
            "reason": self.reason,
            "status": self.status.value,
            "status_label": self.status_label,
            "admin_note": self.admin_note,
            "decided_by": self.decided_by,
            "decided_at": _iso(self.decided_at),
            "cancellation_requested": self.cancellation_requested,
            "cancellation_requested_at": _iso(self.cancellation_requested_at),
            "cancellation_note": self.cancellation_note,
            "cancelled_at": _iso(self.cancelled_at),
            "applied_to_shift_plan": self.applied_to_shift_plan,
            "created_at": _iso(self.created_at),
        }
