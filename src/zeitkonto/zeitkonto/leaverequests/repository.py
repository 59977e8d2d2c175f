from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveRequestStatus, LeaveRequestType
from .model import LeaveRequest


class LeaveRequestRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        request_type: LeaveRequestType,
        start_date: date,
        end_date: date,
        start_time: Optional[str],
        end_time: Optional[str],
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_for_employee(self, *, employee_id: int, limit: int) -> Sequence[LeaveRequest]:
        """Newest first."""
        raise NotImplementedError

    def list_all(self, *, status: Optional[LeaveRequestStatus], limit: int) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveRequestStatus,
        admin_note: Optional[str],
        decided_by: str,
        decided_at: datetime,
    ) -> bool:
        """Only pending requests are updated; returns False otherwise."""
        raise NotImplementedError

    def set_applied_to_shift_plan(self, *, request_id: int, applied: bool) -> None:
        raise NotImplementedError

    def request_cancellation(self, *, request_id: int, note: Optional[str], requested_at: datetime) -> bool:
        """Flags an approved request; returns False if already flagged or not approved."""
        raise NotImplementedError

    def clear_cancellation(
        self,
        *,
        request_id: int,
        admin_note: Optional[str],
        decided_by: str,
        decided_at: datetime,
    ) -> None:
        raise NotImplementedError

    def cancel(
        self,
        *,
        request_id: int,
        cancelled_at: datetime,
        cancellation_note: Optional[str],
        admin_note: Optional[str] = None,
        decided_by: Optional[str] = None,
    ) -> None:
        """Store the request as cancelled (rejected with ``cancelled_at``) and not applied."""
        raise NotImplementedError
