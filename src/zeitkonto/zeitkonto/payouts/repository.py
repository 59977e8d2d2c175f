from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PayoutRequestStatus
from .model import OvertimePayout, PayoutRequest


class OvertimePayoutRepository(Protocol):
    def get(self, *, employee_id: int, year: int, month: int) -> Optional[OvertimePayout]:
        raise NotImplementedError

    def upsert(self, *, employee_id: int, year: int, month: int, payout_hours: float) -> None:
        raise NotImplementedError

    def sum_up_to(self, *, employee_id: int, year: int, month: int) -> float:
        """Total paid in all months up to and including ``year``/``month``."""
        raise NotImplementedError

    def sum_all(self, *, employee_id: int) -> float:
        """Total paid across every booked month."""
        raise NotImplementedError

    def list_for_employee(self, *, employee_id: int, limit: int) -> Sequence[OvertimePayout]:
        raise NotImplementedError


class PayoutRequestRepository(Protocol):
    def create(self, *, employee_id: int, year: int, month: int, hours: float, note: Optional[str]) -> int:
        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[PayoutRequest]:
        raise NotImplementedError

    def list_for_employee(
        self,
        *,
        employee_id: int,
        year: Optional[int] = None,
        month: Optional[int] = None,
        limit: int = 5,
    ) -> Sequence[PayoutRequest]:
        """Newest first."""
        raise NotImplementedError

    def pending_hours(self, *, employee_id: int) -> float:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: PayoutRequestStatus,
        decided_by: str,
        decided_at: datetime,
    ) -> bool:
        """Only pending requests are updated; returns False otherwise."""
        raise NotImplementedError
