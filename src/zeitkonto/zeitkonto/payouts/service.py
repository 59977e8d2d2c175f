from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.numbers import round_hours
from ..common.validators import require_month, require_positive_hours
from ..core.constants import DEFAULT_PAYOUT_REQUEST_LIMIT
from ..core.enums import PayoutRequestStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import OvertimePayout, PayoutRequest
from .repository import OvertimePayoutRepository, PayoutRequestRepository

logger = logging.getLogger(__name__)


class PayoutService:
    """Payout ledger and the request/approval workflow on top of it.

    The payout bank itself is owned by the overtime reconciliation; this
    service only books hours paid out of it.
    """

    def __init__(
        self,
        payouts: OvertimePayoutRepository,
        requests: PayoutRequestRepository,
        employees: EmployeeRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._payouts = payouts
        self._requests = requests
        self._employees = employees
        self._clock = clock

    def record_payout(self, *, employee_id: int, year: int, month: int, payout_hours: float) -> OvertimePayout:
        year, month = require_month(year, month)
        hours = round_hours(float(payout_hours))
        if hours < 0:
            raise ValidationError("Auszahlungsstunden dürfen nicht negativ sein")
        self._payouts.upsert(employee_id=int(employee_id), year=year, month=month, payout_hours=hours)
        return OvertimePayout(employee_id=int(employee_id), year=year, month=month, payout_hours=hours)

    def total_paid_up_to(self, *, employee_id: int, year: int, month: int) -> float:
        year, month = require_month(year, month)
        return self._payouts.sum_up_to(employee_id=int(employee_id), year=year, month=month)

    def history(self, *, employee_id: int, limit: int = 120) -> Sequence[OvertimePayout]:
        return self._payouts.list_for_employee(employee_id=int(employee_id), limit=int(limit))

    def available_hours(self, *, employee_id: int) -> float:
        """Payout bank minus every booked payout and hours still pending.

        Booked payouts count regardless of their month, so a request dated
        before an existing payout cannot spend the same bank hours twice.
        """
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Mitarbeiter nicht gefunden")
        paid = self._payouts.sum_all(employee_id=employee.employee_id)
        pending = self._requests.pending_hours(employee_id=employee.employee_id)
        return round_hours(max(employee.payout_bank_hours - paid - pending, 0.0))

    def request_payout(
        self,
        *,
        employee_id: int,
        year: int,
        month: int,
        hours: float,
        note: Optional[str] = None,
    ) -> int:
        year, month = require_month(year, month)
        try:
            hours = require_positive_hours(hours, "Stunden")
        except (TypeError, ValueError):
            raise ValidationError("Bitte eine gültige Stundenanzahl angeben")

        available = self.available_hours(employee_id=employee_id)
        if hours > available + 1e-9:
            shown = f"{available:.2f}".replace(".", ",")
            raise ValidationError(f"Es können höchstens {shown} h zur Auszahlung beantragt werden")

        request_id = self._requests.create(
            employee_id=int(employee_id),
            year=year,
            month=month,
            hours=hours,
            note=(note or "").strip() or None,
        )
        logger.info(
            "Payout requested employee=%s month=%04d-%02d hours=%.2f request=%s",
            employee_id,
            year,
            month,
            hours,
            request_id,
        )
        return request_id

    def list_requests(
        self,
        *,
        employee_id: int,
        year: Optional[int] = None,
        month: Optional[int] = None,
        limit: int = DEFAULT_PAYOUT_REQUEST_LIMIT,
    ) -> Sequence[PayoutRequest]:
        if year is not None and month is not None:
            year, month = require_month(year, month)
        return self._requests.list_for_employee(
            employee_id=int(employee_id), year=year, month=month, limit=int(limit)
        )

    def _require_pending(self, request_id: int) -> PayoutRequest:
        req = self._requests.get(request_id=int(request_id))
        if not req:
            raise NotFoundError("Antrag nicht gefunden")
        if req.status != PayoutRequestStatus.PENDING:
            raise ValidationError("Der Antrag wurde bereits bearbeitet")
        return req

    def approve(self, *, current_role: Role, request_id: int, decided_by: str) -> PayoutRequest:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Nur Administratoren dürfen Auszahlungen genehmigen")
        req = self._require_pending(request_id)

        name = (decided_by or "").strip() or "Admin"
        if not self._requests.decide(
            request_id=req.request_id,
            status=PayoutRequestStatus.APPROVED,
            decided_by=name,
            decided_at=self._clock(),
        ):
            raise ValidationError("Der Antrag wurde bereits bearbeitet")

        existing = self._payouts.get(employee_id=req.employee_id, year=req.year, month=req.month)
        booked = (existing.payout_hours if existing else 0.0) + req.requested_hours
        self._payouts.upsert(
            employee_id=req.employee_id,
            year=req.year,
            month=req.month,
            payout_hours=round_hours(booked),
        )
        logger.info(
            "Payout approved request=%s employee=%s hours=%.2f by=%s",
            req.request_id,
            req.employee_id,
            req.requested_hours,
            name,
        )
        return self._requests.get(request_id=req.request_id) or req

    def reject(self, *, current_role: Role, request_id: int, decided_by: str) -> PayoutRequest:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Nur Administratoren dürfen Auszahlungen ablehnen")
        req = self._require_pending(request_id)

        name = (decided_by or "").strip() or "Admin"
        if not self._requests.decide(
            request_id=req.request_id,
            status=PayoutRequestStatus.REJECTED,
            decided_by=name,
            decided_at=self._clock(),
        ):
            raise ValidationError("Der Antrag wurde bereits bearbeitet")

        logger.info("Payout rejected request=%s employee=%s by=%s", req.request_id, req.employee_id, name)
        return self._requests.get(request_id=req.request_id) or req
