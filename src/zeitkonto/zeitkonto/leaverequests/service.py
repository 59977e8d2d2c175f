from __future__ import annotations

import logging
from contextlib import nullcontext
from datetime import date, datetime
from typing import Callable, ContextManager, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_LEAVE_REQUEST_LIMIT, MAX_LEAVE_REASON_LENGTH, MAX_LEAVE_REQUEST_DAYS
from ..core.enums import LeaveRequestStatus, LeaveRequestType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..shiftplan.service import ShiftPlanService
from ..timecalc.calculator import parse_time
from .model import LeaveRequest
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)

CANCEL_PENDING = "cancel_pending"
REQUEST_CANCELLATION = "request_cancellation"


def _normalize_time(value: Optional[str]) -> Optional[str]:
    parsed = parse_time(value)
    if parsed is None:
        return None
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


def _note(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def _admin_name(value: Optional[str]) -> str:
    return (value or "").strip() or "Admin"


class LeaveRequestService:
    """Vacation and overtime-reduction requests.

    Approval writes the request's label ("Urlaub" or "Überstundenabbau") onto
    every shift-plan day of the range; a confirmed cancellation clears those
    days again. The overtime reconciliation picks the labels up as planned
    absences.
    """

    def __init__(
        self,
        requests: LeaveRequestRepository,
        employees: EmployeeRepository,
        shift_plans: ShiftPlanService,
        *,
        clock: Callable[[], datetime] = now_local,
        transaction: Callable[[], ContextManager] = nullcontext,
    ):
        self._requests = requests
        self._employees = employees
        self._shift_plans = shift_plans
        self._clock = clock
        self._transaction = transaction

    def submit(
        self,
        *,
        employee_id: int,
        request_type: LeaveRequestType | str,
        start_date: date,
        end_date: date,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        try:
            request_type = LeaveRequestType(request_type)
        except ValueError:
            raise ValidationError("Unbekannter Antragstyp.")

        if start_date > end_date:
            start_date, end_date = end_date, start_date
        if (end_date - start_date).days + 1 > MAX_LEAVE_REQUEST_DAYS:
            raise ValidationError("Zeiträume über 31 Tage müssen separat mit der Verwaltung abgestimmt werden.")

        start_time = _normalize_time(start_time)
        end_time = _normalize_time(end_time)
        if request_type is LeaveRequestType.OVERTIME:
            if not start_time or not end_time:
                raise ValidationError("Bitte Start- und Endzeit für den Überstundenabbau angeben.")
        else:
            start_time = end_time = None

        reason = _note(reason)
        if reason and len(reason) > MAX_LEAVE_REASON_LENGTH:
            raise ValidationError("Die Begründung darf maximal 500 Zeichen enthalten.")

        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Mitarbeiter wurde nicht gefunden.")

        request_id = self._requests.create(
            employee_id=int(employee_id),
            request_type=request_type,
            start_date=start_date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
            reason=reason,
        )
        logger.info(
            "Leave requested employee=%s type=%s range=%s..%s request=%s",
            employee_id,
            request_type.value,
            start_date.isoformat(),
            end_date.isoformat(),
            request_id,
        )
        return self._require(request_id)

    def list_for_employee(self, *, employee_id: int, limit: int = DEFAULT_LEAVE_REQUEST_LIMIT) -> Sequence[LeaveRequest]:
        return self._requests.list_for_employee(employee_id=int(employee_id), limit=int(limit))

    def list_all(
        self,
        *,
        current_role: Role,
        status: Optional[LeaveRequestStatus | str] = None,
        limit: int = DEFAULT_LEAVE_REQUEST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Nur Administratoren dürfen alle Anträge sehen")
        if status is not None:
            try:
                status = LeaveRequestStatus(status)
            except ValueError:
                raise ValidationError(f"Unbekannter Status: {status!r}")
        return self._requests.list_all(status=status, limit=int(limit))

    def _require(self, request_id: int) -> LeaveRequest:
        req = self._requests.get(request_id=int(request_id))
        if not req:
            raise NotFoundError("Der Antrag wurde nicht gefunden.")
        return req

    def approve(
        self,
        *,
        current_role: Role,
        request_id: int,
        decided_by: str,
        admin_note: Optional[str] = None,
    ) -> LeaveRequest:
        return self._decide(current_role, request_id, LeaveRequestStatus.APPROVED, decided_by, admin_note)

    def reject(
        self,
        *,
        current_role: Role,
        request_id: int,
        decided_by: str,
        admin_note: Optional[str] = None,
    ) -> LeaveRequest:
        return self._decide(current_role, request_id, LeaveRequestStatus.REJECTED, decided_by, admin_note)

    def _decide(
        self,
        current_role: Role,
        request_id: int,
        status: LeaveRequestStatus,
        decided_by: str,
        admin_note: Optional[str],
    ) -> LeaveRequest:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Nur Administratoren dürfen Anträge bearbeiten")
        req = self._require(request_id)
        if req.status != LeaveRequestStatus.PENDING:
            raise ValidationError("Nur offene Anträge können bearbeitet werden.")

        name = _admin_name(decided_by)
        with self._transaction():
            if not self._requests.decide(
                request_id=req.request_id,
                status=status,
                admin_note=_note(admin_note),
                decided_by=name,
                decided_at=self._clock(),
            ):
                raise ValidationError("Nur offene Anträge können bearbeitet werden.")
            if status == LeaveRequestStatus.APPROVED:
                self._apply_to_shift_plan(req)

        logger.info("Leave %s request=%s employee=%s by=%s", status.value, req.request_id, req.employee_id, name)
        return self._require(req.request_id)

    def _apply_to_shift_plan(self, req: LeaveRequest) -> None:
        overtime = req.request_type is LeaveRequestType.OVERTIME
        for day_date in req.dates():
            self._shift_plans.save_day(
                employee_id=req.employee_id,
                day_date=day_date,
                start=req.start_time if overtime else None,
                end=req.end_time if overtime else None,
                required_pause_minutes=0,
                label=req.request_type.plan_label,
            )
        self._requests.set_applied_to_shift_plan(request_id=req.request_id, applied=True)

    def _remove_from_shift_plan(self, req: LeaveRequest) -> None:
        if not req.applied_to_shift_plan:
            return
        for day_date in req.dates():
            self._shift_plans.save_day(
                employee_id=req.employee_id,
                day_date=day_date,
                start=None,
                end=None,
                required_pause_minutes=0,
                label=None,
            )
        self._requests.set_applied_to_shift_plan(request_id=req.request_id, applied=False)

    def cancel_as_employee(
        self,
        *,
        employee_id: int,
        request_id: int,
        mode: str,
        message: Optional[str] = None,
    ) -> str:
        """Withdraw a pending request or ask an admin to cancel an approved one.

        Returns ``"cancelled"`` or ``"requested"``.
        """
        req = self._requests.get(request_id=int(request_id))
        if not req or req.employee_id != int(employee_id):
            raise NotFoundError("Antrag wurde nicht gefunden.")
        note = _note(message)

        if req.status == LeaveRequestStatus.PENDING:
            if mode != CANCEL_PENDING:
                raise ValidationError("Dieser Antrag ist noch nicht genehmigt.")
            self._requests.cancel(request_id=req.request_id, cancelled_at=self._clock(), cancellation_note=note)
            logger.info("Leave withdrawn request=%s employee=%s", req.request_id, req.employee_id)
            return "cancelled"

        if req.status == LeaveRequestStatus.APPROVED:
            if mode != REQUEST_CANCELLATION:
                raise ValidationError("Der Antrag ist bereits genehmigt.")
            if req.cancellation_requested or not self._requests.request_cancellation(
                request_id=req.request_id, note=note, requested_at=self._clock()
            ):
                raise ValidationError("Eine Stornierung wurde bereits angefragt.")
            logger.info("Leave cancellation requested request=%s employee=%s", req.request_id, req.employee_id)
            return "requested"

        if req.cancelled_at:
            raise ValidationError("Der Antrag wurde bereits storniert.")
        raise ValidationError("Der Antrag befindet sich nicht in einem stornierbaren Status.")

    def _require_cancellation_request(self, current_role: Role, request_id: int) -> LeaveRequest:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Nur Administratoren dürfen Stornierungen bearbeiten")
        req = self._requests.get(request_id=int(request_id))
        if not req:
            raise NotFoundError("Antrag wurde nicht gefunden.")
        if req.status != LeaveRequestStatus.APPROVED or not req.cancellation_requested:
            raise ValidationError("Für diesen Antrag liegt keine Stornoanfrage vor.")
        return req

    def confirm_cancellation(
        self,
        *,
        current_role: Role,
        request_id: int,
        decided_by: str,
        admin_note: Optional[str] = None,
    ) -> LeaveRequest:
        req = self._require_cancellation_request(current_role, request_id)
        name = _admin_name(decided_by)
        with self._transaction():
            self._remove_from_shift_plan(req)
            self._requests.cancel(
                request_id=req.request_id,
                cancelled_at=self._clock(),
                cancellation_note=req.cancellation_note,
                admin_note=_note(admin_note),
                decided_by=name,
            )
        logger.info("Leave cancelled request=%s employee=%s by=%s", req.request_id, req.employee_id, name)
        return self._require(req.request_id)

    def reject_cancellation(
        self,
        *,
        current_role: Role,
        request_id: int,
        decided_by: str,
        admin_note: Optional[str] = None,
    ) -> LeaveRequest:
        req = self._require_cancellation_request(current_role, request_id)
        name = _admin_name(decided_by)
        self._requests.clear_cancellation(
            request_id=req.request_id,
            admin_note=_note(admin_note),
            decided_by=name,
            decided_at=self._clock(),
        )
        logger.info("Leave cancellation refused request=%s employee=%s by=%s", req.request_id, req.employee_id, name)
        return self._require(req.request_id)
