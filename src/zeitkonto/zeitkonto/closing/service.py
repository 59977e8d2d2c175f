from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_month
from ..core.constants import DEFAULT_CLOSING_HISTORY_LIMIT
from ..core.enums import ClosingStatus, Role
from ..core.exceptions import AuthorizationError, BalanceLimitError, ValidationError
from ..days.service import TimeEntryService
from .model import MonthlyClosing, MonthlyClosingState
from .repository import MonthlyClosingRepository

logger = logging.getLogger(__name__)


class MonthlyClosingService:
    def __init__(
        self,
        closings: MonthlyClosingRepository,
        time_entries: TimeEntryService,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._closings = closings
        self._time_entries = time_entries
        self._clock = clock

    def get_state(self, *, employee_id: int, year: int, month: int) -> MonthlyClosingState:
        year, month = require_month(year, month)
        closing = self._closings.get(employee_id=int(employee_id), year=year, month=month)
        if not closing:
            return MonthlyClosingState(status=ClosingStatus.OPEN)
        return MonthlyClosingState(status=closing.status, closed_at=closing.closed_at, closed_by=closing.closed_by)

    def is_closed(self, *, employee_id: int, day: date) -> bool:
        return self.get_state(employee_id=employee_id, year=day.year, month=day.month).status == ClosingStatus.CLOSED

    def close(
        self,
        *,
        current_role: Role,
        employee_id: int,
        year: int,
        month: int,
        closed_by: str,
    ) -> MonthlyClosingState:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Nur Administratoren dürfen Monate abschließen")
        year, month = require_month(year, month)

        # Balances must be current before a month is frozen.
        try:
            self._time_entries.recompute_employee_overtime(int(employee_id))
        except BalanceLimitError as e:
            logger.warning(
                "Closing blocked employee=%s month=%04d-%02d: %s", employee_id, year, month, e
            )
            raise ValidationError(
                f"Monatsabschluss nicht möglich, bis die Stunden korrigiert sind: {e}"
            ) from e

        closed_at = self._clock()
        name = (closed_by or "").strip() or "Admin"
        self._closings.upsert_status(
            employee_id=int(employee_id),
            year=year,
            month=month,
            status=ClosingStatus.CLOSED,
            closed_at=closed_at,
            closed_by=name,
        )
        logger.info("Closed month employee=%s month=%04d-%02d by=%s", employee_id, year, month, name)
        return MonthlyClosingState(status=ClosingStatus.CLOSED, closed_at=closed_at, closed_by=name)

    def reopen(self, *, current_role: Role, employee_id: int, year: int, month: int) -> MonthlyClosingState:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Nur Administratoren dürfen Monate wieder öffnen")
        year, month = require_month(year, month)

        self._closings.upsert_status(
            employee_id=int(employee_id),
            year=year,
            month=month,
            status=ClosingStatus.OPEN,
            closed_at=None,
            closed_by=None,
        )
        logger.info("Reopened month employee=%s month=%04d-%02d", employee_id, year, month)
        return MonthlyClosingState(status=ClosingStatus.OPEN)

    def history(self, *, employee_id: int, limit: int = DEFAULT_CLOSING_HISTORY_LIMIT) -> Sequence[MonthlyClosing]:
        return self._closings.list_for_employee(employee_id=int(employee_id), limit=int(limit))
