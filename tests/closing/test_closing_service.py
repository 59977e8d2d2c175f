from __future__ import annotations

from datetime import date, datetime

import pytest

from src.zeitkonto.zeitkonto.closing.service import MonthlyClosingService
from src.zeitkonto.zeitkonto.core.enums import ClosingStatus, Role
from src.zeitkonto.zeitkonto.core.exceptions import AuthorizationError, BalanceLimitError, ValidationError
from src.zeitkonto.zeitkonto.days.model import DailyDayRecord

CLOSED_AT = datetime(2025, 4, 2, 10, 15, 0)


class _RecordingTimeEntries:
    def __init__(self, error=None):
        self.recomputed = []
        self._error = error

    def recompute_employee_overtime(self, employee_id):
        self.recomputed.append(employee_id)
        if self._error:
            raise self._error


@pytest.fixture
def time_entries():
    return _RecordingTimeEntries()


@pytest.fixture
def service(closings, time_entries):
    return MonthlyClosingService(closings, time_entries, clock=lambda: CLOSED_AT)


def test_month_without_row_is_open(service):
    state = service.get_state(employee_id=1, year=2025, month=3)
    assert state.status == ClosingStatus.OPEN
    assert state.to_dict() == {"status": "open", "closed_at": None, "closed_by": None}


def test_close_recomputes_and_records_who(service, time_entries):
    state = service.close(current_role=Role.ADMIN, employee_id=1, year=2025, month=3, closed_by="Chefin")

    assert time_entries.recomputed == [1]
    assert state.status == ClosingStatus.CLOSED
    assert service.get_state(employee_id=1, year=2025, month=3).closed_by == "Chefin"
    assert service.get_state(employee_id=1, year=2025, month=3).closed_at == CLOSED_AT
    assert service.is_closed(employee_id=1, day=date(2025, 3, 17))
    assert not service.is_closed(employee_id=1, day=date(2025, 4, 1))


def test_close_requires_admin(service, closings):
    with pytest.raises(AuthorizationError):
        service.close(current_role=Role.EMPLOYEE, employee_id=1, year=2025, month=3, closed_by="Erika")
    assert closings.rows == {}


def test_close_blocked_by_balance_limit(closings):
    failing = _RecordingTimeEntries(BalanceLimitError(max_minus_hours=10.0, balance_hours=-12.0))
    service = MonthlyClosingService(closings, failing, clock=lambda: CLOSED_AT)

    with pytest.raises(ValidationError, match="Monatsabschluss nicht möglich"):
        service.close(current_role=Role.ADMIN, employee_id=1, year=2025, month=3, closed_by="Chefin")
    assert closings.rows == {}


def test_reopen_clears_closing(service):
    service.close(current_role=Role.ADMIN, employee_id=1, year=2025, month=3, closed_by="Chefin")
    state = service.reopen(current_role=Role.ADMIN, employee_id=1, year=2025, month=3)

    assert state.status == ClosingStatus.OPEN
    assert service.get_state(employee_id=1, year=2025, month=3).closed_at is None
    assert not service.is_closed(employee_id=1, day=date(2025, 3, 17))

    with pytest.raises(AuthorizationError):
        service.reopen(current_role=Role.EMPLOYEE, employee_id=1, year=2025, month=3)


def test_history_newest_first(service):
    for month in (1, 3, 2):
        service.close(current_role=Role.ADMIN, employee_id=1, year=2025, month=month, closed_by="Chefin")
    service.close(current_role=Role.ADMIN, employee_id=1, year=2024, month=12, closed_by="Chefin")

    assert [(c.year, c.month) for c in service.history(employee_id=1, limit=3)] == [(2025, 3), (2025, 2), (2025, 1)]


def test_invalid_month_is_rejected(service):
    with pytest.raises(ValidationError):
        service.get_state(employee_id=1, year=2025, month=0)


def test_closed_month_blocks_time_entries(container, closings):
    container.closing_service.close(current_role=Role.ADMIN, employee_id=1, year=2025, month=3, closed_by="Chefin")
    assert container.closing_service.is_closed(employee_id=1, day=date(2025, 3, 3))

    with pytest.raises(ValidationError):
        container.time_entry_service.delete_time_entry(1, date(2025, 3, 3))


def test_close_turns_engine_limit_error_into_validation_error(container, closings, days, employees, monkeypatch):
    days.add(DailyDayRecord(day_id=None, employee_id=1, day_date=date(2025, 3, 3), kommt1="08:00", geht1="12:00", plan_hours=8.0))
    before = dict(days.rows)

    def fail(*args, **kwargs):
        raise BalanceLimitError(max_minus_hours=20.0, balance_hours=-24.0)

    monkeypatch.setattr("src.zeitkonto.zeitkonto.days.service.recalculate", fail)

    with pytest.raises(ValidationError, match="Minusstunden-Limit"):
        container.closing_service.close(current_role=Role.ADMIN, employee_id=1, year=2025, month=3, closed_by="Chefin")

    assert closings.rows == {}
    assert days.rows == before
    assert days.recalculation_calls == []
    assert employees.get_by_id(1).overtime_balance == 0
