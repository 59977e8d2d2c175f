from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.zeitkonto.zeitkonto.closing.model import MonthlyClosing
from src.zeitkonto.zeitkonto.container import build_services
from src.zeitkonto.zeitkonto.core.enums import LeaveRequestStatus, PayoutRequestStatus
from src.zeitkonto.zeitkonto.days.model import DailyDayRecord
from src.zeitkonto.zeitkonto.employees.model import Employee
from src.zeitkonto.zeitkonto.leaverequests.model import LeaveRequest
from src.zeitkonto.zeitkonto.payouts.model import OvertimePayout, PayoutRequest
from src.zeitkonto.zeitkonto.shiftplan.model import ShiftPlanDay


class InMemoryEmployees:
    def __init__(self, *employees: Employee):
        self.by_id: dict[int, Employee] = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> None:
        self.by_id[employee.employee_id] = employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(int(employee_id))

    def update_overtime_balance(self, *, employee_id, balance_hours, payout_bank_hours) -> bool:
        emp = self.by_id.get(int(employee_id))
        if not emp:
            return False
        self.by_id[emp.employee_id] = replace(
            emp,
            overtime_balance=round(balance_hours, 2),
            payout_bank_hours=round(payout_bank_hours, 2),
        )
        return True


class InMemoryDays:
    def __init__(self):
        self.rows: dict[tuple[int, date], DailyDayRecord] = {}
        self.recalculation_calls: list[list] = []
        self._next_id = 1

    def add(self, record: DailyDayRecord) -> DailyDayRecord:
        if record.day_id is None:
            record = replace(record, day_id=self._next_id)
            self._next_id += 1
        self.rows[(record.employee_id, record.day_date)] = record
        return record

    def list_for_employee(self, employee_id, *, limit=None):
        items = [r for (eid, _), r in self.rows.items() if eid == int(employee_id)]
        items.sort(key=lambda r: r.day_date, reverse=True)
        return items[:limit] if limit is not None else items

    def get_for_employee_and_date(self, employee_id, day_date):
        return self.rows.get((int(employee_id), day_date))

    def upsert(self, record: DailyDayRecord) -> int:
        existing = self.rows.get((record.employee_id, record.day_date))
        if existing:
            record = replace(
                record,
                day_id=existing.day_id,
                admin_last_change_at=existing.admin_last_change_at,
                admin_last_change_by=existing.admin_last_change_by,
                admin_last_change_type=existing.admin_last_change_type,
                admin_last_change_summary=existing.admin_last_change_summary,
            )
        return self.add(record).day_id

    def apply_recalculation(self, employee_id, days) -> int:
        self.recalculation_calls.append(list(days))
        count = 0
        for d in days:
            key = (int(employee_id), d.day_date)
            if key in self.rows:
                self.rows[key] = replace(
                    self.rows[key],
                    plan_hours=d.plan_hours,
                    overtime_delta=d.overtime_delta,
                    forced_overflow=d.forced_overflow,
                    sick_hours=d.sick_hours,
                    child_sick_hours=d.child_sick_hours,
                    short_work_hours=d.short_work_hours,
                    vacation_hours=d.vacation_hours,
                )
                count += 1
        return count

    def delete_for_date(self, employee_id, day_date) -> bool:
        return self.rows.pop((int(employee_id), day_date), None) is not None

    def set_admin_change(self, employee_id, day_date, change) -> None:
        key = (int(employee_id), day_date)
        if key not in self.rows:
            return
        self.rows[key] = replace(
            self.rows[key],
            admin_last_change_at=change.at if change else None,
            admin_last_change_by=change.by if change else None,
            admin_last_change_type=change.change_type if change else None,
            admin_last_change_summary=change.summary if change else None,
        )


class InMemoryShiftPlans:
    def __init__(self, *days: ShiftPlanDay):
        self.days: dict[tuple[int, date], ShiftPlanDay] = {(d.employee_id, d.day_date): d for d in days}

    def add(self, day: ShiftPlanDay) -> None:
        self.days[(day.employee_id, day.day_date)] = day

    def get_for_employee_and_date(self, *, employee_id, day_date):
        return self.days.get((int(employee_id), day_date))

    def list_for_employee(self, *, employee_id, start=None, end=None):
        return [
            d
            for (eid, day), d in sorted(self.days.items())
            if eid == int(employee_id) and (start is None or day >= start) and (end is None or day <= end)
        ]

    def save_day(self, day: ShiftPlanDay) -> None:
        self.add(day)


class InMemoryClosings:
    def __init__(self):
        self.rows: dict[tuple[int, int, int], MonthlyClosing] = {}

    def get(self, *, employee_id, year, month):
        return self.rows.get((int(employee_id), int(year), int(month)))

    def upsert_status(self, *, employee_id, year, month, status, closed_at, closed_by) -> None:
        key = (int(employee_id), int(year), int(month))
        self.rows[key] = MonthlyClosing(
            closing_id=len(self.rows) + 1,
            employee_id=key[0],
            year=key[1],
            month=key[2],
            status=status,
            closed_at=closed_at,
            closed_by=closed_by,
        )

    def list_for_employee(self, *, employee_id, limit):
        items = [c for (eid, _, _), c in self.rows.items() if eid == int(employee_id)]
        items.sort(key=lambda c: (c.year, c.month), reverse=True)
        return items[:limit]


class InMemoryPayouts:
    def __init__(self):
        self.rows: dict[tuple[int, int, int], OvertimePayout] = {}

    def get(self, *, employee_id, year, month):
        return self.rows.get((int(employee_id), int(year), int(month)))

    def upsert(self, *, employee_id, year, month, payout_hours) -> None:
        self.rows[(int(employee_id), int(year), int(month))] = OvertimePayout(
            employee_id=int(employee_id), year=int(year), month=int(month), payout_hours=round(payout_hours, 2)
        )

    def sum_up_to(self, *, employee_id, year, month) -> float:
        return round(
            sum(
                p.payout_hours
                for (eid, y, m), p in self.rows.items()
                if eid == int(employee_id) and (y < year or (y == year and m <= month))
            ),
            2,
        )

    def sum_all(self, *, employee_id) -> float:
        return round(sum(p.payout_hours for (eid, _, _), p in self.rows.items() if eid == int(employee_id)), 2)

    def list_for_employee(self, *, employee_id, limit):
        items = [p for (eid, _, _), p in self.rows.items() if eid == int(employee_id)]
        items.sort(key=lambda p: (p.year, p.month), reverse=True)
        return items[:limit]


class InMemoryPayoutRequests:
    def __init__(self):
        self.rows: dict[int, PayoutRequest] = {}
        self._next_id = 1

    def create(self, *, employee_id, year, month, hours, note) -> int:
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = PayoutRequest(
            request_id=rid,
            employee_id=int(employee_id),
            year=int(year),
            month=int(month),
            requested_hours=hours,
            note=note,
            status=PayoutRequestStatus.PENDING,
            created_at=datetime(2025, 3, 1, 9, 0, 0),
        )
        return rid

    def get(self, *, request_id):
        return self.rows.get(int(request_id))

    def list_for_employee(self, *, employee_id, year=None, month=None, limit=5):
        items = [
            r
            for r in self.rows.values()
            if r.employee_id == int(employee_id) and (year is None or (r.year == year and r.month == month))
        ]
        items.sort(key=lambda r: r.request_id, reverse=True)
        return items[:limit]

    def pending_hours(self, *, employee_id) -> float:
        return round(
            sum(
                r.requested_hours
                for r in self.rows.values()
                if r.employee_id == int(employee_id) and r.status == PayoutRequestStatus.PENDING
            ),
            2,
        )

    def decide(self, *, request_id, status, decided_by, decided_at) -> bool:
        req = self.rows.get(int(request_id))
        if not req or req.status != PayoutRequestStatus.PENDING:
            return False
        self.rows[req.request_id] = replace(req, status=status, decided_by=decided_by, decided_at=decided_at)
        return True


class InMemoryLeaveRequests:
    def __init__(self):
        self.rows: dict[int, LeaveRequest] = {}
        self._next_id = 1

    def create(self, *, employee_id, request_type, start_date, end_date, start_time, end_time, reason) -> int:
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = LeaveRequest(
            request_id=rid,
            employee_id=int(employee_id),
            request_type=request_type,
            start_date=start_date,
            end_date=end_date,
            status=LeaveRequestStatus.PENDING,
            start_time=start_time,
            end_time=end_time,
            reason=reason,
            created_at=datetime(2025, 3, 1, 9, 0, 0),
        )
        return rid

    def get(self, *, request_id):
        return self.rows.get(int(request_id))

    def list_for_employee(self, *, employee_id, limit):
        items = [r for r in self.rows.values() if r.employee_id == int(employee_id)]
        items.sort(key=lambda r: r.request_id, reverse=True)
        return items[:limit]

    def list_all(self, *, status, limit):
        items = [r for r in self.rows.values() if status is None or r.status == status]
        items.sort(key=lambda r: (r.start_date, r.request_id))
        return items[:limit]

    def decide(self, *, request_id, status, admin_note, decided_by, decided_at) -> bool:
        req = self.rows.get(int(request_id))
        if not req or req.status != LeaveRequestStatus.PENDING:
            return False
        self.rows[req.request_id] = replace(
            req, status=status, admin_note=admin_note, decided_by=decided_by, decided_at=decided_at
        )
        return True

    def set_applied_to_shift_plan(self, *, request_id, applied) -> None:
        req = self.rows[int(request_id)]
        self.rows[req.request_id] = replace(req, applied_to_shift_plan=applied)

    def request_cancellation(self, *, request_id, note, requested_at) -> bool:
        req = self.rows.get(int(request_id))
        if not req or req.status != LeaveRequestStatus.APPROVED or req.cancellation_requested:
            return False
        self.rows[req.request_id] = replace(
            req, cancellation_requested=True, cancellation_requested_at=requested_at, cancellation_note=note
        )
        return True

    def clear_cancellation(self, *, request_id, admin_note, decided_by, decided_at) -> None:
        req = self.rows[int(request_id)]
        self.rows[req.request_id] = replace(
            req,
            cancellation_requested=False,
            cancellation_requested_at=None,
            cancellation_note=None,
            admin_note=admin_note,
            decided_by=decided_by,
            decided_at=decided_at,
        )

    def cancel(self, *, request_id, cancelled_at, cancellation_note, admin_note=None, decided_by=None) -> None:
        req = self.rows[int(request_id)]
        self.rows[req.request_id] = replace(
            req,
            status=LeaveRequestStatus.REJECTED,
            cancelled_at=cancelled_at,
            cancellation_note=cancellation_note,
            cancellation_requested=False,
            cancellation_requested_at=None,
            applied_to_shift_plan=False,
            admin_note=admin_note if admin_note is not None else req.admin_note,
            decided_by=decided_by if decided_by is not None else req.decided_by,
        )


@pytest.fixture
def employees():
    return InMemoryEmployees(
        Employee(employee_id=1, full_name="Erika Muster", max_minus_hours=20.0, max_overtime_hours=40.0)
    )


@pytest.fixture
def days():
    return InMemoryDays()


@pytest.fixture
def shift_plans():
    return InMemoryShiftPlans()


@pytest.fixture
def closings():
    return InMemoryClosings()


@pytest.fixture
def payouts():
    return InMemoryPayouts()


@pytest.fixture
def payout_requests():
    return InMemoryPayoutRequests()


@pytest.fixture
def leave_requests():
    return InMemoryLeaveRequests()


@pytest.fixture
def container(employees, days, shift_plans, closings, payouts, payout_requests, leave_requests):
    return build_services(
        employees_repo=employees,
        days_repo=days,
        shift_plans_repo=shift_plans,
        closings_repo=closings,
        payouts_repo=payouts,
        payout_requests_repo=payout_requests,
        leave_requests_repo=leave_requests,
    )