from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
from typing import Callable, ContextManager

from .closing.mysql_closing_repository import MySQLMonthlyClosingRepository
from .closing.repository import MonthlyClosingRepository
from .closing.service import MonthlyClosingService
from .database.connection import DBConfig, DatabaseConnection
from .days.mysql_day_repository import MySQLDailyDayRepository
from .days.repository import DailyDayRepository
from .days.service import TimeEntryService
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .leaverequests.mysql_leave_request_repository import MySQLLeaveRequestRepository
from .leaverequests.repository import LeaveRequestRepository
from .leaverequests.service import LeaveRequestService
from .payouts.mysql_payout_repository import MySQLOvertimePayoutRepository, MySQLPayoutRequestRepository
from .payouts.repository import OvertimePayoutRepository, PayoutRequestRepository
from .payouts.service import PayoutService
from .shiftplan.mysql_shift_plan_repository import MySQLShiftPlanRepository
from .shiftplan.repository import ShiftPlanRepository
from .shiftplan.service import ShiftPlanService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    days_repo: DailyDayRepository
    shift_plans_repo: ShiftPlanRepository
    closings_repo: MonthlyClosingRepository
    payouts_repo: OvertimePayoutRepository
    payout_requests_repo: PayoutRequestRepository
    leave_requests_repo: LeaveRequestRepository

    shift_plan_service: ShiftPlanService
    time_entry_service: TimeEntryService
    closing_service: MonthlyClosingService
    payout_service: PayoutService
    leave_request_service: LeaveRequestService


def build_services(
    *,
    employees_repo: EmployeeRepository,
    days_repo: DailyDayRepository,
    shift_plans_repo: ShiftPlanRepository,
    closings_repo: MonthlyClosingRepository,
    payouts_repo: OvertimePayoutRepository,
    payout_requests_repo: PayoutRequestRepository,
    leave_requests_repo: LeaveRequestRepository,
    transaction: Callable[[], ContextManager] = nullcontext,
) -> Container:
    shift_plan_service = ShiftPlanService(shift_plans_repo)
    time_entry_service = TimeEntryService(
        days_repo, employees_repo, shift_plan_service, closings_repo, transaction=transaction
    )
    closing_service = MonthlyClosingService(closings_repo, time_entry_service)
    payout_service = PayoutService(payouts_repo, payout_requests_repo, employees_repo)
    leave_request_service = LeaveRequestService(
        leave_requests_repo, employees_repo, shift_plan_service, transaction=transaction
    )

    return Container(
        employees_repo=employees_repo,
        days_repo=days_repo,
        shift_plans_repo=shift_plans_repo,
        closings_repo=closings_repo,
        payouts_repo=payouts_repo,
        payout_requests_repo=payout_requests_repo,
        leave_requests_repo=leave_requests_repo,
        shift_plan_service=shift_plan_service,
        time_entry_service=time_entry_service,
        closing_service=closing_service,
        payout_service=payout_service,
        leave_request_service=leave_request_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return build_services(
        employees_repo=MySQLEmployeeRepository(conn),
        days_repo=MySQLDailyDayRepository(conn),
        shift_plans_repo=MySQLShiftPlanRepository(conn),
        closings_repo=MySQLMonthlyClosingRepository(conn),
        payouts_repo=MySQLOvertimePayoutRepository(conn),
        payout_requests_repo=MySQLPayoutRequestRepository(conn),
        leave_requests_repo=MySQLLeaveRequestRepository(conn),
        transaction=conn.unit_of_work,
    )
