from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveRequestStatus, LeaveRequestType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import LeaveRequest
from .repository import LeaveRequestRepository


def _row_to_request(r: dict) -> LeaveRequest:
    try:
        status = LeaveRequestStatus((r.get("status") or "pending").lower())
    except ValueError:
        status = LeaveRequestStatus.PENDING
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        request_type=LeaveRequestType(r["request_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=status,
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        reason=r.get("reason"),
        admin_note=r.get("admin_note"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        cancellation_requested=bool(r.get("cancellation_requested")),
        cancellation_requested_at=r.get("cancellation_requested_at"),
        cancellation_note=r.get("cancellation_note"),
        cancelled_at=r.get("cancelled_at"),
        applied_to_shift_plan=bool(r.get("applied_to_shift_plan")),
        created_at=r.get("created_at"),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    _SELECT = """
        SELECT request_id, employee_id, request_type, start_date, end_date, start_time, end_time,
               reason, status, admin_note, decided_by, decided_at, cancellation_requested,
               cancellation_requested_at, cancellation_note, cancelled_at, applied_to_shift_plan, created_at
        FROM leave_requests
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, request_type, start_date, end_date, start_time, end_time, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    request_type.value,
                    start_date,
                    end_date,
                    start_time,
                    end_time,
                    reason,
                    LeaveRequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid or 0)

    def get(self, *, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(self._SELECT + " WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list_for_employee(self, *, employee_id: int, limit: int) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                self._SELECT + " WHERE employee_id=%s ORDER BY created_at DESC, request_id DESC LIMIT %s",
                (int(employee_id), int(limit)),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def list_all(self, *, status: Optional[LeaveRequestStatus], limit: int) -> Sequence[LeaveRequest]:
        where = ""
        params: list = []
        if status is not None:
            where = " WHERE status=%s"
            params.append(status.value)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                self._SELECT + where + " ORDER BY start_date ASC, request_id ASC LIMIT %s",
                tuple(params),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveRequestStatus,
        admin_note: Optional[str],
        decided_by: str,
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, admin_note=%s, decided_by=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, admin_note, decided_by, decided_at, int(request_id), LeaveRequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def set_applied_to_shift_plan(self, *, request_id: int, applied: bool) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE leave_requests SET applied_to_shift_plan=%s WHERE request_id=%s",
                (1 if applied else 0, int(request_id)),
            )

    def request_cancellation(self, *, request_id: int, note: Optional[str], requested_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET cancellation_requested=1, cancellation_requested_at=%s, cancellation_note=%s
                WHERE request_id=%s AND status=%s AND cancellation_requested=0
                """,
                (requested_at, note, int(request_id), LeaveRequestStatus.APPROVED.value),
            )
            return cur.rowcount > 0

    def clear_cancellation(
        self,
        *,
        request_id: int,
        admin_note: Optional[str],
        decided_by: str,
        decided_at: datetime,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET cancellation_requested=0, cancellation_requested_at=NULL, cancellation_note=NULL,
                    admin_note=%s, decided_by=%s, decided_at=%s
                WHERE request_id=%s
                """,
                (admin_note, decided_by, decided_at, int(request_id)),
            )

    def cancel(
        self,
        *,
        request_id: int,
        cancelled_at: datetime,
        cancellation_note: Optional[str],
        admin_note: Optional[str] = None,
        decided_by: Optional[str] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, cancelled_at=%s, cancellation_note=%s, cancellation_requested=0,
                    cancellation_requested_at=NULL, applied_to_shift_plan=0,
                    admin_note=COALESCE(%s, admin_note), decided_by=COALESCE(%s, decided_by)
                WHERE request_id=%s
                """,
                (
                    LeaveRequestStatus.REJECTED.value,
                    cancelled_at,
                    cancellation_note,
                    admin_note,
                    decided_by,
                    int(request_id),
                ),
            )
