from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.numbers import round_hours, to_hours
from ..core.enums import PayoutRequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import OvertimePayout, PayoutRequest
from .repository import OvertimePayoutRepository, PayoutRequestRepository


def _row_to_payout(r: dict) -> OvertimePayout:
    return OvertimePayout(
        employee_id=int(r["employee_id"]),
        year=int(r["year"]),
        month=int(r["month"]),
        payout_hours=round_hours(to_hours(r.get("payout_hours"))),
    )


def _row_to_request(r: dict) -> PayoutRequest:
    try:
        status = PayoutRequestStatus((r.get("status") or "pending").lower())
    except ValueError:
        status = PayoutRequestStatus.PENDING
    return PayoutRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        year=int(r["year"]),
        month=int(r["month"]),
        requested_hours=round_hours(to_hours(r.get("requested_hours"))),
        note=r.get("note"),
        status=status,
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
    )


class MySQLOvertimePayoutRepository(OvertimePayoutRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, employee_id: int, year: int, month: int) -> Optional[OvertimePayout]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, year, month, payout_hours
                FROM overtime_payouts
                WHERE employee_id=%s AND year=%s AND month=%s
                """,
                (int(employee_id), int(year), int(month)),
            )
            r = fetchone(cur)
            return _row_to_payout(r) if r else None

    def upsert(self, *, employee_id: int, year: int, month: int, payout_hours: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO overtime_payouts(employee_id, year, month, payout_hours)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE payout_hours=VALUES(payout_hours)
                """,
                (int(employee_id), int(year), int(month), round_hours(payout_hours)),
            )

    def sum_up_to(self, *, employee_id: int, year: int, month: int) -> float:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT SUM(payout_hours) AS total
                FROM overtime_payouts
                WHERE employee_id=%s AND (year < %s OR (year = %s AND month <= %s))
                """,
                (int(employee_id), int(year), int(year), int(month)),
            )
            r = fetchone(cur)
            return round_hours(to_hours(r.get("total") if r else None))

    def sum_all(self, *, employee_id: int) -> float:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT SUM(payout_hours) AS total FROM overtime_payouts WHERE employee_id=%s",
                (int(employee_id),),
            )
            r = fetchone(cur)
            return round_hours(to_hours(r.get("total") if r else None))

    def list_for_employee(self, *, employee_id: int, limit: int) -> Sequence[OvertimePayout]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, year, month, payout_hours
                FROM overtime_payouts
                WHERE employee_id=%s
                ORDER BY year DESC, month DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_row_to_payout(r) for r in fetchall(cur)]


class MySQLPayoutRequestRepository(PayoutRequestRepository):
    _SELECT = """
        SELECT request_id, employee_id, year, month, requested_hours, note, status,
               created_at, decided_by, decided_at
        FROM overtime_payout_requests
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, employee_id: int, year: int, month: int, hours: float, note: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO overtime_payout_requests(employee_id, year, month, requested_hours, note, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), int(year), int(month), round_hours(hours), note, PayoutRequestStatus.PENDING.value),
            )
            return int(cur.lastrowid or 0)

    def get(self, *, request_id: int) -> Optional[PayoutRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(self._SELECT + " WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list_for_employee(
        self,
        *,
        employee_id: int,
        year: Optional[int] = None,
        month: Optional[int] = None,
        limit: int = 5,
    ) -> Sequence[PayoutRequest]:
        where = ["employee_id=%s"]
        params: list = [int(employee_id)]
        if year is not None and month is not None:
            where.append("year=%s AND month=%s")
            params.extend([int(year), int(month)])
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                self._SELECT + f" WHERE {' AND '.join(where)} ORDER BY created_at DESC, request_id DESC LIMIT %s",
                tuple(params),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def pending_hours(self, *, employee_id: int) -> float:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT SUM(requested_hours) AS total
                FROM overtime_payout_requests
                WHERE employee_id=%s AND status=%s
                """,
                (int(employee_id), PayoutRequestStatus.PENDING.value),
            )
            r = fetchone(cur)
            return round_hours(to_hours(r.get("total") if r else None))

    def decide(
        self,
        *,
        request_id: int,
        status: PayoutRequestStatus,
        decided_by: str,
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE overtime_payout_requests
                SET status=%s, decided_by=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, decided_by, decided_at, int(request_id), PayoutRequestStatus.PENDING.value),
            )
            return cur.rowcount > 0
