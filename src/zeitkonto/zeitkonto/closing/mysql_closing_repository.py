from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ClosingStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import MonthlyClosing
from .repository import MonthlyClosingRepository


def _row_to_closing(r: dict) -> MonthlyClosing:
    status = ClosingStatus.CLOSED if (r.get("status") or "").lower() == "closed" else ClosingStatus.OPEN
    return MonthlyClosing(
        closing_id=int(r["closing_id"]),
        employee_id=int(r["employee_id"]),
        year=int(r["year"]),
        month=int(r["month"]),
        status=status,
        closed_at=r.get("closed_at"),
        closed_by=r.get("closed_by"),
    )


class MySQLMonthlyClosingRepository(MonthlyClosingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, employee_id: int, year: int, month: int) -> Optional[MonthlyClosing]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT closing_id, employee_id, year, month, status, closed_at, closed_by
                FROM monthly_closings
                WHERE employee_id=%s AND year=%s AND month=%s
                """,
                (int(employee_id), int(year), int(month)),
            )
            r = fetchone(cur)
            return _row_to_closing(r) if r else None

    def upsert_status(
        self,
        *,
        employee_id: int,
        year: int,
        month: int,
        status: ClosingStatus,
        closed_at: Optional[datetime],
        closed_by: Optional[str],
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO monthly_closings(employee_id, year, month, status, closed_at, closed_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), closed_at=VALUES(closed_at), closed_by=VALUES(closed_by)
                """,
                (int(employee_id), int(year), int(month), status.value, closed_at, closed_by),
            )

    def list_for_employee(self, *, employee_id: int, limit: int) -> Sequence[MonthlyClosing]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT closing_id, employee_id, year, month, status, closed_at, closed_by
                FROM monthly_closings
                WHERE employee_id=%s
                ORDER BY year DESC, month DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_row_to_closing(r) for r in fetchall(cur)]
