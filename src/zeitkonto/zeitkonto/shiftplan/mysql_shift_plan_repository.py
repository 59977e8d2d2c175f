from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ShiftPlanDay
from .repository import ShiftPlanRepository


def _row_to_plan_day(r: dict) -> ShiftPlanDay:
    return ShiftPlanDay(
        employee_id=int(r["employee_id"]),
        day_date=r["day_date"],
        start=normalize_mysql_time(r.get("start_time")),
        end=normalize_mysql_time(r.get("end_time")),
        required_pause_minutes=int(r.get("required_pause_minutes") or 0),
        label=(r.get("label") or "").strip() or None,
    )


class MySQLShiftPlanRepository(ShiftPlanRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, employee_id: int, day_date: date) -> Optional[ShiftPlanDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, day_date, start_time, end_time, required_pause_minutes, label
                FROM shift_plan_days
                WHERE employee_id=%s AND day_date=%s
                """,
                (int(employee_id), day_date),
            )
            r = fetchone(cur)
            return _row_to_plan_day(r) if r else None

    def list_for_employee(
        self,
        *,
        employee_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[ShiftPlanDay]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if start is not None:
            clauses.append("day_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("day_date <= %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT employee_id, day_date, start_time, end_time, required_pause_minutes, label
                FROM shift_plan_days
                WHERE {where}
                ORDER BY day_date ASC
                """,
                tuple(params),
            )
            return [_row_to_plan_day(r) for r in fetchall(cur)]

    def save_day(self, day: ShiftPlanDay) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_plan_days(employee_id, day_date, start_time, end_time, required_pause_minutes, label)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    start_time=VALUES(start_time),
                    end_time=VALUES(end_time),
                    required_pause_minutes=VALUES(required_pause_minutes),
                    label=VALUES(label)
                """,
                (
                    int(day.employee_id),
                    day.day_date,
                    day.start,
                    day.end,
                    int(day.required_pause_minutes or 0),
                    day.label,
                ),
            )
