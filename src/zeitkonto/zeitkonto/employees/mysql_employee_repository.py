from __future__ import annotations

from typing import Optional

from ..common.numbers import to_hours
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeRepository


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, full_name, max_minus_hours, max_overtime_hours,
                       overtime_balance, payout_bank_hours, min_pause_under6_minutes,
                       requires_meal_flag
                FROM employees
                WHERE employee_id=%s
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Employee(
                employee_id=int(r["employee_id"]),
                full_name=r["full_name"],
                max_minus_hours=to_hours(r.get("max_minus_hours")),
                max_overtime_hours=to_hours(r.get("max_overtime_hours")),
                overtime_balance=to_hours(r.get("overtime_balance")),
                payout_bank_hours=to_hours(r.get("payout_bank_hours")),
                min_pause_under6_minutes=int(r.get("min_pause_under6_minutes") or 0),
                requires_meal_flag=bool(r.get("requires_meal_flag")),
            )

    def update_overtime_balance(
        self,
        *,
        employee_id: int,
        balance_hours: float,
        payout_bank_hours: float,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET overtime_balance=%s, payout_bank_hours=%s
                WHERE employee_id=%s
                """,
                (round(balance_hours, 2), round(payout_bank_hours, 2), int(employee_id)),
            )
            return cur.rowcount > 0
