from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.numbers import to_hours
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..overtime.model import RecalculatedDay
from .model import AdminChange, DailyDayRecord
from .repository import DailyDayRepository

_COLUMNS = """
    day_id, employee_id, day_date, kommt1, geht1, kommt2, geht2, pause, code, note,
    mittag, shift_label, sick_hours, child_sick_hours, short_work_hours, vacation_hours,
    holiday_hours, overtime_delta, plan_hours, forced_overflow, required_pause_minutes,
    admin_last_change_at, admin_last_change_by, admin_last_change_type, admin_last_change_summary
"""


def _text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def _row_to_record(r: dict) -> DailyDayRecord:
    return DailyDayRecord(
        day_id=int(r["day_id"]),
        employee_id=int(r["employee_id"]),
        day_date=r["day_date"],
        kommt1=_text(r.get("kommt1")),
        geht1=_text(r.get("geht1")),
        kommt2=_text(r.get("kommt2")),
        geht2=_text(r.get("geht2")),
        pause=_text(r.get("pause")),
        code=_text(r.get("code")),
        note=_text(r.get("note")),
        mittag=r.get("mittag") or "Nein",
        shift_label=r.get("shift_label") or "",
        sick_hours=to_hours(r.get("sick_hours")),
        child_sick_hours=to_hours(r.get("child_sick_hours")),
        short_work_hours=to_hours(r.get("short_work_hours")),
        vacation_hours=to_hours(r.get("vacation_hours")),
        holiday_hours=to_hours(r.get("holiday_hours")),
        overtime_delta=to_hours(r.get("overtime_delta")),
        plan_hours=to_hours(r.get("plan_hours")),
        forced_overflow=to_hours(r.get("forced_overflow")),
        required_pause_minutes=int(r.get("required_pause_minutes") or 0),
        admin_last_change_at=r.get("admin_last_change_at"),
        admin_last_change_by=r.get("admin_last_change_by"),
        admin_last_change_type=r.get("admin_last_change_type"),
        admin_last_change_summary=r.get("admin_last_change_summary"),
    )


class MySQLDailyDayRepository(DailyDayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employee(self, employee_id: int, *, limit: Optional[int] = None) -> Sequence[DailyDayRecord]:
        sql = f"SELECT {_COLUMNS} FROM daily_days WHERE employee_id=%s ORDER BY day_date DESC, day_id DESC"
        params: tuple = (int(employee_id),)
        if limit is not None:
            sql += " LIMIT %s"
            params = (int(employee_id), int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_record(r) for r in fetchall(cur)]

    def get_for_employee_and_date(self, employee_id: int, day_date: date) -> Optional[DailyDayRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_days WHERE employee_id=%s AND day_date=%s",
                (int(employee_id), day_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def upsert(self, record: DailyDayRecord) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO daily_days(
                    employee_id, day_date, kommt1, geht1, kommt2, geht2, pause, code, note, mittag,
                    shift_label, sick_hours, child_sick_hours, short_work_hours, vacation_hours,
                    holiday_hours, overtime_delta, plan_hours, forced_overflow, required_pause_minutes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    kommt1=VALUES(kommt1), geht1=VALUES(geht1), kommt2=VALUES(kommt2), geht2=VALUES(geht2),
                    pause=VALUES(pause), code=VALUES(code), note=VALUES(note), mittag=VALUES(mittag),
                    shift_label=VALUES(shift_label), sick_hours=VALUES(sick_hours),
                    child_sick_hours=VALUES(child_sick_hours), short_work_hours=VALUES(short_work_hours),
                    vacation_hours=VALUES(vacation_hours), holiday_hours=VALUES(holiday_hours),
                    overtime_delta=VALUES(overtime_delta), plan_hours=VALUES(plan_hours),
                    forced_overflow=VALUES(forced_overflow), required_pause_minutes=VALUES(required_pause_minutes)
                """,
                (
                    int(record.employee_id),
                    record.day_date,
                    record.kommt1,
                    record.geht1,
                    record.kommt2,
                    record.geht2,
                    record.pause,
                    record.code,
                    record.note,
                    record.mittag,
                    record.shift_label,
                    record.sick_hours,
                    record.child_sick_hours,
                    record.short_work_hours,
                    record.vacation_hours,
                    record.holiday_hours,
                    record.overtime_delta,
                    record.plan_hours,
                    record.forced_overflow,
                    int(record.required_pause_minutes),
                ),
            )

            # If it was an update, lastrowid can be 0; fetch day_id.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT day_id FROM daily_days WHERE employee_id=%s AND day_date=%s",
                (int(record.employee_id), record.day_date),
            )
            r = fetchone(cur)
            return int(r["day_id"]) if r else 0

    def apply_recalculation(self, employee_id: int, days: Sequence[RecalculatedDay]) -> int:
        if not days:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                UPDATE daily_days
                SET plan_hours=%s, overtime_delta=%s, forced_overflow=%s, sick_hours=%s,
                    child_sick_hours=%s, short_work_hours=%s, vacation_hours=%s
                WHERE employee_id=%s AND day_date=%s
                """,
                [
                    (
                        d.plan_hours,
                        d.overtime_delta,
                        d.forced_overflow,
                        d.sick_hours,
                        d.child_sick_hours,
                        d.short_work_hours,
                        d.vacation_hours,
                        int(employee_id),
                        d.day_date,
                    )
                    for d in days
                ],
            )
            return len(days)

    def delete_for_date(self, employee_id: int, day_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM daily_days WHERE employee_id=%s AND day_date=%s", (int(employee_id), day_date))
            return cur.rowcount > 0

    def set_admin_change(self, employee_id: int, day_date: date, change: Optional[AdminChange]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE daily_days
                SET admin_last_change_at=%s, admin_last_change_by=%s,
                    admin_last_change_type=%s, admin_last_change_summary=%s
                WHERE employee_id=%s AND day_date=%s
                """,
                (
                    change.at if change else None,
                    change.by if change else None,
                    change.change_type if change else None,
                    change.summary if change else None,
                    int(employee_id),
                    day_date,
                ),
            )
