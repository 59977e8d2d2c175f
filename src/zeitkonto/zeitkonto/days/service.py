from __future__ import annotations

import logging
import threading
from contextlib import contextmanager, nullcontext
from datetime import date, datetime
from typing import Callable, ContextManager, Iterator, Optional, Sequence

from ..closing.repository import MonthlyClosingRepository
from ..common.datetime_utils import now_local
from ..common.numbers import round_hours
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_PAUSE_TOKEN, ENTRY_HOURS_TOLERANCE
from ..core.enums import AbsenceCode, ClosingStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..overtime.engine import recalculate
from ..overtime.model import DayEntry, RecalculationResult
from ..shiftplan.model import PlanHoursInfo
from ..shiftplan.service import ShiftPlanService, build_plan_hours, derive_code_from_plan_label
from ..timecalc.calculator import compute_net_hours, legal_pause_hours
from .model import Actor, AdminChange, DailyDayRecord, SaveTimeEntryResult, TimeEntryInput
from .repository import DailyDayRepository
from .validation import validate_time_entry

logger = logging.getLogger(__name__)

# Codes that never get a meal allowance.
MEAL_BLOCKED_CODES = frozenset({"U", "UH", "UBF", "K", "KK", "KR", "KKR", "KU", "FT"})
_EMPTY_TIME_VALUES = frozenset({"", "00:00", "0", "0:00", "0min", "0min.", "keine"})

_TRACKED_FIELDS: tuple[tuple[str, str], ...] = (
    ("kommt1", "Kommt 1"),
    ("geht1", "Geht 1"),
    ("kommt2", "Kommt 2"),
    ("geht2", "Geht 2"),
    ("pause", "Pause"),
    ("mittag", "Mittag"),
    ("code", "Code"),
    ("shift_label", "Schicht"),
    ("note", "Notiz"),
)


def _is_empty_time(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _EMPTY_TIME_VALUES


def _normalized(field_name: str, value) -> Optional[str]:
    text = (str(value) if value is not None else "").strip()
    if not text:
        return None
    return text.upper() if field_name == "code" else text


def build_admin_change_summary(existing: Optional[DailyDayRecord], new: DailyDayRecord) -> Optional[tuple[str, str]]:
    """Return ``(change_type, summary)`` for an admin edit, or None if nothing changed."""
    if existing is None:
        filled = [
            f"{label}: {_normalized(name, getattr(new, name))}"
            for name, label in _TRACKED_FIELDS
            if _normalized(name, getattr(new, name)) is not None
        ]
        return "create", ", ".join(filled) or "Eintrag angelegt"

    changes = []
    for name, label in _TRACKED_FIELDS:
        before = _normalized(name, getattr(existing, name))
        after = _normalized(name, getattr(new, name))
        if before != after:
            changes.append(f"{label}: {before or '—'} → {after or '—'}")
    if not changes:
        return None
    return "update", ", ".join(changes)


class TimeEntryService:
    def __init__(
        self,
        days: DailyDayRepository,
        employees: EmployeeRepository,
        shift_plans: ShiftPlanService,
        closings: MonthlyClosingRepository,
        *,
        clock: Callable[[], datetime] = now_local,
        transaction: Callable[[], ContextManager] = nullcontext,
    ):
        self._days = days
        self._employees = employees
        self._shift_plans = shift_plans
        self._closings = closings
        self._clock = clock
        self._transaction = transaction
        # employee_id -> [lock, holders]; dropped when the last holder leaves.
        self._locks: dict[int, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _employee_lock(self, employee_id: int) -> Iterator[None]:
        # One reconciliation per employee at a time; the fold is order-dependent.
        key = int(employee_id)
        with self._locks_guard:
            slot = self._locks.setdefault(key, [threading.RLock(), 0])
            slot[1] += 1
        try:
            with slot[0]:
                yield
        finally:
            with self._locks_guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[key]

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Mitarbeiter nicht gefunden")
        return employee

    def _require_open_month(self, employee_id: int, day_date: date) -> None:
        closing = self._closings.get(employee_id=int(employee_id), year=day_date.year, month=day_date.month)
        if closing and closing.status == ClosingStatus.CLOSED:
            raise ValidationError("Der Monat ist bereits abgeschlossen und kann nicht mehr bearbeitet werden")

    def _plan_hours_with_pause(self, plan_info: Optional[PlanHoursInfo], employee: Employee) -> tuple[float, int]:
        """Plan hours after the enforced pause, and the enforced pause in minutes."""
        if not plan_info:
            return 0.0, 0
        base_required = max(plan_info.required_pause_minutes or 0, 0)
        legal_minutes = legal_pause_hours(plan_info.raw_hours) * 60
        mandatory = max(employee.min_pause_under6_minutes or 0, 0)

        enforced = max(base_required, legal_minutes)
        if legal_minutes >= 30 and mandatory > enforced:
            enforced = mandatory

        net = max(plan_info.raw_hours - enforced / 60, 0.0)
        return round_hours(net), round(enforced)

    def save_time_entry(self, entry: TimeEntryInput, *, performed_by: Actor) -> SaveTimeEntryResult:
        employee = self._require_employee(entry.employee_id)
        self._require_open_month(employee.employee_id, entry.day_date)

        plan_info = self._shift_plans.plan_info_for_day(employee_id=employee.employee_id, day_date=entry.day_date)
        code = (entry.code or "").strip().upper()

        check = validate_time_entry(
            kommt1=entry.kommt1,
            geht1=entry.geht1,
            kommt2=entry.kommt2,
            geht2=entry.geht2,
            pause=entry.pause,
            code=code,
            mittag=entry.mittag,
            plan_info=plan_info,
            min_pause_under6_minutes=employee.min_pause_under6_minutes,
            requires_meal_flag=employee.requires_meal_flag,
        )
        if not check.ok:
            raise ValidationError(" ".join(check.errors))

        record = self._normalize_entry(entry, code=code, plan_info=plan_info, employee=employee)

        with self._employee_lock(employee.employee_id):
            existing = self._days.get_for_employee_and_date(employee.employee_id, entry.day_date)
            records = [
                r for r in self._days.list_for_employee(employee.employee_id) if r.day_date != entry.day_date
            ]
            records.append(record)

            # Reconcile before writing so a balance-limit failure leaves no partial writes.
            result = self._reconcile(employee, records)

            with self._transaction():
                day_id = self._days.upsert(record)
                self._persist(employee.employee_id, records, result)
                self._record_admin_change(existing, record, performed_by)

        logger.info(
            "Saved time entry employee=%s day=%s code=%s balance=%.2f",
            employee.employee_id,
            entry.day_date.isoformat(),
            record.code or "-",
            result.balance_hours,
        )
        return SaveTimeEntryResult(
            day_id=day_id,
            warnings=list(check.warnings),
            balance_hours=result.balance_hours,
            payout_bank_hours=result.payout_bank_hours,
        )

    def _record_admin_change(
        self, existing: Optional[DailyDayRecord], record: DailyDayRecord, performed_by: Actor
    ) -> None:
        if performed_by.role != Role.ADMIN:
            self._days.set_admin_change(record.employee_id, record.day_date, None)
            return
        summary = build_admin_change_summary(existing, record)
        if summary:
            change_type, text = summary
            name = (performed_by.name or "").strip() or "Admin"
            self._days.set_admin_change(
                record.employee_id,
                record.day_date,
                AdminChange(at=self._clock(), by=name, change_type=change_type, summary=text),
            )

    def _normalize_entry(
        self,
        entry: TimeEntryInput,
        *,
        code: str,
        plan_info: Optional[PlanHoursInfo],
        employee: Employee,
    ) -> DailyDayRecord:
        kommt1, geht1, kommt2, geht2 = entry.kommt1, entry.geht1, entry.kommt2, entry.geht2
        pause = entry.pause or DEFAULT_PAUSE_TOKEN
        mittag = "Ja" if (entry.mittag or "").strip().lower() == "ja" else "Nein"

        ist = compute_net_hours(kommt1, geht1, kommt2, geht2, pause)
        plan_hours, required_pause_minutes = self._plan_hours_with_pause(plan_info, employee)
        plan_hours_for_save = plan_hours

        sick = child_sick = short_work = vacation = holiday = 0.0
        zero_times = False

        matches_plan_times = bool(
            plan_info
            and plan_info.start
            and plan_info.end
            and (kommt1 or "") == plan_info.start
            and (geht1 or "") == plan_info.end
            and _is_empty_time(kommt2)
            and _is_empty_time(geht2)
        )

        parsed = AbsenceCode.parse(code)
        if parsed is AbsenceCode.VACATION:
            zero_times = True
            vacation = plan_hours
        elif parsed is AbsenceCode.HALF_VACATION:
            half = plan_hours / 2
            if half > 0 and ist.net_hours > half + ENTRY_HOURS_TOLERANCE:
                raise ValidationError(
                    "Bei halbem Urlaub darf maximal die Hälfte der Sollzeit gearbeitet werden. "
                    "Bitte Zeiten oder Code anpassen."
                )
            vacation = half
        elif parsed is AbsenceCode.SICK:
            zero_times = True
            sick = plan_hours
        elif parsed is AbsenceCode.CHILD_SICK:
            zero_times = True
            child_sick = plan_hours
        elif parsed is AbsenceCode.SHORT_WORK:
            zero_times = True
            short_work = plan_hours
            plan_hours_for_save = 0.0
        elif parsed is AbsenceCode.SICK_REDUCED:
            sick = max(plan_hours - ist.net_hours, 0.0)
            # Reduced sickness covering the whole planned shift is a full sick day.
            if plan_hours > 0 and abs(sick - plan_hours) < ENTRY_HOURS_TOLERANCE and matches_plan_times:
                code, zero_times, sick = AbsenceCode.SICK.value, True, plan_hours
        elif parsed is AbsenceCode.CHILD_SICK_REDUCED:
            child_sick = max(plan_hours - ist.net_hours, 0.0)
            if plan_hours > 0 and abs(child_sick - plan_hours) < ENTRY_HOURS_TOLERANCE and matches_plan_times:
                code, zero_times, child_sick = AbsenceCode.CHILD_SICK.value, True, plan_hours
        elif parsed is AbsenceCode.HOLIDAY:
            if ist.net_hours <= ENTRY_HOURS_TOLERANCE:
                holiday = plan_hours
                zero_times = True
        elif parsed is AbsenceCode.UNPAID_LEAVE:
            zero_times = True
            plan_hours_for_save = 0.0
        elif code == "Ü":
            if matches_plan_times and _is_empty_time(pause):
                zero_times = True

        if zero_times:
            kommt1, geht1, kommt2, geht2, pause = "00:00", "00:00", None, None, DEFAULT_PAUSE_TOKEN
            mittag = "Nein"
        if code in MEAL_BLOCKED_CODES:
            mittag = "Nein"

        return DailyDayRecord(
            day_id=None,
            employee_id=employee.employee_id,
            day_date=entry.day_date,
            kommt1=kommt1,
            geht1=geht1,
            kommt2=kommt2,
            geht2=geht2,
            pause=pause,
            code=code or None,
            note=(entry.note or "").strip() or None,
            mittag=mittag,
            shift_label=(entry.shift_label or "").strip(),
            sick_hours=sick,
            child_sick_hours=child_sick,
            short_work_hours=short_work,
            vacation_hours=vacation,
            holiday_hours=holiday,
            overtime_delta=0.0,
            plan_hours=plan_hours_for_save,
            forced_overflow=0.0,
            required_pause_minutes=required_pause_minutes,
        )

    def delete_time_entry(self, employee_id: int, day_date: date) -> RecalculationResult:
        employee = self._require_employee(employee_id)
        self._require_open_month(employee.employee_id, day_date)

        with self._employee_lock(employee.employee_id):
            records = [r for r in self._days.list_for_employee(employee.employee_id) if r.day_date != day_date]
            result = self._reconcile(employee, records)
            with self._transaction():
                if not self._days.delete_for_date(employee.employee_id, day_date):
                    raise NotFoundError("Kein Eintrag für dieses Datum vorhanden")
                self._persist(employee.employee_id, records, result)

        logger.info("Deleted time entry employee=%s day=%s", employee.employee_id, day_date.isoformat())
        return result

    def list_time_entries(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
        rows = self._days.list_for_employee(int(employee_id), limit=int(limit))
        return [self._to_view(r) for r in rows]

    def recompute_employee_overtime(self, employee_id: int) -> RecalculationResult:
        employee = self._require_employee(employee_id)
        with self._employee_lock(employee.employee_id):
            records = list(self._days.list_for_employee(employee.employee_id))
            result = self._reconcile(employee, records)
            with self._transaction():
                self._persist(employee.employee_id, records, result)

        logger.info(
            "Recomputed overtime employee=%s days=%d updated=%d balance=%.2f payout_bank=%.2f",
            employee.employee_id,
            len(records),
            len(result.updated_days),
            result.balance_hours,
            result.payout_bank_hours,
        )
        return result

    def _reconcile(self, employee: Employee, records: Sequence[DailyDayRecord]) -> RecalculationResult:
        if not records:
            return RecalculationResult()

        plan = self._shift_plans.load_plan(employee.employee_id)
        entries: list[DayEntry] = [r.to_day_entry() for r in records]

        # Planned absences (e.g. "Urlaub" in the shift plan) count even without a time entry.
        # Only plan days up to today count. A synthetic "FT" is credited its plan hours
        # as holiday hours, same as a saved holiday record.
        today = self._clock().date()
        record_dates = {r.day_date for r in records}
        for day_date, plan_day in plan.items():
            if day_date in record_dates or day_date > today:
                continue
            synthetic_code = derive_code_from_plan_label(plan_day.label)
            if not synthetic_code:
                continue
            soll = build_plan_hours(plan_day.start, plan_day.end, plan_day.required_pause_minutes).soll_hours
            if soll <= 0.001:
                continue
            entries.append(
                DayEntry(
                    day_date=day_date,
                    code=synthetic_code,
                    plan_hours=soll,
                    holiday_hours=soll if synthetic_code == AbsenceCode.HOLIDAY.value else 0.0,
                    pause=DEFAULT_PAUSE_TOKEN,
                    shift_label=plan_day.label,
                )
            )

        return recalculate(
            entries,
            employee.overtime_settings(),
            plan_hours_provider=self._shift_plans.plan_hours_provider(plan),
        )

    def _persist(self, employee_id: int, records: Sequence[DailyDayRecord], result: RecalculationResult) -> None:
        record_dates = {r.day_date for r in records}
        real_updates = [d for d in result.updated_days if d.day_date in record_dates]
        self._days.apply_recalculation(employee_id, real_updates)
        self._employees.update_overtime_balance(
            employee_id=employee_id,
            balance_hours=result.balance_hours,
            payout_bank_hours=result.payout_bank_hours,
        )

    def _to_view(self, r: DailyDayRecord) -> dict:
        code = AbsenceCode.parse(r.code)
        if code in (AbsenceCode.VACATION, AbsenceCode.UNPAID_LEAVE):
            ist_hours = 0.0
        else:
            ist_hours = compute_net_hours(r.kommt1, r.geht1, r.kommt2, r.geht2, r.pause or DEFAULT_PAUSE_TOKEN).net_hours

        return {
            "day_id": r.day_id,
            "day_date": r.day_date.strftime("%Y-%m-%d"),
            "kommt1": r.kommt1,
            "geht1": r.geht1,
            "kommt2": r.kommt2,
            "geht2": r.geht2,
            "pause": r.pause,
            "code": r.code,
            "note": r.note,
            "mittag": r.mittag,
            "shift_label": r.shift_label,
            "ist_hours": ist_hours,
            "plan_hours": r.plan_hours,
            "overtime_delta": r.overtime_delta,
            "forced_overflow": r.forced_overflow,
            "sick_hours": r.sick_hours,
            "child_sick_hours": r.child_sick_hours,
            "short_work_hours": r.short_work_hours,
            "vacation_hours": r.vacation_hours,
            "holiday_hours": r.holiday_hours,
            "admin_last_change": (
                {
                    "at": r.admin_last_change_at.isoformat() if r.admin_last_change_at else None,
                    "by": r.admin_last_change_by,
                    "type": r.admin_last_change_type,
                    "summary": r.admin_last_change_summary,
                }
                if r.admin_last_change_type
                else None
            ),
        }
