"""Example: run the overtime reconciliation without Flask or a database.

Controllers are a thin layer; the calculation lives in plain functions.
"""

from datetime import date

from src.zeitkonto.zeitkonto.overtime.engine import recalculate
from src.zeitkonto.zeitkonto.overtime.model import DayEntry, EmployeeOvertimeSettings
from src.zeitkonto.zeitkonto.timecalc.calculator import compute_net_hours


def main():
    print(compute_net_hours("08:00", "12:00", "12:30", "17:00", "30"))

    entries = [
        DayEntry(day_date=date(2025, 3, 3), kommt1="08:00", geht1="18:00", pause="45", plan_hours=8.0),
        DayEntry(day_date=date(2025, 3, 4), kommt1="08:00", geht1="14:00", pause="Keine", plan_hours=8.0),
        DayEntry(day_date=date(2025, 3, 5), code="U", plan_hours=8.0),
    ]
    result = recalculate(entries, EmployeeOvertimeSettings(max_minus_hours=10.0, max_overtime_hours=1.0))
    print(f"balance={result.balance_hours:.2f} h payout_bank={result.payout_bank_hours:.2f} h")
    for day in result.updated_days:
        print(day.day_date, f"delta={day.overtime_delta:+.2f}", f"forced={day.forced_overflow:+.2f}")


if __name__ == "__main__":
    main()
