from __future__ import annotations

from dataclasses import dataclass

from ..overtime.model import EmployeeOvertimeSettings


@dataclass(frozen=True)
class Employee:
    """Employee with the working-time settings the back office needs."""

    employee_id: int
    full_name: str
    max_minus_hours: float = 0.0
    max_overtime_hours: float = 0.0
    overtime_balance: float = 0.0
    payout_bank_hours: float = 0.0
    min_pause_under6_minutes: int = 0
    requires_meal_flag: bool = False

    def overtime_settings(self) -> EmployeeOvertimeSettings:
        return EmployeeOvertimeSettings(
            max_minus_hours=self.max_minus_hours,
            max_overtime_hours=self.max_overtime_hours,
        )
