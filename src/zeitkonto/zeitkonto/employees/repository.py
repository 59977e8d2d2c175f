from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def update_overtime_balance(
        self,
        *,
        employee_id: int,
        balance_hours: float,
        payout_bank_hours: float,
    ) -> bool:
        raise NotImplementedError
