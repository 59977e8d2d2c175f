from __future__ import annotations

from ..core.exceptions import ValidationError


def require_month(year: int, month: int) -> tuple[int, int]:
    if int(year) < 1970 or int(year) > 9999:
        raise ValidationError("Ungültiges Jahr")
    if int(month) < 1 or int(month) > 12:
        raise ValidationError("Ungültiger Monat")
    return int(year), int(month)


def require_positive_hours(value: float, field_name: str) -> float:
    hours = round(float(value), 2)
    if hours <= 0:
        raise ValidationError(f"{field_name} muss größer als 0 sein")
    return hours
