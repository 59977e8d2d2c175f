"""Plausibility checks for a submitted time entry.

Never raises: callers decide whether errors block the save. Warnings are
informational only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.constants import ENTRY_HOURS_TOLERANCE
from ..core.enums import AbsenceCode
from ..shiftplan.model import PlanHoursInfo
from ..timecalc.calculator import (
    ParsedTime,
    compute_net_hours,
    legal_pause_hours,
    parse_time,
    pause_to_minutes,
    time_to_decimal_hours,
)

# "Ü" (overtime reduction day) counts as an absence here but not in the engine.
ABSENCE_CODES = frozenset({c.value for c in AbsenceCode if c.is_absence} | {"Ü"})
PAUSE_SLACK_MINUTES = 0.9


@dataclass(frozen=True)
class TimeEntryValidation:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    ist_hours: float = 0.0
    raw_hours: float = 0.0
    pause_minutes: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.errors


def _fmt_hours(value: float) -> str:
    return f"{value:.2f}".replace(".", ",")


def _to_minutes(value: Optional[ParsedTime]) -> Optional[int]:
    return round(time_to_decimal_hours(value) * 60) if value else None


def validate_time_entry(
    *,
    kommt1: Optional[str],
    geht1: Optional[str],
    kommt2: Optional[str],
    geht2: Optional[str],
    pause: Optional[str],
    code: Optional[str],
    mittag: Optional[str] = None,
    plan_info: Optional[PlanHoursInfo] = None,
    min_pause_under6_minutes: int = 0,
    requires_meal_flag: bool = False,
) -> TimeEntryValidation:
    code = (code or "").strip().upper()
    mittag = (mittag or "").strip()
    pause_minutes = pause_to_minutes(pause)

    k1 = _to_minutes(parse_time(kommt1))
    g1 = _to_minutes(parse_time(geht1))
    k2 = _to_minutes(parse_time(kommt2))
    g2 = _to_minutes(parse_time(geht2))

    errors: list[str] = []
    warnings: list[str] = []

    if (k1 is None) != (g1 is None):
        errors.append("Bitte Kommt 1 und Geht 1 vollständig eintragen.")
    if (k2 is None) != (g2 is None):
        errors.append("Bitte Kommt 2 und Geht 2 vollständig eintragen oder beide leer lassen.")

    if k1 is not None and g1 is not None and k1 >= g1:
        errors.append("Geht 1 muss nach Kommt 1 liegen.")

    if k2 is not None and g2 is not None:
        if k2 >= g2:
            errors.append("Geht 2 muss nach Kommt 2 liegen.")
        if k1 is not None and g1 is not None and g1 > k2:
            errors.append("Kommt 2 muss nach Geht 1 liegen. Bitte die Zeiten prüfen.")

    ist = compute_net_hours(kommt1, geht1, kommt2, geht2, pause)
    absence = code in ABSENCE_CODES

    if not absence and ist.net_hours <= ENTRY_HOURS_TOLERANCE:
        errors.append(
            "Kein gültiger Arbeitszeitraum erfasst. Bitte Kommt- und Gehtzeiten eintragen "
            "oder einen passenden Code wählen (z. B. U, KR)."
        )

    plan_soll = plan_info.soll_hours if plan_info else 0.0
    if not absence and plan_soll > 0 and ist.net_hours + ENTRY_HOURS_TOLERANCE < plan_soll:
        message = (
            f"Es wurden {_fmt_hours(ist.net_hours)} h erfasst, geplant waren {_fmt_hours(plan_soll)} h."
        )
        if not code:
            errors.append(f"{message} Bitte gib im Feld Code einen Grund an.")
        else:
            warnings.append(message)

    if not absence:
        legal_minutes = legal_pause_hours(ist.raw_hours) * 60
        if legal_minutes >= 30 and pause_minutes + PAUSE_SLACK_MINUTES < legal_minutes:
            errors.append(
                f"Bei {_fmt_hours(ist.raw_hours)} h Arbeitszeit sind gemäß § 4 ArbZG mindestens "
                f"{legal_minutes:.0f} Minuten Pause erforderlich."
            )

        required = plan_info.required_pause_minutes if plan_info else 0
        if required and code == "RA" and pause_minutes + PAUSE_SLACK_MINUTES < required:
            errors.append(
                f"Der Schichtplan verlangt mindestens {required} Minuten Pause, "
                f"erfasst sind jedoch nur {pause_minutes:.0f} Minuten."
            )

        plan_has_explicit_zero_pause = plan_info is not None and plan_info.required_pause_minutes == 0
        mandatory = max(min_pause_under6_minutes or 0, 0)
        if (
            code == "RA"
            and mandatory > legal_minutes
            and legal_minutes >= 30
            and pause_minutes + PAUSE_SLACK_MINUTES < mandatory
            and not plan_has_explicit_zero_pause
        ):
            errors.append(f"Für Dienste mit gesetzlicher Pause sind mindestens {mandatory} Minuten hinterlegt.")

    if requires_meal_flag and not absence and ist.raw_hours > 6:
        if mittag.lower() != "ja":
            errors.append("Da Sachbezug Verpflegung aktiviert ist, muss „Verpflegung“ auf „Ja“ gesetzt werden.")
        elif pause_minutes < 30:
            warnings.append("Verpflegung wurde bestätigt, die erfasste Pause liegt jedoch unter 30 Minuten.")

    return TimeEntryValidation(
        errors=errors,
        warnings=warnings,
        ist_hours=ist.net_hours,
        raw_hours=ist.raw_hours,
        pause_minutes=pause_minutes,
    )
