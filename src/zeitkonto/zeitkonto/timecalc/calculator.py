"""Working-time arithmetic for punch fields.

Everything here processes user-entered free text from the time-entry form,
so malformed values degrade to ``None``/``0`` instead of raising.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..common.numbers import round_hours
from ..core.constants import (
    LEGAL_PAUSE_LONG_HOURS,
    LEGAL_PAUSE_SHORT_HOURS,
    LEGAL_PAUSE_THRESHOLD_LONG_HOURS,
    LEGAL_PAUSE_THRESHOLD_SHORT_HOURS,
    MAX_DECLARED_PAUSE_MINUTES,
)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_PAUSE_RE = re.compile(r"^(\d+)\s*(?:min\.?|minuten)?$")
_NO_PAUSE_TOKENS = {"keine", "0", "0min", "0min.", "0 min", "0 minuten"}


@dataclass(frozen=True)
class ParsedTime:
    hour: int
    minute: int


@dataclass(frozen=True)
class NetHours:
    raw_hours: float
    effective_pause_hours: float
    net_hours: float


def parse_time(value: Optional[str]) -> Optional[ParsedTime]:
    """Parse ``HH:MM`` (single-digit hour allowed). Returns None when invalid."""
    if not value:
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return ParsedTime(hour=hour, minute=minute)


def time_to_decimal_hours(value: Optional[ParsedTime]) -> float:
    if value is None:
        return 0.0
    return value.hour + value.minute / 60


def pause_to_hours(token: Optional[str]) -> float:
    """Map a declared pause (``"Keine"``, ``"30min"``, ``"45min."``, ``"15"``) to hours."""
    normalized = (token or "").strip().lower()
    if not normalized or normalized in _NO_PAUSE_TOKENS:
        return 0.0
    match = _PAUSE_RE.match(normalized)
    if not match:
        return 0.0
    minutes = min(max(int(match.group(1)), 0), MAX_DECLARED_PAUSE_MINUTES)
    return minutes / 60


def pause_to_minutes(token: Optional[str]) -> float:
    return pause_to_hours(token) * 60


def legal_pause_hours(raw_span_hours: float) -> float:
    if raw_span_hours > LEGAL_PAUSE_THRESHOLD_LONG_HOURS:
        return LEGAL_PAUSE_LONG_HOURS
    if raw_span_hours > LEGAL_PAUSE_THRESHOLD_SHORT_HOURS:
        return LEGAL_PAUSE_SHORT_HOURS
    return 0.0


def span_hours(start: Optional[str], end: Optional[str]) -> float:
    """Duration of one in/out span; an end before the start rolls past midnight."""
    start_time = parse_time(start)
    end_time = parse_time(end)
    if start_time is None or end_time is None:
        return 0.0
    diff = time_to_decimal_hours(end_time) - time_to_decimal_hours(start_time)
    if diff < 0:
        diff += 24
    return max(diff, 0.0)


def compute_net_hours(
    kommt1: Optional[str],
    geht1: Optional[str],
    kommt2: Optional[str],
    geht2: Optional[str],
    pause: Optional[str],
) -> NetHours:
    raw = span_hours(kommt1, geht1) + span_hours(kommt2, geht2)
    effective_pause = max(pause_to_hours(pause), legal_pause_hours(raw))
    net = max(raw - effective_pause, 0.0)
    return NetHours(
        raw_hours=round_hours(raw),
        effective_pause_hours=round_hours(effective_pause),
        net_hours=round_hours(net),
    )

