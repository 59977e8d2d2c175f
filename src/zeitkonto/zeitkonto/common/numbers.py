from __future__ import annotations

import math
from decimal import Decimal
from typing import Any

from ..core.constants import RECONCILIATION_EPSILON


def to_hours(value: Any, default: float = 0.0) -> float:
    """Coerce a stored hour value (None, Decimal, str, number) to float.

    Non-finite or unparsable values fall back to ``default``.
    """

    if value is None:
        return default
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError:
            return default
    else:
        return default
    return number if math.isfinite(number) else default


def almost_equal(a: float, b: float, tolerance: float = RECONCILIATION_EPSILON) -> bool:
    return abs(a - b) <= tolerance


def round_hours(value: float) -> float:
    return round(float(value), 2)
