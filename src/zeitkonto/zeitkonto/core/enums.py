from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role used for admin-only actions."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AbsenceCode(str, Enum):
    """Day code that overrides punch-derived hours.

    Stored as free text on the day record; ``parse`` maps unknown or empty
    values to ``REGULAR`` so a bad code never aborts a recompute.
    """

    REGULAR = ""
    VACATION = "U"
    HALF_VACATION = "UH"
    SICK = "K"
    CHILD_SICK = "KK"
    SICK_REDUCED = "KR"
    CHILD_SICK_REDUCED = "KKR"
    SHORT_WORK = "KU"
    HOLIDAY = "FT"
    UNPAID_LEAVE = "UBF"

    @classmethod
    def parse(cls, value: str | None) -> "AbsenceCode":
        normalized = (value or "").strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            return cls.REGULAR

    @property
    def is_absence(self) -> bool:
        return self is not AbsenceCode.REGULAR


class ClosingStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class PayoutRequestStatus(str, Enum):
    """Approval states of an overtime payout request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveRequestType(str, Enum):
    VACATION = "vacation"
    OVERTIME = "overtime"

    @property
    def plan_label(self) -> str:
        """Label written onto the shift plan when the request is approved."""
        return "Urlaub" if self is LeaveRequestType.VACATION else "Überstundenabbau"


class LeaveRequestStatus(str, Enum):
    """Stored states; a cancelled request is ``REJECTED`` with ``cancelled_at`` set."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
