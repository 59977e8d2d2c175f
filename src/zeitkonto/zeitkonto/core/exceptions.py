class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, record or request does not exist."""


class BalanceLimitError(DomainError):
    """Raised when a deficit would push the balance below the minus-hours floor.

    Callers must abort persistence entirely when this is raised.
    """

    def __init__(self, *, max_minus_hours: float, balance_hours: float):
        self.max_minus_hours = max_minus_hours
        self.balance_hours = balance_hours
        super().__init__(
            "Minusstunden-Limit überschritten: "
            f"höchstens {max_minus_hours:.2f} h erlaubt, Saldo wäre {balance_hours:.2f} h"
        )
