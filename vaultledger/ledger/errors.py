"""Errors raised by the position ledger.

All of them are validation failures: retrying with the same inputs fails
the same way, and no ledger state changes when one is raised.
"""

from typing import Optional


class LedgerError(ValueError):
    """Base class for rejected ledger operations."""


class InvalidAmount(LedgerError):
    """Raised when an amount, share count or price is not a finite positive number."""

    def __init__(self, field: str, value: float, message: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(message or f"{field} must be positive, got {value}")


class InsufficientUnlockedShares(LedgerError):
    """Raised when a withdrawal asks for more shares than are unlocked."""

    def __init__(self, requested: float, available: float, message: Optional[str] = None):
        self.requested = requested
        self.available = available
        super().__init__(
            message
            or f"Insufficient unlocked shares. Requested: {requested:.4f}, Available: {available:.4f}"
        )


class PositionNotFound(InsufficientUnlockedShares):
    """Raised when withdrawing from a vault the user holds nothing in."""

    def __init__(self, user_id: str, vault_id: int, requested: float):
        self.user_id = user_id
        self.vault_id = vault_id
        super().__init__(
            requested=requested,
            available=0.0,
            message=f"No position for user {user_id!r} in vault {vault_id}",
        )
