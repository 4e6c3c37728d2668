"""Position ledger: tranche bookkeeping, unlocking and valuation."""

from vaultledger.ledger.errors import (
    InsufficientUnlockedShares,
    InvalidAmount,
    LedgerError,
    PositionNotFound,
)
from vaultledger.ledger.ledger import DepositResult, PositionLedger, WithdrawResult
from vaultledger.ledger import valuation

__all__ = [
    "DepositResult",
    "InsufficientUnlockedShares",
    "InvalidAmount",
    "LedgerError",
    "PositionLedger",
    "PositionNotFound",
    "WithdrawResult",
    "valuation",
]
