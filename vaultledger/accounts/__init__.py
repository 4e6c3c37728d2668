"""Account implementations for VaultLedger."""

from vaultledger.accounts.base import ActionResult, Balance, BaseAccount, PositionSummary
from vaultledger.accounts.demo import DemoAccount

__all__ = [
    "ActionResult",
    "Balance",
    "BaseAccount",
    "DemoAccount",
    "PositionSummary",
]
