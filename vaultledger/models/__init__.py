"""Data models for VaultLedger."""

from vaultledger.models.vault import Vault
from vaultledger.models.tranche import Tranche
from vaultledger.models.position import Position
from vaultledger.models.activity import Activity

__all__ = [
    "Activity",
    "Position",
    "Tranche",
    "Vault",
]
