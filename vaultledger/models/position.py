"""Position data model."""

from datetime import datetime

from pydantic import BaseModel, Field

from vaultledger.models.tranche import Tranche


class Position(BaseModel):
    """A user's holding in one vault, made of ordered deposit tranches.

    Totals are derived from the tranches so they can never drift from
    them. Tranches are kept oldest first. ``total_invested`` is the cost
    basis of the shares still held, not the lifetime amount deposited:
    every sell lowers it by the cost basis it releases.
    """

    user_id: str = Field(..., min_length=1, description="Owner of the position")
    vault_id: int = Field(..., ge=1, description="Vault the shares belong to")
    tranches: tuple[Tranche, ...] = Field(default=(), description="Deposit tranches, oldest first")

    model_config = {"frozen": True}

    @property
    def total_shares(self) -> float:
        return sum(t.shares for t in self.tranches)

    @property
    def total_invested(self) -> float:
        """Cost basis of the shares still held."""
        return sum(t.amount for t in self.tranches)

    @property
    def is_empty(self) -> bool:
        return not self.tranches

    def unlocked_shares(self, now: datetime) -> float:
        return sum(t.shares for t in self.tranches if t.is_unlocked(now))
