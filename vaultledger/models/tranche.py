"""Tranche data model."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Tranche(BaseModel):
    """Shares received from a single deposit, locked until ``unlock_date``."""

    amount: float = Field(..., ge=0, description="Cost basis in USDC")
    shares: float = Field(..., gt=0, description="Vault shares held")
    unlock_date: datetime = Field(..., description="When the shares become withdrawable")
    created_at: Optional[datetime] = Field(default=None, description="Deposit timestamp")

    model_config = {"frozen": True}

    def is_unlocked(self, now: datetime) -> bool:
        return self.unlock_date <= now
