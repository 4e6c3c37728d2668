"""Activity log data model."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class Activity(BaseModel):
    """Represents a buy or sell recorded in the activity feed."""

    id: Optional[int] = Field(default=None, description="Database ID")
    type: Literal["buy", "sell"] = Field(..., description="Activity type")
    user_id: str = Field(..., min_length=1, description="User who acted")
    vault_id: int = Field(..., ge=1, description="Vault involved")
    vault_name: str = Field(default="", description="Vault name at the time")
    amount: Optional[float] = Field(default=None, ge=0, description="USDC deposited (buys)")
    shares: float = Field(..., gt=0, description="Shares bought or sold")
    net_value: Optional[float] = Field(default=None, description="USDC received after fee (sells)")
    fee: Optional[float] = Field(default=None, ge=0, description="Exit fee charged (sells)")
    timestamp: datetime = Field(..., description="When the activity happened")

    model_config = {"frozen": True}
