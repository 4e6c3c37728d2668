"""Vault data model."""

from pydantic import BaseModel, Field


class Vault(BaseModel):
    """Represents an investment vault and its current pricing parameters."""

    id: int = Field(..., ge=1, description="Vault identifier")
    name: str = Field(..., min_length=1, description="Display name")
    manager: str = Field(default="", description="Manager handle or address")
    nav: float = Field(..., gt=0, description="Net asset value per share")
    exit_fee_percent: float = Field(
        default=1.0, ge=0, le=100, description="Exit fee charged on withdrawals"
    )
    lockup_days: int = Field(default=7, ge=0, description="Lockup period per deposit")
    tvl: float = Field(default=0.0, ge=0, description="Total value locked")
    nav_history: tuple[float, ...] = Field(
        default=(), description="Past NAV values, oldest first"
    )

    model_config = {"frozen": True}

    @property
    def performance_percent(self) -> float:
        """NAV change across the recorded history, in percent."""
        if len(self.nav_history) < 2 or self.nav_history[0] <= 0:
            return 0.0
        return (self.nav_history[-1] / self.nav_history[0] - 1) * 100
