"""Base account interface for VaultLedger."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from vaultledger.models import Activity


class ActionResult(BaseModel):
    """Represents the result of a buy or sell action."""

    status: Literal["COMPLETE", "REJECTED"] = Field(..., description="Action status")
    vault_id: int = Field(..., description="Vault acted on")
    amount: float = Field(default=0.0, ge=0, description="USDC deposited (buys)")
    shares: float = Field(default=0.0, ge=0, description="Shares bought or sold")
    net_value: float = Field(default=0.0, description="USDC received (sells)")
    fee: float = Field(default=0.0, ge=0, description="Exit fee charged (sells)")
    unlock_date: Optional[datetime] = Field(default=None, description="Unlock date of a new tranche")
    closed: bool = Field(default=False, description="Whether a sell closed the position")
    message: str = Field(default="", description="Status message")

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.status == "COMPLETE"


class PositionSummary(BaseModel):
    """Display-ready view of one position."""

    vault_id: int = Field(..., description="Vault ID")
    vault_name: str = Field(..., description="Vault name")
    nav: float = Field(..., gt=0, description="Current NAV")
    total_shares: float = Field(..., ge=0, description="Shares held")
    unlocked_shares: float = Field(..., ge=0, description="Shares withdrawable now")
    total_invested: float = Field(..., ge=0, description="Cost basis")
    value: float = Field(..., ge=0, description="Shares times NAV")
    pnl: float = Field(..., description="Unrealized profit/loss")
    pnl_percent: float = Field(..., description="Unrealized profit/loss percentage")
    next_unlock: Optional[datetime] = Field(default=None, description="Earliest pending unlock")
    status: str = Field(..., description="Unlock status text")
    tranche_count: int = Field(..., ge=0, description="Number of tranches")

    model_config = {"frozen": True}


class Balance(BaseModel):
    """Represents account balance information."""

    available_cash: float = Field(..., description="Spendable USDC")
    invested: float = Field(..., ge=0, description="Cost basis of open positions")
    positions_value: float = Field(..., ge=0, description="Open positions at current NAV")
    total_value: float = Field(..., description="Cash plus positions value")

    model_config = {"frozen": True}


class BaseAccount(ABC):
    """Abstract base class for vault accounts.

    An account owns a wallet balance and a set of vault positions and
    applies buy/sell actions to both.
    """

    @abstractmethod
    def buy(self, vault_id: int, amount: float, now: Optional[datetime] = None) -> ActionResult:
        """Deposit USDC into a vault.

        Args:
            vault_id: Vault to buy into.
            amount: USDC amount to deposit.
            now: Action time, defaults to now.

        Returns:
            ActionResult with the shares received.
        """
        pass

    @abstractmethod
    def sell(self, vault_id: int, shares: float, now: Optional[datetime] = None) -> ActionResult:
        """Redeem unlocked vault shares.

        Args:
            vault_id: Vault to sell from.
            shares: Shares to redeem.
            now: Action time, defaults to now.

        Returns:
            ActionResult with the net USDC received.
        """
        pass

    @abstractmethod
    def get_positions(self, now: Optional[datetime] = None) -> list[PositionSummary]:
        """Get all open positions.

        Returns:
            List of position summaries.
        """
        pass

    @abstractmethod
    def get_balance(self) -> Balance:
        """Get account balance information.

        Returns:
            Balance with cash and position values.
        """
        pass

    @abstractmethod
    def get_activity(self, limit: Optional[int] = None) -> list[Activity]:
        """Get recent activity, newest first.

        Returns:
            List of activities.
        """
        pass
