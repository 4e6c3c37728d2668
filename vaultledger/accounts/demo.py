"""Demo account with a simulated USDC wallet."""

import logging
from datetime import datetime
from typing import Optional

from vaultledger.accounts.base import ActionResult, Balance, BaseAccount, PositionSummary
from vaultledger.db.store import DataStore
from vaultledger.ledger import LedgerError, PositionLedger, valuation
from vaultledger.models import Activity, Position, Vault
from vaultledger.registry import VaultNotFound, VaultRegistry

logger = logging.getLogger(__name__)


class DemoAccount(BaseAccount):
    """Demo account for trying vaults without a wallet.

    Keeps a virtual USDC balance and the user's positions in SQLite,
    applies buys and sells through the PositionLedger, and logs every
    completed action to the activity feed.
    """

    DEFAULT_USER_ID = "demo"
    DEFAULT_STARTING_BALANCE = 240.0

    def __init__(
        self,
        data_store: DataStore,
        registry: Optional[VaultRegistry] = None,
        user_id: str = DEFAULT_USER_ID,
        starting_balance: float = DEFAULT_STARTING_BALANCE,
    ):
        """Initialize the demo account.

        Args:
            data_store: DataStore instance for persistence.
            registry: Vault registry; built on the same store when omitted.
            user_id: Owner of the wallet and positions.
            starting_balance: Initial virtual USDC balance.
        """
        self._data_store = data_store
        self._registry = registry or VaultRegistry(data_store)
        self._user_id = user_id
        self._starting_balance = starting_balance
        self._ledger = PositionLedger(self._data_store.get_positions(user_id))

        stored = self._data_store.get_balance(user_id)
        if stored is None:
            self._balance = starting_balance
            self._save_balance()
        else:
            self._balance = stored

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def ledger(self) -> PositionLedger:
        return self._ledger

    @property
    def registry(self) -> VaultRegistry:
        return self._registry

    def _save_balance(self) -> None:
        self._data_store.set_balance(self._user_id, self._balance)

    def _reject(self, vault_id: int, message: str) -> ActionResult:
        logger.warning("Rejected action on vault %s: %s", vault_id, message)
        return ActionResult(status="REJECTED", vault_id=vault_id, message=message)

    def buy(self, vault_id: int, amount: float, now: Optional[datetime] = None) -> ActionResult:
        """Deposit USDC into a vault.

        Args:
            vault_id: Vault to buy into.
            amount: USDC amount to deposit.
            now: Action time, defaults to now.

        Returns:
            ActionResult with the shares received, or REJECTED.
        """
        now = now or datetime.now()

        try:
            vault = self._registry.get_vault(vault_id)
        except VaultNotFound as e:
            return self._reject(vault_id, str(e))

        if amount > self._balance:
            return self._reject(
                vault_id,
                f"Insufficient balance. Required: {amount:.2f}, Available: {self._balance:.2f}",
            )

        try:
            result = self._ledger.deposit(
                user_id=self._user_id,
                vault_id=vault.id,
                amount=amount,
                nav=vault.nav,
                lockup_days=vault.lockup_days,
                now=now,
            )
        except LedgerError as e:
            return self._reject(vault_id, str(e))

        self._balance -= amount
        self._save_balance()
        self._data_store.save_position(result.position)
        self._data_store.log_activity(
            Activity(
                type="buy",
                user_id=self._user_id,
                vault_id=vault.id,
                vault_name=vault.name,
                amount=amount,
                shares=result.tranche.shares,
                timestamp=now,
            )
        )

        return ActionResult(
            status="COMPLETE",
            vault_id=vault.id,
            amount=amount,
            shares=result.tranche.shares,
            unlock_date=result.tranche.unlock_date,
            message=f"Bought {amount:.2f} USDC of {vault.name}",
        )

    def sell(self, vault_id: int, shares: float, now: Optional[datetime] = None) -> ActionResult:
        """Redeem unlocked vault shares.

        Args:
            vault_id: Vault to sell from.
            shares: Shares to redeem.
            now: Action time, defaults to now.

        Returns:
            ActionResult with the net USDC received, or REJECTED.
        """
        now = now or datetime.now()

        try:
            vault = self._registry.get_vault(vault_id)
        except VaultNotFound as e:
            return self._reject(vault_id, str(e))

        try:
            result = self._ledger.withdraw(
                user_id=self._user_id,
                vault_id=vault.id,
                shares=shares,
                nav=vault.nav,
                exit_fee_percent=vault.exit_fee_percent,
                now=now,
            )
        except LedgerError as e:
            return self._reject(vault_id, str(e))

        self._balance += result.net_value
        self._save_balance()
        if result.position is None:
            self._data_store.delete_position(self._user_id, vault.id)
        else:
            self._data_store.save_position(result.position)
        self._data_store.log_activity(
            Activity(
                type="sell",
                user_id=self._user_id,
                vault_id=vault.id,
                vault_name=vault.name,
                shares=shares,
                net_value=result.net_value,
                fee=result.fee,
                timestamp=now,
            )
        )

        return ActionResult(
            status="COMPLETE",
            vault_id=vault.id,
            shares=shares,
            net_value=result.net_value,
            fee=result.fee,
            closed=result.closed,
            message=(
                f"Sold {shares:.4f} shares -> {result.net_value:.2f} USDC net "
                f"({vault.exit_fee_percent:g}% exit fee)"
            ),
        )

    def sell_percent(self, vault_id: int, percent: float, now: Optional[datetime] = None) -> ActionResult:
        """Redeem a percentage of the currently unlocked shares."""
        now = now or datetime.now()
        position = self._ledger.get_position(self._user_id, vault_id)
        if position is None:
            return self._reject(vault_id, f"No position in vault {vault_id}")
        return self.sell(vault_id, valuation.shares_for_percent(position, percent, now), now)

    def _summarize(self, position: Position, vault: Vault, now: datetime) -> PositionSummary:
        upcoming = valuation.next_unlock(position, now)
        return PositionSummary(
            vault_id=vault.id,
            vault_name=vault.name,
            nav=vault.nav,
            total_shares=position.total_shares,
            unlocked_shares=valuation.unlocked_shares(position, now),
            total_invested=position.total_invested,
            value=valuation.position_value(position, vault.nav),
            pnl=valuation.unrealized_pnl(position, vault.nav),
            pnl_percent=valuation.pnl_percent(position, vault.nav),
            next_unlock=upcoming.unlock_date if upcoming else None,
            status=valuation.unlock_status(position, now),
            tranche_count=len(position.tranches),
        )

    def get_position(self, vault_id: int) -> Optional[Position]:
        return self._ledger.get_position(self._user_id, vault_id)

    def get_positions(self, now: Optional[datetime] = None) -> list[PositionSummary]:
        """Get all open positions valued at current NAVs.

        Returns:
            List of position summaries; positions whose vault has
            disappeared from the registry are skipped.
        """
        now = now or datetime.now()
        summaries = []
        for position in self._ledger.get_positions(self._user_id):
            try:
                vault = self._registry.get_vault(position.vault_id)
            except VaultNotFound:
                logger.warning("Skipping position in unknown vault %s", position.vault_id)
                continue
            summaries.append(self._summarize(position, vault, now))
        return summaries

    def get_balance(self) -> Balance:
        """Get account balance.

        Returns:
            Current balance information.
        """
        summaries = self.get_positions()
        positions_value = sum(s.value for s in summaries)
        return Balance(
            available_cash=self._balance,
            invested=sum(s.total_invested for s in summaries),
            positions_value=positions_value,
            total_value=self._balance + positions_value,
        )

    def get_current_balance(self) -> float:
        """Get the current cash balance.

        Returns:
            Current available USDC.
        """
        return self._balance

    def get_activity(self, limit: Optional[int] = None) -> list[Activity]:
        return self._data_store.get_activities(self._user_id, limit=limit)

    def reset(self) -> None:
        """Reset the demo account to its initial state.

        Clears all positions and activity and restores the starting balance.
        """
        self._data_store.delete_positions(self._user_id)
        self._data_store.clear_activities(self._user_id)
        self._ledger.clear(self._user_id)

        self._balance = self._starting_balance
        self._save_balance()
        logger.info("Reset demo account %s", self._user_id)
