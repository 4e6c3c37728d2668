"""In-memory position ledger with lockup-aware FIFO withdrawals."""

import logging
import math
import threading
from datetime import datetime, timedelta
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from vaultledger.ledger.errors import (
    InsufficientUnlockedShares,
    InvalidAmount,
    PositionNotFound,
)
from vaultledger.models import Position, Tranche

logger = logging.getLogger(__name__)


def _require_positive(field: str, value: float) -> None:
    """Raise InvalidAmount unless ``value`` is a finite number above zero."""
    if not math.isfinite(value) or value <= 0:
        raise InvalidAmount(field, value)


class DepositResult(BaseModel):
    """Outcome of a deposit."""

    tranche: Tranche = Field(..., description="Tranche created by the deposit")
    position: Position = Field(..., description="Position after the deposit")

    model_config = {"frozen": True}


class WithdrawResult(BaseModel):
    """Outcome of a withdrawal."""

    shares: float = Field(..., gt=0, description="Shares redeemed")
    gross_value: float = Field(..., ge=0, description="Shares times NAV")
    fee: float = Field(..., ge=0, description="Exit fee deducted")
    net_value: float = Field(..., description="USDC paid out")
    cost_basis: float = Field(..., ge=0, description="Cost basis released from tranches")
    realized_pnl: float = Field(..., description="Net value minus released cost basis")
    position: Optional[Position] = Field(
        default=None, description="Position after the withdrawal, None when closed"
    )
    closed: bool = Field(default=False, description="Whether the position was closed")

    model_config = {"frozen": True}


class PositionLedger:
    """Bookkeeping of users' per-vault share holdings.

    Positions are immutable; every mutation swaps in a new Position, so
    anything handed out by the ledger is a snapshot. Deposits and
    withdrawals on the same (user, vault) pair are serialized by a lock.
    """

    # Positions at or below this many shares are closed
    CLOSE_EPSILON = 0.0001

    # Float slack when matching requested shares against tranches
    SHARE_TOLERANCE = 1e-9

    def __init__(self, positions: Optional[Iterable[Position]] = None):
        """Initialize the ledger.

        Args:
            positions: Existing positions to load, e.g. from a DataStore.
        """
        self._positions: dict[tuple[str, int], Position] = {}
        self._locks: dict[tuple[str, int], threading.Lock] = {}
        self._locks_guard = threading.Lock()

        for position in positions or ():
            self.load_position(position)

    def _lock_for(self, key: tuple[str, int]) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    # ==================== Queries ====================

    def get_position(self, user_id: str, vault_id: int) -> Optional[Position]:
        return self._positions.get((user_id, vault_id))

    def get_positions(self, user_id: str) -> list[Position]:
        """Get all open positions for a user, ordered by vault ID."""
        return sorted(
            (p for (owner, _), p in self._positions.items() if owner == user_id),
            key=lambda p: p.vault_id,
        )

    def unlocked_shares(self, user_id: str, vault_id: int, now: datetime) -> float:
        position = self.get_position(user_id, vault_id)
        if position is None:
            return 0.0
        return position.unlocked_shares(now)

    # ==================== Loading ====================

    def load_position(self, position: Position) -> None:
        """Put a persisted position into the ledger, replacing any existing one."""
        key = (position.user_id, position.vault_id)
        if position.is_empty:
            self._positions.pop(key, None)
        else:
            self._positions[key] = position

    def remove_position(self, user_id: str, vault_id: int) -> None:
        self._positions.pop((user_id, vault_id), None)

    def clear(self, user_id: Optional[str] = None) -> None:
        """Drop all positions, or only those belonging to ``user_id``."""
        if user_id is None:
            self._positions.clear()
            return
        for key in [k for k in self._positions if k[0] == user_id]:
            del self._positions[key]

    # ==================== Mutations ====================

    def deposit(
        self,
        user_id: str,
        vault_id: int,
        amount: float,
        nav: float,
        lockup_days: int,
        now: datetime,
    ) -> DepositResult:
        """Buy vault shares at ``nav`` and record them as a new locked tranche.

        Args:
            user_id: Depositing user.
            vault_id: Vault receiving the deposit.
            amount: USDC amount; wallet affordability is the caller's concern.
            nav: Current vault NAV per share.
            lockup_days: Vault lockup period.
            now: Deposit time.

        Returns:
            DepositResult with the new tranche and updated position.

        Raises:
            InvalidAmount: If amount or NAV is not a finite positive number.
        """
        _require_positive("amount", amount)
        _require_positive("nav", nav)
        shares = amount / nav
        _require_positive("shares", shares)

        key = (user_id, vault_id)
        with self._lock_for(key):
            tranche = Tranche(
                amount=amount,
                shares=shares,
                unlock_date=now + timedelta(days=lockup_days),
                created_at=now,
            )
            existing = self._positions.get(key)
            if existing is None:
                existing = Position(user_id=user_id, vault_id=vault_id)

            position = existing.model_copy(update={"tranches": existing.tranches + (tranche,)})
            result = DepositResult(tranche=tranche, position=position)
            self._positions[key] = position

        logger.info(
            "Deposit user=%s vault=%s amount=%.2f shares=%.6f unlock=%s",
            user_id, vault_id, amount, tranche.shares, tranche.unlock_date.isoformat(),
        )
        return result

    def withdraw(
        self,
        user_id: str,
        vault_id: int,
        shares: float,
        nav: float,
        exit_fee_percent: float,
        now: datetime,
    ) -> WithdrawResult:
        """Redeem unlocked shares, consuming unlocked tranches oldest first.

        A partially consumed tranche keeps the proportional share of its
        original cost basis.

        Args:
            user_id: Withdrawing user.
            vault_id: Vault to withdraw from.
            shares: Number of shares to redeem.
            nav: Current vault NAV per share.
            exit_fee_percent: Exit fee as a percentage of gross value.
            now: Withdrawal time; decides which tranches are unlocked.

        Returns:
            WithdrawResult with payout figures and the updated position.

        Raises:
            InvalidAmount: If shares or NAV is not a finite positive number,
                or the exit fee is outside 0..100.
            PositionNotFound: If the user holds nothing in the vault.
            InsufficientUnlockedShares: If shares exceed the unlocked shares.
        """
        _require_positive("shares", shares)
        _require_positive("nav", nav)
        if not math.isfinite(exit_fee_percent) or not 0 <= exit_fee_percent <= 100:
            raise InvalidAmount(
                "exit_fee_percent",
                exit_fee_percent,
                f"exit_fee_percent must be between 0 and 100, got {exit_fee_percent}",
            )

        key = (user_id, vault_id)
        with self._lock_for(key):
            position = self._positions.get(key)
            if position is None:
                raise PositionNotFound(user_id, vault_id, shares)

            available = position.unlocked_shares(now)
            if shares > available + self.SHARE_TOLERANCE:
                raise InsufficientUnlockedShares(requested=shares, available=available)

            remaining_tranches, cost_basis = self._consume_fifo(position.tranches, shares, now)

            gross_value = shares * nav
            fee = gross_value * (exit_fee_percent / 100)
            net_value = gross_value - fee

            updated = position.model_copy(update={"tranches": remaining_tranches})
            closed = updated.total_shares <= self.CLOSE_EPSILON
            result = WithdrawResult(
                shares=shares,
                gross_value=gross_value,
                fee=fee,
                net_value=net_value,
                cost_basis=cost_basis,
                realized_pnl=net_value - cost_basis,
                position=None if closed else updated,
                closed=closed,
            )
            if closed:
                del self._positions[key]
            else:
                self._positions[key] = updated

        logger.info(
            "Withdraw user=%s vault=%s shares=%.6f net=%.2f fee=%.2f closed=%s",
            user_id, vault_id, shares, net_value, fee, closed,
        )
        return result

    def _consume_fifo(
        self, tranches: tuple[Tranche, ...], shares: float, now: datetime
    ) -> tuple[tuple[Tranche, ...], float]:
        """Remove ``shares`` from unlocked tranches in order.

        Returns:
            Tuple of (remaining tranches, cost basis released).
        """
        to_remove = shares
        released = 0.0
        kept: list[Tranche] = []

        for tranche in tranches:
            if to_remove <= 0 or not tranche.is_unlocked(now):
                kept.append(tranche)
                continue

            if tranche.shares <= to_remove + self.SHARE_TOLERANCE:
                to_remove -= tranche.shares
                released += tranche.amount
                logger.debug("Consumed tranche unlocked at %s", tranche.unlock_date.isoformat())
                continue

            left = tranche.shares - to_remove
            amount_left = tranche.amount * (left / tranche.shares)
            released += tranche.amount - amount_left
            kept.append(tranche.model_copy(update={"shares": left, "amount": amount_left}))
            to_remove = 0.0

        return tuple(kept), released
