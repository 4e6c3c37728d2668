"""Pure valuation and unlock queries over positions.

None of these functions read the clock or mutate their inputs; callers
pass ``now`` and the current NAV explicitly.
"""

from datetime import datetime, timedelta
from typing import Optional

from vaultledger.models import Position, Tranche


def unlocked_shares(position: Position, now: datetime) -> float:
    """Sum of shares in tranches whose unlock date has passed."""
    return position.unlocked_shares(now)


def locked_shares(position: Position, now: datetime) -> float:
    return position.total_shares - position.unlocked_shares(now)


def position_value(position: Position, nav: float) -> float:
    return position.total_shares * nav


def unrealized_pnl(position: Position, nav: float) -> float:
    return position_value(position, nav) - position.total_invested


def pnl_percent(position: Position, nav: float) -> float:
    """Unrealized P&L as a percentage of cost basis (0 when nothing is invested)."""
    invested = position.total_invested
    if invested <= 0:
        return 0.0
    return unrealized_pnl(position, nav) / invested * 100


def next_unlock(position: Position, now: datetime) -> Optional[Tranche]:
    """The still-locked tranche that unlocks soonest, if any."""
    locked = [t for t in position.tranches if not t.is_unlocked(now)]
    if not locked:
        return None
    return min(locked, key=lambda t: t.unlock_date)


def preview_deposit(
    amount: float, nav: float, lockup_days: int, now: datetime
) -> tuple[float, datetime]:
    """Shares an amount would buy at ``nav`` and when they would unlock."""
    if amount <= 0:
        return 0.0, now + timedelta(days=lockup_days)
    return amount / nav, now + timedelta(days=lockup_days)


def preview_withdrawal(
    shares: float, nav: float, exit_fee_percent: float
) -> tuple[float, float, float]:
    """Gross value, exit fee and net value for redeeming ``shares``.

    Returns:
        Tuple of (gross_value, fee, net_value).
    """
    if shares <= 0:
        return 0.0, 0.0, 0.0
    gross_value = shares * nav
    fee = gross_value * (exit_fee_percent / 100)
    return gross_value, fee, gross_value - fee


def shares_for_percent(position: Position, percent: float, now: datetime) -> float:
    """Share count for selling ``percent`` of the currently unlocked shares."""
    percent = min(max(percent, 0.0), 100.0)
    return position.unlocked_shares(now) * percent / 100


def time_to_unlock(unlock_date: datetime, now: datetime) -> str:
    """Human readable countdown such as ``in 2d 3h`` or ``now``."""
    diff = unlock_date - now
    if diff.total_seconds() <= 0:
        return "now"

    days = diff.days
    hours = diff.seconds // 3600
    if days > 0:
        return f"in {days}d {hours}h"
    return f"in {hours}h"


def unlock_status(position: Position, now: datetime) -> str:
    """Status chip text: unlocked, next unlock countdown, or no unlocks."""
    if position.unlocked_shares(now) > 0:
        return "Unlocked"
    upcoming = next_unlock(position, now)
    if upcoming is None:
        return "No unlocks"
    return f"Unlocks {time_to_unlock(upcoming.unlock_date, now)}"
