"""Tests for valuation and unlock queries."""

from datetime import datetime, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from vaultledger.ledger import valuation
from vaultledger.models import Position, Tranche


NOW = datetime(2025, 1, 15, 12, 0, 0)


def _position(*tranches: Tranche) -> Position:
    return Position(user_id="alice", vault_id=1, tranches=tranches)


def _tranche(shares: float, unlock_in: timedelta, amount: float | None = None) -> Tranche:
    return Tranche(
        amount=shares if amount is None else amount,
        shares=shares,
        unlock_date=NOW + unlock_in,
    )


class TestUnlocking:
    def test_unlock_boundary_is_inclusive(self):
        position = _position(_tranche(5.0, timedelta(0)))
        assert valuation.unlocked_shares(position, NOW) == pytest.approx(5.0)

    def test_locked_shares(self):
        position = _position(
            _tranche(5.0, -timedelta(days=1)),
            _tranche(3.0, timedelta(days=1)),
        )
        assert valuation.unlocked_shares(position, NOW) == pytest.approx(5.0)
        assert valuation.locked_shares(position, NOW) == pytest.approx(3.0)

    def test_next_unlock_picks_earliest_future_tranche(self):
        later = _tranche(1.0, timedelta(days=5))
        sooner = _tranche(2.0, timedelta(days=2))
        position = _position(_tranche(3.0, -timedelta(days=1)), later, sooner)

        assert valuation.next_unlock(position, NOW) == sooner

    def test_next_unlock_none_when_all_unlocked(self):
        position = _position(_tranche(3.0, -timedelta(days=1)))
        assert valuation.next_unlock(position, NOW) is None

    def test_next_unlock_none_for_empty_position(self):
        assert valuation.next_unlock(_position(), NOW) is None


class TestTimeToUnlock:
    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(0), "now"),
            (-timedelta(hours=1), "now"),
            (timedelta(hours=5, minutes=30), "in 5h"),
            (timedelta(days=2, hours=3), "in 2d 3h"),
            (timedelta(days=7), "in 7d 0h"),
        ],
    )
    def test_formatting(self, delta: timedelta, expected: str):
        assert valuation.time_to_unlock(NOW + delta, NOW) == expected

    def test_unlock_status_unlocked(self):
        position = _position(_tranche(1.0, -timedelta(days=1)), _tranche(1.0, timedelta(days=1)))
        assert valuation.unlock_status(position, NOW) == "Unlocked"

    def test_unlock_status_pending(self):
        position = _position(_tranche(1.0, timedelta(days=1, hours=2)))
        assert valuation.unlock_status(position, NOW) == "Unlocks in 1d 2h"

    def test_unlock_status_empty(self):
        assert valuation.unlock_status(_position(), NOW) == "No unlocks"


class TestValue:
    def test_position_value_and_pnl(self):
        position = _position(_tranche(100.0, timedelta(0), amount=100.0))

        assert valuation.position_value(position, 1.05) == pytest.approx(105.0)
        assert valuation.unrealized_pnl(position, 1.05) == pytest.approx(5.0)
        assert valuation.pnl_percent(position, 1.05) == pytest.approx(5.0)

    def test_pnl_percent_guarded_without_cost_basis(self):
        position = _position(_tranche(10.0, timedelta(0), amount=0.0))
        assert valuation.pnl_percent(position, 1.0) == 0.0

    def test_preview_deposit(self):
        shares, unlock_date = valuation.preview_deposit(100.0, 1.02, 7, NOW)
        assert shares == pytest.approx(98.0392, abs=1e-4)
        assert unlock_date == NOW + timedelta(days=7)

    def test_preview_deposit_non_positive(self):
        shares, _ = valuation.preview_deposit(0.0, 1.0, 7, NOW)
        assert shares == 0.0

    def test_preview_withdrawal(self):
        gross, fee, net = valuation.preview_withdrawal(100.0, 1.0, 1.0)
        assert (gross, fee, net) == pytest.approx((100.0, 1.0, 99.0))

    def test_preview_withdrawal_non_positive(self):
        assert valuation.preview_withdrawal(0.0, 1.0, 1.0) == (0.0, 0.0, 0.0)

    @given(
        shares=st.floats(min_value=0.0001, max_value=1e7, allow_nan=False, allow_infinity=False),
        nav=st.floats(min_value=0.01, max_value=100.0, allow_nan=False, allow_infinity=False),
        fee_percent=st.floats(min_value=0.0, max_value=100.0, allow_nan=False, allow_infinity=False),
    )
    @settings(max_examples=100)
    def test_net_plus_fee_equals_gross(self, shares: float, nav: float, fee_percent: float):
        gross, fee, net = valuation.preview_withdrawal(shares, nav, fee_percent)
        assert net + fee == pytest.approx(gross)
        assert 0 <= fee <= gross * (1 + 1e-12)


class TestSharesForPercent:
    def test_percent_of_unlocked_only(self):
        position = _position(_tranche(10.0, -timedelta(days=1)), _tranche(90.0, timedelta(days=1)))

        assert valuation.shares_for_percent(position, 50, NOW) == pytest.approx(5.0)
        assert valuation.shares_for_percent(position, 100, NOW) == pytest.approx(10.0)

    def test_percent_is_clamped(self):
        position = _position(_tranche(10.0, -timedelta(days=1)))

        assert valuation.shares_for_percent(position, 150, NOW) == pytest.approx(10.0)
        assert valuation.shares_for_percent(position, -5, NOW) == 0.0
