"""Tests for the demo account.

**Feature: vault-ledger**
"""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from vaultledger.accounts import BaseAccount, DemoAccount
from vaultledger.db.store import DataStore
from vaultledger.registry import VaultRegistry


NOW = datetime(2025, 1, 15, 12, 0, 0)
LATER = NOW + timedelta(days=8)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir: Path):
    return DataStore(temp_dir / "test.db")


@pytest.fixture
def account(store: DataStore):
    return DemoAccount(store, VaultRegistry(store))


class TestDemoAccountInterface:
    def test_is_base_account(self, account: DemoAccount):
        assert isinstance(account, BaseAccount)

    def test_starting_balance(self, account: DemoAccount):
        assert account.get_current_balance() == pytest.approx(240.0)
        assert account.user_id == "demo"


class TestBuy:
    def test_buy_debits_wallet_and_creates_position(self, account: DemoAccount):
        result = account.buy(1, 100.0, now=NOW)

        assert result.ok
        assert result.shares == pytest.approx(100.0 / 1.0234)
        assert result.unlock_date == NOW + timedelta(days=7)
        assert account.get_current_balance() == pytest.approx(140.0)

        position = account.get_position(1)
        assert position.total_invested == pytest.approx(100.0)

    def test_buy_more_than_balance_rejected(self, account: DemoAccount):
        result = account.buy(1, 240.01, now=NOW)

        assert result.status == "REJECTED"
        assert "Insufficient balance" in result.message
        assert account.get_position(1) is None
        assert account.get_current_balance() == pytest.approx(240.0)

    def test_buy_full_balance_allowed(self, account: DemoAccount):
        assert account.buy(1, 240.0, now=NOW).ok
        assert account.get_current_balance() == pytest.approx(0.0)

    @pytest.mark.parametrize("amount", [0.0, -10.0, float("nan"), float("inf")])
    def test_non_positive_amount_rejected(self, account: DemoAccount, amount: float):
        result = account.buy(1, amount, now=NOW)
        assert result.status == "REJECTED"
        assert account.get_activity() == []
        assert account.get_position(1) is None
        assert account.get_current_balance() == pytest.approx(240.0)

    def test_unknown_vault_rejected(self, account: DemoAccount):
        result = account.buy(99, 10.0, now=NOW)
        assert result.status == "REJECTED"
        assert "99" in result.message

    def test_buy_logs_activity(self, account: DemoAccount):
        account.buy(2, 50.0, now=NOW)

        records = account.get_activity()
        assert len(records) == 1
        assert records[0].type == "buy"
        assert records[0].vault_name == "Blue Chip DeFi Vault"
        assert records[0].amount == pytest.approx(50.0)


class TestSell:
    def test_locked_shares_cannot_be_sold(self, account: DemoAccount):
        bought = account.buy(1, 100.0, now=NOW)

        result = account.sell(1, bought.shares, now=NOW + timedelta(days=1))

        assert result.status == "REJECTED"
        assert "Insufficient unlocked shares" in result.message
        assert account.get_current_balance() == pytest.approx(140.0)

    def test_sell_all_after_lockup(self, account: DemoAccount):
        bought = account.buy(1, 100.0, now=NOW)

        result = account.sell(1, bought.shares, now=LATER)

        assert result.ok
        assert result.closed
        assert result.net_value == pytest.approx(99.0)
        assert result.fee == pytest.approx(1.0)
        assert account.get_current_balance() == pytest.approx(239.0)
        assert account.get_position(1) is None
        assert account.get_positions(now=LATER) == []

    @pytest.mark.parametrize("shares", [float("nan"), float("inf"), -1.0])
    def test_invalid_share_count_rejected(self, store: DataStore, account: DemoAccount, shares: float):
        account.buy(1, 100.0, now=NOW)
        before = account.get_position(1)

        result = account.sell(1, shares, now=LATER)

        assert result.status == "REJECTED"
        assert account.get_position(1) == before
        assert account.get_current_balance() == pytest.approx(140.0)
        assert len(account.get_activity()) == 1
        assert store.get_positions("demo")[0].total_shares == pytest.approx(before.total_shares)

    def test_sell_without_position(self, account: DemoAccount):
        result = account.sell(1, 1.0, now=NOW)
        assert result.status == "REJECTED"
        assert "No position" in result.message

    def test_sell_percent(self, account: DemoAccount):
        bought = account.buy(1, 100.0, now=NOW)

        result = account.sell_percent(1, 50, now=LATER)

        assert result.ok
        assert result.shares == pytest.approx(bought.shares / 2)
        assert account.get_position(1).total_shares == pytest.approx(bought.shares / 2)

    def test_sell_logs_activity_newest_first(self, account: DemoAccount):
        bought = account.buy(1, 100.0, now=NOW)
        account.sell(1, bought.shares / 4, now=LATER)

        records = account.get_activity()
        assert [r.type for r in records] == ["sell", "buy"]
        assert records[0].fee == pytest.approx(0.25)

    @given(
        amounts=st.lists(
            st.floats(min_value=1.0, max_value=40.0, allow_nan=False, allow_infinity=False),
            min_size=1,
            max_size=5,
        )
    )
    @settings(max_examples=25, deadline=None)
    def test_round_trip_costs_exactly_the_exit_fee(self, amounts: list[float]):
        """
        *For any* set of buys at a constant NAV, selling everything after
        the lockup returns the deposits minus the 1% exit fee.
        """
        with tempfile.TemporaryDirectory() as tmpdir:
            store = DataStore(Path(tmpdir) / "test.db")
            account = DemoAccount(store)
            for amount in amounts:
                assert account.buy(3, amount, now=NOW).ok

            unlocked = account.get_position(3).unlocked_shares(LATER)
            assert account.sell(3, unlocked, now=LATER).ok

            deposited = sum(amounts)
            assert account.get_current_balance() == pytest.approx(240.0 - deposited * 0.01)


class TestPortfolioViews:
    def test_position_summary(self, account: DemoAccount):
        account.buy(4, 100.0, now=NOW)

        summaries = account.get_positions(now=NOW)

        assert len(summaries) == 1
        summary = summaries[0]
        assert summary.vault_name == "ETH Supremacy Fund"
        assert summary.unlocked_shares == 0.0
        assert summary.status == "Unlocks in 7d 0h"
        assert summary.next_unlock == NOW + timedelta(days=7)
        assert summary.value == pytest.approx(100.0)
        assert summary.tranche_count == 1

    def test_pnl_after_nav_drop(self, store: DataStore, account: DemoAccount):
        account.buy(1, 100.0, now=NOW)
        account.registry.update_nav(1, 0.99)

        summary = account.get_positions(now=NOW)[0]
        assert summary.pnl < 0
        assert summary.pnl_percent < 0

    def test_balance(self, account: DemoAccount):
        account.buy(1, 100.0, now=NOW)

        info = account.get_balance()

        assert info.available_cash == pytest.approx(140.0)
        assert info.invested == pytest.approx(100.0)
        assert info.positions_value == pytest.approx(100.0)
        assert info.total_value == pytest.approx(240.0)


class TestPersistence:
    def test_state_survives_new_instance(self, store: DataStore):
        first = DemoAccount(store)
        first.buy(1, 60.0, now=NOW)
        first.buy(1, 40.0, now=NOW + timedelta(days=1))

        second = DemoAccount(store)

        assert second.get_current_balance() == pytest.approx(140.0)
        position = second.get_position(1)
        assert len(position.tranches) == 2
        assert position.tranches[0].amount == pytest.approx(60.0)

    def test_users_are_separate(self, store: DataStore):
        alice = DemoAccount(store, user_id="alice", starting_balance=1000.0)
        bob = DemoAccount(store, user_id="bob")
        alice.buy(1, 500.0, now=NOW)

        assert bob.get_positions(now=NOW) == []
        assert bob.get_current_balance() == pytest.approx(240.0)

    def test_reset(self, store: DataStore):
        account = DemoAccount(store)
        account.buy(1, 100.0, now=NOW)

        account.reset()

        assert account.get_current_balance() == pytest.approx(240.0)
        assert account.get_positions(now=NOW) == []
        assert account.get_activity() == []
        assert DemoAccount(store).get_position(1) is None
