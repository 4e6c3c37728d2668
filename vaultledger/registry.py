"""Vault registry: reference data the ledger prices against."""

import logging
from datetime import datetime, timedelta
from typing import Literal, Optional

from vaultledger.db.store import DataStore
from vaultledger.models import Vault

logger = logging.getLogger(__name__)


# Demo vaults shown on first launch, with a week of daily NAVs each
DEMO_VAULTS = [
    {
        "id": 1,
        "name": "Start Fund",
        "manager": "whale.eth",
        "exit_fee_percent": 1.0,
        "lockup_days": 7,
        "tvl": 9200.0,
        "nav_history": [1.00, 1.01, 1.005, 1.015, 1.02, 1.018, 1.0234],
    },
    {
        "id": 2,
        "name": "Blue Chip DeFi Vault",
        "manager": "defi.pro",
        "exit_fee_percent": 1.0,
        "lockup_days": 7,
        "tvl": 15400.0,
        "nav_history": [1.00, 1.005, 1.008, 1.012, 1.014, 1.015, 1.0156],
    },
    {
        "id": 3,
        "name": "Stable Yields Max",
        "manager": "yield.master",
        "exit_fee_percent": 1.0,
        "lockup_days": 7,
        "tvl": 28600.0,
        "nav_history": [1.00, 1.002, 1.004, 1.006, 1.007, 1.008, 1.0087],
    },
    {
        "id": 4,
        "name": "ETH Supremacy Fund",
        "manager": "eth.bull",
        "exit_fee_percent": 1.0,
        "lockup_days": 7,
        "tvl": 6800.0,
        "nav_history": [1.00, 0.998, 0.995, 0.993, 0.990, 0.992, 0.9912],
    },
]

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50
MAX_LOCKUP_DAYS = 365

SortKey = Literal["tvl", "performance", "name"]


class VaultNotFound(KeyError):
    """Raised when a vault ID is not in the registry."""

    def __init__(self, vault_id: int):
        self.vault_id = vault_id
        super().__init__(vault_id)

    def __str__(self) -> str:
        return f"Vault {self.vault_id} not found"


class VaultValidationError(ValueError):
    """Raised when vault creation parameters are invalid.

    ``errors`` holds (field, message) pairs, one per failed check.
    """

    def __init__(self, errors: list[tuple[str, str]]):
        self.errors = errors
        super().__init__("; ".join(message for _, message in errors))


def validate_vault_params(
    name: str,
    exit_fee_percent: float,
    lockup_days: int,
    nav: float = 1.0,
) -> list[tuple[str, str]]:
    """Check vault creation parameters.

    Returns:
        List of (field, message) errors; empty when everything is valid.
    """
    errors: list[tuple[str, str]] = []

    if not name or not name.strip():
        errors.append(("name", "Vault name is required"))
    elif len(name.strip()) < NAME_MIN_LENGTH:
        errors.append(("name", f"Vault name must be at least {NAME_MIN_LENGTH} characters"))
    elif len(name.strip()) > NAME_MAX_LENGTH:
        errors.append(("name", f"Vault name must be less than {NAME_MAX_LENGTH} characters"))

    if exit_fee_percent < 0 or exit_fee_percent > 100:
        errors.append(("exit_fee_percent", "Exit fee must be between 0 and 100 percent"))

    if lockup_days < 0 or lockup_days > MAX_LOCKUP_DAYS:
        errors.append(("lockup_days", f"Lockup must be between 0 and {MAX_LOCKUP_DAYS} days"))

    if nav <= 0:
        errors.append(("nav", "NAV must be positive"))

    return errors


class VaultRegistry:
    """Vault reference data backed by the DataStore.

    Callers re-read the vault on every ledger operation so the ledger
    always sees the current NAV.
    """

    def __init__(self, data_store: DataStore, seed_demo: bool = True):
        """Initialize the registry.

        Args:
            data_store: DataStore instance for persistence.
            seed_demo: Seed the demo vaults when the store has none.
        """
        self._data_store = data_store
        if seed_demo and not self._data_store.get_vaults():
            self.seed_demo_vaults()

    def seed_demo_vaults(self, now: Optional[datetime] = None) -> None:
        """Insert the demo vaults, one NAV history point per day ending ``now``."""
        now = now or datetime.now()
        for entry in DEMO_VAULTS:
            history = entry["nav_history"]
            vault = Vault(
                id=entry["id"],
                name=entry["name"],
                manager=entry["manager"],
                nav=history[-1],
                exit_fee_percent=entry["exit_fee_percent"],
                lockup_days=entry["lockup_days"],
                tvl=entry["tvl"],
            )
            self._data_store.save_vault(vault)
            for offset, nav in enumerate(history):
                recorded_at = now - timedelta(days=len(history) - 1 - offset)
                self._data_store.record_nav(vault.id, nav, recorded_at)
        logger.info("Seeded %d demo vaults", len(DEMO_VAULTS))

    def get_vault(self, vault_id: int) -> Vault:
        """Get a vault by ID.

        Raises:
            VaultNotFound: If no such vault exists.
        """
        vault = self._data_store.get_vault(vault_id)
        if vault is None:
            raise VaultNotFound(vault_id)
        return vault

    def list_vaults(self, sort_by: SortKey = "tvl") -> list[Vault]:
        """List vaults, largest/best first for numeric keys.

        Args:
            sort_by: One of ``tvl``, ``performance`` or ``name``.
        """
        vaults = self._data_store.get_vaults()
        if sort_by == "name":
            return sorted(vaults, key=lambda v: v.name.lower())
        if sort_by == "performance":
            return sorted(vaults, key=lambda v: v.performance_percent, reverse=True)
        return sorted(vaults, key=lambda v: v.tvl, reverse=True)

    def create_vault(
        self,
        name: str,
        manager: str,
        exit_fee_percent: float = 1.0,
        lockup_days: int = 7,
        nav: float = 1.0,
        now: Optional[datetime] = None,
    ) -> Vault:
        """Create a manager vault.

        Returns:
            The created vault.

        Raises:
            VaultValidationError: If any parameter is invalid.
        """
        errors = validate_vault_params(name, exit_fee_percent, lockup_days, nav)
        if errors:
            raise VaultValidationError(errors)

        vault = Vault(
            id=self._data_store.next_vault_id(),
            name=name.strip(),
            manager=manager,
            nav=nav,
            exit_fee_percent=exit_fee_percent,
            lockup_days=lockup_days,
            nav_history=(nav,),
        )
        self._data_store.save_vault(vault)
        self._data_store.record_nav(vault.id, nav, now)
        logger.info("Created vault %d (%s) for %s", vault.id, vault.name, manager)
        return vault

    def update_nav(self, vault_id: int, nav: float, now: Optional[datetime] = None) -> Vault:
        """Set a vault's current NAV and append it to the history.

        Raises:
            ValueError: If NAV is not positive.
            VaultNotFound: If no such vault exists.
        """
        if nav <= 0:
            raise ValueError(f"NAV must be positive, got {nav}")

        vault = self.get_vault(vault_id)
        self._data_store.save_vault(vault.model_copy(update={"nav": nav}))
        self._data_store.record_nav(vault_id, nav, now)
        logger.info("Vault %d NAV %.4f -> %.4f", vault_id, vault.nav, nav)
        return self.get_vault(vault_id)
