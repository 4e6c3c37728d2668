"""SQLite data store for VaultLedger."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from vaultledger.models import Activity, Position, Tranche, Vault

logger = logging.getLogger(__name__)


class DataStore:
    """SQLite-based data store for VaultLedger."""

    REQUIRED_TABLES = [
        "vaults",
        "nav_history",
        "tranches",
        "balances",
        "activities",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS vaults (
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    manager TEXT NOT NULL DEFAULT '',
                    nav REAL NOT NULL,
                    exit_fee_percent REAL NOT NULL,
                    lockup_days INTEGER NOT NULL,
                    tvl REAL NOT NULL DEFAULT 0
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS nav_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    vault_id INTEGER NOT NULL,
                    nav REAL NOT NULL,
                    recorded_at TEXT NOT NULL
                )
            """)

            # One row per tranche; seq keeps FIFO order within a position
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS tranches (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    vault_id INTEGER NOT NULL,
                    seq INTEGER NOT NULL,
                    amount REAL NOT NULL,
                    shares REAL NOT NULL,
                    unlock_date TEXT NOT NULL,
                    created_at TEXT,
                    UNIQUE(user_id, vault_id, seq)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS balances (
                    user_id TEXT PRIMARY KEY,
                    balance REAL NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS activities (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    type TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    vault_id INTEGER NOT NULL,
                    vault_name TEXT NOT NULL DEFAULT '',
                    amount REAL,
                    shares REAL NOT NULL,
                    net_value REAL,
                    fee REAL,
                    timestamp TEXT NOT NULL
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Vaults ====================

    def save_vault(self, vault: Vault) -> None:
        """Save or update a vault's reference data.

        NAV history is stored separately; see ``record_nav``.

        Args:
            vault: Vault to save.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR REPLACE INTO vaults
                (id, name, manager, nav, exit_fee_percent, lockup_days, tvl)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    vault.id,
                    vault.name,
                    vault.manager,
                    vault.nav,
                    vault.exit_fee_percent,
                    vault.lockup_days,
                    vault.tvl,
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def _get_nav_history(self, cursor: sqlite3.Cursor, vault_id: int) -> tuple[float, ...]:
        cursor.execute(
            "SELECT nav FROM nav_history WHERE vault_id = ? ORDER BY recorded_at, id",
            (vault_id,),
        )
        return tuple(row["nav"] for row in cursor.fetchall())

    def _row_to_vault(self, cursor: sqlite3.Cursor, row: sqlite3.Row) -> Vault:
        return Vault(
            id=row["id"],
            name=row["name"],
            manager=row["manager"],
            nav=row["nav"],
            exit_fee_percent=row["exit_fee_percent"],
            lockup_days=row["lockup_days"],
            tvl=row["tvl"],
            nav_history=self._get_nav_history(cursor, row["id"]),
        )

    def get_vault(self, vault_id: int) -> Optional[Vault]:
        """Get a vault by ID.

        Args:
            vault_id: Vault ID.

        Returns:
            Vault if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, name, manager, nav, exit_fee_percent, lockup_days, tvl
                FROM vaults
                WHERE id = ?
                """,
                (vault_id,),
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_vault(cursor, row)
            return None
        finally:
            conn.close()

    def get_vaults(self) -> list[Vault]:
        """Get all vaults ordered by ID."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, name, manager, nav, exit_fee_percent, lockup_days, tvl
                FROM vaults
                ORDER BY id
                """
            )
            rows = cursor.fetchall()
            return [self._row_to_vault(cursor, row) for row in rows]
        finally:
            conn.close()

    def next_vault_id(self) -> int:
        """Get the ID the next created vault should use."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT MAX(id) AS max_id FROM vaults")
            row = cursor.fetchone()
            return (row["max_id"] or 0) + 1
        finally:
            conn.close()

    def record_nav(self, vault_id: int, nav: float, recorded_at: Optional[datetime] = None) -> None:
        """Append a NAV observation to a vault's history.

        Args:
            vault_id: Vault ID.
            nav: NAV per share.
            recorded_at: Observation time, defaults to now.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO nav_history (vault_id, nav, recorded_at) VALUES (?, ?, ?)",
                (vault_id, nav, (recorded_at or datetime.now()).isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    # ==================== Positions ====================

    def save_position(self, position: Position) -> None:
        """Replace the stored tranches of a position.

        An empty position is deleted.

        Args:
            position: Position to save.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM tranches WHERE user_id = ? AND vault_id = ?",
                (position.user_id, position.vault_id),
            )
            cursor.executemany(
                """
                INSERT INTO tranches
                (user_id, vault_id, seq, amount, shares, unlock_date, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        position.user_id,
                        position.vault_id,
                        seq,
                        tranche.amount,
                        tranche.shares,
                        tranche.unlock_date.isoformat(),
                        tranche.created_at.isoformat() if tranche.created_at else None,
                    )
                    for seq, tranche in enumerate(position.tranches)
                ],
            )
            conn.commit()
        finally:
            conn.close()

    def get_positions(self, user_id: Optional[str] = None) -> list[Position]:
        """Get stored positions.

        Args:
            user_id: Optional owner filter. If None, returns all positions.

        Returns:
            List of positions ordered by user and vault.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            query = """
                SELECT user_id, vault_id, amount, shares, unlock_date, created_at
                FROM tranches
            """
            params: tuple = ()
            if user_id is not None:
                query += " WHERE user_id = ?"
                params = (user_id,)
            query += " ORDER BY user_id, vault_id, seq"
            cursor.execute(query, params)

            grouped: dict[tuple[str, int], list[Tranche]] = {}
            for row in cursor.fetchall():
                grouped.setdefault((row["user_id"], row["vault_id"]), []).append(
                    Tranche(
                        amount=row["amount"],
                        shares=row["shares"],
                        unlock_date=datetime.fromisoformat(row["unlock_date"]),
                        created_at=(
                            datetime.fromisoformat(row["created_at"])
                            if row["created_at"]
                            else None
                        ),
                    )
                )
            return [
                Position(user_id=owner, vault_id=vault_id, tranches=tuple(tranches))
                for (owner, vault_id), tranches in grouped.items()
            ]
        finally:
            conn.close()

    def delete_position(self, user_id: str, vault_id: int) -> None:
        """Delete a position.

        Args:
            user_id: Position owner.
            vault_id: Vault ID.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM tranches WHERE user_id = ? AND vault_id = ?",
                (user_id, vault_id),
            )
            conn.commit()
        finally:
            conn.close()

    def delete_positions(self, user_id: str) -> None:
        """Delete every position owned by a user."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM tranches WHERE user_id = ?", (user_id,))
            conn.commit()
        finally:
            conn.close()

    # ==================== Balances ====================

    def get_balance(self, user_id: str) -> Optional[float]:
        """Get a user's wallet balance.

        Args:
            user_id: Wallet owner.

        Returns:
            Balance if stored, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT balance FROM balances WHERE user_id = ?", (user_id,))
            row = cursor.fetchone()
            return row["balance"] if row else None
        finally:
            conn.close()

    def set_balance(self, user_id: str, balance: float) -> None:
        """Save a user's wallet balance.

        Args:
            user_id: Wallet owner.
            balance: New balance.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR REPLACE INTO balances (user_id, balance, updated_at)
                VALUES (?, ?, ?)
                """,
                (user_id, balance, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    # ==================== Activities ====================

    def log_activity(self, activity: Activity) -> int:
        """Append an activity record.

        Args:
            activity: Activity to log.

        Returns:
            The ID of the saved activity.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO activities
                (type, user_id, vault_id, vault_name, amount, shares, net_value, fee, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    activity.type,
                    activity.user_id,
                    activity.vault_id,
                    activity.vault_name,
                    activity.amount,
                    activity.shares,
                    activity.net_value,
                    activity.fee,
                    activity.timestamp.isoformat(),
                ),
            )
            conn.commit()
            return cursor.lastrowid or 0
        finally:
            conn.close()

    def get_activities(self, user_id: str, limit: Optional[int] = None) -> list[Activity]:
        """Get a user's activity, newest first.

        Args:
            user_id: User to fetch activity for.
            limit: Optional maximum number of records.

        Returns:
            List of activities.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            query = """
                SELECT id, type, user_id, vault_id, vault_name, amount, shares,
                       net_value, fee, timestamp
                FROM activities
                WHERE user_id = ?
                ORDER BY timestamp DESC, id DESC
            """
            params: tuple = (user_id,)
            if limit is not None:
                query += " LIMIT ?"
                params = (user_id, limit)
            cursor.execute(query, params)
            return [
                Activity(
                    id=row["id"],
                    type=row["type"],
                    user_id=row["user_id"],
                    vault_id=row["vault_id"],
                    vault_name=row["vault_name"],
                    amount=row["amount"],
                    shares=row["shares"],
                    net_value=row["net_value"],
                    fee=row["fee"],
                    timestamp=datetime.fromisoformat(row["timestamp"]),
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    def clear_activities(self, user_id: str) -> None:
        """Delete a user's activity records."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM activities WHERE user_id = ?", (user_id,))
            conn.commit()
        finally:
            conn.close()

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
