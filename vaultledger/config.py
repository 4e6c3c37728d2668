"""Configuration loading for VaultLedger.

Settings live in ``~/.config/vaultledger/config.toml`` (or under
``$VAULTLEDGER_HOME`` when set)::

    [demo]
    user_id = "demo"
    starting_balance = 240.0

    [storage]
    db_path = "/path/to/vaultledger.db"

    [logging]
    level = "WARNING"
"""

import logging
import os
from pathlib import Path
from typing import Optional

import toml

logger = logging.getLogger(__name__)

DEFAULT_STARTING_BALANCE = 240.0
DEFAULT_USER_ID = "demo"


def get_config_dir() -> Path:
    """Get the configuration directory."""
    override = os.environ.get("VAULTLEDGER_HOME")
    if override:
        return Path(override)
    return Path.home() / ".config" / "vaultledger"


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration, returning an empty dict when there is none.

    Args:
        config_path: Explicit config file, defaults to ``get_config_path()``.

    Raises:
        toml.TomlDecodeError: If the file exists but is not valid TOML.
    """
    path = config_path or get_config_path()
    if not path.exists():
        return {}
    logger.debug("Loading config from %s", path)
    return toml.load(path)


def save_config(config: dict, config_path: Optional[Path] = None) -> Path:
    """Write configuration to disk.

    Returns:
        Path the config was written to.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        toml.dump(config, f)
    return path


def get_db_path(config: dict) -> Path:
    """Get the database path from config, defaulting to the config directory."""
    db_path = config.get("storage", {}).get("db_path")
    if db_path:
        return Path(db_path).expanduser()
    return get_config_dir() / "vaultledger.db"


def get_user_id(config: dict) -> str:
    return config.get("demo", {}).get("user_id", DEFAULT_USER_ID)


def get_starting_balance(config: dict) -> float:
    return float(config.get("demo", {}).get("starting_balance", DEFAULT_STARTING_BALANCE))


def get_log_level(config: dict) -> str:
    return str(config.get("logging", {}).get("level", "WARNING")).upper()
