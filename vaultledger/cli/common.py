"""Shared helpers for VaultLedger CLI commands."""

import click
import toml
from rich.console import Console
from rich.panel import Panel

console = Console()


def error_panel(message: str, title: str = "Error") -> None:
    """Print an error panel."""
    console.print(Panel(
        message,
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def get_config() -> dict:
    """Load configuration, exiting with an error panel if it is malformed."""
    from vaultledger.config import get_config_path, load_config

    try:
        return load_config()
    except toml.TomlDecodeError as e:
        error_panel(f"[red]Invalid config file[/red] {get_config_path()}\n\n{e}")
        raise SystemExit(1)


def _config_from_context() -> dict:
    ctx = click.get_current_context(silent=True)
    if ctx is not None and isinstance(ctx.obj, dict) and "config" in ctx.obj:
        return ctx.obj["config"]
    return get_config()


def get_data_store():
    """Get the data store instance."""
    from vaultledger.config import get_db_path
    from vaultledger.db.store import DataStore

    return DataStore(get_db_path(_config_from_context()))


def get_registry():
    """Get the vault registry."""
    from vaultledger.registry import VaultRegistry

    return VaultRegistry(get_data_store())


def get_account():
    """Get the demo account for the configured user."""
    from vaultledger.accounts.demo import DemoAccount
    from vaultledger.config import get_starting_balance, get_user_id
    from vaultledger.registry import VaultRegistry

    config = _config_from_context()
    store = get_data_store()
    return DemoAccount(
        data_store=store,
        registry=VaultRegistry(store),
        user_id=get_user_id(config),
        starting_balance=get_starting_balance(config),
    )


def signed(value: float, fmt: str = ",.2f") -> tuple[str, str]:
    """Return (color, formatted value with sign) for a P&L style number."""
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else ""
    return color, f"{sign}{value:{fmt}}"
