"""Main CLI entry point for VaultLedger.

This module provides the main click group and lazy loading
of command modules to keep startup fast.
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

# Console for rich output
console = Console()


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when they are invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        attr = getattr(module, cmd_name, None)
        if not isinstance(attr, click.Command):
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(attr)
        return attr


LAZY_SUBCOMMANDS = {
    # Vaults
    "vaults": "vaultledger.cli.vaults",
    "vault": "vaultledger.cli.vaults",
    # Trading
    "buy": "vaultledger.cli.trade",
    "sell": "vaultledger.cli.trade",
    # Portfolio
    "positions": "vaultledger.cli.portfolio",
    "balance": "vaultledger.cli.portfolio",
    "activity": "vaultledger.cli.portfolio",
    # Demo account
    "demo": "vaultledger.cli.demo",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def configure_logging(level: str) -> None:
    """Route log records through rich to stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="vaultledger")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """VaultLedger - co-investment vaults with lockups, from the terminal.

    Browse vaults, buy shares with USDC, and sell unlocked shares
    after each deposit's lockup period ends.

    \b
    Quick Start:
      vaultledger vaults           # Browse vaults
      vaultledger buy 1 100        # Deposit 100 USDC into vault 1
      vaultledger positions        # View positions and unlocks
    """
    from vaultledger.cli.common import get_config
    from vaultledger.config import get_log_level

    ctx.ensure_object(dict)
    config = get_config()
    ctx.obj["config"] = config
    configure_logging("DEBUG" if verbose else get_log_level(config))


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
