"""CLI commands for VaultLedger.

This package provides the command-line interface for VaultLedger,
including vault browsing, buying and selling shares, and viewing
positions and activity.
"""

from vaultledger.cli.main import cli, main

__all__ = ["cli", "main"]
