"""VaultLedger - position and tranche accounting for co-investment vaults."""

__version__ = "0.1.0"
