"""Trading commands for VaultLedger CLI.

Handles buying vault shares with USDC and selling unlocked shares.
"""

from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from vaultledger.cli.common import error_panel, get_account

console = Console()


def format_unlock_date(unlock_date: datetime) -> str:
    return unlock_date.strftime("%b %d, %Y")


@click.command()
@click.argument("vault_id", type=int)
@click.argument("amount", type=float)
@click.option(
    "-y", "--yes",
    is_flag=True,
    default=False,
    help="Skip confirmation prompt.",
)
def buy(vault_id: int, amount: float, yes: bool) -> None:
    """Buy vault shares with USDC.

    VAULT_ID is the vault to deposit into (see `vaultledger vaults`).
    AMOUNT is the USDC amount to deposit.

    Shares are priced at the vault's current NAV and stay locked for
    the vault's lockup period.

    \b
    Examples:
      vaultledger buy 1 100        # Deposit 100 USDC into vault 1
      vaultledger buy 2 50 --yes   # Skip confirmation
    """
    from vaultledger.ledger import valuation
    from vaultledger.registry import VaultNotFound

    account = get_account()
    try:
        vault = account.registry.get_vault(vault_id)
    except VaultNotFound as e:
        error_panel(f"[red]{e}[/red]")
        raise SystemExit(1)

    shares, unlock_date = valuation.preview_deposit(amount, vault.nav, vault.lockup_days, datetime.now())
    console.print(Panel(
        f"[bold]Buy Preview[/bold]\n\n"
        f"Vault:    {vault.name}\n"
        f"Amount:   {amount:,.2f} USDC\n"
        f"NAV:      {vault.nav:.4f}\n"
        f"Shares:   {shares:.4f}\n"
        f"Unlocks:  {format_unlock_date(unlock_date)}\n"
        f"Balance:  {account.get_current_balance():,.2f} USDC",
        title="[bold cyan]Buying Shares[/bold cyan]",
        border_style="cyan",
    ))

    if not yes and not click.confirm("Confirm purchase?"):
        console.print("[dim]Purchase cancelled.[/dim]")
        return

    result = account.buy(vault_id, amount)
    if not result.ok:
        error_panel(f"[red]Purchase rejected[/red]\n\n{result.message}")
        raise SystemExit(1)

    console.print(Panel(
        f"[green]{result.message}[/green]\n\n"
        f"Shares:   {result.shares:.4f}\n"
        f"Unlocks:  {format_unlock_date(result.unlock_date)}\n"
        f"Balance:  {account.get_current_balance():,.2f} USDC",
        title="[bold green]Success[/bold green]",
        border_style="green",
    ))


@click.command()
@click.argument("vault_id", type=int)
@click.argument("shares", type=float, required=False)
@click.option(
    "-p", "--percent",
    type=click.FloatRange(0, 100),
    default=None,
    help="Sell this percentage of your unlocked shares instead of a share count.",
)
@click.option(
    "-y", "--yes",
    is_flag=True,
    default=False,
    help="Skip confirmation prompt.",
)
def sell(vault_id: int, shares: Optional[float], percent: Optional[float], yes: bool) -> None:
    """Sell unlocked vault shares.

    VAULT_ID is the vault to withdraw from.
    SHARES is the number of shares to sell; use --percent for a
    fraction of your unlocked shares instead.

    Oldest unlocked deposits are sold first. Locked deposits are
    never sold. The vault's exit fee is deducted from the proceeds.

    \b
    Examples:
      vaultledger sell 1 25.5          # Sell 25.5 shares
      vaultledger sell 1 --percent 100 # Sell everything unlocked
    """
    from vaultledger.ledger import valuation
    from vaultledger.registry import VaultNotFound

    if (shares is None) == (percent is None):
        error_panel("[red]Specify either SHARES or --percent.[/red]")
        raise SystemExit(1)

    account = get_account()
    try:
        vault = account.registry.get_vault(vault_id)
    except VaultNotFound as e:
        error_panel(f"[red]{e}[/red]")
        raise SystemExit(1)

    now = datetime.now()
    position = account.get_position(vault_id)
    if position is None:
        error_panel(f"[red]You have no position in {vault.name}.[/red]")
        raise SystemExit(1)

    if percent is not None:
        shares = valuation.shares_for_percent(position, percent, now)

    unlocked = valuation.unlocked_shares(position, now)
    gross, fee, net = valuation.preview_withdrawal(shares, vault.nav, vault.exit_fee_percent)
    console.print(Panel(
        f"[bold]Sell Preview[/bold]\n\n"
        f"Vault:     {vault.name}\n"
        f"Shares:    {shares:.4f} of {unlocked:.4f} unlocked\n"
        f"Gross:     {gross:,.2f} USDC\n"
        f"Exit Fee:  {fee:,.2f} USDC ({vault.exit_fee_percent:g}%)\n"
        f"You Get:   [bold]{net:,.2f} USDC[/bold]",
        title="[bold cyan]Selling Shares[/bold cyan]",
        border_style="cyan",
    ))

    if not yes and not click.confirm("Confirm sale?"):
        console.print("[dim]Sale cancelled.[/dim]")
        return

    result = account.sell(vault_id, shares, now)
    if not result.ok:
        error_panel(f"[red]Sale rejected[/red]\n\n{result.message}")
        raise SystemExit(1)

    closed_note = "\n[dim]Position closed.[/dim]" if result.closed else ""
    console.print(Panel(
        f"[green]{result.message}[/green]\n\n"
        f"Balance:  {account.get_current_balance():,.2f} USDC"
        f"{closed_note}",
        title="[bold green]Success[/bold green]",
        border_style="green",
    ))
