"""Vault commands for VaultLedger CLI.

Handles browsing vaults, vault details, manager vault creation
and NAV updates.
"""

from datetime import datetime
from typing import Sequence

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vaultledger.cli.common import error_panel, get_account, get_registry, signed

console = Console()


def sparkline(values: Sequence[float]) -> str:
    """Render a NAV history as a unicode sparkline."""
    if not values:
        return ""
    blocks = "▁▂▃▄▅▆▇█"
    low, high = min(values), max(values)
    span = high - low
    if span == 0:
        return blocks[3] * len(values)
    return "".join(blocks[round((v - low) / span * (len(blocks) - 1))] for v in values)


@click.command()
@click.option(
    "-s", "--sort",
    "sort_by",
    type=click.Choice(["tvl", "performance", "name"]),
    default="tvl",
    show_default=True,
    help="Sort order.",
)
def vaults(sort_by: str) -> None:
    """List available vaults.

    \b
    Examples:
      vaultledger vaults                  # Largest vaults first
      vaultledger vaults --sort performance
    """
    registry = get_registry()
    items = registry.list_vaults(sort_by=sort_by)

    if not items:
        console.print("[dim]No vaults yet.[/dim]")
        return

    table = Table(title="Vaults", show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Manager")
    table.add_column("NAV", justify="right")
    table.add_column("Perf", justify="right")
    table.add_column("TVL", justify="right")
    table.add_column("Exit Fee", justify="right")
    table.add_column("Lockup", justify="right")
    table.add_column("History")

    for vault in items:
        color, perf = signed(vault.performance_percent, ".1f")
        table.add_row(
            str(vault.id),
            vault.name,
            vault.manager,
            f"{vault.nav:.4f}",
            f"[{color}]{perf}%[/{color}]",
            f"${vault.tvl:,.0f}",
            f"{vault.exit_fee_percent:g}%",
            f"{vault.lockup_days}d",
            sparkline(vault.nav_history),
        )

    console.print(table)


@click.group()
def vault() -> None:
    """Vault details and manager commands.

    \b
    Commands:
      show    - Show a vault and your tranches in it
      create  - Create a new vault as a manager
      nav     - Record a new NAV for a vault
    """
    pass


@vault.command()
@click.argument("vault_id", type=int)
def show(vault_id: int) -> None:
    """Show vault details and your tranches in it."""
    from vaultledger.ledger import valuation
    from vaultledger.registry import VaultNotFound

    account = get_account()
    try:
        item = account.registry.get_vault(vault_id)
    except VaultNotFound as e:
        error_panel(f"[red]{e}[/red]")
        raise SystemExit(1)

    color, perf = signed(item.performance_percent, ".2f")
    console.print(Panel(
        f"[bold]{item.name}[/bold] by {item.manager or 'unknown'}\n\n"
        f"NAV:        {item.nav:.4f}  [{color}]{perf}%[/{color}]\n"
        f"TVL:        ${item.tvl:,.2f}\n"
        f"Exit Fee:   {item.exit_fee_percent:g}%\n"
        f"Lockup:     {item.lockup_days}d\n"
        f"History:    {sparkline(item.nav_history)}",
        title=f"[bold cyan]Vault {item.id}[/bold cyan]",
        border_style="cyan",
    ))

    position = account.get_position(vault_id)
    if position is None:
        console.print("\n[dim]You have no position in this vault.[/dim]")
        return

    now = datetime.now()
    table = Table(title="Your Tranches", show_header=True, header_style="bold")
    table.add_column("Deposited", justify="right")
    table.add_column("Shares", justify="right")
    table.add_column("Unlock Date")
    table.add_column("Status")

    for tranche in position.tranches:
        if tranche.is_unlocked(now):
            status = "[green]Unlocked[/green]"
        else:
            status = f"[yellow]Unlocks {valuation.time_to_unlock(tranche.unlock_date, now)}[/yellow]"
        table.add_row(
            f"{tranche.amount:.2f} USDC",
            f"{tranche.shares:.4f}",
            tranche.unlock_date.strftime("%b %d, %Y %H:%M"),
            status,
        )

    console.print(table)
    unlocked = valuation.unlocked_shares(position, now)
    console.print(
        f"\nUnlocked: [bold]{unlocked:.4f}[/bold] shares "
        f"(~{unlocked * item.nav:.2f} USDC)"
    )


@vault.command()
@click.argument("name")
@click.option("-m", "--manager", default="", help="Manager handle or wallet address.")
@click.option("-f", "--fee", "exit_fee", type=float, default=1.0, show_default=True, help="Exit fee percent.")
@click.option("-l", "--lockup", "lockup_days", type=int, default=7, show_default=True, help="Lockup days per deposit.")
@click.option("--nav", type=float, default=1.0, show_default=True, help="Initial NAV per share.")
def create(name: str, manager: str, exit_fee: float, lockup_days: int, nav: float) -> None:
    """Create a new vault.

    \b
    Examples:
      vaultledger vault create "Momentum Fund" --manager alice.eth
      vaultledger vault create "Slow Money" --lockup 30 --fee 0.5
    """
    from vaultledger.registry import VaultValidationError

    registry = get_registry()
    try:
        created = registry.create_vault(
            name=name,
            manager=manager,
            exit_fee_percent=exit_fee,
            lockup_days=lockup_days,
            nav=nav,
        )
    except VaultValidationError as e:
        error_panel("\n".join(f"[red]{field}[/red]: {message}" for field, message in e.errors),
                    title="Invalid Vault")
        raise SystemExit(1)

    console.print(Panel(
        f"[green]Vault created![/green]\n\n"
        f"ID:       {created.id}\n"
        f"Name:     {created.name}\n"
        f"Exit Fee: {created.exit_fee_percent:g}%\n"
        f"Lockup:   {created.lockup_days}d",
        title="[bold green]Success[/bold green]",
        border_style="green",
    ))


@vault.command()
@click.argument("vault_id", type=int)
@click.argument("value", type=float)
def nav(vault_id: int, value: float) -> None:
    """Record a new NAV for a vault."""
    from vaultledger.registry import VaultNotFound

    registry = get_registry()
    try:
        updated = registry.update_nav(vault_id, value)
    except (ValueError, VaultNotFound) as e:
        error_panel(f"[red]{e}[/red]")
        raise SystemExit(1)

    console.print(f"[green]✓[/green] {updated.name} NAV is now [bold]{updated.nav:.4f}[/bold]")
