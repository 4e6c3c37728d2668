"""Demo account commands for VaultLedger CLI.

Handles demo account management including reset and status commands.
"""

import click
from rich.console import Console
from rich.panel import Panel

from vaultledger.cli.common import get_account, signed

console = Console()


@click.group()
def demo() -> None:
    """Demo account management commands.

    \b
    Commands:
      reset   - Reset the demo account to its initial state
      status  - View demo account status
    """
    pass


@demo.command()
@click.option(
    "--confirm",
    is_flag=True,
    help="Skip confirmation prompt.",
)
def reset(confirm: bool) -> None:
    """Reset the demo account.

    Clears all positions and activity and restores the starting
    USDC balance.

    \b
    Examples:
      vaultledger demo reset           # Reset with confirmation
      vaultledger demo reset --confirm # Reset without confirmation
    """
    account = get_account()
    current_balance = account.get_current_balance()
    positions = account.get_positions()

    console.print("[bold cyan]Demo Account Reset[/bold cyan]\n")
    console.print(f"Current Balance: [yellow]{current_balance:,.2f} USDC[/yellow]")
    console.print(f"Open Positions:  [yellow]{len(positions)}[/yellow]\n")

    if not confirm:
        if not click.confirm("Are you sure you want to reset the demo account?"):
            console.print("[dim]Reset cancelled.[/dim]")
            return

    account.reset()

    console.print(Panel(
        f"[green]Demo account has been reset![/green]\n\n"
        f"Balance: {account.get_current_balance():,.2f} USDC\n"
        f"Positions: 0",
        title="[bold green]Reset Complete[/bold green]",
        border_style="green",
    ))


@demo.command()
def status() -> None:
    """View demo account status.

    \b
    Examples:
      vaultledger demo status
    """
    account = get_account()
    info = account.get_balance()
    positions = account.get_positions()
    activities = account.get_activity()

    color, pnl = signed(info.positions_value - info.invested)
    console.print(Panel(
        f"[bold]Account Summary[/bold]\n\n"
        f"User:            {account.user_id}\n"
        f"Available Cash:  {info.available_cash:,.2f} USDC\n"
        f"Positions:       {len(positions)}\n"
        f"Total Value:     {info.total_value:,.2f} USDC\n"
        f"Unrealized P&L:  [{color}]{pnl} USDC[/{color}]\n"
        f"Activity:        {len(activities)} records",
        title="[bold]Demo Account[/bold]",
        border_style="cyan",
    ))

    console.print(Panel(
        "[dim]Commands:[/dim]\n"
        "• [cyan]vaultledger buy VAULT_ID AMOUNT[/cyan] - Buy shares\n"
        "• [cyan]vaultledger sell VAULT_ID SHARES[/cyan] - Sell unlocked shares\n"
        "• [cyan]vaultledger demo reset[/cyan] - Reset the demo account",
        title="[bold]Quick Actions[/bold]",
        border_style="dim",
    ))
