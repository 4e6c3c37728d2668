"""Portfolio commands for VaultLedger CLI.

Handles position display, balance information and the activity feed.
"""

from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vaultledger.cli.common import get_account, signed
from vaultledger.models import Activity

console = Console()


def time_ago(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """Relative time such as ``just now``, ``5m ago`` or ``3d ago``."""
    now = now or datetime.now()
    seconds = int((now - timestamp).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def describe_activity(activity: Activity) -> str:
    """One-line description of an activity record."""
    if activity.type == "buy":
        return f"Bought {activity.amount or 0:.2f} USDC of {activity.vault_name}"
    return (
        f"Sold {activity.shares:.4f} shares of {activity.vault_name} "
        f"for {activity.net_value or 0:.2f} USDC"
    )


def summarize_activity(activities: list[Activity]) -> dict:
    """Aggregate an activity list.

    Args:
        activities: List of Activity objects.

    Returns:
        Dictionary with deposit, withdrawal and fee totals.
    """
    buys = [a for a in activities if a.type == "buy"]
    sells = [a for a in activities if a.type == "sell"]
    return {
        "total_actions": len(activities),
        "buys": len(buys),
        "sells": len(sells),
        "total_deposited": sum(a.amount or 0.0 for a in buys),
        "total_withdrawn": sum(a.net_value or 0.0 for a in sells),
        "total_fees": sum(a.fee or 0.0 for a in sells),
    }


@click.command()
def positions() -> None:
    """Show your vault positions.

    Displays shares, value at current NAV, unrealized P&L and
    unlock status for each vault you hold.

    \b
    Examples:
      vaultledger positions
    """
    account = get_account()
    summaries = account.get_positions()

    if not summaries:
        console.print(Panel(
            "[dim]No positions yet.[/dim]\n\n"
            "Run [cyan]vaultledger vaults[/cyan] to find a vault, then "
            "[cyan]vaultledger buy VAULT_ID AMOUNT[/cyan].",
            title="[bold]My Vaults[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="My Vaults", show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Vault", style="bold")
    table.add_column("Shares", justify="right")
    table.add_column("Unlocked", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("P&L %", justify="right")
    table.add_column("Status")

    for summary in summaries:
        color, pnl = signed(summary.pnl)
        _, pnl_pct = signed(summary.pnl_percent)
        status_color = "green" if summary.unlocked_shares > 0 else "yellow"
        table.add_row(
            str(summary.vault_id),
            summary.vault_name,
            f"{summary.total_shares:.4f}",
            f"{summary.unlocked_shares:.4f}",
            f"${summary.value:,.2f}",
            f"[{color}]{pnl}[/{color}]",
            f"[{color}]{pnl_pct}%[/{color}]",
            f"[{status_color}]{summary.status}[/{status_color}]",
        )

    console.print(table)

    total_pnl = sum(s.pnl for s in summaries)
    color, text = signed(total_pnl)
    console.print(f"\nUnrealized P&L: [{color}]{text} USDC[/{color}]")


@click.command()
def balance() -> None:
    """Show wallet balance and portfolio value.

    \b
    Examples:
      vaultledger balance
    """
    account = get_account()
    info = account.get_balance()

    color, pnl = signed(info.positions_value - info.invested)
    console.print(Panel(
        f"Available:       {info.available_cash:,.2f} USDC\n"
        f"Invested:        {info.invested:,.2f} USDC\n"
        f"Positions Value: {info.positions_value:,.2f} USDC\n"
        f"{'─' * 35}\n"
        f"Total Value:     [bold]{info.total_value:,.2f} USDC[/bold]\n"
        f"Unrealized P&L:  [{color}]{pnl} USDC[/{color}]",
        title="[bold]Balance[/bold]",
        border_style="cyan",
    ))


@click.command()
@click.option(
    "-n", "--limit",
    type=int,
    default=20,
    show_default=True,
    help="Number of records to show.",
)
def activity(limit: int) -> None:
    """Show recent buys and sells.

    \b
    Examples:
      vaultledger activity
      vaultledger activity -n 5
    """
    account = get_account()
    records = account.get_activity(limit=limit)

    if not records:
        console.print("[dim]No activity yet.[/dim]")
        return

    now = datetime.now()
    table = Table(title="Activity", show_header=True, header_style="bold")
    table.add_column("When")
    table.add_column("Type")
    table.add_column("Details")
    table.add_column("Fee", justify="right")

    for record in records:
        type_color = "green" if record.type == "buy" else "magenta"
        table.add_row(
            time_ago(record.timestamp, now),
            f"[{type_color}]{record.type.upper()}[/{type_color}]",
            describe_activity(record),
            f"{record.fee:.2f}" if record.fee is not None else "-",
        )

    console.print(table)

    totals = summarize_activity(records)
    console.print(
        f"\n[dim]{totals['buys']} buys, {totals['sells']} sells · "
        f"fees paid {totals['total_fees']:.2f} USDC[/dim]"
    )
