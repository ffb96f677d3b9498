"""
SeersLeague Ledger Reader - Main Entry Point

Demonstrates the reader against the configured Base RPC endpoint:
ledger health, upcoming matches and, when an address is given on the
command line, its reconciled stats and history.

Usage:
    python main.py [ADDRESS]
"""

import asyncio
import sys

import structlog
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from seersleague.chain.connection import close_ledger, get_connection, get_ledger
from seersleague.chain.ledger import ContractLedger
from seersleague.config.logging_config import configure_logging
from seersleague.config.settings import get_settings
from seersleague.services.history_service import HistoryService
from seersleague.services.match_service import MatchService
from seersleague.services.stats_service import StatsService

logger = structlog.get_logger(__name__)
console = Console()


async def check_connection() -> bool:
    """Check ledger connection health."""
    try:
        connection = await get_connection()
        await connection.connect()
        health = await connection.health_check()

        if health["healthy"]:
            console.print(
                f"[green]✓[/green] Connected to chain {health.get('chain_id')} "
                f"(block: {health.get('block_number')}, "
                f"latency: {health.get('latency_ms', 'N/A')}ms)"
            )
            return True
        else:
            console.print(
                f"[red]✗[/red] Ledger unhealthy: {health.get('error', health.get('status'))}"
            )
            return False
    except Exception as e:
        console.print(f"[red]✗[/red] Failed to connect to ledger: {e}")
        return False


async def demo_show_matches(ledger: ContractLedger) -> None:
    """Display matches starting within a week."""
    console.print("\n[bold cyan]Upcoming matches (7 days):[/bold cyan]")

    try:
        service = MatchService(ledger, get_settings().chain)
        upcoming = await service.list_upcoming(window_days=7)

        table = Table(title="⚽ Upcoming Matches")
        table.add_column("Match", justify="right", style="cyan")
        table.add_column("Kick-off (UTC)", style="green")
        table.add_column("Open", justify="center")

        for match in upcoming:
            table.add_row(
                str(match.match_id),
                match.start_date.strftime("%Y-%m-%d %H:%M"),
                "yes" if match.can_predict else "no",
            )

        console.print(table)
    except Exception as e:
        console.print(f"  [red]✗[/red] Failed to list matches: {e}")


async def demo_show_stats(ledger: ContractLedger, address: str) -> None:
    """Display reconciled stats and duplicate recordings for one address."""
    console.print(f"\n[bold cyan]Stats for {address}:[/bold cyan]")

    settings = get_settings()
    try:
        stats = await StatsService(ledger, settings.chain, name_resolver=ledger).get_reconciled_stats(
            address
        )
        history = await HistoryService(ledger, settings.chain).get_history(address)
    except Exception as e:
        console.print(f"  [red]✗[/red] Failed to read stats: {e}")
        return

    table = Table(title="📊 Reconciled Stats")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")

    table.add_row("Name", stats.name or "-")
    table.add_row("Correct", str(stats.correct_predictions))
    table.add_row("Total", str(stats.total_predictions))
    table.add_row("Accuracy", f"{stats.accuracy}%")
    table.add_row("Current Streak", str(stats.current_streak))
    table.add_row("Longest Streak", str(stats.longest_streak))
    table.add_row("Free Left", str(stats.remaining_free_predictions))
    table.add_row("Pending Results", str(history.pending_count))
    table.add_row("Duplicate Recordings", str(len(history.duplicate_results)))

    console.print(table)


async def run_demo(address: str | None) -> None:
    """Run the ledger reader demo."""
    console.print(
        Panel.fit(
            "[bold blue]SeersLeague Ledger Reader[/bold blue]\nweb3 + Pydantic",
            border_style="blue",
        )
    )

    settings = get_settings()
    console.print(f"\n[dim]Environment: {settings.app.environment}[/dim]")
    console.print(f"[dim]Contract: {settings.chain.contract_address}[/dim]")

    if not await check_connection():
        console.print("\n[red]Cannot proceed without a ledger connection.[/red]")
        console.print("Check CHAIN_RPC_URL in your environment or .env file.")
        return

    ledger = await get_ledger()

    await demo_show_matches(ledger)
    if address:
        await demo_show_stats(ledger, address)

    console.print("\n[green]Demo completed![/green]")


async def main() -> None:
    """Main entry point."""
    configure_logging(get_settings().app.log_level)
    address = sys.argv[1] if len(sys.argv) > 1 else None

    try:
        await run_demo(address)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
    except Exception as e:
        logger.exception("Application error")
        console.print(f"\n[red]Error: {e}[/red]")
        sys.exit(1)
    finally:
        await close_ledger()


if __name__ == "__main__":
    asyncio.run(main())
