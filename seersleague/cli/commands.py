"""
CLI commands for the SeersLeague ledger reader.

Provides command-line access to reconciled stats, prediction history,
upcoming matches and the cached leaderboard.
"""

import asyncio
from functools import wraps
from typing import Callable

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from seersleague import __version__
from seersleague.chain.connection import close_ledger, get_ledger
from seersleague.chain.connection import get_connection as get_ledger_connection
from seersleague.chain.errors import UpstreamUnavailableError
from seersleague.config.logging_config import configure_logging
from seersleague.config.settings import get_settings
from seersleague.db.connection import close_database, get_database
from seersleague.db.connection import get_connection as get_db_connection
from seersleague.db.indexes import ensure_indexes
from seersleague.models.stats import calculate_prediction_fee, format_usdc
from seersleague.repositories.leaderboard_repository import LeaderboardRepository
from seersleague.repositories.lock_repository import ActionLockRepository
from seersleague.services.action_guard import (
    ActionCoolingDownError,
    ActionGuardError,
    MongoActionGuard,
)
from seersleague.services.history_service import HistoryService
from seersleague.services.leaderboard_service import LeaderboardService, LeaderboardServiceError
from seersleague.services.match_service import MatchService
from seersleague.services.stats_service import StatsService
from seersleague.services.task_queue import BackgroundTaskQueue
from seersleague.validators.custom_types import InvalidAddressError

console = Console()


def async_command(f: Callable) -> Callable:
    """Decorator to run async functions in Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def handle_errors(f: Callable) -> Callable:
    """Decorator to handle common errors in CLI commands."""

    @wraps(f)
    async def wrapper(*args, **kwargs):
        try:
            return await f(*args, **kwargs)
        except InvalidAddressError as e:
            console.print(f"[red]Error:[/red] {e}")
        except UpstreamUnavailableError as e:
            console.print(f"[red]Ledger unavailable:[/red] {e}")
        except ActionCoolingDownError as e:
            console.print(f"[yellow]Cooling down:[/yellow] {e}")
        except ActionGuardError as e:
            console.print(f"[yellow]Busy:[/yellow] {e}")
        except LeaderboardServiceError as e:
            console.print(f"[red]Error:[/red] {e}")
        except Exception as e:
            console.print(f"[red]Unexpected error:[/red] {e}")
            raise
        finally:
            await close_ledger()
            await close_database()

    return wrapper


async def build_leaderboard_service(queue: BackgroundTaskQueue) -> LeaderboardService:
    """Wire the leaderboard service with the Mongo-backed guard."""
    settings = get_settings()
    database = await get_database()
    guard = MongoActionGuard(
        ActionLockRepository(database),
        cooldown_seconds=settings.leaderboard.refresh_cooldown_seconds,
        lock_ttl_seconds=settings.leaderboard.lock_ttl_seconds,
    )
    return LeaderboardService(
        await get_ledger(),
        LeaderboardRepository(database),
        guard,
        queue,
        settings.chain,
        settings.leaderboard,
    )


# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="seers")
@click.option("--log-level", default=None, help="Override APP_LOG_LEVEL")
def cli(log_level: str | None):
    """SeersLeague ledger reader - CLI Interface.

    Read reconciled prediction stats, history, matches and the leaderboard.
    """
    configure_logging(log_level or get_settings().app.log_level)


# =============================================================================
# Stats Commands
# =============================================================================


@cli.command("stats")
@click.argument("address")
@click.option("--from-block", type=int, default=None, help="Lower bound for the event scan")
@async_command
@handle_errors
async def stats(address: str, from_block: int | None):
    """Show reconciled stats for ADDRESS."""
    ledger = await get_ledger()
    service = StatsService(ledger, get_settings().chain, name_resolver=ledger)

    result = await service.get_reconciled_stats(address, block_range_hint=from_block)
    next_fee = calculate_prediction_fee(result.free_predictions_used, 1)

    console.print(
        Panel(
            f"Address: {result.address}\n"
            f"Name: {result.name or '-'}\n\n"
            f"Correct: {result.correct_predictions}\n"
            f"Total: {result.total_predictions}\n"
            f"Accuracy: [bold]{result.accuracy}%[/bold]\n"
            f"Current Streak: {result.current_streak}\n"
            f"Longest Streak: {result.longest_streak}\n\n"
            f"Free Predictions Left: {result.remaining_free_predictions}\n"
            f"Next Prediction Fee: {format_usdc(next_fee)} USDC",
            title="Reconciled Stats",
            border_style="cyan",
        )
    )


@cli.command("history")
@click.argument("address")
@click.option("--from-block", type=int, default=None, help="Lower bound for the event scan")
@async_command
@handle_errors
async def history(address: str, from_block: int | None):
    """Show prediction history for ADDRESS."""
    service = HistoryService(await get_ledger(), get_settings().chain)
    result = await service.get_history(address, from_block=from_block)

    table = Table(
        title=f"History ({len(result.entries)}) blocks {result.from_block}-{result.to_block}",
        box=box.ROUNDED,
    )
    table.add_column("Block", justify="right", style="dim")
    table.add_column("Match", justify="right", style="cyan")
    table.add_column("Result", justify="center")
    table.add_column("Recorded", justify="right")

    for entry in result.entries:
        if entry.is_correct is None:
            outcome = "[dim]pending[/dim]"
        elif entry.is_correct:
            outcome = "[green]correct[/green]"
        else:
            outcome = "[red]wrong[/red]"
        recorded = str(entry.recorded_times)
        if entry.is_duplicated:
            recorded = f"[yellow]{recorded}[/yellow]"
        table.add_row(str(entry.block_number), str(entry.match_id), outcome, recorded)

    console.print(table)

    if result.duplicate_results:
        console.print(
            f"[yellow]{len(result.duplicate_results)} match result(s) recorded more than once, "
            f"{result.extra_correct_recordings} extra correct recording(s)[/yellow]"
        )


# =============================================================================
# Match Commands
# =============================================================================


@cli.command("matches")
@click.option("--days", "-d", type=int, default=None, help="Only matches within N days")
@async_command
@handle_errors
async def matches(days: int | None):
    """List upcoming matches."""
    service = MatchService(await get_ledger(), get_settings().chain)
    upcoming = await service.list_upcoming(window_days=days)

    table = Table(title=f"Upcoming Matches ({len(upcoming)})", box=box.ROUNDED)
    table.add_column("Match", justify="right", style="cyan")
    table.add_column("Kick-off (UTC)")
    table.add_column("Starts In", justify="right")
    table.add_column("Open", justify="center")

    for match in upcoming:
        hours, rest = divmod(match.seconds_until_start, 3600)
        table.add_row(
            str(match.match_id),
            match.start_date.strftime("%Y-%m-%d %H:%M"),
            f"{hours}h {rest // 60}m",
            "[green]yes[/green]" if match.can_predict else "[red]no[/red]",
        )

    console.print(table)


# =============================================================================
# Leaderboard Commands
# =============================================================================


@cli.group()
def leaderboard():
    """Leaderboard commands."""
    pass


@leaderboard.command("show")
@click.option("--address", "-a", default=None, help="Also show this player's rank")
@click.option("--limit", "-l", type=int, default=None, help="Number of top players")
@async_command
@handle_errors
async def leaderboard_show(address: str | None, limit: int | None):
    """Show the cached leaderboard."""
    queue = BackgroundTaskQueue()
    service = await build_leaderboard_service(queue)

    view = await service.get_leaderboard(address=address, limit=limit)

    if view.generated_at is None:
        console.print("[yellow]No leaderboard yet, a refresh has been started.[/yellow]")
        await queue.drain()
        return

    table = Table(
        title=f"Leaderboard ({view.total_players} players)",
        caption=f"Generated {view.generated_at:%Y-%m-%d %H:%M} UTC",
        box=box.ROUNDED,
    )
    table.add_column("Rank", justify="center", style="cyan")
    table.add_column("Player", style="green")
    table.add_column("Accuracy", justify="right", style="magenta")
    table.add_column("Correct", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Streak", justify="right")

    for entry in view.top_players:
        table.add_row(
            f"#{entry.rank}",
            entry.address,
            f"{entry.accuracy}%",
            str(entry.correct_predictions),
            str(entry.total_predictions),
            str(entry.current_streak),
        )

    console.print(table)

    if address is not None:
        if view.user_rank is None:
            console.print(f"[dim]{address} is not ranked[/dim]")
        else:
            console.print(f"Rank of {view.user_rank.address}: [bold]#{view.user_rank.rank}[/bold]")

    if view.needs_update:
        console.print("[yellow]Snapshot is stale, refreshing...[/yellow]")
        await queue.drain()


@leaderboard.command("refresh")
@click.option("--from-block", type=int, default=None, help="Lower bound for the event scan")
@async_command
@handle_errors
async def leaderboard_refresh(from_block: int | None):
    """Rebuild the leaderboard snapshot now."""
    service = await build_leaderboard_service(BackgroundTaskQueue())

    console.print("[yellow]Refreshing leaderboard...[/yellow]")
    snapshot = await service.refresh(from_block=from_block)

    console.print(
        f"[green]Leaderboard refreshed:[/green] {snapshot.total_players} players, "
        f"blocks {snapshot.from_block}-{snapshot.to_block}"
    )


# =============================================================================
# Chain Commands
# =============================================================================


@cli.group()
def chain():
    """Ledger connection commands."""
    pass


@chain.command("status")
@async_command
@handle_errors
async def chain_status():
    """Check ledger connection status."""
    conn = await get_ledger_connection()
    await conn.connect()

    health = await conn.health_check()

    if health["healthy"]:
        console.print(
            Panel(
                f"[green]Connected[/green]\n"
                f"Chain ID: {health.get('chain_id')}\n"
                f"Block: {health.get('block_number')}\n"
                f"Latency: {health.get('latency_ms', 'N/A')} ms",
                title="Ledger Status",
                border_style="green",
            )
        )
    else:
        detail = health.get("error") or f"unexpected chain id {health.get('chain_id')}"
        console.print(
            Panel(
                f"[red]{health['status']}[/red]\nError: {detail}",
                title="Ledger Status",
                border_style="red",
            )
        )


# =============================================================================
# Database Commands
# =============================================================================


@cli.group()
def db():
    """Database management commands."""
    pass


@db.command("init")
@async_command
@handle_errors
async def db_init():
    """Initialize database with indexes."""
    console.print("[yellow]Initializing database...[/yellow]")

    database = await get_database()
    results = await ensure_indexes(database)

    table = Table(title="Created Indexes", box=box.ROUNDED)
    table.add_column("Collection", style="cyan")
    table.add_column("Indexes", style="green")

    for collection, indexes in results.items():
        table.add_row(collection, ", ".join(indexes))

    console.print(table)
    console.print("[green]Database initialized successfully![/green]")


@db.command("status")
@async_command
@handle_errors
async def db_status():
    """Check database connection and cache status."""
    conn = await get_db_connection()
    await conn.connect()

    health = await conn.health_check()

    if health["healthy"]:
        collections = ", ".join(
            f"{name} {'[green]ok[/green]' if present else '[red]missing[/red]'}"
            for name, present in health["collections"].items()
        )
        generated_at = health.get("snapshot_generated_at")
        console.print(
            Panel(
                f"[green]Connected[/green]\n"
                f"Latency: {health.get('latency_ms', 'N/A')} ms\n"
                f"Collections: {collections}\n"
                f"Leaderboard: {generated_at or 'not generated yet'}",
                title="Database Status",
                border_style="green",
            )
        )
    else:
        console.print(
            Panel(
                f"[red]Disconnected[/red]\nError: {health.get('error', 'Unknown')}",
                title="Database Status",
                border_style="red",
            )
        )


if __name__ == "__main__":
    cli()
