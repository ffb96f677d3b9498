"""
Leaderboard service.

The leaderboard is expensive to build (one stats read per player), so it
is computed by a guarded refresh and cached in MongoDB. Reads serve the
cached snapshot and schedule a background refresh when it is missing or
stale.
"""

import asyncio
from collections import Counter
from collections.abc import Callable
from datetime import datetime

import structlog

from seersleague.chain.ledger import LedgerReader
from seersleague.config.settings import ChainSettings, LeaderboardSettings
from seersleague.models.base import utc_now
from seersleague.models.events import EventName, PredictionEvent, ResultEvent
from seersleague.models.leaderboard import LeaderboardEntry, LeaderboardSnapshot, LeaderboardView
from seersleague.models.stats import AggregateStats, ReconciledStats
from seersleague.repositories.leaderboard_repository import LeaderboardRepository
from seersleague.services.action_guard import ActionGuard, ActionGuardError
from seersleague.services.scan_window import ScanWindow, resolve_scan_window
from seersleague.services.task_queue import BackgroundTaskQueue
from seersleague.validators.custom_types import validate_address

logger = structlog.get_logger(__name__)

LEADERBOARD_ACTION = "update-leaderboard"


class LeaderboardServiceError(Exception):
    """Base exception for leaderboard service errors."""

    pass


def rank_entries(entries: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
    """
    Sort and assign 1-based ranks.

    Players without predictions are dropped. Order is accuracy desc, total
    predictions desc, current streak desc, then address.
    """
    ranked = sorted((e for e in entries if e.total_predictions > 0), key=LeaderboardEntry.sort_key)
    return [entry.model_copy(update={"rank": rank}) for rank, entry in enumerate(ranked, start=1)]


class LeaderboardService:
    """
    Service layer for the cached leaderboard.

    Usage:
        service = LeaderboardService(ledger, repository, guard, queue, settings.chain,
                                     settings.leaderboard)
        view = await service.get_leaderboard(address="0xabc...")
    """

    def __init__(
        self,
        ledger: LedgerReader,
        repository: LeaderboardRepository,
        guard: ActionGuard,
        queue: BackgroundTaskQueue,
        chain_settings: ChainSettings,
        settings: LeaderboardSettings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize leaderboard service.

        Args:
            ledger: Ledger read interface
            repository: Snapshot repository
            guard: Guard for the refresh action
            queue: Queue used for background refreshes
            chain_settings: Chain settings (scan window)
            settings: Leaderboard settings
            clock: Returns the current aware UTC datetime
        """
        self.ledger = ledger
        self.repository = repository
        self.guard = guard
        self.queue = queue
        self.chain_settings = chain_settings
        self.settings = settings
        self.clock = clock

    # =========================================================================
    # Refresh
    # =========================================================================

    async def refresh(self, from_block: int | None = None) -> LeaderboardSnapshot:
        """
        Rebuild the leaderboard and replace the cached snapshot.

        Args:
            from_block: Optional lower bound for the event scan

        Returns:
            The stored snapshot

        Raises:
            ActionBusyError: If a refresh is already running
            ActionCoolingDownError: If the last refresh was too recent
            UpstreamUnavailableError: If any ledger read fails; the
                previous snapshot is kept
        """
        async with self.guard.hold(LEADERBOARD_ACTION):
            window = await resolve_scan_window(self.ledger, self.chain_settings, from_block)
            entries = await self._collect_entries(window)

            snapshot = LeaderboardSnapshot(
                entries=rank_entries(entries),
                from_block=window.from_block,
                to_block=window.to_block,
                generated_at=self.clock(),
            )
            await self.repository.save_snapshot(snapshot)

        logger.info(
            "Leaderboard refreshed",
            from_block=window.from_block,
            to_block=window.to_block,
            players=snapshot.total_players,
        )
        return snapshot

    async def _collect_entries(self, window: ScanWindow) -> list[LeaderboardEntry]:
        if window.is_empty:
            return []

        submissions, results = await asyncio.gather(
            self.ledger.query_events(
                EventName.PREDICTIONS_SUBMITTED, None, window.from_block, window.to_block
            ),
            self.ledger.query_events(
                EventName.RESULT_RECORDED, None, window.from_block, window.to_block
            ),
        )

        users = sorted({event.user for event in submissions if isinstance(event, PredictionEvent)})
        correct: Counter[str] = Counter(
            event.user for event in results if isinstance(event, ResultEvent) and event.correct
        )
        logger.debug(
            "Collected leaderboard players",
            players=len(users),
            events=len(submissions) + len(results),
        )

        aggregates = await self._read_aggregates(users)
        return [
            LeaderboardEntry.from_stats(
                ReconciledStats.reconcile(user, aggregate, correct[user])
            )
            for user, aggregate in zip(users, aggregates)
        ]

    async def _read_aggregates(self, users: list[str]) -> list[AggregateStats]:
        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async def read(user: str) -> AggregateStats:
            async with semaphore:
                return await self.ledger.read_aggregate_stats(user)

        results = await asyncio.gather(*(read(user) for user in users), return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    # =========================================================================
    # Reads
    # =========================================================================

    def is_stale(self, snapshot: LeaderboardSnapshot) -> bool:
        """Whether the snapshot is older than the configured age."""
        age = (self.clock() - snapshot.generated_at).total_seconds()
        return age > self.settings.stale_after_seconds

    def schedule_refresh(self) -> bool:
        """Enqueue a background refresh unless one is already pending."""
        return self.queue.enqueue(self._background_refresh, name=LEADERBOARD_ACTION)

    async def _background_refresh(self) -> None:
        try:
            await self.refresh()
        except ActionGuardError as e:
            logger.info("Background leaderboard refresh skipped", reason=str(e))

    async def get_leaderboard(
        self,
        address: str | None = None,
        limit: int | None = None,
    ) -> LeaderboardView:
        """
        Read the cached leaderboard.

        Never waits for a refresh: a missing or stale snapshot schedules
        one in the background and is reported through ``needs_update``.

        Args:
            address: Optional account whose entry should be returned
            limit: Number of top players (default from settings)

        Returns:
            Leaderboard view

        Raises:
            InvalidAddressError: If the address is malformed
            LeaderboardServiceError: If the limit is not positive
        """
        if address is not None:
            address = validate_address(address)
        if limit is None:
            limit = self.settings.top_players
        if limit < 1:
            raise LeaderboardServiceError(f"Limit must be positive, got {limit}")

        snapshot = await self.repository.get_snapshot()
        if snapshot is None:
            self.schedule_refresh()
            return LeaderboardView(needs_update=True)

        needs_update = self.is_stale(snapshot)
        if needs_update:
            self.schedule_refresh()

        user_rank = None
        if address is not None:
            user_rank = next((e for e in snapshot.entries if e.address == address), None)

        return LeaderboardView(
            top_players=snapshot.entries[:limit],
            user_rank=user_rank,
            total_players=snapshot.total_players,
            generated_at=snapshot.generated_at,
            needs_update=needs_update,
        )
