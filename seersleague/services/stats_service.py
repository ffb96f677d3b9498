"""
Reconciled statistics service.

Combines the contract's aggregate counters with a count of correct
results taken from the event log. The contract's own correct counter is
never used: it double-counts results recorded more than once.
"""

import asyncio

import structlog

from seersleague.chain.ledger import LedgerReader, NameResolver
from seersleague.config.settings import ChainSettings
from seersleague.models.events import EventName, ResultEvent
from seersleague.models.stats import ReconciledStats
from seersleague.services.scan_window import ScanWindow, resolve_scan_window
from seersleague.validators.custom_types import validate_address

logger = structlog.get_logger(__name__)


def count_correct_results(events: list[ResultEvent]) -> int:
    """Count correct results, duplicates included."""
    return sum(1 for event in events if event.correct)


class StatsService:
    """
    Reads reconciled statistics for one account.

    Usage:
        service = StatsService(ledger, settings.chain, name_resolver=ledger)
        stats = await service.get_reconciled_stats("0xabc...")
    """

    def __init__(
        self,
        ledger: LedgerReader,
        settings: ChainSettings,
        name_resolver: NameResolver | None = None,
    ) -> None:
        """
        Initialize stats service.

        Args:
            ledger: Ledger read interface
            settings: Chain settings (deployment block, fallback window)
            name_resolver: Optional name lookup
        """
        self.ledger = ledger
        self.settings = settings
        self.name_resolver = name_resolver

    async def get_reconciled_stats(
        self,
        address: str,
        block_range_hint: int | None = None,
    ) -> ReconciledStats:
        """
        Get statistics with the correct count recomputed from events.

        The aggregate read and the event scan run concurrently; if either
        fails the whole call fails. The name lookup is best-effort.

        Args:
            address: Account address (any case)
            block_range_hint: Optional lower bound for the event scan

        Returns:
            Reconciled statistics

        Raises:
            InvalidAddressError: If the address is malformed
            UpstreamUnavailableError: If a mandatory ledger read fails
        """
        address = validate_address(address)

        results = await asyncio.gather(
            self.ledger.read_aggregate_stats(address),
            self._count_correct(address, block_range_hint),
            self._lookup_name(address),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        aggregate, (window, correct), name = results

        if aggregate.is_inconsistent:
            logger.info(
                "Contract reports more correct than total predictions",
                address=address,
                contract_correct=aggregate.correct_predictions,
                total=aggregate.total_predictions,
            )

        stats = ReconciledStats.reconcile(address, aggregate, correct, name=name)

        logger.debug(
            "Reconciled stats",
            address=address,
            from_block=window.from_block,
            to_block=window.to_block,
            correct=stats.correct_predictions,
            total=stats.total_predictions,
        )
        return stats

    async def _count_correct(
        self,
        address: str,
        block_range_hint: int | None,
    ) -> tuple[ScanWindow, int]:
        window = await resolve_scan_window(self.ledger, self.settings, block_range_hint)
        if window.is_empty:
            return window, 0

        events = await self.ledger.query_events(
            EventName.RESULT_RECORDED,
            {"user": address},
            window.from_block,
            window.to_block,
        )
        return window, count_correct_results(list(events))

    async def _lookup_name(self, address: str) -> str | None:
        if self.name_resolver is None:
            return None
        try:
            return await self.name_resolver.resolve_name(address)
        except Exception as e:
            logger.debug("Name lookup failed", address=address, error=repr(e))
            return None
