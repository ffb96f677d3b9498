"""
Prediction history service.

Rebuilds a user's predictions from the event log and attaches the
recorded outcome of each one.
"""

import asyncio
from collections import Counter

import structlog

from seersleague.chain.ledger import LedgerReader
from seersleague.config.settings import ChainSettings
from seersleague.models.events import EventName, PredictionEvent, ResultEvent
from seersleague.models.history import DuplicateResult, PredictionHistory, PredictionHistoryEntry
from seersleague.services.scan_window import resolve_scan_window
from seersleague.validators.custom_types import validate_address

logger = structlog.get_logger(__name__)


def build_history_entries(
    submissions: list[PredictionEvent],
    results: list[ResultEvent],
) -> list[PredictionHistoryEntry]:
    """
    One entry per (submission, match id), newest submission first.

    When a match has several results recorded, the latest in ledger order
    decides ``is_correct``.
    """
    outcome: dict[int, bool] = {}
    recorded: Counter[int] = Counter()
    for result in sorted(results, key=lambda r: r.ledger_position):
        outcome[result.match_id] = result.correct
        recorded[result.match_id] += 1

    entries = [
        PredictionHistoryEntry(
            match_id=match_id,
            block_number=submission.block_number,
            transaction_hash=submission.transaction_hash,
            is_correct=outcome.get(match_id),
            recorded_times=recorded[match_id],
        )
        for submission in submissions
        for match_id in submission.match_ids
    ]
    entries.sort(key=lambda e: (-e.block_number, e.match_id))
    return entries


def find_duplicate_results(results: list[ResultEvent]) -> list[DuplicateResult]:
    """Matches whose result was recorded more than once, by match id."""
    recorded: Counter[int] = Counter(r.match_id for r in results)
    correct: Counter[int] = Counter(r.match_id for r in results if r.correct)
    return [
        DuplicateResult(
            match_id=match_id,
            recorded_times=times,
            correct_recordings=correct[match_id],
        )
        for match_id, times in sorted(recorded.items())
        if times > 1
    ]


class HistoryService:
    """Service layer for per-user prediction history."""

    def __init__(self, ledger: LedgerReader, settings: ChainSettings) -> None:
        """
        Initialize history service.

        Args:
            ledger: Ledger read interface
            settings: Chain settings
        """
        self.ledger = ledger
        self.settings = settings

    async def get_history(
        self,
        address: str,
        from_block: int | None = None,
    ) -> PredictionHistory:
        """
        Get the prediction history of an account.

        Args:
            address: Account address (any case)
            from_block: Optional lower bound for the scan

        Returns:
            History with entries newest first and duplicate recordings

        Raises:
            InvalidAddressError: If the address is malformed
            UpstreamUnavailableError: If the ledger cannot be read
        """
        address = validate_address(address)
        window = await resolve_scan_window(self.ledger, self.settings, from_block)

        submissions: list[PredictionEvent] = []
        results: list[ResultEvent] = []
        if not window.is_empty:
            user_filter = {"user": address}
            fetched = await asyncio.gather(
                self.ledger.query_events(
                    EventName.PREDICTIONS_SUBMITTED,
                    user_filter,
                    window.from_block,
                    window.to_block,
                ),
                self.ledger.query_events(
                    EventName.RESULT_RECORDED,
                    user_filter,
                    window.from_block,
                    window.to_block,
                ),
            )
            submissions, results = list(fetched[0]), list(fetched[1])

        history = PredictionHistory(
            address=address,
            from_block=window.from_block,
            to_block=window.to_block,
            entries=build_history_entries(submissions, results),
            duplicate_results=find_duplicate_results(results),
        )

        if history.duplicate_results:
            logger.info(
                "Duplicate results recorded",
                address=address,
                matches=[d.match_id for d in history.duplicate_results],
            )
        return history
