"""
Match discovery service.

Upcoming matches come from MatchRegistered events; nothing is stored.
"""

import time
from collections.abc import Callable

import structlog

from seersleague.chain.ledger import LedgerReader
from seersleague.config.settings import ChainSettings
from seersleague.models.events import EventName, MatchRegisteredEvent
from seersleague.models.match import UpcomingMatches
from seersleague.services.scan_window import resolve_scan_window

logger = structlog.get_logger(__name__)


class MatchService:
    """
    Service layer for match discovery.

    Usage:
        service = MatchService(ledger, settings.chain)
        for match in await service.list_upcoming(window_days=3):
            ...
    """

    def __init__(
        self,
        ledger: LedgerReader,
        settings: ChainSettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize match service.

        Args:
            ledger: Ledger read interface
            settings: Chain settings
            clock: Returns the current unix time in seconds
        """
        self.ledger = ledger
        self.settings = settings
        self.clock = clock

    async def list_upcoming(
        self,
        window_days: int | None = None,
        from_block: int | None = None,
    ) -> UpcomingMatches:
        """
        List matches that have not started yet.

        Args:
            window_days: Only matches starting within this many days; all when None
            from_block: Optional lower bound for the registration scan

        Returns:
            Matches ordered by start time, then match id. The sequence can
            be iterated more than once.

        Raises:
            ValueError: If window_days is negative
            UpstreamUnavailableError: If the ledger cannot be read
        """
        if window_days is not None and window_days < 0:
            raise ValueError("window_days cannot be negative")

        window = await resolve_scan_window(self.ledger, self.settings, from_block)
        registrations: list[MatchRegisteredEvent] = []
        if not window.is_empty:
            registrations = list(
                await self.ledger.query_events(
                    EventName.MATCH_REGISTERED,
                    None,
                    window.from_block,
                    window.to_block,
                )
            )

        matches = UpcomingMatches(registrations, now=int(self.clock()), window_days=window_days)
        logger.debug(
            "Listed upcoming matches",
            from_block=window.from_block,
            to_block=window.to_block,
            events=len(registrations),
            upcoming=len(matches),
        )
        return matches
