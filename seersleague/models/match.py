"""
Upcoming match models.

Matches are discovered from MatchRegistered events; the contract holds no
team names, only an identifier and a kick-off time.
"""

from collections.abc import Iterable, Iterator
from datetime import datetime, timezone

from pydantic import Field, computed_field

from seersleague.models.base import LedgerModel
from seersleague.models.events import MatchRegisteredEvent

SECONDS_PER_DAY = 86_400
PREDICTION_DEADLINE_SECONDS = 10 * 60  # predictions close 10 minutes before kick-off


class UpcomingMatch(LedgerModel):
    """A registered match that has not started yet."""

    match_id: int = Field(..., ge=0, description="Match identifier")
    start_time: int = Field(..., ge=0, description="Kick-off as unix timestamp (seconds)")
    seconds_until_start: int = Field(..., gt=0, description="Time left before kick-off")
    registered_block: int = Field(..., ge=0, description="Block of the registration event")

    @computed_field(alias="startDate")  # type: ignore[misc]
    @property
    def start_date(self) -> datetime:
        """Kick-off as an aware UTC datetime."""
        return datetime.fromtimestamp(self.start_time, tz=timezone.utc)

    @computed_field(alias="canPredict")  # type: ignore[misc]
    @property
    def can_predict(self) -> bool:
        """Whether the prediction deadline has not passed yet."""
        return self.seconds_until_start > PREDICTION_DEADLINE_SECONDS


class UpcomingMatches:
    """
    Lazy, finite, restartable sequence of upcoming matches.

    Holds the raw registrations and the reference time; every iteration
    re-applies the filter and ordering, so iterating twice yields the same
    matches. Ordered by start time ascending, ties by match id ascending.

    A match registered more than once keeps its latest registration in
    ledger order.
    """

    def __init__(
        self,
        registrations: Iterable[MatchRegisteredEvent],
        now: int,
        window_days: int | None = None,
    ) -> None:
        if window_days is not None and window_days < 0:
            raise ValueError("window_days cannot be negative")
        self._registrations = tuple(registrations)
        self.now = now
        self.window_days = window_days

    @property
    def horizon(self) -> int | None:
        """Latest start time included, or None when unbounded."""
        if self.window_days is None:
            return None
        return self.now + self.window_days * SECONDS_PER_DAY

    def _latest_registrations(self) -> Iterator[MatchRegisteredEvent]:
        latest: dict[int, MatchRegisteredEvent] = {}
        for event in sorted(self._registrations, key=lambda e: e.ledger_position):
            latest[event.match_id] = event
        return iter(latest.values())

    def _is_upcoming(self, event: MatchRegisteredEvent) -> bool:
        if event.start_time <= self.now:
            return False
        horizon = self.horizon
        return horizon is None or event.start_time <= horizon

    def __iter__(self) -> Iterator[UpcomingMatch]:
        selected = sorted(
            (e for e in self._latest_registrations() if self._is_upcoming(e)),
            key=lambda e: (e.start_time, e.match_id),
        )
        for event in selected:
            yield UpcomingMatch(
                match_id=event.match_id,
                start_time=event.start_time,
                seconds_until_start=event.start_time - self.now,
                registered_block=event.block_number,
            )

    def __len__(self) -> int:
        return sum(1 for e in self._latest_registrations() if self._is_upcoming(e))

    def __repr__(self) -> str:
        return (
            f"UpcomingMatches(registrations={len(self._registrations)}, "
            f"now={self.now}, window_days={self.window_days})"
        )
