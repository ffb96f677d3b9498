"""
Pytest configuration and fixtures for testing.

Provides an in-memory ledger, an in-memory snapshot repository, event
factories and settings fixtures. No test needs a live RPC endpoint or a
running MongoDB.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest
from motor.motor_asyncio import AsyncIOMotorDatabase

from seersleague.config.settings import ChainSettings, LeaderboardSettings
from seersleague.models.base import EventModel
from seersleague.models.events import (
    EventName,
    MatchRegisteredEvent,
    PredictionEvent,
    ResultEvent,
)
from seersleague.models.leaderboard import LeaderboardSnapshot
from seersleague.models.stats import AggregateStats
from seersleague.services.action_guard import InMemoryActionGuard
from seersleague.services.task_queue import BackgroundTaskQueue

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20


def make_address(n: int) -> str:
    """Deterministic lowercase address for index ``n``."""
    return "0x" + f"{n:040x}"


# =============================================================================
# Fake Collaborators
# =============================================================================


class FakeLedger:
    """
    In-memory LedgerReader and NameResolver.

    Events are filtered by block range and by equality on any filter key.
    ``failures`` maps an operation ("read_aggregate_stats",
    "get_current_height", "resolve_name" or an event name) to the exception
    it raises. Every call is recorded in ``calls``.
    """

    def __init__(self, tip: int = 100_000) -> None:
        self.tip = tip
        self.events: dict[str, list[EventModel]] = {
            EventName.PREDICTIONS_SUBMITTED: [],
            EventName.RESULT_RECORDED: [],
            EventName.MATCH_REGISTERED: [],
        }
        self.aggregates: dict[str, AggregateStats] = {}
        self.names: dict[str, str] = {}
        self.failures: dict[str, BaseException] = {}
        self.calls: list[tuple[Any, ...]] = []

    def add(self, *events: EventModel) -> None:
        for event in events:
            if isinstance(event, PredictionEvent):
                self.events[EventName.PREDICTIONS_SUBMITTED].append(event)
            elif isinstance(event, ResultEvent):
                self.events[EventName.RESULT_RECORDED].append(event)
            elif isinstance(event, MatchRegisteredEvent):
                self.events[EventName.MATCH_REGISTERED].append(event)

    def set_aggregate(self, address: str, **values: int) -> None:
        self.aggregates[address.lower()] = AggregateStats(**values)

    def _maybe_fail(self, operation: str) -> None:
        error = self.failures.get(operation)
        if error is not None:
            raise error

    async def read_aggregate_stats(self, address: str) -> AggregateStats:
        self.calls.append(("read_aggregate_stats", address))
        self._maybe_fail("read_aggregate_stats")
        return self.aggregates.get(address.lower(), AggregateStats())

    async def get_current_height(self) -> int:
        self.calls.append(("get_current_height",))
        self._maybe_fail("get_current_height")
        return self.tip

    async def query_events(
        self,
        event_name: str,
        filters: Mapping[str, Any] | None,
        from_height: int,
        to_height: int,
    ) -> Sequence[EventModel]:
        self.calls.append(("query_events", event_name, dict(filters or {}), from_height, to_height))
        self._maybe_fail(event_name)
        selected = [
            event
            for event in self.events[event_name]
            if from_height <= event.block_number <= to_height
            and all(getattr(event, key) == value for key, value in (filters or {}).items())
        ]
        return sorted(selected, key=lambda e: e.ledger_position)

    async def resolve_name(self, address: str) -> str | None:
        self.calls.append(("resolve_name", address))
        self._maybe_fail("resolve_name")
        return self.names.get(address)

    def scans(self, event_name: str) -> list[tuple[Any, ...]]:
        """Recorded query_events calls for one event."""
        return [c for c in self.calls if c[0] == "query_events" and c[1] == event_name]


class FakeLeaderboardRepository:
    """In-memory stand-in for LeaderboardRepository."""

    def __init__(self, snapshot: LeaderboardSnapshot | None = None) -> None:
        self.snapshot = snapshot
        self.saved: list[LeaderboardSnapshot] = []

    async def get_snapshot(self) -> LeaderboardSnapshot | None:
        return self.snapshot

    async def save_snapshot(self, snapshot: LeaderboardSnapshot) -> None:
        self.snapshot = snapshot
        self.saved.append(snapshot)


class FakeClock:
    """Manually advanced clock returning unix seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDatetimeClock:
    """Manually advanced clock returning aware UTC datetimes."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


# =============================================================================
# Factory Fixtures
# =============================================================================


class EventFactory:
    """Factory for creating decoded contract events."""

    _log_index = 0

    @classmethod
    def _next_index(cls) -> int:
        cls._log_index += 1
        return cls._log_index

    @classmethod
    def prediction(
        cls,
        user: str = ALICE,
        match_ids: Sequence[int] = (1,),
        block_number: int = 1_000,
        free_used: int = 0,
        fee_paid: int = 0,
    ) -> PredictionEvent:
        """Create a PredictionsSubmitted event."""
        return PredictionEvent(
            user=user,
            match_ids=tuple(match_ids),
            predictions_count=len(match_ids),
            free_used=free_used,
            fee_paid=fee_paid,
            block_number=block_number,
            log_index=cls._next_index(),
            transaction_hash=f"0x{block_number:064x}",
        )

    @classmethod
    def result(
        cls,
        user: str = ALICE,
        match_id: int = 1,
        correct: bool = True,
        block_number: int = 2_000,
    ) -> ResultEvent:
        """Create a ResultRecorded event."""
        return ResultEvent(
            user=user,
            match_id=match_id,
            correct=correct,
            block_number=block_number,
            log_index=cls._next_index(),
        )

    @classmethod
    def registration(
        cls,
        match_id: int = 1,
        start_time: int = 1_700_100_000,
        block_number: int = 500,
    ) -> MatchRegisteredEvent:
        """Create a MatchRegistered event."""
        return MatchRegisteredEvent(
            match_id=match_id,
            start_time=start_time,
            block_number=block_number,
            log_index=cls._next_index(),
        )


@pytest.fixture
def events() -> type[EventFactory]:
    """Provide the event factory."""
    return EventFactory


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def chain_settings() -> ChainSettings:
    """Chain settings with no deployment block and a 10 000 block fallback."""
    return ChainSettings(_env_file=None, deployment_block=0, fallback_scan_blocks=10_000)


@pytest.fixture
def leaderboard_settings() -> LeaderboardSettings:
    """Leaderboard settings with a small concurrency limit."""
    return LeaderboardSettings(
        _env_file=None,
        stale_after_seconds=3600,
        top_players=65,
        max_concurrency=2,
        refresh_cooldown_seconds=300,
    )


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def ledger() -> FakeLedger:
    """Create an empty in-memory ledger."""
    return FakeLedger()


@pytest.fixture
def leaderboard_repository() -> FakeLeaderboardRepository:
    """Create an empty in-memory snapshot repository."""
    return FakeLeaderboardRepository()


@pytest.fixture
def clock() -> FakeClock:
    """Create a unix-seconds clock."""
    return FakeClock()


@pytest.fixture
def datetime_clock() -> FakeDatetimeClock:
    """Create a datetime clock."""
    return FakeDatetimeClock()


@pytest.fixture
def task_queue() -> BackgroundTaskQueue:
    """Create a background task queue."""
    return BackgroundTaskQueue()


@pytest.fixture
def action_guard(clock: FakeClock) -> InMemoryActionGuard:
    """Create an in-memory guard with a 300 second cooldown."""
    return InMemoryActionGuard(cooldown_seconds=300, clock=clock)


@pytest.fixture
def mock_db() -> AsyncIOMotorDatabase:
    """
    Create a mock database for unit tests that don't need real MongoDB.
    """
    mock = MagicMock(spec=AsyncIOMotorDatabase)
    mock.__getitem__ = MagicMock(return_value=MagicMock())
    return mock
