"""Tests for prediction history."""

import pytest

from seersleague.chain.errors import UpstreamUnavailableError
from seersleague.models.events import EventName
from seersleague.services.history_service import (
    HistoryService,
    build_history_entries,
    find_duplicate_results,
)
from seersleague.validators.custom_types import InvalidAddressError
from tests.conftest import ALICE, BOB, EventFactory


@pytest.fixture
def service(ledger, chain_settings) -> HistoryService:
    """HistoryService on the fake ledger."""
    return HistoryService(ledger, chain_settings)


class TestBuildHistoryEntries:
    """Tests for the pure history builder."""

    def test_one_entry_per_match(self):
        """Test each match in a submission becomes an entry."""
        submission = EventFactory.prediction(match_ids=(3, 1, 2), block_number=10)
        entries = build_history_entries([submission], [])

        assert [e.match_id for e in entries] == [1, 2, 3]
        assert all(e.is_correct is None for e in entries)
        assert all(e.block_number == 10 for e in entries)

    def test_newest_first(self):
        """Test ordering by block descending."""
        entries = build_history_entries(
            [
                EventFactory.prediction(match_ids=(1,), block_number=10),
                EventFactory.prediction(match_ids=(2,), block_number=30),
                EventFactory.prediction(match_ids=(3,), block_number=20),
            ],
            [],
        )
        assert [e.match_id for e in entries] == [2, 3, 1]

    def test_latest_result_wins(self):
        """Test disagreeing duplicates resolve to the latest recording."""
        entries = build_history_entries(
            [EventFactory.prediction(match_ids=(1,), block_number=10)],
            [
                EventFactory.result(match_id=1, correct=False, block_number=50),
                EventFactory.result(match_id=1, correct=True, block_number=40),
            ],
        )
        assert entries[0].is_correct is False
        assert entries[0].recorded_times == 2
        assert entries[0].is_duplicated is True

    def test_find_duplicate_results(self):
        """Test duplicate detection and correct recording counts."""
        duplicates = find_duplicate_results(
            [
                EventFactory.result(match_id=2, correct=True),
                EventFactory.result(match_id=2, correct=True),
                EventFactory.result(match_id=1, correct=True),
                EventFactory.result(match_id=3, correct=False),
                EventFactory.result(match_id=3, correct=True),
            ]
        )
        assert [(d.match_id, d.recorded_times, d.correct_recordings) for d in duplicates] == [
            (2, 2, 2),
            (3, 2, 1),
        ]


class TestGetHistory:
    """Tests for HistoryService.get_history."""

    async def test_history(self, service, ledger):
        """Test entries, outcomes and duplicate diagnostics."""
        ledger.add(
            EventFactory.prediction(match_ids=(1, 2), block_number=91_000),
            EventFactory.prediction(match_ids=(3,), block_number=92_000),
            EventFactory.prediction(user=BOB, match_ids=(9,), block_number=92_000),
            EventFactory.result(match_id=1, correct=True, block_number=93_000),
            EventFactory.result(match_id=1, correct=True, block_number=93_500),
            EventFactory.result(match_id=2, correct=False, block_number=93_000),
        )

        history = await service.get_history(ALICE)

        assert history.address == ALICE
        assert (history.from_block, history.to_block) == (90_000, 100_000)
        assert [(e.match_id, e.is_correct) for e in history.entries] == [
            (3, None),
            (1, True),
            (2, False),
        ]
        assert history.pending_count == 1
        assert [d.match_id for d in history.duplicate_results] == [1]
        assert history.extra_correct_recordings == 1

    async def test_scans_only_the_user(self, service, ledger):
        """Test both scans are filtered by the normalized user."""
        await service.get_history(ALICE.upper().replace("0X", "0x"), from_block=5)

        for event_name in (EventName.PREDICTIONS_SUBMITTED, EventName.RESULT_RECORDED):
            assert ledger.scans(event_name) == [
                ("query_events", event_name, {"user": ALICE}, 5, 100_000)
            ]

    async def test_invalid_address(self, service, ledger):
        """Test malformed input fails before any read."""
        with pytest.raises(InvalidAddressError):
            await service.get_history("0xnope")
        assert ledger.calls == []

    async def test_upstream_failure(self, service, ledger):
        """Test scan failures propagate."""
        ledger.failures[EventName.PREDICTIONS_SUBMITTED] = UpstreamUnavailableError("getLogs")

        with pytest.raises(UpstreamUnavailableError):
            await service.get_history(ALICE)
