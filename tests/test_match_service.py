"""Tests for upcoming match discovery."""

import pytest

from seersleague.chain.errors import UpstreamUnavailableError
from seersleague.models.events import EventName
from seersleague.services.match_service import MatchService
from tests.conftest import EventFactory

DAY = 86_400


@pytest.fixture
def service(ledger, chain_settings, clock) -> MatchService:
    """MatchService on the fake ledger with a fixed clock."""
    return MatchService(ledger, chain_settings, clock=clock)


class TestListUpcoming:
    """Tests for MatchService.list_upcoming."""

    async def test_sorted_and_filtered(self, service, ledger, clock):
        """Test started matches are dropped and the rest ordered."""
        now = int(clock())
        ledger.add(
            EventFactory.registration(match_id=3, start_time=now + 3_600, block_number=95_000),
            EventFactory.registration(match_id=1, start_time=now - 60, block_number=95_000),
            EventFactory.registration(match_id=2, start_time=now + 3_600, block_number=95_001),
            EventFactory.registration(match_id=4, start_time=now + 60, block_number=95_002),
        )

        matches = await service.list_upcoming()

        assert [m.match_id for m in matches] == [4, 2, 3]
        assert [m.seconds_until_start for m in matches] == [60, 3_600, 3_600]

    async def test_window_days(self, service, ledger, clock):
        """Test matches beyond the window are excluded."""
        now = int(clock())
        ledger.add(
            EventFactory.registration(match_id=1, start_time=now + DAY, block_number=95_000),
            EventFactory.registration(match_id=2, start_time=now + 3 * DAY, block_number=95_000),
        )

        matches = await service.list_upcoming(window_days=2)

        assert [m.match_id for m in matches] == [1]

    async def test_zero_window_is_empty(self, service, ledger, clock):
        """Test a zero-day window contains nothing in the future."""
        ledger.add(
            EventFactory.registration(match_id=1, start_time=int(clock()) + 1, block_number=95_000)
        )
        assert len(await service.list_upcoming(window_days=0)) == 0

    async def test_sequence_is_restartable(self, service, ledger, clock):
        """Test the result can be iterated more than once."""
        now = int(clock())
        ledger.add(
            EventFactory.registration(match_id=1, start_time=now + 10, block_number=95_000),
            EventFactory.registration(match_id=2, start_time=now + 20, block_number=95_000),
        )

        matches = await service.list_upcoming()

        assert [m.match_id for m in matches] == [1, 2]
        assert [m.match_id for m in matches] == [1, 2]

    async def test_uses_clock_at_iteration_reference(self, service, ledger, clock):
        """Test the reference time is taken when the call is made."""
        now = int(clock())
        ledger.add(
            EventFactory.registration(match_id=1, start_time=now + 100, block_number=95_000)
        )

        matches = await service.list_upcoming()
        clock.advance(1_000)

        assert [m.match_id for m in matches] == [1]

    async def test_scans_registration_events(self, service, ledger):
        """Test registrations are read over the fallback window."""
        await service.list_upcoming()

        assert ledger.scans(EventName.MATCH_REGISTERED) == [
            ("query_events", EventName.MATCH_REGISTERED, {}, 90_000, 100_000)
        ]

    async def test_negative_window_rejected(self, service, ledger):
        """Test rejection before any ledger read."""
        with pytest.raises(ValueError):
            await service.list_upcoming(window_days=-1)
        assert ledger.calls == []

    async def test_upstream_failure(self, service, ledger):
        """Test scan failures propagate."""
        ledger.failures[EventName.MATCH_REGISTERED] = UpstreamUnavailableError("getLogs")

        with pytest.raises(UpstreamUnavailableError):
            await service.list_upcoming()
