"""
Tests for the reconciled stats reader.

Exercises window selection, raw counting of correct results, error
propagation and the best-effort name lookup against the in-memory ledger.
"""

import pytest

from seersleague.chain.errors import UpstreamUnavailableError
from seersleague.config.settings import ChainSettings
from seersleague.models.events import EventName
from seersleague.services.scan_window import ScanWindow, lower_bound, resolve_scan_window
from seersleague.services.stats_service import StatsService
from seersleague.validators.custom_types import InvalidAddressError
from tests.conftest import ALICE, BOB, EventFactory, FakeLedger


@pytest.fixture
def service(ledger: FakeLedger, chain_settings: ChainSettings) -> StatsService:
    """StatsService using the fake ledger for reads and names."""
    return StatsService(ledger, chain_settings, name_resolver=ledger)


# =============================================================================
# Scan Window Tests
# =============================================================================


class TestScanWindow:
    """Tests for scan window selection."""

    def test_fallback_window(self, chain_settings):
        """Test the recent window when neither hint nor deployment block is set."""
        assert lower_bound(100_000, chain_settings) == 90_000

    def test_fallback_window_near_genesis(self, chain_settings):
        """Test the fallback never goes below block 0."""
        assert lower_bound(500, chain_settings) == 0

    def test_hint_used(self, chain_settings):
        """Test the hint is the lower bound when given."""
        assert lower_bound(100_000, chain_settings, hint=12_345) == 12_345

    def test_hint_zero_scans_everything(self, chain_settings):
        """Test an explicit zero hint means an unrestricted window."""
        assert lower_bound(100_000, chain_settings, hint=0) == 0

    def test_deployment_block_used(self):
        """Test the deployment block replaces the fallback."""
        settings = ChainSettings(_env_file=None, deployment_block=50_000)
        assert lower_bound(100_000, settings) == 50_000

    def test_max_of_hint_and_deployment(self):
        """Test the larger of hint and deployment block wins."""
        settings = ChainSettings(_env_file=None, deployment_block=50_000)
        assert lower_bound(100_000, settings, hint=10) == 50_000
        assert lower_bound(100_000, settings, hint=60_000) == 60_000

    def test_negative_hint_clamped(self, chain_settings):
        """Test a negative hint never yields a negative block."""
        assert lower_bound(100_000, chain_settings, hint=-5) == 0

    async def test_resolve_reads_tip(self, ledger, chain_settings):
        """Test the window ends at the tip read at call time."""
        ledger.tip = 42_000
        window = await resolve_scan_window(ledger, chain_settings, hint=1_000)
        assert window == ScanWindow(1_000, 42_000)
        assert window.is_empty is False


# =============================================================================
# Reconciled Stats Tests
# =============================================================================


class TestGetReconciledStats:
    """Tests for StatsService.get_reconciled_stats."""

    async def test_duplicated_contract_count_replaced(self, service, ledger):
        """Test total 10, contract correct 12, six correct events gives 6 and 60%."""
        ledger.set_aggregate(
            ALICE,
            correct_predictions=12,
            total_predictions=10,
            free_predictions_used=5,
            current_streak=2,
            longest_streak=4,
        )
        for match_id in range(1, 6):
            ledger.add(EventFactory.result(match_id=match_id, correct=True, block_number=95_000))
        # Same match recorded twice; both count
        ledger.add(EventFactory.result(match_id=5, correct=True, block_number=96_000))
        ledger.add(EventFactory.result(match_id=6, correct=False, block_number=96_000))

        stats = await service.get_reconciled_stats(ALICE)

        assert stats.correct_predictions == 6
        assert stats.total_predictions == 10
        assert stats.accuracy == 60
        assert stats.free_predictions_used == 5
        assert stats.remaining_free_predictions == 0
        assert stats.current_streak == 2
        assert stats.longest_streak == 4

    async def test_no_events(self, service, ledger):
        """Test zero events in range gives zero correct and zero accuracy."""
        ledger.set_aggregate(ALICE, correct_predictions=3, total_predictions=3)

        stats = await service.get_reconciled_stats(ALICE)

        assert stats.correct_predictions == 0
        assert stats.accuracy == 0

    async def test_zero_total(self, service, ledger):
        """Test no division by zero for a fresh account."""
        stats = await service.get_reconciled_stats(BOB)
        assert stats.total_predictions == 0
        assert stats.accuracy == 0
        assert stats.remaining_free_predictions == 5

    async def test_remaining_free_predictions(self, service, ledger):
        """Test remaining quota from free predictions used."""
        ledger.set_aggregate(ALICE, total_predictions=3, free_predictions_used=3)
        stats = await service.get_reconciled_stats(ALICE)
        assert stats.remaining_free_predictions == 2

    async def test_only_requested_user_counted(self, service, ledger):
        """Test other users' results are ignored."""
        ledger.set_aggregate(ALICE, total_predictions=2)
        ledger.add(
            EventFactory.result(user=ALICE, match_id=1, block_number=95_000),
            EventFactory.result(user=BOB, match_id=1, block_number=95_000),
        )
        stats = await service.get_reconciled_stats(ALICE)
        assert stats.correct_predictions == 1

    async def test_address_normalized(self, service, ledger):
        """Test mixed-case input is lowercased before any read."""
        ledger.set_aggregate(ALICE, total_predictions=1)
        stats = await service.get_reconciled_stats(ALICE.upper().replace("0X", "0x"))

        assert stats.address == ALICE
        assert ("read_aggregate_stats", ALICE) in ledger.calls

    async def test_idempotent(self, service, ledger):
        """Test identical logs give identical counts."""
        ledger.set_aggregate(ALICE, total_predictions=4)
        ledger.add(
            EventFactory.result(match_id=1, block_number=95_000),
            EventFactory.result(match_id=1, block_number=95_001),
        )
        first = await service.get_reconciled_stats(ALICE)
        second = await service.get_reconciled_stats(ALICE)
        assert first == second
        assert first.correct_predictions == 2

    async def test_wider_window_counts_at_least_as_many(self, service, ledger):
        """Test the count is monotonic in window size."""
        ledger.set_aggregate(ALICE, total_predictions=10)
        ledger.add(
            EventFactory.result(match_id=1, block_number=1_000),
            EventFactory.result(match_id=2, block_number=50_000),
            EventFactory.result(match_id=3, block_number=99_000),
        )
        counts = [
            (await service.get_reconciled_stats(ALICE, block_range_hint=hint)).correct_predictions
            for hint in (99_500, 60_000, 20_000, 0)
        ]
        assert counts == sorted(counts)
        assert counts == [0, 1, 2, 3]

    async def test_scan_window_passed_to_ledger(self, service, ledger):
        """Test the default scan covers the fallback window up to the tip."""
        await service.get_reconciled_stats(ALICE)

        scans = ledger.scans(EventName.RESULT_RECORDED)
        assert scans == [
            ("query_events", EventName.RESULT_RECORDED, {"user": ALICE}, 90_000, 100_000)
        ]

    async def test_hint_beyond_tip_skips_scan(self, service, ledger):
        """Test an empty window counts nothing without scanning."""
        ledger.set_aggregate(ALICE, total_predictions=1)
        stats = await service.get_reconciled_stats(ALICE, block_range_hint=200_000)

        assert stats.correct_predictions == 0
        assert ledger.scans(EventName.RESULT_RECORDED) == []

    async def test_accuracy_clamped_when_events_exceed_total(self, service, ledger):
        """Test duplicates never push accuracy past 100."""
        ledger.set_aggregate(ALICE, total_predictions=1)
        ledger.add(
            EventFactory.result(match_id=1, block_number=95_000),
            EventFactory.result(match_id=1, block_number=95_001),
        )
        stats = await service.get_reconciled_stats(ALICE)
        assert stats.correct_predictions == 2
        assert stats.accuracy == 100


class TestErrors:
    """Tests for error propagation."""

    @pytest.mark.parametrize("value", ["not-an-address", "0x1234", ""])
    async def test_malformed_address_makes_no_upstream_call(self, service, ledger, value):
        """Test InvalidAddressError is raised before touching the ledger."""
        with pytest.raises(InvalidAddressError):
            await service.get_reconciled_stats(value)
        assert ledger.calls == []

    async def test_scan_failure_fails_whole_call(self, service, ledger):
        """Test a scan timeout does not return the aggregate alone."""
        ledger.set_aggregate(ALICE, total_predictions=10)
        ledger.failures[EventName.RESULT_RECORDED] = UpstreamUnavailableError(
            "getLogs(ResultRecorded)", TimeoutError()
        )

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await service.get_reconciled_stats(ALICE)

        assert isinstance(exc_info.value.cause, TimeoutError)
        assert ("read_aggregate_stats", ALICE) in ledger.calls

    async def test_aggregate_failure_fails_whole_call(self, service, ledger):
        """Test a failed aggregate read propagates."""
        ledger.failures["read_aggregate_stats"] = UpstreamUnavailableError("getUserStats")

        with pytest.raises(UpstreamUnavailableError):
            await service.get_reconciled_stats(ALICE)

    async def test_tip_failure_fails_whole_call(self, service, ledger):
        """Test a failed tip read propagates."""
        ledger.failures["get_current_height"] = UpstreamUnavailableError("eth_blockNumber")

        with pytest.raises(UpstreamUnavailableError):
            await service.get_reconciled_stats(ALICE)


class TestNameLookup:
    """Tests for the best-effort name lookup."""

    async def test_name_resolved(self, service, ledger):
        """Test the resolved name is attached."""
        ledger.names[ALICE] = "alice.eth"
        stats = await service.get_reconciled_stats(ALICE)
        assert stats.name == "alice.eth"

    async def test_name_failure_degrades_to_none(self, service, ledger):
        """Test a failing lookup does not fail the call."""
        ledger.set_aggregate(ALICE, total_predictions=2)
        ledger.failures["resolve_name"] = RuntimeError("resolver down")

        stats = await service.get_reconciled_stats(ALICE)

        assert stats.name is None
        assert stats.total_predictions == 2

    async def test_without_resolver(self, ledger, chain_settings):
        """Test name is None when no resolver is configured."""
        service = StatsService(ledger, chain_settings)
        stats = await service.get_reconciled_stats(ALICE)
        assert stats.name is None
        assert not any(call[0] == "resolve_name" for call in ledger.calls)
