"""Block-range selection shared by the event-scanning services."""

from typing import NamedTuple

from seersleague.chain.ledger import LedgerReader
from seersleague.config.settings import ChainSettings


class ScanWindow(NamedTuple):
    """Inclusive block range ``[from_block, to_block]``."""

    from_block: int
    to_block: int

    @property
    def is_empty(self) -> bool:
        """True when the lower bound is past the tip."""
        return self.from_block > self.to_block


def lower_bound(tip: int, settings: ChainSettings, hint: int | None = None) -> int:
    """
    First block to scan.

    The larger of the hint and the deployment block. With neither one
    known, the last ``fallback_scan_blocks`` blocks before the tip.
    """
    if hint is None and settings.deployment_block <= 0:
        return max(0, tip - settings.fallback_scan_blocks)
    return max(hint or 0, settings.deployment_block, 0)


async def resolve_scan_window(
    ledger: LedgerReader,
    settings: ChainSettings,
    hint: int | None = None,
) -> ScanWindow:
    """Read the tip and build the scan window for this call."""
    tip = await ledger.get_current_height()
    return ScanWindow(lower_bound(tip, settings, hint), tip)
