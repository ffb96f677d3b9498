"""
Prediction history models.

A user's history is rebuilt from PredictionsSubmitted and ResultRecorded
events. Entries keep the number of times a result was recorded so the
contract's duplicate recordings stay visible.
"""

from pydantic import Field, computed_field

from seersleague.models.base import LedgerModel
from seersleague.validators.custom_types import Address


class PredictionHistoryEntry(LedgerModel):
    """One predicted match within one submission."""

    match_id: int = Field(..., ge=0, description="Predicted match")
    block_number: int = Field(..., ge=0, description="Block of the submission")
    transaction_hash: str | None = Field(default=None, description="Submission transaction")
    is_correct: bool | None = Field(
        default=None,
        description="Recorded outcome, null while the result is pending",
    )
    recorded_times: int = Field(
        default=0,
        ge=0,
        description="How many ResultRecorded events exist for this match and user",
    )

    @computed_field(alias="isDuplicated")  # type: ignore[misc]
    @property
    def is_duplicated(self) -> bool:
        """True when the result was recorded more than once."""
        return self.recorded_times > 1


class DuplicateResult(LedgerModel):
    """A (user, match) pair recorded more than once."""

    match_id: int = Field(..., ge=0)
    recorded_times: int = Field(..., ge=2)
    correct_recordings: int = Field(default=0, ge=0)

    @computed_field(alias="extraRecordings")  # type: ignore[misc]
    @property
    def extra_recordings(self) -> int:
        """Recordings beyond the first one."""
        return self.recorded_times - 1


class PredictionHistory(LedgerModel):
    """Full history for one account over a scan window."""

    address: Address
    from_block: int = Field(..., ge=0)
    to_block: int = Field(..., ge=0)
    entries: list[PredictionHistoryEntry] = Field(default_factory=list)
    duplicate_results: list[DuplicateResult] = Field(default_factory=list)

    @computed_field(alias="pendingCount")  # type: ignore[misc]
    @property
    def pending_count(self) -> int:
        """Entries still waiting for a recorded result."""
        return sum(1 for entry in self.entries if entry.is_correct is None)

    @computed_field(alias="extraCorrectRecordings")  # type: ignore[misc]
    @property
    def extra_correct_recordings(self) -> int:
        """Correct recordings beyond one per match, i.e. the contract's overcount."""
        return sum(max(0, d.correct_recordings - 1) for d in self.duplicate_results)
