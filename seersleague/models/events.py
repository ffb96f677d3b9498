"""
Decoded SeersLeague contract events.

Each model mirrors one event of the contract ABI. Decoding from raw web3
logs lives in the chain layer; these models only validate and normalize.
"""

from datetime import datetime, timezone

from pydantic import Field, computed_field, field_validator

from seersleague.models.base import EventModel
from seersleague.validators.custom_types import Address


class EventName:
    """Contract event names."""

    PREDICTIONS_SUBMITTED = "PredictionsSubmitted"
    RESULT_RECORDED = "ResultRecorded"
    MATCH_REGISTERED = "MatchRegistered"


class PredictionEvent(EventModel):
    """A user submitted predictions for one or more matches."""

    user: Address = Field(..., description="Submitting account")
    match_ids: tuple[int, ...] = Field(..., min_length=1, description="Predicted matches, in order")
    predictions_count: int = Field(..., ge=1, description="Number of predictions submitted")
    free_used: int = Field(default=0, ge=0, description="Free-quota slots consumed")
    fee_paid: int = Field(default=0, ge=0, description="Fee paid in USDC base units")

    @field_validator("match_ids")
    @classmethod
    def validate_match_ids(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        """Match identifiers are unsigned integers."""
        if any(match_id < 0 for match_id in v):
            raise ValueError("Match ids cannot be negative")
        return v


class ResultEvent(EventModel):
    """
    A match outcome was recorded against a user's prediction.

    The contract's batch recorder does not check for duplicates, so the
    same (user, match_id) pair can appear more than once.
    """

    user: Address = Field(..., description="Account whose prediction was graded")
    match_id: int = Field(..., ge=0, description="Graded match")
    correct: bool = Field(..., description="Whether the prediction was correct")

    @property
    def pair(self) -> tuple[str, int]:
        """The (user, match_id) identity of this result."""
        return (self.user, self.match_id)


class MatchRegisteredEvent(EventModel):
    """A match was registered as open for predictions."""

    match_id: int = Field(..., ge=0, description="Match identifier")
    start_time: int = Field(..., ge=0, description="Kick-off as unix timestamp (seconds)")

    @computed_field(alias="startDate")  # type: ignore[misc]
    @property
    def start_date(self) -> datetime:
        """Kick-off as an aware UTC datetime."""
        return datetime.fromtimestamp(self.start_time, tz=timezone.utc)
