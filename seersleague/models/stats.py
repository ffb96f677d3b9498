"""
User statistics models.

AggregateStats is the contract's own running tally, read as a snapshot.
ReconciledStats is what the reader returns: the same shape, with
correct_predictions recomputed from ResultRecorded events because the
contract's counter double-counts duplicate recordings.
"""

from typing import Self

from pydantic import Field, computed_field

from seersleague.models.base import LedgerModel
from seersleague.validators.custom_types import Address

FREE_PREDICTION_QUOTA = 5
PREDICTION_FEE_UNITS = 500_000  # 0.5 USDC
USDC_DECIMALS = 6


def remaining_free_predictions(free_predictions_used: int) -> int:
    """Free predictions left before fees apply."""
    return max(0, FREE_PREDICTION_QUOTA - free_predictions_used)


def calculate_prediction_fee(free_predictions_used: int, prediction_count: int) -> int:
    """
    Fee in USDC base units for submitting ``prediction_count`` predictions.

    Predictions covered by the remaining free quota cost nothing.
    """
    if prediction_count < 0:
        raise ValueError("Prediction count cannot be negative")
    paid = max(0, prediction_count - remaining_free_predictions(free_predictions_used))
    return paid * PREDICTION_FEE_UNITS


def format_usdc(units: int) -> str:
    """Format USDC base units as a decimal string (6 places)."""
    sign = "-" if units < 0 else ""
    whole, fraction = divmod(abs(units), 10**USDC_DECIMALS)
    return f"{sign}{whole}.{fraction:06d}"


def calculate_accuracy(correct_predictions: int, total_predictions: int) -> int:
    """
    Accuracy as an integer percentage in [0, 100].

    Rounds half up. Raw correct counts can exceed the total when the
    contract emitted duplicate results, so the value is clamped.
    """
    if total_predictions <= 0:
        return 0
    # round-half-up on integers: floor((200c + t) / 2t)
    percent = (200 * correct_predictions + total_predictions) // (2 * total_predictions)
    return max(0, min(100, percent))


class AggregateStats(LedgerModel):
    """
    Contract-reported user statistics (``getUserStats``).

    Not assumed internally consistent: correct_predictions may be inflated.
    """

    correct_predictions: int = Field(default=0, ge=0)
    total_predictions: int = Field(default=0, ge=0)
    free_predictions_used: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)

    @classmethod
    def from_contract(cls, values: tuple[int, ...] | list[int]) -> Self:
        """Build from the positional struct returned by the contract call."""
        if len(values) < 5:
            raise ValueError(f"getUserStats returned {len(values)} fields, expected 5")
        correct, total, free_used, current, longest = (int(v) for v in values[:5])
        return cls(
            correct_predictions=correct,
            total_predictions=total,
            free_predictions_used=free_used,
            current_streak=current,
            longest_streak=longest,
        )

    @property
    def is_inconsistent(self) -> bool:
        """True when the contract reports more correct than total predictions."""
        return self.correct_predictions > self.total_predictions


class ReconciledStats(LedgerModel):
    """Statistics with correct_predictions recomputed from the event log."""

    address: Address = Field(..., description="Account the stats belong to")
    name: str | None = Field(default=None, description="Resolved name, if any")
    correct_predictions: int = Field(..., ge=0)
    total_predictions: int = Field(..., ge=0)
    free_predictions_used: int = Field(..., ge=0)
    current_streak: int = Field(..., ge=0)
    longest_streak: int = Field(..., ge=0)

    @computed_field
    @property
    def accuracy(self) -> int:
        """Rounded accuracy percentage."""
        return calculate_accuracy(self.correct_predictions, self.total_predictions)

    @computed_field(alias="remainingFreePredictions")  # type: ignore[misc]
    @property
    def remaining_free_predictions(self) -> int:
        """Free-quota slots still available."""
        return remaining_free_predictions(self.free_predictions_used)

    @classmethod
    def reconcile(
        cls,
        address: str,
        aggregate: AggregateStats,
        correct_from_events: int,
        name: str | None = None,
    ) -> Self:
        """
        Combine the contract snapshot with the event-derived correct count.

        The contract's own correct_predictions is ignored.
        """
        return cls(
            address=address,
            name=name,
            correct_predictions=correct_from_events,
            total_predictions=aggregate.total_predictions,
            free_predictions_used=aggregate.free_predictions_used,
            current_streak=aggregate.current_streak,
            longest_streak=aggregate.longest_streak,
        )
