"""
Leaderboard models.

The snapshot is computed by a privileged refresh and cached in MongoDB;
readers only ever see a complete snapshot.
"""

from datetime import datetime

from pydantic import Field, computed_field

from seersleague.models.base import LedgerModel, utc_now
from seersleague.models.stats import ReconciledStats, calculate_accuracy
from seersleague.validators.custom_types import Address

SNAPSHOT_ID = "all"


class LeaderboardEntry(LedgerModel):
    """Single ranked player."""

    rank: int = Field(default=0, ge=0, description="Position in leaderboard (1-based)")
    address: Address = Field(..., description="Player account")
    correct_predictions: int = Field(default=0, ge=0)
    total_predictions: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)

    @computed_field  # type: ignore[misc]
    @property
    def accuracy(self) -> int:
        """Rounded accuracy percentage."""
        return calculate_accuracy(self.correct_predictions, self.total_predictions)

    @classmethod
    def from_stats(cls, stats: ReconciledStats) -> "LeaderboardEntry":
        """Build an unranked entry from reconciled stats."""
        return cls(
            address=stats.address,
            correct_predictions=stats.correct_predictions,
            total_predictions=stats.total_predictions,
            current_streak=stats.current_streak,
            longest_streak=stats.longest_streak,
        )

    def sort_key(self) -> tuple[int, int, int, str]:
        """Accuracy desc, total desc, current streak desc, address asc."""
        return (-self.accuracy, -self.total_predictions, -self.current_streak, self.address)


class LeaderboardSnapshot(LedgerModel):
    """Cached leaderboard document."""

    id: str = Field(default=SNAPSHOT_ID, alias="_id")
    entries: list[LeaderboardEntry] = Field(default_factory=list)
    from_block: int = Field(default=0, ge=0)
    to_block: int = Field(default=0, ge=0)
    generated_at: datetime = Field(default_factory=utc_now)

    @computed_field(alias="totalPlayers")  # type: ignore[misc]
    @property
    def total_players(self) -> int:
        """Number of ranked players."""
        return len(self.entries)

    def to_mongo(self) -> dict:
        """Document for MongoDB (computed fields stripped)."""
        data = self.model_dump(by_alias=False, exclude={"id", "total_players"})
        data["entries"] = [
            entry.model_dump(by_alias=False, exclude={"accuracy"}) for entry in self.entries
        ]
        data["_id"] = self.id
        return data


class LeaderboardView(LedgerModel):
    """What a leaderboard read returns."""

    top_players: list[LeaderboardEntry] = Field(default_factory=list)
    user_rank: LeaderboardEntry | None = Field(default=None)
    total_players: int = Field(default=0, ge=0)
    generated_at: datetime | None = Field(default=None)
    needs_update: bool = Field(default=False, description="No snapshot yet or snapshot stale")
