"""Leaderboard snapshot repository."""

from seersleague.db.indexes import LEADERBOARD_COLLECTION
from seersleague.models.leaderboard import SNAPSHOT_ID, LeaderboardSnapshot
from seersleague.repositories.base import BaseRepository


class LeaderboardRepository(BaseRepository[LeaderboardSnapshot]):
    """Stores the single current leaderboard snapshot."""

    collection_name = LEADERBOARD_COLLECTION
    model_class = LeaderboardSnapshot

    async def get_snapshot(self) -> LeaderboardSnapshot | None:
        """Get the cached snapshot, if any."""
        return await self.get_by_id(SNAPSHOT_ID)

    async def save_snapshot(self, snapshot: LeaderboardSnapshot) -> None:
        """Replace the cached snapshot as a whole."""
        await self.replace_by_id(snapshot.id, snapshot.to_mongo())
