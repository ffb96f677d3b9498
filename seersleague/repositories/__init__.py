"""
Repository layer for data access.

Provides abstraction over the MongoDB collections used to cache the
leaderboard snapshot and to coordinate privileged actions across
instances.
"""

from seersleague.repositories.base import BaseRepository
from seersleague.repositories.leaderboard_repository import LeaderboardRepository
from seersleague.repositories.lock_repository import ActionLockRepository

__all__ = [
    "BaseRepository",
    "LeaderboardRepository",
    "ActionLockRepository",
]
