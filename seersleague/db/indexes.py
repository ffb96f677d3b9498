"""
MongoDB index definitions for the cache and lock collections.

Indexes are applied by the ``db init`` CLI command.
"""

from dataclasses import dataclass
from typing import Any

from pymongo import ASCENDING, DESCENDING, IndexModel

LEADERBOARD_COLLECTION = "leaderboard_snapshots"
ACTION_LOCKS_COLLECTION = "action_locks"


@dataclass(frozen=True)
class IndexDefinition:
    """Index definition for a collection."""

    collection: str
    indexes: tuple[IndexModel, ...]


LEADERBOARD_INDEXES = IndexDefinition(
    collection=LEADERBOARD_COLLECTION,
    indexes=(
        # Staleness checks read the newest snapshot
        IndexModel(
            [("generated_at", DESCENDING)],
            name="idx_leaderboard_generated",
        ),
    ),
)

ACTION_LOCKS_INDEXES = IndexDefinition(
    collection=ACTION_LOCKS_COLLECTION,
    indexes=(
        # Finding held locks past their TTL
        IndexModel(
            [("holder", ASCENDING), ("acquired_at", ASCENDING)],
            name="idx_action_locks_holder_acquired",
        ),
    ),
)

ALL_INDEXES: tuple[IndexDefinition, ...] = (
    LEADERBOARD_INDEXES,
    ACTION_LOCKS_INDEXES,
)


async def ensure_indexes(db: Any) -> dict[str, list[str]]:
    """
    Create all indexes in the database.

    Args:
        db: Motor database instance.

    Returns:
        Dictionary mapping collection names to created index names.
    """
    results: dict[str, list[str]] = {}

    for definition in ALL_INDEXES:
        collection = db[definition.collection]
        created_indexes = await collection.create_indexes(list(definition.indexes))
        results[definition.collection] = created_indexes

    return results
