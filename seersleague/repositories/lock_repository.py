"""
Action lock repository.

One document per action name. Acquisition is a single conditional upsert,
so two instances racing for the same action cannot both succeed.
"""

from datetime import datetime

from pymongo.errors import DuplicateKeyError

from seersleague.db.indexes import ACTION_LOCKS_COLLECTION
from seersleague.models.lock import ActionLock
from seersleague.repositories.base import BaseRepository


class ActionLockRepository(BaseRepository[ActionLock]):
    """Repository for distributed action locks."""

    collection_name = ACTION_LOCKS_COLLECTION
    model_class = ActionLock

    async def try_acquire(
        self,
        action: str,
        holder: str,
        now: datetime,
        cooldown_cutoff: datetime,
        stale_cutoff: datetime,
    ) -> ActionLock | None:
        """
        Take the lock for ``action`` if it is free and not cooling down.

        Args:
            action: Action name (document id)
            holder: Unique token of the caller
            now: Acquisition time
            cooldown_cutoff: A previous success must have started at or before this
            stale_cutoff: Held locks acquired before this are reclaimable

        Returns:
            The lock after acquisition, or None when it is held or cooling down
        """
        filter = {
            "_id": action,
            "$and": [
                {"$or": [{"holder": None}, {"acquired_at": {"$lt": stale_cutoff}}]},
                {
                    "$or": [
                        {"last_success_at": None},
                        {"last_success_at": {"$lte": cooldown_cutoff}},
                    ]
                },
            ],
        }
        update = {"$set": {"holder": holder, "acquired_at": now}}

        try:
            return await self.find_one_and_update(filter, update, upsert=True)
        except DuplicateKeyError:
            # The document exists but did not match: held or cooling down
            return None

    async def release(
        self,
        action: str,
        holder: str,
        succeeded_at: datetime | None = None,
    ) -> bool:
        """
        Release the lock if ``holder`` still owns it.

        Args:
            action: Action name
            holder: Token used to acquire
            succeeded_at: Start time of the run when it succeeded; starts the cooldown

        Returns:
            True if the lock was released
        """
        fields: dict[str, object] = {"holder": None, "acquired_at": None}
        if succeeded_at is not None:
            fields["last_success_at"] = succeeded_at

        return await self.update_one({"_id": action, "holder": holder}, {"$set": fields})
