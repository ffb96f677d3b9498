"""
Base repository pattern implementation for MongoDB with Motor.

Provides the common document operations the cache and lock repositories
build on. Documents here are keyed by string ids (snapshot name, action
name), not ObjectIds.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ReturnDocument

# Type variable for generic repository
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType], ABC):
    """
    Abstract base repository with common document operations.

    Subclasses must implement the abstract properties and can add
    domain-specific queries.

    Usage:
        class LeaderboardRepository(BaseRepository[LeaderboardSnapshot]):
            collection_name = "leaderboard_snapshots"
            model_class = LeaderboardSnapshot
    """

    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        """
        Initialize repository with database connection.

        Args:
            database: Motor database instance
        """
        self._database = database
        self._collection: AsyncIOMotorCollection = database[self.collection_name]

    @property
    @abstractmethod
    def collection_name(self) -> str:
        """Name of the MongoDB collection."""
        ...

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """Pydantic model class for this repository."""
        ...

    @property
    def collection(self) -> AsyncIOMotorCollection:
        """Get the Motor collection instance."""
        return self._collection

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def get_by_id(self, id: str) -> ModelType | None:
        """
        Get a document by its ID.

        Args:
            id: Document ID

        Returns:
            Model instance or None if not found
        """
        document = await self._collection.find_one({"_id": id})

        if document is None:
            return None

        return self.model_class.model_validate(document)

    # =========================================================================
    # Write Operations
    # =========================================================================

    async def replace_by_id(self, id: str, document: dict[str, Any]) -> None:
        """
        Replace (or insert) the document with the given ID.

        Args:
            id: Document ID
            document: Full replacement document
        """
        document = {**document, "_id": id}
        await self._collection.replace_one({"_id": id}, document, upsert=True)

    async def find_one_and_update(
        self,
        filter: dict[str, Any],
        update: dict[str, Any],
        *,
        upsert: bool = False,
    ) -> ModelType | None:
        """
        Atomically update a single document and return its new state.

        Args:
            filter: MongoDB query filter
            update: Update operations
            upsert: Insert when nothing matches

        Returns:
            Updated model instance, or None if nothing matched
        """
        document = await self._collection.find_one_and_update(
            filter,
            update,
            upsert=upsert,
            return_document=ReturnDocument.AFTER,
        )

        if document is None:
            return None

        return self.model_class.model_validate(document)

    async def update_one(self, filter: dict[str, Any], update: dict[str, Any]) -> bool:
        """
        Update a single document matching the filter.

        Returns:
            True if a document was modified
        """
        result = await self._collection.update_one(filter, update)
        return result.modified_count > 0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(collection={self.collection_name!r})"
