"""
MongoDB async connection module using Motor.

MongoDB holds only two small collections: the cached leaderboard snapshot
and the action locks. The ledger itself stays the source of truth, so a
missing database degrades the leaderboard but never the stats reads.
"""

import asyncio

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from seersleague.config.settings import MongoSettings, get_settings
from seersleague.db.indexes import ACTION_LOCKS_COLLECTION, LEADERBOARD_COLLECTION
from seersleague.models.leaderboard import SNAPSHOT_ID

logger = structlog.get_logger(__name__)


class DatabaseConnection:
    """
    Owns the Motor client used by the cache and lock repositories.

    Usage:
        async with DatabaseConnection() as database:
            repository = LeaderboardRepository(database)
    """

    def __init__(self, settings: MongoSettings | None = None) -> None:
        """
        Initialize the connection holder.

        Args:
            settings: Mongo settings (defaults to the application settings)
        """
        self.settings = settings or get_settings().mongo
        self._client: AsyncIOMotorClient | None = None
        self._database: AsyncIOMotorDatabase | None = None
        self._lock = asyncio.Lock()

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """Get the database instance."""
        if self._database is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._database

    @property
    def is_connected(self) -> bool:
        return self._database is not None

    def _create_client(self) -> AsyncIOMotorClient:
        # tz_aware so snapshot ages compare against aware UTC datetimes
        return AsyncIOMotorClient(
            self.settings.uri,
            tz_aware=True,
            minPoolSize=self.settings.min_pool_size,
            maxPoolSize=self.settings.max_pool_size,
            connectTimeoutMS=self.settings.connect_timeout_ms,
            serverSelectionTimeoutMS=self.settings.server_selection_timeout_ms,
        )

    async def connect(self) -> AsyncIOMotorDatabase:
        """
        Open the client and verify the server answers.

        Returns:
            The application database

        Raises:
            pymongo.errors.PyMongoError: If the server cannot be reached
        """
        async with self._lock:
            if self._database is not None:
                return self._database

            logger.info(
                "Connecting to MongoDB",
                host=self.settings.host,
                port=self.settings.port,
                database=self.settings.db_name,
            )

            client = self._create_client()
            try:
                await client.admin.command("ping")
            except Exception as e:
                logger.error("Failed to connect to MongoDB", error=str(e))
                client.close()
                raise

            self._client = client
            self._database = client[self.settings.db_name]
            logger.info("Connected to MongoDB", database=self.settings.db_name)
            return self._database

    async def disconnect(self) -> None:
        """Close the MongoDB client."""
        async with self._lock:
            if self._client is None:
                return

            self._client.close()
            self._client = None
            self._database = None
            logger.info("Disconnected from MongoDB")

    async def health_check(self) -> dict:
        """
        Ping the server and report the cache state.

        Returns:
            dict with status, latency, whether the cache collections exist
            and when the current leaderboard snapshot was generated
        """
        if self._database is None:
            return {"status": "disconnected", "healthy": False, "error": "No active connection"}

        try:
            loop = asyncio.get_running_loop()
            start = loop.time()
            await self._database.command("ping")
            latency_ms = (loop.time() - start) * 1000

            collections = set(await self._database.list_collection_names())
            snapshot = await self._database[LEADERBOARD_COLLECTION].find_one(
                {"_id": SNAPSHOT_ID},
                projection={"generated_at": True},
            )
        except Exception as e:
            logger.error("Health check failed", error=str(e))
            return {"status": "error", "healthy": False, "error": str(e)}

        return {
            "status": "connected",
            "healthy": True,
            "latency_ms": round(latency_ms, 2),
            "collections": {
                name: name in collections
                for name in (LEADERBOARD_COLLECTION, ACTION_LOCKS_COLLECTION)
            },
            "snapshot_generated_at": snapshot.get("generated_at") if snapshot else None,
        }

    async def __aenter__(self) -> AsyncIOMotorDatabase:
        return await self.connect()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()


# Process-wide connection shared by the CLI commands
_db_connection: DatabaseConnection | None = None


async def get_connection() -> DatabaseConnection:
    """Get the shared DatabaseConnection, creating it if needed."""
    global _db_connection

    if _db_connection is None:
        _db_connection = DatabaseConnection()

    return _db_connection


async def get_database() -> AsyncIOMotorDatabase:
    """
    Get the database, connecting if necessary.

    Example:
        db = await get_database()
        snapshot = await LeaderboardRepository(db).get_snapshot()
    """
    connection = await get_connection()
    return await connection.connect()


async def close_database() -> None:
    """Close the shared connection; safe to call when never opened."""
    global _db_connection

    if _db_connection is not None:
        await _db_connection.disconnect()
        _db_connection = None
