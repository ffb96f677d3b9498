"""
Database connection and management module.

Provides async MongoDB connectivity through Motor driver for the
leaderboard cache and the action locks.
"""

from seersleague.db.connection import (
    DatabaseConnection,
    close_database,
    get_connection,
    get_database,
)
from seersleague.db.indexes import ensure_indexes

__all__ = [
    "DatabaseConnection",
    "get_connection",
    "get_database",
    "close_database",
    "ensure_indexes",
]
