"""
Service layer for business logic.

Services combine ledger reads, the snapshot cache and the action guard,
and implement the reconciliation rules. They provide the main interface
for application logic.
"""

from seersleague.services.action_guard import (
    ActionBusyError,
    ActionCoolingDownError,
    ActionGuard,
    ActionGuardError,
    InMemoryActionGuard,
    MongoActionGuard,
)
from seersleague.services.history_service import HistoryService
from seersleague.services.leaderboard_service import (
    LEADERBOARD_ACTION,
    LeaderboardService,
    LeaderboardServiceError,
)
from seersleague.services.match_service import MatchService
from seersleague.services.scan_window import ScanWindow, resolve_scan_window
from seersleague.services.stats_service import StatsService
from seersleague.services.task_queue import BackgroundTaskQueue

__all__ = [
    "StatsService",
    "MatchService",
    "HistoryService",
    "LeaderboardService",
    "LeaderboardServiceError",
    "LEADERBOARD_ACTION",
    "ActionGuard",
    "ActionGuardError",
    "ActionBusyError",
    "ActionCoolingDownError",
    "InMemoryActionGuard",
    "MongoActionGuard",
    "BackgroundTaskQueue",
    "ScanWindow",
    "resolve_scan_window",
]
