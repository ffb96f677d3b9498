"""
Pydantic models for the SeersLeague ledger reader.

This module exports the domain models used throughout the application:
- Events: decoded contract events
- Stats: contract aggregates and reconciled statistics
- Matches, history and leaderboard read models
"""

from seersleague.models.base import EventModel, LedgerModel
from seersleague.models.events import (
    EventName,
    MatchRegisteredEvent,
    PredictionEvent,
    ResultEvent,
)
from seersleague.models.history import DuplicateResult, PredictionHistory, PredictionHistoryEntry
from seersleague.models.leaderboard import LeaderboardEntry, LeaderboardSnapshot, LeaderboardView
from seersleague.models.lock import ActionLock
from seersleague.models.match import UpcomingMatch, UpcomingMatches
from seersleague.models.stats import (
    FREE_PREDICTION_QUOTA,
    PREDICTION_FEE_UNITS,
    AggregateStats,
    ReconciledStats,
    calculate_accuracy,
    calculate_prediction_fee,
    format_usdc,
    remaining_free_predictions,
)

__all__ = [
    # Base
    "LedgerModel",
    "EventModel",
    # Events
    "EventName",
    "PredictionEvent",
    "ResultEvent",
    "MatchRegisteredEvent",
    # Stats
    "FREE_PREDICTION_QUOTA",
    "PREDICTION_FEE_UNITS",
    "AggregateStats",
    "ReconciledStats",
    "calculate_accuracy",
    "calculate_prediction_fee",
    "format_usdc",
    "remaining_free_predictions",
    # Matches
    "UpcomingMatch",
    "UpcomingMatches",
    # History
    "PredictionHistory",
    "PredictionHistoryEntry",
    "DuplicateResult",
    # Leaderboard
    "LeaderboardEntry",
    "LeaderboardSnapshot",
    "LeaderboardView",
    # Locks
    "ActionLock",
]
