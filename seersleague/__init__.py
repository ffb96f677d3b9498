"""
SeersLeague ledger reader.

Reconciles the SeersLeague contract's aggregate counters with its event
log and serves the derived views (stats, history, upcoming matches,
leaderboard).
"""

__version__ = "0.1.0"
