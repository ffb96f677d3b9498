"""
Command Line Interface for the SeersLeague ledger reader.

Provides commands for reading reconciled stats, history, matches and the
leaderboard through a rich terminal interface.
"""

from seersleague.cli.commands import cli

__all__ = ["cli"]
