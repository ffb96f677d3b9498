"""Configuration module for the ledger reader."""

from seersleague.config.logging_config import configure_logging
from seersleague.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "configure_logging"]
