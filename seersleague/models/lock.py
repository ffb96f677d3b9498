"""Action lock document used by the distributed action guard."""

from datetime import datetime

from pydantic import Field

from seersleague.models.base import LedgerModel


class ActionLock(LedgerModel):
    """
    State of one privileged action, keyed by action name.

    ``holder`` is set while a run is in flight; ``last_success_at`` is the
    start time of the most recent run that completed without error.
    """

    id: str = Field(..., alias="_id", description="Action name")
    holder: str | None = Field(default=None, description="Token of the current holder")
    acquired_at: datetime | None = Field(default=None)
    last_success_at: datetime | None = Field(default=None)

    @property
    def is_held(self) -> bool:
        """Whether a run is currently in flight."""
        return self.holder is not None
