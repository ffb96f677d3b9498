"""
Guard for privileged batch actions.

Ensures at most one run of a named action at a time and enforces a
cooldown after each successful run. The in-memory guard covers a single
process; the Mongo guard coordinates several instances through the
``action_locks`` collection.
"""

import asyncio
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Generic, TypeVar

import structlog

from seersleague.models.base import utc_now
from seersleague.repositories.lock_repository import ActionLockRepository

logger = structlog.get_logger(__name__)

TokenType = TypeVar("TokenType")


class ActionGuardError(Exception):
    """Base exception for action guard errors."""

    def __init__(self, action: str, message: str) -> None:
        super().__init__(message)
        self.action = action


class ActionBusyError(ActionGuardError):
    """Raised when the action is already running."""

    def __init__(self, action: str) -> None:
        super().__init__(action, f"Action {action!r} is already running")


class ActionCoolingDownError(ActionGuardError):
    """Raised when the action ran successfully too recently."""

    def __init__(self, action: str, retry_after_seconds: float) -> None:
        super().__init__(
            action,
            f"Action {action!r} is cooling down, retry in {retry_after_seconds:.0f}s",
        )
        self.retry_after_seconds = retry_after_seconds


class ActionGuard(ABC, Generic[TokenType]):
    """
    Base class for action guards.

    Usage:
        async with guard.hold("update-leaderboard"):
            await refresh()

    ``hold`` fails immediately instead of waiting. A run that raises
    releases the action without starting a cooldown.
    """

    def __init__(self, cooldown_seconds: float) -> None:
        if cooldown_seconds < 0:
            raise ValueError("cooldown_seconds cannot be negative")
        self.cooldown_seconds = cooldown_seconds

    @abstractmethod
    async def _acquire(self, action: str) -> TokenType:
        """Take the action or raise ActionBusyError / ActionCoolingDownError."""
        ...

    @abstractmethod
    async def _release(self, action: str, token: TokenType, succeeded: bool) -> None:
        """Give the action back, starting the cooldown when ``succeeded``."""
        ...

    @asynccontextmanager
    async def hold(self, action: str) -> AsyncIterator[None]:
        """Hold ``action`` for the duration of the block."""
        token = await self._acquire(action)
        logger.info("Action started", action=action)
        succeeded = False
        try:
            yield
            succeeded = True
        finally:
            await self._release(action, token, succeeded)
            logger.info("Action finished", action=action, succeeded=succeeded)


# =============================================================================
# In-memory guard
# =============================================================================


@dataclass
class _ActionState:
    running: bool = False
    last_success_at: float | None = None


class InMemoryActionGuard(ActionGuard[float]):
    """
    Single-process guard.

    State lives on the instance, so each guard is independent; inject one
    shared instance where actions must be coordinated.
    """

    def __init__(
        self,
        cooldown_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the guard.

        Args:
            cooldown_seconds: Minimum time between two successful runs
            clock: Returns the current wall-clock time in seconds
        """
        super().__init__(cooldown_seconds)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._states: dict[str, _ActionState] = {}

    def is_running(self, action: str) -> bool:
        """Whether ``action`` is currently held."""
        state = self._states.get(action)
        return state is not None and state.running

    async def _acquire(self, action: str) -> float:
        async with self._lock:
            state = self._states.setdefault(action, _ActionState())
            if state.running:
                raise ActionBusyError(action)

            now = self._clock()
            if state.last_success_at is not None:
                elapsed = now - state.last_success_at
                if elapsed < self.cooldown_seconds:
                    raise ActionCoolingDownError(action, self.cooldown_seconds - elapsed)

            state.running = True
            return now

    async def _release(self, action: str, token: float, succeeded: bool) -> None:
        async with self._lock:
            state = self._states[action]
            state.running = False
            if succeeded:
                state.last_success_at = token


# =============================================================================
# MongoDB guard
# =============================================================================


@dataclass(frozen=True)
class _MongoHold:
    holder: str
    started_at: datetime


class MongoActionGuard(ActionGuard[_MongoHold]):
    """
    Distributed guard backed by one lock document per action.

    A lock whose holder has not released it within ``lock_ttl_seconds``
    is considered abandoned and can be taken over.
    """

    def __init__(
        self,
        repository: ActionLockRepository,
        cooldown_seconds: float,
        lock_ttl_seconds: float,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize the guard.

        Args:
            repository: Action lock repository
            cooldown_seconds: Minimum time between two successful runs
            lock_ttl_seconds: Age after which a held lock is reclaimable
            clock: Returns the current aware UTC datetime
        """
        super().__init__(cooldown_seconds)
        self.repository = repository
        self.lock_ttl = timedelta(seconds=lock_ttl_seconds)
        self._clock = clock

    async def _acquire(self, action: str) -> _MongoHold:
        now = self._clock()
        cooldown = timedelta(seconds=self.cooldown_seconds)
        holder = uuid.uuid4().hex

        acquired = await self.repository.try_acquire(
            action,
            holder,
            now=now,
            cooldown_cutoff=now - cooldown,
            stale_cutoff=now - self.lock_ttl,
        )
        if acquired is not None:
            return _MongoHold(holder=holder, started_at=now)

        # Work out why for the caller
        lock = await self.repository.get_by_id(action)
        if lock is not None and not lock.is_held and lock.last_success_at is not None:
            retry_after = (lock.last_success_at + cooldown - now).total_seconds()
            if retry_after > 0:
                raise ActionCoolingDownError(action, retry_after)
        raise ActionBusyError(action)

    async def _release(self, action: str, token: _MongoHold, succeeded: bool) -> None:
        released = await self.repository.release(
            action,
            token.holder,
            succeeded_at=token.started_at if succeeded else None,
        )
        if not released:
            logger.warning("Action lock was taken over before release", action=action)
