"""
SQLAlchemy unit of work.

Each unit owns one ``AsyncSession`` for the duration of one transaction and
binds fresh repositories to it. ``execute_in_transaction`` retries the whole
begin/operation/commit sequence when the database reports a transient failure.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from homely.core.exceptions import InfrastructureError, TransientStorageError
from homely.core.logger import setup_logger
from homely.infrastructure.local.event_history_repository import SqlEventHistoryRepository
from homely.infrastructure.local.event_repository import SqlEventRepository
from homely.infrastructure.local.household_repository import (
    SqlHouseholdMemberRepository,
    SqlHouseholdRepository,
)
from homely.infrastructure.local.plan_repository import SqlPlanTypeRepository, SqlPlanUsageRepository
from homely.infrastructure.local.task_repository import SqlTaskRepository
from homely.interfaces.unit_of_work import IUnitOfWork

logger = setup_logger(__name__)

T = TypeVar("T")


def is_unique_violation(exc: IntegrityError) -> bool:
    """Whether ``exc`` is a unique-key clash rather than a NOT NULL, CHECK or FK failure."""
    message = str(exc.orig).lower()
    return "unique constraint" in message or "duplicate key" in message


def is_transient(exc: BaseException) -> bool:
    """Whether re-running the whole unit may succeed.

    Covers lock timeouts and deadlocks (``OperationalError``), dropped
    connections, and unique-key races on rows created concurrently. Other
    integrity failures repeat on every attempt and are not retried.
    """
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, IntegrityError):
        return is_unique_violation(exc)
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """Unit of work backed by an ``AsyncSession`` factory."""

    def __init__(self, session_factory, max_retries: int = 3, retry_delay: float = 0.05):
        self._session_factory = session_factory
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._session: Optional[AsyncSession] = None

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def _bind_repositories(self, session: AsyncSession) -> None:
        self.households = SqlHouseholdRepository(session)
        self.members = SqlHouseholdMemberRepository(session)
        self.plan_types = SqlPlanTypeRepository(session)
        self.plan_usage = SqlPlanUsageRepository(session)
        self.tasks = SqlTaskRepository(session)
        self.events = SqlEventRepository(session)
        self.history = SqlEventHistoryRepository(session)

    def _unbind_repositories(self) -> None:
        for name in ("households", "members", "plan_types", "plan_usage", "tasks", "events", "history"):
            self.__dict__.pop(name, None)

    async def begin(self) -> None:
        if self._session is not None:
            raise InfrastructureError("A transaction is already active on this unit of work")
        session = self._session_factory()
        await session.begin()
        self._session = session
        self._bind_repositories(session)

    async def commit(self) -> None:
        if self._session is None:
            raise InfrastructureError("No active transaction to commit")
        try:
            await self._session.commit()
        except BaseException:
            await self.rollback()
            raise
        await self._close()

    async def rollback(self) -> None:
        if self._session is None:
            return
        try:
            await self._session.rollback()
        finally:
            await self._close()

    async def _close(self) -> None:
        session, self._session = self._session, None
        self._unbind_repositories()
        if session is not None:
            await session.close()

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        await self.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            await self.rollback()
        elif self._session is not None:
            await self.commit()

    async def execute_in_transaction(self, operation: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            attempt += 1
            await self.begin()
            try:
                result = await operation()
                await self.commit()
                return result
            except BaseException as exc:
                # Covers cancellation too: nothing from this attempt may persist
                await self.rollback()
                if not isinstance(exc, Exception) or not is_transient(exc):
                    raise
                if attempt > self._max_retries:
                    logger.error("Transaction failed after %d attempts: %s", attempt, exc)
                    raise TransientStorageError(
                        "Storage is temporarily unavailable, please retry", attempts=attempt
                    ) from exc

                delay = self._retry_delay * (2 ** (attempt - 1))
                logger.warning(
                    "Transient storage error on attempt %d/%d, retrying in %.2fs: %s",
                    attempt,
                    self._max_retries + 1,
                    delay,
                    exc,
                )
                await asyncio.sleep(delay)
