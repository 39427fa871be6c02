"""
Unit of work interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, TypeVar

from homely.interfaces.event_history_repository import IEventHistoryRepository
from homely.interfaces.event_repository import IEventRepository
from homely.interfaces.household_repository import IHouseholdMemberRepository, IHouseholdRepository
from homely.interfaces.plan_repository import IPlanTypeRepository, IPlanUsageRepository
from homely.interfaces.task_repository import ITaskRepository

T = TypeVar("T")


class IUnitOfWork(ABC):
    """
    One transaction and the repositories bound to it.

    Repository properties are only available between ``begin`` and
    ``commit``/``rollback``.
    """

    households: IHouseholdRepository
    members: IHouseholdMemberRepository
    plan_types: IPlanTypeRepository
    plan_usage: IPlanUsageRepository
    tasks: ITaskRepository
    events: IEventRepository
    history: IEventHistoryRepository

    @abstractmethod
    async def begin(self) -> None:
        """Start a transaction. Raises if one is already active."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit; on failure roll back and re-raise."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

    @abstractmethod
    async def execute_in_transaction(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` between begin and commit, retrying transient failures."""
        pass
