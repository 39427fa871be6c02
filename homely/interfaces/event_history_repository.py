"""
Event history repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from homely.models.event import EventHistory, EventHistoryCreate
from homely.models.pagination import Page


class IEventHistoryRepository(ABC):
    """Append-only completion records. There is no update or delete."""

    @abstractmethod
    async def create(self, data: EventHistoryCreate) -> EventHistory:
        pass

    @abstractmethod
    async def list_for_household(
        self, household_id: UUID, page: int = 1, page_size: int = 20
    ) -> Page[EventHistory]:
        """Most recent completions first."""
        pass
