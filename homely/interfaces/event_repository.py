"""
Event repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from homely.models.enums import EventStatus, Priority
from homely.models.event import Event, EventCreate, EventStateChange, EventUpdate
from homely.models.pagination import Page


class IEventRepository(ABC):
    """
    Abstract interface for event persistence.

    Every query is scoped to a household and hides soft-deleted rows.
    Listings are ordered by due date, then priority severity, then creation time.
    """

    @abstractmethod
    async def create(self, data: EventCreate, priority: Priority, created_by: UUID) -> Event:
        """Create a pending event."""
        pass

    @abstractmethod
    async def get(self, household_id: UUID, event_id: UUID) -> Optional[Event]:
        """Get an event by ID within a household."""
        pass

    @abstractmethod
    async def update(self, household_id: UUID, event_id: UUID, update: EventUpdate) -> Event:
        """Update editable fields. Raises NotFoundError."""
        pass

    @abstractmethod
    async def transition(
        self,
        household_id: UUID,
        event_id: UUID,
        from_statuses: Iterable[EventStatus],
        change: EventStateChange,
    ) -> Optional[Event]:
        """
        Apply a state change only if the event is still in one of ``from_statuses``.

        Returns:
            The updated event, or None when the status no longer matched.
        """
        pass

    @abstractmethod
    async def delete(self, household_id: UUID, event_id: UUID) -> bool:
        """Soft-delete an event."""
        pass

    @abstractmethod
    async def list_for_household(
        self,
        household_id: UUID,
        page: int = 1,
        page_size: int = 20,
        status: Optional[EventStatus] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Page[Event]:
        """Paged listing with optional status and due-date filters."""
        pass

    @abstractmethod
    async def list_in_range(self, household_id: UUID, start: date, end: date) -> list[Event]:
        """Events due between ``start`` and ``end`` inclusive."""
        pass

    @abstractmethod
    async def list_overdue(self, household_id: UUID, today: date) -> list[Event]:
        """Open events due before ``today``."""
        pass

    @abstractmethod
    async def list_upcoming(self, household_id: UUID, until: date) -> list[Event]:
        """Open events due on or before ``until``, overdue ones included."""
        pass

    @abstractmethod
    async def list_assigned(self, household_id: UUID, user_id: UUID) -> list[Event]:
        """Open events assigned to a user."""
        pass

    @abstractmethod
    async def list_for_task(self, household_id: UUID, task_id: UUID) -> list[Event]:
        pass

    @abstractmethod
    async def count_for_household(
        self, household_id: UUID, statuses: Optional[Iterable[EventStatus]] = None
    ) -> int:
        pass

    @abstractmethod
    async def count_overdue(self, household_id: UUID, today: date) -> int:
        pass

    @abstractmethod
    async def count_completed_between(self, household_id: UUID, start: date, end: date) -> int:
        pass
