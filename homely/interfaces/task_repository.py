"""
Task template repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from homely.models.pagination import Page
from homely.models.task import Task, TaskCreate, TaskUpdate


class ITaskRepository(ABC):
    """Abstract interface for task template persistence. Soft-deleted templates are invisible."""

    @abstractmethod
    async def create(self, data: TaskCreate, created_by: UUID) -> Task:
        """Create a task template."""
        pass

    @abstractmethod
    async def get(self, household_id: UUID, task_id: UUID) -> Optional[Task]:
        """Get a template by ID within a household."""
        pass

    @abstractmethod
    async def get_names(self, household_id: UUID, task_ids: list[UUID]) -> dict[UUID, str]:
        """Map template IDs to names."""
        pass

    @abstractmethod
    async def list_for_household(
        self,
        household_id: UUID,
        page: int = 1,
        page_size: int = 20,
        active_only: bool = False,
        recurring: Optional[bool] = None,
        category_id: Optional[int] = None,
    ) -> Page[Task]:
        """List templates of a household, newest first."""
        pass

    @abstractmethod
    async def count_for_household(self, household_id: UUID) -> int:
        """Count non-deleted templates."""
        pass

    @abstractmethod
    async def count_by_category(self, household_id: UUID) -> list[tuple[Optional[int], int]]:
        """Count non-deleted templates grouped by category."""
        pass

    @abstractmethod
    async def update(self, household_id: UUID, task_id: UUID, update: TaskUpdate) -> Task:
        """Update a template. Raises NotFoundError."""
        pass

    @abstractmethod
    async def delete(self, household_id: UUID, task_id: UUID) -> bool:
        """Soft-delete a template. Returns False when it was not visible."""
        pass
