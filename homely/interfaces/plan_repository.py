"""
Plan type and plan usage repository interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from homely.models.enums import UsageType
from homely.models.plan import PlanType, PlanUsage


class IPlanTypeRepository(ABC):
    """Read access to subscription plans."""

    @abstractmethod
    async def get(self, plan_type_id: int) -> Optional[PlanType]:
        pass

    @abstractmethod
    async def list_active(self) -> list[PlanType]:
        pass


class IPlanUsageRepository(ABC):
    """Daily usage counters, one row per household, usage type and date."""

    @abstractmethod
    async def get_for_date(
        self, household_id: UUID, usage_type: UsageType, usage_date: date
    ) -> Optional[PlanUsage]:
        pass

    @abstractmethod
    async def create(
        self,
        household_id: UUID,
        usage_type: UsageType,
        usage_date: date,
        current_value: int,
        max_value: Optional[int],
    ) -> PlanUsage:
        pass

    @abstractmethod
    async def increment(self, usage_id: UUID, delta: int, max_value: Optional[int]) -> PlanUsage:
        """Atomically add ``delta`` to the stored value, never going below zero."""
        pass

    @abstractmethod
    async def list_for_date(self, household_id: UUID, usage_date: date) -> list[PlanUsage]:
        pass

    @abstractmethod
    async def list_history(
        self, household_id: UUID, usage_type: UsageType, since: date
    ) -> list[PlanUsage]:
        """Usage rows on or after ``since``, oldest first."""
        pass

    @abstractmethod
    async def delete(self, usage_id: UUID) -> bool:
        """Physically remove a usage row."""
        pass
