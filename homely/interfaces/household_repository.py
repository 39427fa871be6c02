"""
Household and membership repository interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from homely.models.enums import HouseholdRole, SubscriptionStatus
from homely.models.household import Household, HouseholdCreate, HouseholdMember


class IHouseholdRepository(ABC):
    """Abstract interface for household persistence."""

    @abstractmethod
    async def create(
        self,
        data: HouseholdCreate,
        plan_type_id: int,
        subscription_status: SubscriptionStatus = SubscriptionStatus.FREE,
    ) -> Household:
        pass

    @abstractmethod
    async def get(self, household_id: UUID) -> Optional[Household]:
        pass


class IHouseholdMemberRepository(ABC):
    """Abstract interface for membership persistence. Removed members stay as soft-deleted rows."""

    @abstractmethod
    async def create(
        self,
        household_id: UUID,
        user_id: UUID,
        role: HouseholdRole,
        invited_by: Optional[UUID] = None,
        joined_at: Optional[datetime] = None,
    ) -> HouseholdMember:
        pass

    @abstractmethod
    async def get_membership(self, household_id: UUID, user_id: UUID) -> Optional[HouseholdMember]:
        pass

    @abstractmethod
    async def list_for_household(self, household_id: UUID) -> list[HouseholdMember]:
        pass

    @abstractmethod
    async def count_for_household(self, household_id: UUID) -> int:
        pass

    @abstractmethod
    async def update_role(self, household_id: UUID, user_id: UUID, role: HouseholdRole) -> HouseholdMember:
        """Raises NotFoundError."""
        pass

    @abstractmethod
    async def delete(self, household_id: UUID, user_id: UUID) -> bool:
        pass
