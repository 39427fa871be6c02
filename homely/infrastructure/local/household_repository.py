"""
SQLAlchemy implementations of the household and membership repositories.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from homely.core.exceptions import NotFoundError
from homely.infrastructure.local.base_repository import SoftDeleteRepository
from homely.infrastructure.local.database import HouseholdMemberORM, HouseholdORM
from homely.interfaces.household_repository import IHouseholdMemberRepository, IHouseholdRepository
from homely.models.enums import HouseholdRole, SubscriptionStatus
from homely.models.household import Household, HouseholdCreate, HouseholdMember
from homely.utils.datetime_utils import now_utc


class SqlHouseholdRepository(SoftDeleteRepository[HouseholdORM], IHouseholdRepository):
    """Households stored in the ``households`` table."""

    model = HouseholdORM

    async def create(
        self,
        data: HouseholdCreate,
        plan_type_id: int,
        subscription_status: SubscriptionStatus = SubscriptionStatus.FREE,
    ) -> Household:
        orm = HouseholdORM(
            id=str(uuid4()),
            name=data.name,
            plan_type_id=plan_type_id,
            subscription_status=subscription_status.value,
        )
        return Household.model_validate(await self._add(orm), from_attributes=True)

    async def get(self, household_id: UUID) -> Optional[Household]:
        orm = await self._first(HouseholdORM.id == str(household_id))
        return Household.model_validate(orm, from_attributes=True) if orm else None


class SqlHouseholdMemberRepository(SoftDeleteRepository[HouseholdMemberORM], IHouseholdMemberRepository):
    """Memberships stored in the ``household_members`` table."""

    model = HouseholdMemberORM

    def _orm_to_model(self, orm: HouseholdMemberORM) -> HouseholdMember:
        return HouseholdMember.model_validate(orm, from_attributes=True)

    async def _get_orm(self, household_id: UUID, user_id: UUID) -> Optional[HouseholdMemberORM]:
        return await self._first(
            HouseholdMemberORM.household_id == str(household_id),
            HouseholdMemberORM.user_id == str(user_id),
        )

    async def create(
        self,
        household_id: UUID,
        user_id: UUID,
        role: HouseholdRole,
        invited_by: Optional[UUID] = None,
        joined_at: Optional[datetime] = None,
    ) -> HouseholdMember:
        orm = HouseholdMemberORM(
            id=str(uuid4()),
            household_id=str(household_id),
            user_id=str(user_id),
            role=role.value,
            invited_by=str(invited_by) if invited_by else None,
            joined_at=joined_at or now_utc(),
        )
        return self._orm_to_model(await self._add(orm))

    async def get_membership(self, household_id: UUID, user_id: UUID) -> Optional[HouseholdMember]:
        orm = await self._get_orm(household_id, user_id)
        return self._orm_to_model(orm) if orm else None

    async def list_for_household(self, household_id: UUID) -> list[HouseholdMember]:
        rows = await self._all(
            HouseholdMemberORM.household_id == str(household_id),
            order_by=(HouseholdMemberORM.created_at, HouseholdMemberORM.id),
        )
        return [self._orm_to_model(orm) for orm in rows]

    async def count_for_household(self, household_id: UUID) -> int:
        return await self._count(HouseholdMemberORM.household_id == str(household_id))

    async def update_role(self, household_id: UUID, user_id: UUID, role: HouseholdRole) -> HouseholdMember:
        orm = await self._get_orm(household_id, user_id)
        if not orm:
            raise NotFoundError(f"User {user_id} is not a member of household {household_id}")
        orm.role = role.value
        orm.updated_at = now_utc()
        await self._session.flush()
        return self._orm_to_model(orm)

    async def delete(self, household_id: UUID, user_id: UUID) -> bool:
        orm = await self._get_orm(household_id, user_id)
        if not orm:
            return False
        await self._remove(orm)
        return True
