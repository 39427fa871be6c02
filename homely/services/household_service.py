"""
Household provisioning and membership service.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from homely.core.config import get_settings
from homely.core.exceptions import DuplicateError, NotFoundError, ValidationError
from homely.core.logger import setup_logger
from homely.interfaces.unit_of_work import IUnitOfWork
from homely.models.enums import HouseholdRole, SubscriptionStatus, UsageType
from homely.models.household import (
    Household,
    HouseholdCreate,
    HouseholdMember,
    HouseholdMemberCreate,
    HouseholdMemberUpdate,
)
from homely.models.plan import PlanType, PlanUsage, UsageSummary
from homely.services.plan_quota_service import PlanQuotaGuard
from homely.utils.datetime_utils import today_utc

logger = setup_logger(__name__)


class HouseholdService:
    """Households and their members."""

    def __init__(self, uow: IUnitOfWork):
        self._uow = uow
        self._quota = PlanQuotaGuard(uow)

    async def _require_household(self, household_id: UUID) -> Household:
        household = await self._uow.households.get(household_id)
        if not household:
            raise NotFoundError(f"Household {household_id} not found")
        return household

    async def create_household(self, data: HouseholdCreate, owner_user_id: UUID) -> Household:
        """Create a household with its owner as the first admin member."""
        plan_type_id = data.plan_type_id or get_settings().DEFAULT_PLAN_TYPE_ID

        async def operation() -> Household:
            plan = await self._uow.plan_types.get(plan_type_id)
            if not plan or not plan.is_active:
                raise ValidationError(f"Unknown plan type {plan_type_id}", field="plan_type_id")

            status = SubscriptionStatus.FREE if plan.price_monthly == 0 else SubscriptionStatus.ACTIVE
            household = await self._uow.households.create(data, plan.id, status)
            await self._uow.members.create(household.id, owner_user_id, HouseholdRole.ADMIN)
            await self._quota.record_usage(household.id, UsageType.HOUSEHOLD_MEMBERS, +1)
            return household

        household = await self._uow.execute_in_transaction(operation)
        logger.info("Household %s created on plan %s", household.id, plan_type_id)
        return household

    async def list_plans(self) -> list[PlanType]:
        async def operation() -> list[PlanType]:
            return await self._uow.plan_types.list_active()

        return await self._uow.execute_in_transaction(operation)

    async def get_household(self, household_id: UUID) -> Household:
        async def operation() -> Household:
            return await self._require_household(household_id)

        return await self._uow.execute_in_transaction(operation)

    async def list_members(self, household_id: UUID) -> list[HouseholdMember]:
        async def operation() -> list[HouseholdMember]:
            await self._require_household(household_id)
            return await self._uow.members.list_for_household(household_id)

        return await self._uow.execute_in_transaction(operation)

    async def add_member(
        self, household_id: UUID, data: HouseholdMemberCreate, invited_by: Optional[UUID] = None
    ) -> HouseholdMember:
        """
        Add a user to a household.

        A previously removed member gets a new membership row; the old one
        stays soft-deleted.

        Raises:
            DuplicateError: user already an active member
            QuotaExceededError: plan member limit reached
        """

        async def operation() -> HouseholdMember:
            await self._require_household(household_id)
            if await self._uow.members.get_membership(household_id, data.user_id):
                raise DuplicateError(f"User {data.user_id} is already a member of household {household_id}")

            await self._quota.ensure_can_create(household_id, UsageType.HOUSEHOLD_MEMBERS)
            member = await self._uow.members.create(household_id, data.user_id, data.role, invited_by=invited_by)
            await self._quota.record_usage(household_id, UsageType.HOUSEHOLD_MEMBERS, +1)
            return member

        member = await self._uow.execute_in_transaction(operation)
        logger.info("User %s joined household %s as %s", data.user_id, household_id, data.role.value)
        return member

    async def update_member_role(
        self, household_id: UUID, user_id: UUID, update: HouseholdMemberUpdate
    ) -> HouseholdMember:
        async def operation() -> HouseholdMember:
            return await self._uow.members.update_role(household_id, user_id, update.role)

        return await self._uow.execute_in_transaction(operation)

    async def remove_member(self, household_id: UUID, user_id: UUID) -> None:
        async def operation() -> None:
            if not await self._uow.members.delete(household_id, user_id):
                raise NotFoundError(f"User {user_id} is not a member of household {household_id}")
            await self._quota.record_usage(household_id, UsageType.HOUSEHOLD_MEMBERS, -1)

        await self._uow.execute_in_transaction(operation)
        logger.info("User %s removed from household %s", user_id, household_id)

    async def get_usage(self, household_id: UUID) -> list[UsageSummary]:
        async def operation() -> list[UsageSummary]:
            return await self._quota.get_usage(household_id)

        return await self._uow.execute_in_transaction(operation)

    async def get_usage_history(
        self,
        household_id: UUID,
        usage_type: UsageType,
        days: int = 30,
        today: Optional[date] = None,
    ) -> list[PlanUsage]:
        since = (today or today_utc()) - timedelta(days=days)

        async def operation() -> list[PlanUsage]:
            return await self._quota.get_usage_history(household_id, usage_type, since)

        return await self._uow.execute_in_transaction(operation)
