"""
Plan quota guard.

Decides whether a household may create another template, member or event
under its subscription plan, and keeps the daily ``plan_usage`` counters.
All methods run inside the caller's unit of work so the check, the entity
write and the usage write commit or roll back together.
"""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from homely.core.exceptions import NotFoundError, QuotaExceededError
from homely.core.logger import setup_logger
from homely.interfaces.unit_of_work import IUnitOfWork
from homely.models.enums import UsageType
from homely.models.plan import PlanType, PlanUsage, UsageSummary
from homely.utils.datetime_utils import today_utc

logger = setup_logger(__name__)


class PlanQuotaGuard:
    """Plan limit checks and usage bookkeeping bound to a unit of work."""

    def __init__(self, uow: IUnitOfWork):
        self._uow = uow

    async def _plan_for_household(self, household_id: UUID) -> PlanType:
        household = await self._uow.households.get(household_id)
        if not household:
            raise NotFoundError(f"Household {household_id} not found")
        plan = await self._uow.plan_types.get(household.plan_type_id)
        if not plan:
            raise NotFoundError(f"Plan type {household.plan_type_id} not found")
        return plan

    async def current_count(self, household_id: UUID, usage_type: UsageType) -> int:
        """Live count of non-deleted entities of ``usage_type``."""
        if usage_type == UsageType.TASKS:
            return await self._uow.tasks.count_for_household(household_id)
        if usage_type == UsageType.HOUSEHOLD_MEMBERS:
            return await self._uow.members.count_for_household(household_id)
        return await self._uow.events.count_for_household(household_id)

    async def check_limit(self, plan_type_id: int, household_id: UUID, usage_type: UsageType) -> bool:
        """True when one more entity of ``usage_type`` fits the plan."""
        plan = await self._uow.plan_types.get(plan_type_id)
        if not plan:
            raise NotFoundError(f"Plan type {plan_type_id} not found")
        limit = plan.limit_for(usage_type)
        if limit is None:
            return True
        return await self.current_count(household_id, usage_type) < limit

    async def ensure_can_create(self, household_id: UUID, usage_type: UsageType) -> None:
        """Raise QuotaExceededError when the household is at its plan limit."""
        plan = await self._plan_for_household(household_id)
        if not await self.check_limit(plan.id, household_id, usage_type):
            limit = plan.limit_for(usage_type)
            logger.warning(
                "Quota reached for household %s: %s limit %s on plan %s",
                household_id,
                usage_type.value,
                limit,
                plan.name,
            )
            raise QuotaExceededError(usage_type.value, limit)

    async def record_usage(
        self,
        household_id: UUID,
        usage_type: UsageType,
        delta: int,
        usage_date: Optional[date] = None,
    ) -> PlanUsage:
        """
        Apply ``delta`` to today's usage row, creating it from the live count if missing.

        The usage write takes the row lock first; for growth the live count is
        then re-read and compared to the plan maximum, so a concurrent creation
        that slipped past ``ensure_can_create`` fails here and rolls back.
        """
        plan = await self._plan_for_household(household_id)
        limit = plan.limit_for(usage_type)
        usage_date = usage_date or today_utc()

        usage = await self._uow.plan_usage.get_for_date(household_id, usage_type, usage_date)
        if usage is None:
            live = await self.current_count(household_id, usage_type)
            usage = await self._uow.plan_usage.create(
                household_id, usage_type, usage_date, current_value=live, max_value=limit
            )
        else:
            usage = await self._uow.plan_usage.increment(usage.id, delta, limit)
            live = await self.current_count(household_id, usage_type)

        if delta > 0 and limit is not None and live > limit:
            logger.warning(
                "Concurrent creation pushed household %s over its %s limit (%s > %s)",
                household_id,
                usage_type.value,
                live,
                limit,
            )
            raise QuotaExceededError(usage_type.value, limit)
        return usage

    async def get_usage(self, household_id: UUID) -> list[UsageSummary]:
        """Used/limit figures for every plan-limited counter, from live counts."""
        plan = await self._plan_for_household(household_id)
        summaries = []
        for usage_type in (UsageType.TASKS, UsageType.HOUSEHOLD_MEMBERS):
            used = await self.current_count(household_id, usage_type)
            limit = plan.limit_for(usage_type)
            summaries.append(
                UsageSummary(
                    usage_type=usage_type,
                    used=used,
                    limit=limit,
                    percentage=round(used / limit * 100, 1) if limit else None,
                )
            )
        return summaries

    async def get_usage_history(
        self, household_id: UUID, usage_type: UsageType, since: date
    ) -> list[PlanUsage]:
        await self._plan_for_household(household_id)
        return await self._uow.plan_usage.list_history(household_id, usage_type, since)
