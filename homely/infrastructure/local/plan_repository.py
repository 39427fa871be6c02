"""
SQLAlchemy implementations of the plan type and plan usage repositories.
"""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import case, update as sql_update

from homely.infrastructure.local.base_repository import SqlRepository
from homely.infrastructure.local.database import PlanTypeORM, PlanUsageORM
from homely.interfaces.plan_repository import IPlanTypeRepository, IPlanUsageRepository
from homely.models.enums import UsageType
from homely.models.plan import PlanType, PlanUsage
from homely.utils.datetime_utils import now_utc


class SqlPlanTypeRepository(SqlRepository[PlanTypeORM], IPlanTypeRepository):
    """Plans stored in the ``plan_types`` table."""

    model = PlanTypeORM

    async def get(self, plan_type_id: int) -> Optional[PlanType]:
        orm = await self._first(PlanTypeORM.id == plan_type_id)
        return PlanType.model_validate(orm, from_attributes=True) if orm else None

    async def list_active(self) -> list[PlanType]:
        rows = await self._all(PlanTypeORM.is_active.is_(True), order_by=(PlanTypeORM.id,))
        return [PlanType.model_validate(orm, from_attributes=True) for orm in rows]


class SqlPlanUsageRepository(SqlRepository[PlanUsageORM], IPlanUsageRepository):
    """Usage counters stored in the ``plan_usage`` table."""

    model = PlanUsageORM

    def _orm_to_model(self, orm: PlanUsageORM) -> PlanUsage:
        return PlanUsage.model_validate(orm, from_attributes=True)

    async def get_for_date(
        self, household_id: UUID, usage_type: UsageType, usage_date: date
    ) -> Optional[PlanUsage]:
        orm = await self._first(
            PlanUsageORM.household_id == str(household_id),
            PlanUsageORM.usage_type == usage_type.value,
            PlanUsageORM.usage_date == usage_date,
        )
        return self._orm_to_model(orm) if orm else None

    async def create(
        self,
        household_id: UUID,
        usage_type: UsageType,
        usage_date: date,
        current_value: int,
        max_value: Optional[int],
    ) -> PlanUsage:
        orm = PlanUsageORM(
            id=str(uuid4()),
            household_id=str(household_id),
            usage_type=usage_type.value,
            usage_date=usage_date,
            current_value=max(current_value, 0),
            max_value=max_value,
        )
        return self._orm_to_model(await self._add(orm))

    async def increment(self, usage_id: UUID, delta: int, max_value: Optional[int]) -> PlanUsage:
        new_value = PlanUsageORM.current_value + delta
        await self._session.execute(
            sql_update(PlanUsageORM)
            .where(PlanUsageORM.id == str(usage_id))
            .values(
                current_value=case((new_value < 0, 0), else_=new_value),
                max_value=max_value,
                updated_at=now_utc(),
            )
            .execution_options(synchronize_session=False)
        )
        orm = await self._first(PlanUsageORM.id == str(usage_id), refresh=True)
        return self._orm_to_model(orm)

    async def list_for_date(self, household_id: UUID, usage_date: date) -> list[PlanUsage]:
        rows = await self._all(
            PlanUsageORM.household_id == str(household_id),
            PlanUsageORM.usage_date == usage_date,
            order_by=(PlanUsageORM.usage_type,),
        )
        return [self._orm_to_model(orm) for orm in rows]

    async def list_history(
        self, household_id: UUID, usage_type: UsageType, since: date
    ) -> list[PlanUsage]:
        rows = await self._all(
            PlanUsageORM.household_id == str(household_id),
            PlanUsageORM.usage_type == usage_type.value,
            PlanUsageORM.usage_date >= since,
            order_by=(PlanUsageORM.usage_date,),
        )
        return [self._orm_to_model(orm) for orm in rows]

    async def delete(self, usage_id: UUID) -> bool:
        orm = await self._first(PlanUsageORM.id == str(usage_id))
        if not orm:
            return False
        await self._remove(orm)
        return True
