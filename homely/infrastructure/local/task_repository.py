"""
SQLAlchemy implementation of the task template repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, func, or_, select

from homely.core.exceptions import NotFoundError
from homely.infrastructure.local.base_repository import SoftDeleteRepository
from homely.infrastructure.local.database import TaskORM
from homely.interfaces.task_repository import ITaskRepository
from homely.models.pagination import Page
from homely.models.task import Task, TaskCreate, TaskUpdate
from homely.utils.datetime_utils import now_utc

_INTERVAL_COLUMNS = (
    TaskORM.interval_years,
    TaskORM.interval_months,
    TaskORM.interval_weeks,
    TaskORM.interval_days,
)


class SqlTaskRepository(SoftDeleteRepository[TaskORM], ITaskRepository):
    """Task templates stored in the ``tasks`` table."""

    model = TaskORM

    def _orm_to_model(self, orm: TaskORM) -> Task:
        """Convert ORM object to Pydantic model."""
        return Task.model_validate(orm, from_attributes=True)

    def _scope(self, household_id: UUID) -> list:
        return [TaskORM.household_id == str(household_id)]

    async def create(self, data: TaskCreate, created_by: UUID) -> Task:
        orm = TaskORM(
            id=str(uuid4()),
            household_id=str(data.household_id),
            category_id=data.category_id,
            name=data.name,
            description=data.description,
            interval_years=data.interval.years,
            interval_months=data.interval.months,
            interval_weeks=data.interval.weeks,
            interval_days=data.interval.days,
            priority=data.priority.value,
            notes=data.notes,
            is_active=True,
            assigned_to=str(data.assigned_to) if data.assigned_to else None,
            created_by=str(created_by),
        )
        return self._orm_to_model(await self._add(orm))

    async def get(self, household_id: UUID, task_id: UUID) -> Optional[Task]:
        orm = await self._first(TaskORM.id == str(task_id), *self._scope(household_id))
        return self._orm_to_model(orm) if orm else None

    async def get_names(self, household_id: UUID, task_ids: list[UUID]) -> dict[UUID, str]:
        if not task_ids:
            return {}
        result = await self._session.execute(
            select(TaskORM.id, TaskORM.name).where(
                *self._visible(),
                *self._scope(household_id),
                TaskORM.id.in_([str(task_id) for task_id in task_ids]),
            )
        )
        return {UUID(task_id): name for task_id, name in result.all()}

    async def list_for_household(
        self,
        household_id: UUID,
        page: int = 1,
        page_size: int = 20,
        active_only: bool = False,
        recurring: Optional[bool] = None,
        category_id: Optional[int] = None,
    ) -> Page[Task]:
        conditions = self._scope(household_id)
        if active_only:
            conditions.append(TaskORM.is_active.is_(True))
        if category_id is not None:
            conditions.append(TaskORM.category_id == category_id)
        has_interval = or_(*[column > 0 for column in _INTERVAL_COLUMNS])
        if recurring is True:
            conditions.append(has_interval)
        elif recurring is False:
            conditions.append(and_(*[func.coalesce(column, 0) == 0 for column in _INTERVAL_COLUMNS]))

        rows, total = await self._paginate(
            conditions,
            [TaskORM.created_at.desc(), TaskORM.id],
            page,
            page_size,
        )
        return Page[Task](
            items=[self._orm_to_model(orm) for orm in rows],
            total_count=total,
            page=page,
            page_size=page_size,
        )

    async def count_for_household(self, household_id: UUID) -> int:
        return await self._count(*self._scope(household_id))

    async def count_by_category(self, household_id: UUID) -> list[tuple[Optional[int], int]]:
        result = await self._session.execute(
            select(TaskORM.category_id, func.count())
            .where(*self._visible(), *self._scope(household_id))
            .group_by(TaskORM.category_id)
            .order_by(TaskORM.category_id)
        )
        return [(category_id, int(count)) for category_id, count in result.all()]

    async def update(self, household_id: UUID, task_id: UUID, update: TaskUpdate) -> Task:
        orm = await self._first(TaskORM.id == str(task_id), *self._scope(household_id))
        if not orm:
            raise NotFoundError(f"Task {task_id} not found")

        update_data = update.model_dump(exclude_unset=True)
        if "interval" in update_data:
            interval = update.interval
            orm.interval_years = interval.years if interval else None
            orm.interval_months = interval.months if interval else None
            orm.interval_weeks = interval.weeks if interval else None
            orm.interval_days = interval.days if interval else None
            update_data.pop("interval")
        for field, value in update_data.items():
            if field == "priority" and value is not None:
                value = value.value
            elif field == "assigned_to" and value is not None:
                value = str(value)
            setattr(orm, field, value)
        orm.updated_at = now_utc()

        await self._session.flush()
        await self._session.refresh(orm)
        return self._orm_to_model(orm)

    async def delete(self, household_id: UUID, task_id: UUID) -> bool:
        orm = await self._first(TaskORM.id == str(task_id), *self._scope(household_id))
        if not orm:
            return False
        await self._remove(orm)
        return True
