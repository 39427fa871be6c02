"""
Task template service.
"""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from homely.core.config import get_settings
from homely.core.exceptions import NotFoundError
from homely.core.logger import setup_logger
from homely.interfaces.unit_of_work import IUnitOfWork
from homely.models.enums import UsageType
from homely.models.event import Event, EventCreate
from homely.models.pagination import Page, validate_page_request
from homely.models.task import Task, TaskCreate, TaskUpdate
from homely.services.event_service import EventLifecycleService
from homely.services.plan_quota_service import PlanQuotaGuard
from homely.utils.datetime_utils import today_utc

logger = setup_logger(__name__)


class TaskService:
    """Create, edit and retire task templates under the household's plan quota."""

    def __init__(self, uow: IUnitOfWork):
        self._uow = uow
        self._quota = PlanQuotaGuard(uow)
        self._events = EventLifecycleService(uow)

    async def _get_or_raise(self, household_id: UUID, task_id: UUID) -> Task:
        task = await self._uow.tasks.get(household_id, task_id)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    async def create_task(self, data: TaskCreate, created_by: UUID, today: Optional[date] = None) -> Task:
        """
        Create a template and schedule its first event.

        The first event falls on ``first_due_date`` when given; otherwise a
        recurring template starts one interval from today and a one-off
        template starts without an event.

        Raises:
            NotFoundError: household does not exist
            QuotaExceededError: plan task limit reached
        """

        async def operation() -> Task:
            await self._quota.ensure_can_create(data.household_id, UsageType.TASKS)
            task = await self._uow.tasks.create(data, created_by)
            await self._quota.record_usage(data.household_id, UsageType.TASKS, +1)

            first_due = data.first_due_date or data.interval.next_date(today or today_utc())
            if first_due:
                await self._events.add_event(
                    EventCreate(
                        household_id=data.household_id,
                        task_id=task.id,
                        due_date=first_due,
                        assigned_to=data.assigned_to,
                    ),
                    priority=task.priority,
                    created_by=created_by,
                )
            return task

        task = await self._uow.execute_in_transaction(operation)
        logger.info(
            "Task %s '%s' created for household %s (every %s)",
            task.id,
            task.name,
            task.household_id,
            task.interval.describe(),
        )
        return task

    async def get_task(self, household_id: UUID, task_id: UUID) -> Task:
        async def operation() -> Task:
            return await self._get_or_raise(household_id, task_id)

        return await self._uow.execute_in_transaction(operation)

    async def list_tasks(
        self,
        household_id: UUID,
        page: int = 1,
        page_size: Optional[int] = None,
        active_only: bool = False,
        recurring: Optional[bool] = None,
        category_id: Optional[int] = None,
    ) -> Page[Task]:
        settings = get_settings()
        page_size = page_size or settings.DEFAULT_PAGE_SIZE
        validate_page_request(page, page_size, settings.MAX_PAGE_SIZE)

        async def operation() -> Page[Task]:
            return await self._uow.tasks.list_for_household(
                household_id,
                page=page,
                page_size=page_size,
                active_only=active_only,
                recurring=recurring,
                category_id=category_id,
            )

        return await self._uow.execute_in_transaction(operation)

    async def list_task_events(self, household_id: UUID, task_id: UUID) -> list[Event]:
        async def operation() -> list[Event]:
            await self._get_or_raise(household_id, task_id)
            return await self._uow.events.list_for_task(household_id, task_id)

        return await self._uow.execute_in_transaction(operation)

    async def update_task(self, household_id: UUID, task_id: UUID, update: TaskUpdate) -> Task:
        """Update a template. A new interval takes effect at the next completion."""

        async def operation() -> Task:
            return await self._uow.tasks.update(household_id, task_id, update)

        return await self._uow.execute_in_transaction(operation)

    async def delete_task(self, household_id: UUID, task_id: UUID) -> None:
        """Soft-delete a template. Its scheduled events stay, but no successor follows them."""

        async def operation() -> None:
            if not await self._uow.tasks.delete(household_id, task_id):
                raise NotFoundError(f"Task {task_id} not found")
            await self._quota.record_usage(household_id, UsageType.TASKS, -1)

        await self._uow.execute_in_transaction(operation)
        logger.info("Task %s deleted from household %s", task_id, household_id)
