"""
Integration tests for task template management.
"""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from homely.core.exceptions import NotFoundError, ValidationError
from homely.models.enums import Priority
from homely.models.household import HouseholdCreate
from homely.models.interval import Interval
from homely.models.task import TaskCreate, TaskUpdate
from homely.services.household_service import HouseholdService
from homely.services.task_service import TaskService
from homely.utils.datetime_utils import today_utc


class TestCreateTask:
    @pytest.mark.asyncio
    async def test_first_event_on_given_date(self, uow, household, create_task):
        task = await create_task("Oil change", first_due_date=date(2025, 1, 10), months=6)

        events = await TaskService(uow).list_task_events(household.id, task.id)

        assert task.is_recurring
        assert task.interval == Interval(months=6)
        assert [e.due_date for e in events] == [date(2025, 1, 10)]

    @pytest.mark.asyncio
    async def test_recurring_template_starts_one_interval_out(self, uow, household, create_task):
        task = await create_task("Smoke alarm test", weeks=2)

        events = await TaskService(uow).list_task_events(household.id, task.id)

        assert [e.due_date for e in events] == [today_utc() + timedelta(weeks=2)]

    @pytest.mark.asyncio
    async def test_one_off_template_without_date_has_no_event(self, uow, household, create_task):
        task = await create_task("Paint the fence")

        assert not task.is_recurring
        assert await TaskService(uow).list_task_events(household.id, task.id) == []

    @pytest.mark.asyncio
    async def test_first_event_inherits_priority_and_assignee(self, uow, household, owner_id):
        helper = uuid4()
        task = await TaskService(uow).create_task(
            TaskCreate(
                household_id=household.id,
                name="Furnace service",
                priority=Priority.HIGH,
                assigned_to=helper,
                interval=Interval(years=1),
                first_due_date=date(2025, 10, 1),
            ),
            created_by=owner_id,
        )

        [event] = await TaskService(uow).list_task_events(household.id, task.id)

        assert event.priority == Priority.HIGH
        assert event.assigned_to == helper
        assert event.created_by == owner_id

    @pytest.mark.asyncio
    async def test_unknown_household(self, uow, owner_id):
        with pytest.raises(NotFoundError):
            await TaskService(uow).create_task(TaskCreate(household_id=uuid4(), name="Orphan"), created_by=owner_id)


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_update_fields(self, uow, household, create_task):
        task = await create_task("Oil change", months=6)

        updated = await TaskService(uow).update_task(
            household.id,
            task.id,
            TaskUpdate(name="Oil & filter change", is_active=False, interval=Interval(months=3, days=1)),
        )

        assert updated.name == "Oil & filter change"
        assert updated.is_active is False
        assert updated.interval == Interval(months=3, days=1)
        assert updated.priority == Priority.MEDIUM

    @pytest.mark.asyncio
    async def test_clearing_interval_makes_template_one_off(self, uow, household, create_task):
        task = await create_task("Oil change", months=6)

        updated = await TaskService(uow).update_task(household.id, task.id, TaskUpdate(interval=None))

        assert not updated.is_recurring

    @pytest.mark.asyncio
    async def test_update_missing_task(self, uow, household):
        with pytest.raises(NotFoundError):
            await TaskService(uow).update_task(household.id, uuid4(), TaskUpdate(name="Nope"))

    @pytest.mark.asyncio
    async def test_deleted_task_is_not_found(self, uow, household, create_task):
        task = await create_task("Oil change", months=6)
        service = TaskService(uow)

        await service.delete_task(household.id, task.id)

        with pytest.raises(NotFoundError):
            await service.get_task(household.id, task.id)
        with pytest.raises(NotFoundError):
            await service.delete_task(household.id, task.id)
        assert (await service.list_tasks(household.id)).total_count == 0


class TestListTasks:
    @pytest.mark.asyncio
    async def test_active_only(self, uow, household, create_task):
        active = await create_task("Active", days=7)
        paused = await create_task("Paused", days=7)
        await TaskService(uow).update_task(household.id, paused.id, TaskUpdate(is_active=False))

        page = await TaskService(uow).list_tasks(household.id, active_only=True)

        assert [t.id for t in page.items] == [active.id]

    @pytest.mark.asyncio
    async def test_invalid_page_size(self, uow, household):
        with pytest.raises(ValidationError):
            await TaskService(uow).list_tasks(household.id, page_size=1000)


class TestHousehold:
    @pytest.mark.asyncio
    async def test_unknown_plan_rejected(self, uow, owner_id):
        with pytest.raises(ValidationError) as exc_info:
            await HouseholdService(uow).create_household(
                HouseholdCreate(name="Nowhere", plan_type_id=99), owner_user_id=owner_id
            )
        assert exc_info.value.field == "plan_type_id"

    @pytest.mark.asyncio
    async def test_paid_plan_is_active_subscription(self, uow, owner_id):
        household = await HouseholdService(uow).create_household(
            HouseholdCreate(name="Cedar Court", plan_type_id=2), owner_user_id=owner_id
        )
        assert household.subscription_status.value == "active"

    @pytest.mark.asyncio
    async def test_list_plans(self, uow):
        plans = await HouseholdService(uow).list_plans()
        assert [p.name for p in plans] == ["Free", "Premium", "Family"]
        assert plans[2].max_tasks is None
