"""
Integration tests for plan quotas on tasks and members.
"""

import asyncio
from datetime import date, timedelta
from uuid import uuid4

import pytest

from homely.core.exceptions import DuplicateError, QuotaExceededError, TransientStorageError
from homely.models.enums import HouseholdRole, UsageType
from homely.models.household import HouseholdCreate, HouseholdMemberCreate
from homely.models.task import TaskCreate
from homely.services.household_service import HouseholdService
from homely.services.plan_quota_service import PlanQuotaGuard
from homely.services.task_service import TaskService
from homely.utils.datetime_utils import today_utc

FREE_PLAN_ID = 1
FAMILY_PLAN_ID = 3


class TestTaskQuota:
    @pytest.mark.asyncio
    async def test_sixth_task_on_free_plan_is_rejected(self, uow, household, create_task):
        for i in range(5):
            await create_task(f"Task {i}", days=30)

        with pytest.raises(QuotaExceededError) as exc_info:
            await create_task("Task 6", days=30)

        assert exc_info.value.usage_type == "tasks"
        assert exc_info.value.limit == 5
        page = await TaskService(uow).list_tasks(household.id)
        assert page.total_count == 5

    @pytest.mark.asyncio
    async def test_rejected_task_leaves_no_event_behind(self, uow, household, create_task):
        for i in range(5):
            await create_task(f"Task {i}", first_due_date=date(2025, 1, 1))

        with pytest.raises(QuotaExceededError):
            await create_task("Task 6", first_due_date=date(2025, 1, 1))

        async def operation():
            return await uow.events.count_for_household(household.id)

        assert await uow.execute_in_transaction(operation) == 5

    @pytest.mark.asyncio
    async def test_deleting_a_task_frees_a_slot(self, uow, household, create_task):
        tasks = [await create_task(f"Task {i}", days=30) for i in range(5)]

        await TaskService(uow).delete_task(household.id, tasks[0].id)
        replacement = await create_task("Replacement", days=30)

        assert replacement.name == "Replacement"

    @pytest.mark.asyncio
    async def test_unlimited_plan(self, uow, other_household):
        service = TaskService(uow)
        for i in range(7):
            await service.create_task(TaskCreate(household_id=other_household.id, name=f"Task {i}"), uuid4())

        page = await service.list_tasks(other_household.id)
        assert page.total_count == 7

    @pytest.mark.asyncio
    async def test_concurrent_creations_cannot_exceed_limit(self, make_uow, uow, household, create_task):
        for i in range(4):
            await create_task(f"Task {i}", days=30)

        async def create(name):
            return await TaskService(make_uow()).create_task(
                TaskCreate(household_id=household.id, name=name), created_by=uuid4()
            )

        results = await asyncio.gather(create("Racer A"), create("Racer B"), return_exceptions=True)

        failures = [r for r in results if isinstance(r, BaseException)]
        assert all(isinstance(f, (QuotaExceededError, TransientStorageError)) for f in failures)
        page = await TaskService(uow).list_tasks(household.id)
        assert page.total_count <= 5


class TestUsageRecords:
    @pytest.mark.asyncio
    async def test_usage_tracks_creations_and_deletions(self, uow, household, create_task):
        first = await create_task("Task 1", days=30)
        await create_task("Task 2", days=30)
        await TaskService(uow).delete_task(household.id, first.id)

        async def operation():
            return await uow.plan_usage.get_for_date(household.id, UsageType.TASKS, today_utc())

        usage = await uow.execute_in_transaction(operation)
        assert usage.current_value == 1
        assert usage.max_value == 5

    @pytest.mark.asyncio
    async def test_check_limit(self, uow, household, create_task):
        guard = PlanQuotaGuard(uow)

        async def allowed(plan_type_id):
            async def operation():
                return await guard.check_limit(plan_type_id, household.id, UsageType.TASKS)

            return await uow.execute_in_transaction(operation)

        for i in range(5):
            await create_task(f"Task {i}", days=30)

        assert await allowed(FREE_PLAN_ID) is False
        assert await allowed(FAMILY_PLAN_ID) is True

    @pytest.mark.asyncio
    async def test_usage_summary(self, uow, household, create_task):
        await create_task("Task 1", days=30)
        await create_task("Task 2", days=30)

        usage = {u.usage_type: u for u in await HouseholdService(uow).get_usage(household.id)}

        assert usage[UsageType.TASKS].used == 2
        assert usage[UsageType.TASKS].limit == 5
        assert usage[UsageType.TASKS].percentage == 40.0
        assert usage[UsageType.HOUSEHOLD_MEMBERS].used == 1
        assert usage[UsageType.HOUSEHOLD_MEMBERS].limit == 3

    @pytest.mark.asyncio
    async def test_usage_history(self, uow, household, create_task):
        await create_task("Task 1", days=30)

        history = await HouseholdService(uow).get_usage_history(household.id, UsageType.TASKS, days=7)
        assert [row.current_value for row in history] == [1]

        stale = await HouseholdService(uow).get_usage_history(
            household.id, UsageType.TASKS, days=7, today=today_utc() + timedelta(days=30)
        )
        assert stale == []


class TestMemberQuota:
    @pytest.mark.asyncio
    async def test_free_plan_allows_three_members(self, uow, household):
        service = HouseholdService(uow)
        await service.add_member(household.id, HouseholdMemberCreate(user_id=uuid4()))
        await service.add_member(household.id, HouseholdMemberCreate(user_id=uuid4()))

        with pytest.raises(QuotaExceededError) as exc_info:
            await service.add_member(household.id, HouseholdMemberCreate(user_id=uuid4()))

        assert exc_info.value.usage_type == "household_members"
        assert len(await service.list_members(household.id)) == 3

    @pytest.mark.asyncio
    async def test_duplicate_membership_rejected(self, uow, household, owner_id):
        with pytest.raises(DuplicateError):
            await HouseholdService(uow).add_member(household.id, HouseholdMemberCreate(user_id=owner_id))

    @pytest.mark.asyncio
    async def test_removed_member_can_rejoin_as_new_row(self, uow, household):
        service = HouseholdService(uow)
        user_id = uuid4()
        first_membership = await service.add_member(
            household.id, HouseholdMemberCreate(user_id=user_id, role=HouseholdRole.DASHBOARD)
        )

        await service.remove_member(household.id, user_id)
        assert user_id not in [m.user_id for m in await service.list_members(household.id)]

        rejoined = await service.add_member(household.id, HouseholdMemberCreate(user_id=user_id))
        assert rejoined.id != first_membership.id
        assert rejoined.role == HouseholdRole.MEMBER

    @pytest.mark.asyncio
    async def test_new_household_starts_with_admin(self, uow):
        owner = uuid4()
        service = HouseholdService(uow)
        created = await service.create_household(HouseholdCreate(name="Birch Lane"), owner_user_id=owner)

        members = await service.list_members(created.id)

        assert [(m.user_id, m.role) for m in members] == [(owner, HouseholdRole.ADMIN)]
        assert created.plan_type_id == FREE_PLAN_ID
