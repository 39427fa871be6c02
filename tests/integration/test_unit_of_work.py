"""
Integration tests for transaction boundaries and transient-failure retries.
"""

import asyncio
from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from homely.core.exceptions import InfrastructureError, TransientStorageError
from homely.infrastructure.local.database import EventORM, TaskORM
from homely.models.event import EventCreate
from homely.models.task import TaskCreate
from homely.services.event_service import EventLifecycleService
from homely.services.plan_quota_service import PlanQuotaGuard


def locked_error() -> OperationalError:
    return OperationalError("UPDATE plan_usage", {}, Exception("database is locked"))


def integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO tasks", {}, Exception(message))


async def count_rows(session_factory, orm) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(orm))).scalar_one()


class TestTransactionBoundaries:
    @pytest.mark.asyncio
    async def test_begin_twice_is_rejected(self, uow):
        await uow.begin()
        try:
            with pytest.raises(InfrastructureError):
                await uow.begin()
        finally:
            await uow.rollback()

    @pytest.mark.asyncio
    async def test_commit_without_transaction_is_rejected(self, uow):
        with pytest.raises(InfrastructureError):
            await uow.commit()

    @pytest.mark.asyncio
    async def test_rollback_discards_writes(self, uow, household, session_factory):
        await uow.begin()
        await uow.tasks.create(TaskCreate(household_id=household.id, name="Draft"), uuid4())
        await uow.rollback()

        assert await count_rows(session_factory, TaskORM) == 0

    @pytest.mark.asyncio
    async def test_context_manager_commits(self, uow, household, session_factory):
        async with uow:
            await uow.tasks.create(TaskCreate(household_id=household.id, name="Kept"), uuid4())

        assert await count_rows(session_factory, TaskORM) == 1

    @pytest.mark.asyncio
    async def test_failure_mid_operation_undoes_earlier_writes(
        self, uow, household, owner_id, session_factory, monkeypatch
    ):
        async def failing_record_usage(self, *args, **kwargs):
            raise RuntimeError("usage write failed")

        monkeypatch.setattr(PlanQuotaGuard, "record_usage", failing_record_usage)

        with pytest.raises(RuntimeError):
            await EventLifecycleService(uow).create_event(
                EventCreate(household_id=household.id, due_date=date(2025, 6, 1)), created_by=owner_id
            )

        assert await count_rows(session_factory, EventORM) == 0
        assert not uow.is_active

    @pytest.mark.asyncio
    async def test_cancellation_rolls_back(self, uow, household, session_factory):
        async def operation():
            await uow.tasks.create(TaskCreate(household_id=household.id, name="Abandoned"), uuid4())
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await uow.execute_in_transaction(operation)

        assert await count_rows(session_factory, TaskORM) == 0
        assert not uow.is_active


class TestRetries:
    @pytest.mark.asyncio
    async def test_transient_failure_retries_whole_unit(self, uow, household, session_factory):
        attempts = []

        async def operation():
            attempts.append(1)
            await uow.tasks.create(TaskCreate(household_id=household.id, name="Retried"), uuid4())
            if len(attempts) == 1:
                raise locked_error()
            return "ok"

        assert await uow.execute_in_transaction(operation) == "ok"
        assert len(attempts) == 2
        # The first attempt's insert was rolled back
        assert await count_rows(session_factory, TaskORM) == 1

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_without_side_effects(self, make_uow, household, session_factory):
        uow = make_uow(max_retries=2)
        attempts = []

        async def operation():
            attempts.append(1)
            await uow.tasks.create(TaskCreate(household_id=household.id, name="Doomed"), uuid4())
            raise locked_error()

        with pytest.raises(TransientStorageError) as exc_info:
            await uow.execute_in_transaction(operation)

        assert exc_info.value.attempts == 3
        assert len(attempts) == 3
        assert await count_rows(session_factory, TaskORM) == 0

    @pytest.mark.asyncio
    async def test_non_transient_errors_are_not_retried(self, uow):
        attempts = []

        async def operation():
            attempts.append(1)
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            await uow.execute_in_transaction(operation)

        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_unique_violation_is_retried(self, uow):
        attempts = []

        async def operation():
            attempts.append(1)
            if len(attempts) == 1:
                raise integrity_error("UNIQUE constraint failed: plan_usage.household_id")
            return "ok"

        assert await uow.execute_in_transaction(operation) == "ok"
        assert len(attempts) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "message",
        [
            "NOT NULL constraint failed: tasks.name",
            "CHECK constraint failed: ck_tasks_days",
            "FOREIGN KEY constraint failed",
        ],
    )
    async def test_other_integrity_errors_propagate_without_retry(self, uow, message):
        attempts = []

        async def operation():
            attempts.append(1)
            raise integrity_error(message)

        with pytest.raises(IntegrityError):
            await uow.execute_in_transaction(operation)

        assert len(attempts) == 1
        assert not uow.is_active
