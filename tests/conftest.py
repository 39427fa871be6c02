"""
Shared test fixtures.

Each test gets its own SQLite database file so that separate units of work
use separate connections, as they do in production.
"""

from datetime import date
from uuid import uuid4

import pytest

from homely.infrastructure.local.database import Base, build_engine, get_session_factory, seed_plan_types
from homely.infrastructure.local.unit_of_work import SqlAlchemyUnitOfWork
from homely.models.household import HouseholdCreate
from homely.models.interval import Interval
from homely.models.task import TaskCreate
from homely.services.household_service import HouseholdService
from homely.services.task_service import TaskService

FAMILY_PLAN_ID = 3


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'homely_test.db'}", busy_timeout=5.0)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(engine):
    factory = get_session_factory(engine)
    async with factory() as session:
        await seed_plan_types(session)
        await session.commit()
    return factory


@pytest.fixture
def make_uow(session_factory):
    """Build independent units of work over the test database."""

    def factory(max_retries: int = 2) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory, max_retries=max_retries, retry_delay=0)

    return factory


@pytest.fixture
def uow(make_uow):
    return make_uow()


@pytest.fixture
def owner_id():
    return uuid4()


@pytest.fixture
async def household(uow, owner_id):
    """Household on the free plan (5 tasks, 3 members)."""
    service = HouseholdService(uow)
    return await service.create_household(HouseholdCreate(name="Maple Street"), owner_user_id=owner_id)


@pytest.fixture
async def other_household(uow):
    service = HouseholdService(uow)
    return await service.create_household(
        HouseholdCreate(name="Oak Avenue", plan_type_id=FAMILY_PLAN_ID), owner_user_id=uuid4()
    )


@pytest.fixture
def create_task(uow, household, owner_id):
    """Create a task template in ``household``."""

    async def factory(name: str = "Oil change", first_due_date: date | None = None, **interval):
        service = TaskService(uow)
        return await service.create_task(
            TaskCreate(
                household_id=household.id,
                name=name,
                interval=Interval(**interval),
                first_due_date=first_due_date,
            ),
            created_by=owner_id,
        )

    return factory
