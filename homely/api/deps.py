"""
Dependency injection for API endpoints.

Every request gets its own unit of work; services are built on top of it.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Query, status
from pydantic import BaseModel

from homely.core.config import get_settings
from homely.infrastructure.local.database import get_session_factory
from homely.infrastructure.local.unit_of_work import SqlAlchemyUnitOfWork
from homely.interfaces.unit_of_work import IUnitOfWork
from homely.services.dashboard_service import DashboardService
from homely.services.event_service import EventLifecycleService
from homely.services.household_service import HouseholdService
from homely.services.task_service import TaskService


class User(BaseModel):
    """Calling user. Authentication happens upstream of this service."""

    id: UUID


# ===========================================
# Unit of Work & Services
# ===========================================


def get_unit_of_work() -> IUnitOfWork:
    """Get a fresh unit of work for the request."""
    settings = get_settings()
    return SqlAlchemyUnitOfWork(
        get_session_factory(),
        max_retries=settings.TRANSACTION_MAX_RETRIES,
        retry_delay=settings.TRANSACTION_RETRY_DELAY_SECONDS,
    )


UnitOfWork = Annotated[IUnitOfWork, Depends(get_unit_of_work)]


def get_event_service(uow: UnitOfWork) -> EventLifecycleService:
    return EventLifecycleService(uow)


def get_task_service(uow: UnitOfWork) -> TaskService:
    return TaskService(uow)


def get_household_service(uow: UnitOfWork) -> HouseholdService:
    return HouseholdService(uow)


def get_dashboard_service(uow: UnitOfWork) -> DashboardService:
    return DashboardService(uow)


# ===========================================
# User Identity
# ===========================================


async def get_current_user(
    x_user_id: Annotated[str | None, Header()] = None,
) -> User:
    """
    Get the calling user from the ``X-User-Id`` header.

    Falls back to the configured development user when the header is absent.
    """
    raw = x_user_id or get_settings().DEV_USER_ID
    try:
        return User(id=UUID(raw))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-Id must be a UUID",
        )


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

EventServiceDep = Annotated[EventLifecycleService, Depends(get_event_service)]
TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
HouseholdServiceDep = Annotated[HouseholdService, Depends(get_household_service)]
DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]
HouseholdId = Annotated[UUID, Query(description="Household that owns the resource")]
