"""
Task template API endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from homely.api.deps import CurrentUser, HouseholdId, TaskServiceDep
from homely.api.errors import to_http_exception
from homely.core.exceptions import HomelyError
from homely.models.event import Event
from homely.models.pagination import Page
from homely.models.task import Task, TaskCreate, TaskUpdate

router = APIRouter()


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(payload: TaskCreate, user: CurrentUser, service: TaskServiceDep):
    """Create a task template and schedule its first event."""
    try:
        return await service.create_task(payload, created_by=user.id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("", response_model=Page[Task])
async def list_tasks(
    household_id: HouseholdId,
    service: TaskServiceDep,
    active_only: bool = Query(False),
    recurring: Optional[bool] = Query(None, description="True for recurring, False for one-off"),
    category_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
):
    """List task templates, newest first."""
    try:
        return await service.list_tasks(
            household_id,
            page=page,
            page_size=page_size,
            active_only=active_only,
            recurring=recurring,
            category_id=category_id,
        )
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: UUID, household_id: HouseholdId, service: TaskServiceDep):
    """Get a task template."""
    try:
        return await service.get_task(household_id, task_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{task_id}/events", response_model=list[Event])
async def list_task_events(task_id: UUID, household_id: HouseholdId, service: TaskServiceDep):
    """Events generated from a template."""
    try:
        return await service.list_task_events(household_id, task_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    household_id: HouseholdId,
    service: TaskServiceDep,
):
    """Update a task template."""
    try:
        return await service.update_task(household_id, task_id, payload)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: UUID, household_id: HouseholdId, service: TaskServiceDep):
    """Delete a task template (soft delete)."""
    try:
        await service.delete_task(household_id, task_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc
