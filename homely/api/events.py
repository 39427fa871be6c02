"""
Event API endpoints.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from homely.api.deps import CurrentUser, EventServiceDep, HouseholdId
from homely.api.errors import to_http_exception
from homely.core.exceptions import HomelyError
from homely.models.enums import EventStatus
from homely.models.event import (
    CancelEventRequest,
    CompleteEventRequest,
    CompleteEventResult,
    Event,
    EventCreate,
    EventHistory,
    EventRead,
    EventUpdate,
    PostponeEventRequest,
)
from homely.models.pagination import Page

router = APIRouter()


@router.post("", response_model=Event, status_code=status.HTTP_201_CREATED)
async def create_event(payload: EventCreate, user: CurrentUser, service: EventServiceDep):
    """Schedule an event manually."""
    try:
        return await service.create_event(payload, created_by=user.id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("", response_model=Page[EventRead])
async def list_events(
    household_id: HouseholdId,
    service: EventServiceDep,
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    start: Optional[date] = Query(None, description="Earliest due date"),
    end: Optional[date] = Query(None, description="Latest due date"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
):
    """List events of a household ordered by due date, then priority."""
    try:
        return await service.list_events(
            household_id,
            page=page,
            page_size=page_size,
            status=status_filter,
            start=start,
            end=end,
        )
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/overdue", response_model=list[EventRead])
async def list_overdue_events(household_id: HouseholdId, service: EventServiceDep):
    """Open events whose due date has passed."""
    try:
        return await service.list_overdue_events(household_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/upcoming", response_model=list[EventRead])
async def list_upcoming_events(
    household_id: HouseholdId,
    service: EventServiceDep,
    days: int = Query(7, ge=0, le=366),
):
    """Open events due within ``days``, overdue ones included."""
    try:
        return await service.list_upcoming_events(household_id, days)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/range", response_model=list[EventRead])
async def list_events_in_range(
    household_id: HouseholdId,
    service: EventServiceDep,
    start: date = Query(...),
    end: date = Query(...),
):
    """Events due between two dates inclusive, any status."""
    try:
        return await service.list_events_in_range(household_id, start, end)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/assigned", response_model=list[EventRead])
async def list_assigned_events(
    household_id: HouseholdId,
    user: CurrentUser,
    service: EventServiceDep,
    user_id: Optional[UUID] = Query(None, description="Defaults to the calling user"),
):
    """Open events assigned to a user."""
    try:
        return await service.list_assigned_events(household_id, user_id or user.id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/history", response_model=Page[EventHistory])
async def list_event_history(
    household_id: HouseholdId,
    service: EventServiceDep,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
):
    """Completion history, most recent first."""
    try:
        return await service.list_history(household_id, page=page, page_size=page_size)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{event_id}", response_model=EventRead)
async def get_event(event_id: UUID, household_id: HouseholdId, service: EventServiceDep):
    """Get an event."""
    try:
        return await service.get_event(household_id, event_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.patch("/{event_id}", response_model=Event)
async def update_event(
    event_id: UUID,
    payload: EventUpdate,
    household_id: HouseholdId,
    service: EventServiceDep,
):
    """Update assignee, priority or notes of an event."""
    try:
        return await service.update_event(household_id, event_id, payload)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(event_id: UUID, household_id: HouseholdId, service: EventServiceDep):
    """Delete an event (soft delete)."""
    try:
        await service.delete_event(household_id, event_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{event_id}/complete", response_model=CompleteEventResult)
async def complete_event(
    event_id: UUID,
    household_id: HouseholdId,
    user: CurrentUser,
    service: EventServiceDep,
    payload: Optional[CompleteEventRequest] = None,
):
    """Complete an event and schedule the next occurrence of its template."""
    try:
        return await service.complete(
            household_id,
            event_id,
            payload or CompleteEventRequest(),
            completed_by=user.id,
        )
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{event_id}/postpone", response_model=Event)
async def postpone_event(
    event_id: UUID,
    payload: PostponeEventRequest,
    household_id: HouseholdId,
    service: EventServiceDep,
):
    """Move an event to a later due date."""
    try:
        return await service.postpone(household_id, event_id, payload)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{event_id}/cancel", response_model=Event)
async def cancel_event(
    event_id: UUID,
    payload: CancelEventRequest,
    household_id: HouseholdId,
    service: EventServiceDep,
):
    """Cancel an event."""
    try:
        return await service.cancel(household_id, event_id, payload)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc
