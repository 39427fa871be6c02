"""
Event models.

An event is one concrete occurrence of a task template (or a one-off item)
with a due date and a lifecycle status.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from homely.models.enums import PRIORITY_RANK, EventStatus, Priority, UrgencyStatus

OPEN_STATUSES = frozenset({EventStatus.PENDING, EventStatus.POSTPONED})
TERMINAL_STATUSES = frozenset({EventStatus.COMPLETED, EventStatus.CANCELLED})

ONE_OFF_TASK_NAME = "One-off event"


class EventCreate(BaseModel):
    """Schedule an event manually."""

    household_id: UUID
    task_id: Optional[UUID] = None
    due_date: date
    assigned_to: Optional[UUID] = None
    priority: Optional[Priority] = Field(
        None, description="Defaults to the template's priority, or medium"
    )
    notes: Optional[str] = Field(None, max_length=2000)


class EventUpdate(BaseModel):
    """Editable event fields. Due date and status only change through transitions."""

    assigned_to: Optional[UUID] = None
    priority: Optional[Priority] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("priority")
    @classmethod
    def _reject_null_priority(cls, value: Optional[Priority]) -> Priority:
        if value is None:
            raise ValueError("priority cannot be null")
        return value


class EventStateChange(BaseModel):
    """Column values written by a lifecycle transition."""

    status: EventStatus
    due_date: Optional[date] = None
    completion_date: Optional[date] = None
    completion_notes: Optional[str] = None
    postponed_from_date: Optional[date] = None
    postpone_reason: Optional[str] = None
    notes: Optional[str] = None


class Event(BaseModel):
    """Event occurrence."""

    id: UUID
    household_id: UUID
    task_id: Optional[UUID] = None
    assigned_to: Optional[UUID] = None
    due_date: date
    status: EventStatus = EventStatus.PENDING
    priority: Priority = Priority.MEDIUM
    completion_date: Optional[date] = None
    completion_notes: Optional[str] = None
    postponed_from_date: Optional[date] = None
    postpone_reason: Optional[str] = None
    notes: Optional[str] = None
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EventRead(Event):
    """Event with fields derived from the caller's current date."""

    task_name: Optional[str] = None
    is_overdue: bool = False
    days_until_due: int = 0
    urgency_status: UrgencyStatus = UrgencyStatus.UPCOMING

    @classmethod
    def from_event(cls, event: Event, today: date, task_name: Optional[str] = None) -> "EventRead":
        return cls(
            **event.model_dump(),
            task_name=task_name,
            is_overdue=is_overdue(event, today),
            days_until_due=(event.due_date - today).days,
            urgency_status=urgency_status(event.due_date, today),
        )


def is_overdue(event: Event, today: date) -> bool:
    return event.status in OPEN_STATUSES and event.due_date < today


def urgency_status(due_date: date, today: date) -> UrgencyStatus:
    if due_date < today:
        return UrgencyStatus.OVERDUE
    if due_date == today:
        return UrgencyStatus.TODAY
    return UrgencyStatus.UPCOMING


def event_sort_key(event: Event) -> tuple:
    """Listing order: due date, then severity (high first), then creation time."""
    return (event.due_date, PRIORITY_RANK[event.priority], event.created_at, str(event.id))


class CompleteEventRequest(BaseModel):
    """Complete an event."""

    completion_date: Optional[date] = Field(None, description="Defaults to today (UTC)")
    notes: Optional[str] = Field(None, max_length=2000)


class PostponeEventRequest(BaseModel):
    """Move an event to a later due date."""

    new_due_date: date
    reason: str = Field(..., max_length=500)


class CancelEventRequest(BaseModel):
    """Cancel an event."""

    reason: str = Field(..., max_length=500)


class CompleteEventResult(BaseModel):
    """Outcome of a completion: the closed event and its successor, if any."""

    completed_event: Event
    next_event: Optional[Event] = None


class EventHistory(BaseModel):
    """Immutable record of a completion."""

    id: UUID
    event_id: Optional[UUID] = None
    task_id: Optional[UUID] = None
    household_id: UUID
    assigned_to: Optional[UUID] = None
    completed_by: UUID
    due_date: date
    completion_date: date
    task_name: str
    completion_notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class EventHistoryCreate(BaseModel):
    """Fields of a new history record."""

    event_id: UUID
    task_id: Optional[UUID] = None
    household_id: UUID
    assigned_to: Optional[UUID] = None
    completed_by: UUID
    due_date: date
    completion_date: date
    task_name: str = ONE_OFF_TASK_NAME
    completion_notes: Optional[str] = None
