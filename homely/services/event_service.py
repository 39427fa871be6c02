"""
Event lifecycle service.

Drives events through their states and schedules the next occurrence of a
recurring template when one is completed.

States:
    pending    initial state
    postponed  re-enterable; may be postponed again, completed or cancelled
    completed  terminal; a recurring template gets its next occurrence
    cancelled  terminal; nothing is scheduled
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from homely.core.config import get_settings
from homely.core.exceptions import InvalidStateTransitionError, NotFoundError, ValidationError
from homely.core.logger import setup_logger
from homely.interfaces.unit_of_work import IUnitOfWork
from homely.models.enums import EventStatus, Priority, UsageType
from homely.models.event import (
    ONE_OFF_TASK_NAME,
    OPEN_STATUSES,
    CancelEventRequest,
    CompleteEventRequest,
    CompleteEventResult,
    Event,
    EventCreate,
    EventHistory,
    EventHistoryCreate,
    EventRead,
    EventStateChange,
    EventUpdate,
    PostponeEventRequest,
)
from homely.models.pagination import Page, validate_page_request
from homely.services.plan_quota_service import PlanQuotaGuard
from homely.utils.datetime_utils import today_utc

logger = setup_logger(__name__)

CANCELLED_PREFIX = "[CANCELLED]"


def can_transition(current: EventStatus, target: EventStatus) -> bool:
    """Completed and cancelled are terminal; everything else may move to any other state."""
    return current in OPEN_STATUSES and target != EventStatus.PENDING


def cancellation_notes(reason: str, previous_notes: Optional[str]) -> str:
    notes = f"{CANCELLED_PREFIX} {reason}"
    if previous_notes:
        notes += f"\n\nPrevious notes:\n{previous_notes}"
    return notes


async def build_event_reads(
    uow: IUnitOfWork, household_id: UUID, events: list[Event], today: date
) -> list[EventRead]:
    """Attach template names and date-derived fields to events."""
    task_ids = list({event.task_id for event in events if event.task_id})
    names = await uow.tasks.get_names(household_id, task_ids)
    return [
        EventRead.from_event(
            event,
            today,
            task_name=names.get(event.task_id) if event.task_id else ONE_OFF_TASK_NAME,
        )
        for event in events
    ]


class EventLifecycleService:
    """Event operations, each executed as one unit of work."""

    def __init__(self, uow: IUnitOfWork):
        self._uow = uow
        self._quota = PlanQuotaGuard(uow)

    async def _get_or_raise(self, household_id: UUID, event_id: UUID) -> Event:
        event = await self._uow.events.get(household_id, event_id)
        if not event:
            raise NotFoundError(f"Event {event_id} not found")
        return event

    async def _apply_transition(
        self,
        event: Event,
        action: str,
        change: EventStateChange,
    ) -> Event:
        if not can_transition(event.status, change.status):
            raise InvalidStateTransitionError(event.id, event.status.value, action)

        updated = await self._uow.events.transition(event.household_id, event.id, OPEN_STATUSES, change)
        if updated is None:
            # Lost the race against another transition of the same event
            current = await self._get_or_raise(event.household_id, event.id)
            raise InvalidStateTransitionError(event.id, current.status.value, action)
        return updated

    async def _to_read(self, household_id: UUID, events: list[Event], today: date) -> list[EventRead]:
        return await build_event_reads(self._uow, household_id, events, today)

    async def add_event(self, data: EventCreate, priority: Priority, created_by: UUID) -> Event:
        """Insert an event and count it. Must run inside an active unit of work."""
        await self._quota.ensure_can_create(data.household_id, UsageType.EVENTS)
        event = await self._uow.events.create(data, priority, created_by)
        await self._quota.record_usage(data.household_id, UsageType.EVENTS, +1)
        return event

    # ===========================================
    # Transitions
    # ===========================================

    async def complete(
        self,
        household_id: UUID,
        event_id: UUID,
        request: CompleteEventRequest,
        completed_by: UUID,
    ) -> CompleteEventResult:
        """
        Complete an event, record it in history and schedule the next occurrence.

        The successor is due one template interval after the completion date
        (not the due date), inherits task, household, assignee and priority,
        and is created by the completing user. One-off templates and events
        without a template get no successor.

        Raises:
            NotFoundError: event absent, deleted or in another household
            InvalidStateTransitionError: event already completed or cancelled
        """

        async def operation() -> CompleteEventResult:
            event = await self._get_or_raise(household_id, event_id)
            completion_date = request.completion_date or today_utc()
            completed = await self._apply_transition(
                event,
                "complete",
                EventStateChange(
                    status=EventStatus.COMPLETED,
                    completion_date=completion_date,
                    completion_notes=request.notes,
                ),
            )

            task = await self._uow.tasks.get(household_id, event.task_id) if event.task_id else None
            await self._uow.history.create(
                EventHistoryCreate(
                    event_id=event.id,
                    task_id=event.task_id,
                    household_id=household_id,
                    assigned_to=event.assigned_to,
                    completed_by=completed_by,
                    due_date=event.due_date,
                    completion_date=completion_date,
                    task_name=task.name if task else ONE_OFF_TASK_NAME,
                    completion_notes=request.notes,
                )
            )

            next_event = None
            if task and task.interval.is_recurring:
                next_event = await self.add_event(
                    EventCreate(
                        household_id=household_id,
                        task_id=task.id,
                        due_date=task.interval.next_date(completion_date),
                        assigned_to=event.assigned_to,
                    ),
                    priority=event.priority,
                    created_by=completed_by,
                )

            logger.info(
                "Event %s completed on %s; next occurrence %s",
                event_id,
                completion_date,
                next_event.due_date if next_event else "none",
            )
            return CompleteEventResult(completed_event=completed, next_event=next_event)

        return await self._uow.execute_in_transaction(operation)

    async def postpone(
        self,
        household_id: UUID,
        event_id: UUID,
        request: PostponeEventRequest,
        today: Optional[date] = None,
    ) -> Event:
        """
        Move an open event to a later due date.

        The new date must fall after both today and the current due date.
        ``postponed_from_date`` keeps the due date the event had before its
        first postponement, so repeated postponements never lose it.
        """
        reason = request.reason.strip()
        if not reason:
            raise ValidationError("A reason is required to postpone an event", field="reason")
        today = today or today_utc()

        async def operation() -> Event:
            event = await self._get_or_raise(household_id, event_id)
            if event.status in OPEN_STATUSES:
                if request.new_due_date <= today:
                    raise ValidationError("New due date must be in the future", field="new_due_date")
                if request.new_due_date <= event.due_date:
                    raise ValidationError(
                        f"New due date must be after the current due date {event.due_date}",
                        field="new_due_date",
                    )
            postponed = await self._apply_transition(
                event,
                "postpone",
                EventStateChange(
                    status=EventStatus.POSTPONED,
                    due_date=request.new_due_date,
                    postponed_from_date=event.postponed_from_date or event.due_date,
                    postpone_reason=reason,
                ),
            )
            logger.info("Event %s postponed from %s to %s", event_id, event.due_date, request.new_due_date)
            return postponed

        return await self._uow.execute_in_transaction(operation)

    async def cancel(self, household_id: UUID, event_id: UUID, request: CancelEventRequest) -> Event:
        """Cancel an open event. No successor is scheduled."""
        reason = request.reason.strip()
        if not reason:
            raise ValidationError("A reason is required to cancel an event", field="reason")

        async def operation() -> Event:
            event = await self._get_or_raise(household_id, event_id)
            cancelled = await self._apply_transition(
                event,
                "cancel",
                EventStateChange(
                    status=EventStatus.CANCELLED,
                    notes=cancellation_notes(reason, event.notes),
                ),
            )
            logger.info("Event %s cancelled", event_id)
            return cancelled

        return await self._uow.execute_in_transaction(operation)

    # ===========================================
    # CRUD
    # ===========================================

    async def create_event(self, data: EventCreate, created_by: UUID) -> Event:
        """Schedule an event by hand. Priority defaults to the template's."""

        async def operation() -> Event:
            priority = data.priority
            if data.task_id:
                task = await self._uow.tasks.get(data.household_id, data.task_id)
                if not task:
                    raise NotFoundError(f"Task {data.task_id} not found")
                priority = priority or task.priority
            return await self.add_event(data, priority or Priority.MEDIUM, created_by)

        return await self._uow.execute_in_transaction(operation)

    async def get_event(
        self, household_id: UUID, event_id: UUID, today: Optional[date] = None
    ) -> EventRead:
        async def operation() -> EventRead:
            event = await self._get_or_raise(household_id, event_id)
            return (await self._to_read(household_id, [event], today or today_utc()))[0]

        return await self._uow.execute_in_transaction(operation)

    async def update_event(self, household_id: UUID, event_id: UUID, update: EventUpdate) -> Event:
        async def operation() -> Event:
            return await self._uow.events.update(household_id, event_id, update)

        return await self._uow.execute_in_transaction(operation)

    async def delete_event(self, household_id: UUID, event_id: UUID) -> None:
        async def operation() -> None:
            if not await self._uow.events.delete(household_id, event_id):
                raise NotFoundError(f"Event {event_id} not found")
            await self._quota.record_usage(household_id, UsageType.EVENTS, -1)

        await self._uow.execute_in_transaction(operation)
        logger.info("Event %s deleted", event_id)

    # ===========================================
    # Queries
    # ===========================================

    async def list_events(
        self,
        household_id: UUID,
        page: int = 1,
        page_size: Optional[int] = None,
        status: Optional[EventStatus] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        today: Optional[date] = None,
    ) -> Page[EventRead]:
        settings = get_settings()
        page_size = page_size or settings.DEFAULT_PAGE_SIZE
        validate_page_request(page, page_size, settings.MAX_PAGE_SIZE)
        if start and end and start > end:
            raise ValidationError("start must not be after end", field="start")

        async def operation() -> Page[EventRead]:
            result = await self._uow.events.list_for_household(
                household_id, page=page, page_size=page_size, status=status, start=start, end=end
            )
            items = await self._to_read(household_id, result.items, today or today_utc())
            return Page[EventRead](
                items=items,
                total_count=result.total_count,
                page=result.page,
                page_size=result.page_size,
            )

        return await self._uow.execute_in_transaction(operation)

    async def list_events_in_range(
        self, household_id: UUID, start: date, end: date, today: Optional[date] = None
    ) -> list[EventRead]:
        if start > end:
            raise ValidationError("start must not be after end", field="start")

        async def operation() -> list[EventRead]:
            events = await self._uow.events.list_in_range(household_id, start, end)
            return await self._to_read(household_id, events, today or today_utc())

        return await self._uow.execute_in_transaction(operation)

    async def list_overdue_events(self, household_id: UUID, today: Optional[date] = None) -> list[EventRead]:
        today = today or today_utc()

        async def operation() -> list[EventRead]:
            events = await self._uow.events.list_overdue(household_id, today)
            return await self._to_read(household_id, events, today)

        return await self._uow.execute_in_transaction(operation)

    async def list_upcoming_events(
        self, household_id: UUID, days: int, today: Optional[date] = None
    ) -> list[EventRead]:
        """Open events due within ``days`` from today, overdue ones first."""
        if days < 0:
            raise ValidationError("days must not be negative", field="days")
        today = today or today_utc()

        async def operation() -> list[EventRead]:
            events = await self._uow.events.list_upcoming(household_id, today + timedelta(days=days))
            return await self._to_read(household_id, events, today)

        return await self._uow.execute_in_transaction(operation)

    async def list_assigned_events(
        self, household_id: UUID, user_id: UUID, today: Optional[date] = None
    ) -> list[EventRead]:
        async def operation() -> list[EventRead]:
            events = await self._uow.events.list_assigned(household_id, user_id)
            return await self._to_read(household_id, events, today or today_utc())

        return await self._uow.execute_in_transaction(operation)

    async def list_history(
        self, household_id: UUID, page: int = 1, page_size: Optional[int] = None
    ) -> Page[EventHistory]:
        settings = get_settings()
        page_size = page_size or settings.DEFAULT_PAGE_SIZE
        validate_page_request(page, page_size, settings.MAX_PAGE_SIZE)

        async def operation() -> Page[EventHistory]:
            return await self._uow.history.list_for_household(household_id, page=page, page_size=page_size)

        return await self._uow.execute_in_transaction(operation)
