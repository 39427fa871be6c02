"""
SQLAlchemy implementation of the event repository.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional
from uuid import UUID, uuid4

from sqlalchemy import case, update as sql_update

from homely.core.exceptions import NotFoundError
from homely.infrastructure.local.base_repository import SoftDeleteRepository
from homely.infrastructure.local.database import EventORM
from homely.interfaces.event_repository import IEventRepository
from homely.models.enums import PRIORITY_RANK, EventStatus, Priority
from homely.models.event import OPEN_STATUSES, Event, EventCreate, EventStateChange, EventUpdate
from homely.models.pagination import Page
from homely.utils.datetime_utils import now_utc

# Severity rank used as the secondary sort key
PRIORITY_ORDER = case(
    {priority.value: rank for priority, rank in PRIORITY_RANK.items()},
    value=EventORM.priority,
    else_=len(PRIORITY_RANK),
)

EVENT_ORDER = (
    EventORM.due_date.asc(),
    PRIORITY_ORDER.asc(),
    EventORM.created_at.asc(),
    EventORM.id.asc(),
)

_OPEN_STATUS_VALUES = [status.value for status in OPEN_STATUSES]


class SqlEventRepository(SoftDeleteRepository[EventORM], IEventRepository):
    """Events stored in the ``events`` table."""

    model = EventORM

    def _orm_to_model(self, orm: EventORM) -> Event:
        """Convert ORM object to Pydantic model."""
        return Event.model_validate(orm, from_attributes=True)

    def _scope(self, household_id: UUID) -> list:
        return [EventORM.household_id == str(household_id)]

    async def _list(self, household_id: UUID, *criteria) -> list[Event]:
        rows = await self._all(*self._scope(household_id), *criteria, order_by=EVENT_ORDER)
        return [self._orm_to_model(orm) for orm in rows]

    async def create(self, data: EventCreate, priority: Priority, created_by: UUID) -> Event:
        orm = EventORM(
            id=str(uuid4()),
            task_id=str(data.task_id) if data.task_id else None,
            household_id=str(data.household_id),
            assigned_to=str(data.assigned_to) if data.assigned_to else None,
            due_date=data.due_date,
            status=EventStatus.PENDING.value,
            priority=priority.value,
            notes=data.notes,
            created_by=str(created_by),
        )
        return self._orm_to_model(await self._add(orm))

    async def get(self, household_id: UUID, event_id: UUID) -> Optional[Event]:
        orm = await self._first(EventORM.id == str(event_id), *self._scope(household_id))
        return self._orm_to_model(orm) if orm else None

    async def update(self, household_id: UUID, event_id: UUID, update: EventUpdate) -> Event:
        orm = await self._first(EventORM.id == str(event_id), *self._scope(household_id))
        if not orm:
            raise NotFoundError(f"Event {event_id} not found")

        for field, value in update.model_dump(exclude_unset=True).items():
            if field == "priority" and value is not None:
                value = value.value
            elif field == "assigned_to" and value is not None:
                value = str(value)
            setattr(orm, field, value)
        orm.updated_at = now_utc()

        await self._session.flush()
        await self._session.refresh(orm)
        return self._orm_to_model(orm)

    async def transition(
        self,
        household_id: UUID,
        event_id: UUID,
        from_statuses: Iterable[EventStatus],
        change: EventStateChange,
    ) -> Optional[Event]:
        values = change.model_dump(exclude_unset=True)
        values["status"] = change.status.value
        values["updated_at"] = now_utc()

        # Compare-and-set on status: a concurrent transition makes this match zero rows
        result = await self._session.execute(
            sql_update(EventORM)
            .where(
                EventORM.id == str(event_id),
                *self._scope(household_id),
                *self._visible(),
                EventORM.status.in_([status.value for status in from_statuses]),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None

        orm = await self._first(EventORM.id == str(event_id), refresh=True)
        return self._orm_to_model(orm)

    async def delete(self, household_id: UUID, event_id: UUID) -> bool:
        orm = await self._first(EventORM.id == str(event_id), *self._scope(household_id))
        if not orm:
            return False
        await self._remove(orm)
        return True

    async def list_for_household(
        self,
        household_id: UUID,
        page: int = 1,
        page_size: int = 20,
        status: Optional[EventStatus] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Page[Event]:
        conditions = self._scope(household_id)
        if status is not None:
            conditions.append(EventORM.status == status.value)
        if start is not None:
            conditions.append(EventORM.due_date >= start)
        if end is not None:
            conditions.append(EventORM.due_date <= end)

        rows, total = await self._paginate(conditions, EVENT_ORDER, page, page_size)
        return Page[Event](
            items=[self._orm_to_model(orm) for orm in rows],
            total_count=total,
            page=page,
            page_size=page_size,
        )

    async def list_in_range(self, household_id: UUID, start: date, end: date) -> list[Event]:
        return await self._list(household_id, EventORM.due_date >= start, EventORM.due_date <= end)

    async def list_overdue(self, household_id: UUID, today: date) -> list[Event]:
        return await self._list(
            household_id,
            EventORM.status.in_(_OPEN_STATUS_VALUES),
            EventORM.due_date < today,
        )

    async def list_upcoming(self, household_id: UUID, until: date) -> list[Event]:
        return await self._list(
            household_id,
            EventORM.status.in_(_OPEN_STATUS_VALUES),
            EventORM.due_date <= until,
        )

    async def list_assigned(self, household_id: UUID, user_id: UUID) -> list[Event]:
        return await self._list(
            household_id,
            EventORM.assigned_to == str(user_id),
            EventORM.status.in_(_OPEN_STATUS_VALUES),
        )

    async def list_for_task(self, household_id: UUID, task_id: UUID) -> list[Event]:
        return await self._list(household_id, EventORM.task_id == str(task_id))

    async def count_for_household(
        self, household_id: UUID, statuses: Optional[Iterable[EventStatus]] = None
    ) -> int:
        conditions = self._scope(household_id)
        if statuses is not None:
            conditions.append(EventORM.status.in_([status.value for status in statuses]))
        return await self._count(*conditions)

    async def count_overdue(self, household_id: UUID, today: date) -> int:
        return await self._count(
            *self._scope(household_id),
            EventORM.status.in_(_OPEN_STATUS_VALUES),
            EventORM.due_date < today,
        )

    async def count_completed_between(self, household_id: UUID, start: date, end: date) -> int:
        return await self._count(
            *self._scope(household_id),
            EventORM.status == EventStatus.COMPLETED.value,
            EventORM.completion_date >= start,
            EventORM.completion_date <= end,
        )
