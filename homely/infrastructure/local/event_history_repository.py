"""
SQLAlchemy implementation of the event history repository.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from homely.infrastructure.local.base_repository import SqlRepository
from homely.infrastructure.local.database import EventHistoryORM
from homely.interfaces.event_history_repository import IEventHistoryRepository
from homely.models.event import EventHistory, EventHistoryCreate
from homely.models.pagination import Page

_HISTORY_ORDER = (
    EventHistoryORM.completion_date.desc(),
    EventHistoryORM.created_at.desc(),
    EventHistoryORM.id,
)


class SqlEventHistoryRepository(SqlRepository[EventHistoryORM], IEventHistoryRepository):
    """Completion records stored in the ``events_history`` table."""

    model = EventHistoryORM

    def _orm_to_model(self, orm: EventHistoryORM) -> EventHistory:
        return EventHistory.model_validate(orm, from_attributes=True)

    async def create(self, data: EventHistoryCreate) -> EventHistory:
        orm = EventHistoryORM(
            id=str(uuid4()),
            event_id=str(data.event_id),
            task_id=str(data.task_id) if data.task_id else None,
            household_id=str(data.household_id),
            assigned_to=str(data.assigned_to) if data.assigned_to else None,
            completed_by=str(data.completed_by),
            due_date=data.due_date,
            completion_date=data.completion_date,
            task_name=data.task_name,
            completion_notes=data.completion_notes,
        )
        return self._orm_to_model(await self._add(orm))

    async def list_for_household(
        self, household_id: UUID, page: int = 1, page_size: int = 20
    ) -> Page[EventHistory]:
        rows, total = await self._paginate(
            [EventHistoryORM.household_id == str(household_id)],
            _HISTORY_ORDER,
            page,
            page_size,
        )
        return Page[EventHistory](
            items=[self._orm_to_model(orm) for orm in rows],
            total_count=total,
            page=page,
            page_size=page_size,
        )
