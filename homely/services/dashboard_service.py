"""
Dashboard read models: upcoming events and household statistics.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from homely.core.config import get_settings
from homely.core.exceptions import NotFoundError, ValidationError
from homely.interfaces.unit_of_work import IUnitOfWork
from homely.models.dashboard import (
    CategoryTaskCount,
    DashboardStatistics,
    UpcomingEventsResponse,
    UpcomingEventsSummary,
)
from homely.models.event import OPEN_STATUSES, EventRead
from homely.services.event_service import build_event_reads
from homely.services.plan_quota_service import PlanQuotaGuard
from homely.utils.datetime_utils import today_utc

WEEK_DAYS = 7


def summarize(events: list[EventRead], today: date) -> UpcomingEventsSummary:
    """Count overdue, due-today and due-this-week events."""
    week_end = today + timedelta(days=WEEK_DAYS)
    return UpcomingEventsSummary(
        overdue=sum(1 for event in events if event.due_date < today),
        today=sum(1 for event in events if event.due_date == today),
        this_week=sum(1 for event in events if today <= event.due_date <= week_end),
    )


class DashboardService:
    def __init__(self, uow: IUnitOfWork):
        self._uow = uow
        self._quota = PlanQuotaGuard(uow)

    async def _require_household(self, household_id: UUID) -> None:
        if not await self._uow.households.get(household_id):
            raise NotFoundError(f"Household {household_id} not found")

    async def get_upcoming_events(
        self, household_id: UUID, days: int = 7, today: Optional[date] = None
    ) -> UpcomingEventsResponse:
        windows = get_settings().UPCOMING_EVENT_WINDOWS
        if days not in windows:
            raise ValidationError(
                f"days must be one of {', '.join(str(window) for window in windows)}",
                field="days",
            )
        today = today or today_utc()

        async def operation() -> UpcomingEventsResponse:
            await self._require_household(household_id)
            events = await self._uow.events.list_upcoming(household_id, today + timedelta(days=days))
            reads = await build_event_reads(self._uow, household_id, events, today)
            return UpcomingEventsResponse(days=days, events=reads, summary=summarize(reads, today))

        return await self._uow.execute_in_transaction(operation)

    async def get_statistics(self, household_id: UUID, today: Optional[date] = None) -> DashboardStatistics:
        today = today or today_utc()
        month_start = today.replace(day=1)

        async def operation() -> DashboardStatistics:
            await self._require_household(household_id)
            events = self._uow.events
            return DashboardStatistics(
                pending_events=await events.count_for_household(household_id, OPEN_STATUSES),
                overdue_events=await events.count_overdue(household_id, today),
                completed_this_month=await events.count_completed_between(household_id, month_start, today),
                total_tasks=await self._uow.tasks.count_for_household(household_id),
                tasks_by_category=[
                    CategoryTaskCount(category_id=category_id, count=count)
                    for category_id, count in await self._uow.tasks.count_by_category(household_id)
                ],
                usage=await self._quota.get_usage(household_id),
            )

        return await self._uow.execute_in_transaction(operation)
