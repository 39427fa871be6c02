"""
Dashboard read models.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel

from homely.models.event import EventRead
from homely.models.plan import UsageSummary


class UpcomingEventsSummary(BaseModel):
    overdue: int = 0
    today: int = 0
    this_week: int = 0


class UpcomingEventsResponse(BaseModel):
    """Open events due within the requested window, overdue ones included."""

    days: int
    events: List[EventRead]
    summary: UpcomingEventsSummary


class CategoryTaskCount(BaseModel):
    category_id: int | None
    count: int


class DashboardStatistics(BaseModel):
    """Household totals for the dashboard header."""

    pending_events: int = 0
    overdue_events: int = 0
    completed_this_month: int = 0
    total_tasks: int = 0
    tasks_by_category: List[CategoryTaskCount] = []
    usage: List[UsageSummary] = []
