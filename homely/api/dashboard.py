"""
Dashboard API endpoints.
"""

from fastapi import APIRouter, Query

from homely.api.deps import DashboardServiceDep, HouseholdId
from homely.api.errors import to_http_exception
from homely.core.exceptions import HomelyError
from homely.models.dashboard import DashboardStatistics, UpcomingEventsResponse

router = APIRouter()


@router.get("/upcoming-events", response_model=UpcomingEventsResponse)
async def get_upcoming_events(
    household_id: HouseholdId,
    service: DashboardServiceDep,
    days: int = Query(7, description="Window in days: 7, 14 or 30"),
):
    """Open events due within the window, with overdue/today/this-week counts."""
    try:
        return await service.get_upcoming_events(household_id, days)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/statistics", response_model=DashboardStatistics)
async def get_statistics(household_id: HouseholdId, service: DashboardServiceDep):
    try:
        return await service.get_statistics(household_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc
