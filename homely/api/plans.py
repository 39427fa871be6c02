"""
Subscription plan API endpoints.
"""

from fastapi import APIRouter

from homely.api.deps import HouseholdServiceDep
from homely.api.errors import to_http_exception
from homely.core.exceptions import HomelyError
from homely.models.plan import PlanType

router = APIRouter()


@router.get("", response_model=list[PlanType])
async def list_plans(service: HouseholdServiceDep):
    """Available subscription plans."""
    try:
        return await service.list_plans()
    except HomelyError as exc:
        raise to_http_exception(exc) from exc
