"""
Household, membership and plan usage API endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from homely.api.deps import CurrentUser, HouseholdServiceDep
from homely.api.errors import to_http_exception
from homely.core.exceptions import HomelyError
from homely.models.enums import UsageType
from homely.models.household import (
    Household,
    HouseholdCreate,
    HouseholdMember,
    HouseholdMemberCreate,
    HouseholdMemberUpdate,
)
from homely.models.plan import PlanUsage, UsageSummary

router = APIRouter()


@router.post("", response_model=Household, status_code=status.HTTP_201_CREATED)
async def create_household(payload: HouseholdCreate, user: CurrentUser, service: HouseholdServiceDep):
    """Create a household owned by the calling user."""
    try:
        return await service.create_household(payload, owner_user_id=user.id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{household_id}", response_model=Household)
async def get_household(household_id: UUID, service: HouseholdServiceDep):
    try:
        return await service.get_household(household_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{household_id}/usage", response_model=list[UsageSummary])
async def get_usage(household_id: UUID, service: HouseholdServiceDep):
    """Current plan usage against limits."""
    try:
        return await service.get_usage(household_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{household_id}/usage/history", response_model=list[PlanUsage])
async def get_usage_history(
    household_id: UUID,
    service: HouseholdServiceDep,
    usage_type: UsageType = Query(UsageType.TASKS),
    days: int = Query(30, ge=1, le=365),
):
    """Daily usage snapshots."""
    try:
        return await service.get_usage_history(household_id, usage_type, days=days)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{household_id}/members", response_model=list[HouseholdMember])
async def list_members(household_id: UUID, service: HouseholdServiceDep):
    try:
        return await service.list_members(household_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.post(
    "/{household_id}/members",
    response_model=HouseholdMember,
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    household_id: UUID,
    payload: HouseholdMemberCreate,
    user: CurrentUser,
    service: HouseholdServiceDep,
):
    """Add a member, subject to the plan's member limit."""
    try:
        return await service.add_member(household_id, payload, invited_by=user.id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.patch("/{household_id}/members/{user_id}", response_model=HouseholdMember)
async def update_member_role(
    household_id: UUID,
    user_id: UUID,
    payload: HouseholdMemberUpdate,
    service: HouseholdServiceDep,
):
    try:
        return await service.update_member_role(household_id, user_id, payload)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{household_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(household_id: UUID, user_id: UUID, service: HouseholdServiceDep):
    """Remove a member (soft delete)."""
    try:
        await service.remove_member(household_id, user_id)
    except HomelyError as exc:
        raise to_http_exception(exc) from exc
