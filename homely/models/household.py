"""
Household and membership models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from homely.models.enums import HouseholdRole, SubscriptionStatus


class HouseholdCreate(BaseModel):
    """Create a new household."""

    name: str = Field(..., min_length=1, max_length=100)
    plan_type_id: Optional[int] = None


class Household(BaseModel):
    """Household (tenant)."""

    id: UUID
    name: str
    plan_type_id: int
    subscription_status: SubscriptionStatus = SubscriptionStatus.FREE
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class HouseholdMemberCreate(BaseModel):
    """Add a user to a household."""

    user_id: UUID
    role: HouseholdRole = HouseholdRole.MEMBER


class HouseholdMemberUpdate(BaseModel):
    """Change a member's role."""

    role: HouseholdRole


class HouseholdMember(BaseModel):
    """Household membership."""

    id: UUID
    household_id: UUID
    user_id: UUID
    role: HouseholdRole
    invited_by: Optional[UUID] = None
    invitation_token: Optional[str] = None
    invitation_expires_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
