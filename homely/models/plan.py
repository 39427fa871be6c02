"""
Subscription plan and usage models.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from homely.models.enums import UsageType


class PlanType(BaseModel):
    """Subscription plan. A null limit means unlimited."""

    id: int
    name: str
    description: Optional[str] = None
    max_household_members: Optional[int] = None
    max_tasks: Optional[int] = None
    price_monthly: Decimal = Decimal("0")
    price_yearly: Decimal = Decimal("0")
    is_active: bool = True

    class Config:
        from_attributes = True

    def limit_for(self, usage_type: UsageType) -> Optional[int]:
        """Maximum allowed count for a usage type, or None when unlimited."""
        if usage_type == UsageType.TASKS:
            return self.max_tasks
        if usage_type == UsageType.HOUSEHOLD_MEMBERS:
            return self.max_household_members
        return None


class PlanUsage(BaseModel):
    """Daily usage snapshot for one counter of one household."""

    id: UUID
    household_id: UUID
    usage_type: UsageType
    current_value: int = Field(0, ge=0)
    max_value: Optional[int] = None
    usage_date: date
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def is_limit_exceeded(self) -> bool:
        return self.max_value is not None and self.current_value >= self.max_value

    @property
    def usage_percentage(self) -> Optional[float]:
        if not self.max_value:
            return None
        return round(self.current_value / self.max_value * 100, 1)


class UsageSummary(BaseModel):
    """Used/limit pair reported by usage and statistics endpoints."""

    usage_type: UsageType
    used: int
    limit: Optional[int] = None
    percentage: Optional[float] = None
