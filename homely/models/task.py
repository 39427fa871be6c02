"""
Task template models.

A task template describes recurring (or one-off) household work; events are
its concrete occurrences.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, ValidationInfo, computed_field, field_validator

from homely.models.enums import Priority
from homely.models.interval import Interval


class TaskBase(BaseModel):
    """Base fields for task templates."""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    category_id: Optional[int] = None
    priority: Priority = Priority.MEDIUM
    notes: Optional[str] = Field(None, max_length=2000)
    assigned_to: Optional[UUID] = None


class TaskCreate(TaskBase):
    """Create a new task template."""

    household_id: UUID
    interval: Interval = Field(default_factory=Interval)
    first_due_date: Optional[date] = Field(
        None,
        description="Due date of the first event; recurring templates default to one interval from today",
    )


class TaskUpdate(BaseModel):
    """Update a task template. Interval changes apply from the next completion on."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    category_id: Optional[int] = None
    priority: Optional[Priority] = None
    notes: Optional[str] = Field(None, max_length=2000)
    assigned_to: Optional[UUID] = None
    is_active: Optional[bool] = None
    interval: Optional[Interval] = None

    @field_validator("name", "priority", "is_active")
    @classmethod
    def _reject_null(cls, value, info: ValidationInfo):
        # Omit a field to keep it; null only clears interval and optional text
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class Task(TaskBase):
    """Task template."""

    id: UUID
    household_id: UUID
    interval_years: Optional[int] = None
    interval_months: Optional[int] = None
    interval_weeks: Optional[int] = None
    interval_days: Optional[int] = None
    is_active: bool = True
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @computed_field
    @property
    def interval(self) -> Interval:
        return Interval(
            years=self.interval_years,
            months=self.interval_months,
            weeks=self.interval_weeks,
            days=self.interval_days,
        )

    @computed_field
    @property
    def is_recurring(self) -> bool:
        return self.interval.is_recurring
