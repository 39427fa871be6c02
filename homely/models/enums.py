"""
Enum definitions for the application.

These enums are used across models and persisted by value.
"""

from enum import Enum


class EventStatus(str, Enum):
    """Event lifecycle status."""

    PENDING = "pending"
    COMPLETED = "completed"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"


class Priority(str, Enum):
    """Priority of a task template or event."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Lower rank sorts first
PRIORITY_RANK = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
}


class UrgencyStatus(str, Enum):
    """Due-date urgency relative to today."""

    OVERDUE = "overdue"
    TODAY = "today"
    UPCOMING = "upcoming"


class HouseholdRole(str, Enum):
    """Role of a member within a household."""

    ADMIN = "admin"
    MEMBER = "member"
    DASHBOARD = "dashboard"


class SubscriptionStatus(str, Enum):
    """Household subscription status."""

    FREE = "free"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class UsageType(str, Enum):
    """Plan usage counters."""

    TASKS = "tasks"
    HOUSEHOLD_MEMBERS = "household_members"
    EVENTS = "events"
