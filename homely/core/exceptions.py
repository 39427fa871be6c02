"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class HomelyError(Exception):
    """Base exception for homely."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(HomelyError):
    """Resource not found (absent, soft-deleted, or owned by another household)."""

    pass


class DuplicateError(HomelyError):
    """Duplicate resource detected."""

    pass


class ValidationError(HomelyError):
    """Validation error.

    ``details`` maps field names to messages.
    """

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Any] = None):
        if details is None and field is not None:
            details = {field: message}
        super().__init__(message, details=details)
        self.field = field


class QuotaExceededError(HomelyError):
    """Household plan limit reached."""

    def __init__(self, usage_type: str, limit: int):
        super().__init__(
            f"Plan limit reached for {usage_type}: maximum is {limit}",
            details={"usage_type": usage_type, "limit": limit},
        )
        self.usage_type = usage_type
        self.limit = limit


class InvalidStateTransitionError(HomelyError):
    """Event transition not allowed from its current status."""

    def __init__(self, event_id: Any, current_status: str, action: str):
        super().__init__(
            f"Cannot {action} event {event_id} in status '{current_status}'",
            details={"event_id": str(event_id), "status": current_status, "action": action},
        )
        self.current_status = current_status
        self.action = action


class InfrastructureError(HomelyError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass


class TransientStorageError(InfrastructureError):
    """Storage kept failing with retryable errors for every allowed attempt."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message, details={"attempts": attempts})
        self.attempts = attempts
