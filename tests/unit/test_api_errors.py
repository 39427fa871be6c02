"""
Unit tests for domain error translation and route error handling.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import HTTPException

from homely.api.errors import to_http_exception
from homely.api.events import cancel_event, complete_event, get_event, postpone_event
from homely.api.tasks import create_task
from homely.core.exceptions import (
    DuplicateError,
    HomelyError,
    InfrastructureError,
    InvalidStateTransitionError,
    NotFoundError,
    QuotaExceededError,
    TransientStorageError,
    ValidationError,
)
from homely.models.event import CancelEventRequest, CompleteEventRequest, PostponeEventRequest
from homely.models.task import TaskCreate


@pytest.mark.parametrize(
    "error, status_code",
    [
        (NotFoundError("Event missing"), 404),
        (ValidationError("reason required", field="reason"), 400),
        (QuotaExceededError("tasks", 5), 400),
        (InvalidStateTransitionError(uuid4(), "completed", "complete"), 409),
        (DuplicateError("already a member"), 409),
        (TransientStorageError("unavailable", attempts=4), 503),
        (InfrastructureError("boom"), 500),
        (HomelyError("generic"), 500),
    ],
)
def test_status_codes(error, status_code):
    assert to_http_exception(error).status_code == status_code


def test_validation_detail_carries_field_errors():
    exc = to_http_exception(ValidationError("A reason is required", field="reason"))
    assert exc.detail == {
        "message": "A reason is required",
        "errors": {"reason": "A reason is required"},
    }


def test_quota_detail_names_limit():
    exc = to_http_exception(QuotaExceededError("tasks", 5))
    assert exc.detail["message"] == "Plan limit reached for tasks: maximum is 5"
    assert exc.detail["errors"] == {"usage_type": "tasks", "limit": 5}


@pytest.mark.asyncio
async def test_complete_event_returns_conflict_for_terminal_event():
    service = AsyncMock()
    event_id = uuid4()
    service.complete.side_effect = InvalidStateTransitionError(event_id, "cancelled", "complete")

    with pytest.raises(HTTPException) as exc_info:
        await complete_event(
            event_id=event_id,
            household_id=uuid4(),
            user=SimpleNamespace(id=uuid4()),
            service=service,
            payload=CompleteEventRequest(),
        )

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_complete_event_without_body_uses_defaults():
    service = AsyncMock()
    user = SimpleNamespace(id=uuid4())
    household_id = uuid4()
    event_id = uuid4()

    await complete_event(event_id=event_id, household_id=household_id, user=user, service=service, payload=None)

    service.complete.assert_awaited_once_with(
        household_id, event_id, CompleteEventRequest(), completed_by=user.id
    )


@pytest.mark.asyncio
async def test_postpone_event_returns_bad_request_for_blank_reason():
    service = AsyncMock()
    service.postpone.side_effect = ValidationError("A reason is required", field="reason")

    with pytest.raises(HTTPException) as exc_info:
        await postpone_event(
            event_id=uuid4(),
            payload=PostponeEventRequest(new_due_date="2025-03-15", reason="  "),
            household_id=uuid4(),
            service=service,
        )

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_cancel_missing_event_returns_not_found():
    service = AsyncMock()
    service.cancel.side_effect = NotFoundError("Event not found")

    with pytest.raises(HTTPException) as exc_info:
        await cancel_event(
            event_id=uuid4(),
            payload=CancelEventRequest(reason="moved out"),
            household_id=uuid4(),
            service=service,
        )

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_get_event_passes_household_scope():
    service = AsyncMock()
    household_id = uuid4()
    event_id = uuid4()

    await get_event(event_id=event_id, household_id=household_id, service=service)

    service.get_event.assert_awaited_once_with(household_id, event_id)


@pytest.mark.asyncio
async def test_create_task_quota_exceeded_is_bad_request():
    service = AsyncMock()
    service.create_task.side_effect = QuotaExceededError("tasks", 5)

    with pytest.raises(HTTPException) as exc_info:
        await create_task(
            payload=TaskCreate(household_id=uuid4(), name="Gutter cleaning"),
            user=SimpleNamespace(id=uuid4()),
            service=service,
        )

    assert exc_info.value.status_code == 400
