"""
Unit tests for event read models, ordering and transition rules.
"""

from datetime import date, datetime, timedelta
from uuid import uuid4

import pytest

from homely.core.exceptions import ValidationError
from homely.models.enums import EventStatus, Priority, UrgencyStatus
from homely.models.event import Event, EventRead, event_sort_key
from homely.models.pagination import Page, validate_page_request
from homely.services.event_service import can_transition, cancellation_notes

TODAY = date(2025, 6, 15)


def make_event(due_date: date, status=EventStatus.PENDING, priority=Priority.MEDIUM, created_at=None) -> Event:
    now = created_at or datetime(2025, 1, 1, 12, 0)
    return Event(
        id=uuid4(),
        household_id=uuid4(),
        due_date=due_date,
        status=status,
        priority=priority,
        created_by=uuid4(),
        created_at=now,
        updated_at=now,
    )


class TestDerivedFields:
    def test_overdue_pending(self):
        read = EventRead.from_event(make_event(TODAY - timedelta(days=3)), TODAY)
        assert read.is_overdue is True
        assert read.days_until_due == -3
        assert read.urgency_status == UrgencyStatus.OVERDUE

    def test_postponed_past_due_is_overdue(self):
        read = EventRead.from_event(make_event(TODAY - timedelta(days=1), EventStatus.POSTPONED), TODAY)
        assert read.is_overdue is True

    def test_completed_is_never_overdue(self):
        read = EventRead.from_event(make_event(TODAY - timedelta(days=10), EventStatus.COMPLETED), TODAY)
        assert read.is_overdue is False
        assert read.urgency_status == UrgencyStatus.OVERDUE

    def test_due_today(self):
        read = EventRead.from_event(make_event(TODAY), TODAY)
        assert read.is_overdue is False
        assert read.days_until_due == 0
        assert read.urgency_status == UrgencyStatus.TODAY

    def test_upcoming(self):
        read = EventRead.from_event(make_event(TODAY + timedelta(days=5)), TODAY)
        assert read.days_until_due == 5
        assert read.urgency_status == UrgencyStatus.UPCOMING

    def test_recomputed_for_callers_date(self):
        event = make_event(date(2025, 6, 20))
        assert EventRead.from_event(event, date(2025, 6, 1)).urgency_status == UrgencyStatus.UPCOMING
        assert EventRead.from_event(event, date(2025, 7, 1)).urgency_status == UrgencyStatus.OVERDUE


class TestSortOrder:
    def test_due_date_then_severity(self):
        low = make_event(TODAY, priority=Priority.LOW)
        high = make_event(TODAY, priority=Priority.HIGH)
        medium = make_event(TODAY, priority=Priority.MEDIUM)
        earlier_low = make_event(TODAY - timedelta(days=1), priority=Priority.LOW)

        ordered = sorted([low, high, medium, earlier_low], key=event_sort_key)

        assert ordered == [earlier_low, high, medium, low]

    def test_creation_time_breaks_remaining_ties(self):
        first = make_event(TODAY, created_at=datetime(2025, 1, 1))
        second = make_event(TODAY, created_at=datetime(2025, 1, 2))
        assert sorted([second, first], key=event_sort_key) == [first, second]


class TestTransitions:
    @pytest.mark.parametrize("source", [EventStatus.PENDING, EventStatus.POSTPONED])
    @pytest.mark.parametrize(
        "target", [EventStatus.COMPLETED, EventStatus.POSTPONED, EventStatus.CANCELLED]
    )
    def test_open_states_allow_every_action(self, source, target):
        assert can_transition(source, target)

    @pytest.mark.parametrize("source", [EventStatus.COMPLETED, EventStatus.CANCELLED])
    @pytest.mark.parametrize(
        "target", [EventStatus.COMPLETED, EventStatus.POSTPONED, EventStatus.CANCELLED]
    )
    def test_terminal_states_allow_nothing(self, source, target):
        assert not can_transition(source, target)

    def test_cancellation_notes_keep_previous_notes(self):
        assert cancellation_notes("sold the car", None) == "[CANCELLED] sold the car"
        assert cancellation_notes("sold the car", "use synthetic oil") == (
            "[CANCELLED] sold the car\n\nPrevious notes:\nuse synthetic oil"
        )


class TestPage:
    def test_navigation_flags(self):
        page = Page[int](items=[1, 2], total_count=5, page=1, page_size=2)
        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_previous is False

    def test_last_page(self):
        page = Page[int](items=[5], total_count=5, page=3, page_size=2)
        assert page.has_next is False
        assert page.has_previous is True

    def test_empty(self):
        page = Page[int](items=[], total_count=0, page=1, page_size=20)
        assert page.total_pages == 0
        assert page.has_next is False

    def test_serializes_computed_fields(self):
        data = Page[int](items=[1], total_count=1, page=1, page_size=10).model_dump()
        assert data["total_pages"] == 1
        assert data["has_next"] is False

    def test_invalid_paging_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_page_request(0, 10, 100)
        assert exc_info.value.details == {"page": "page must be 1 or greater"}
        with pytest.raises(ValidationError):
            validate_page_request(1, 101, 100)
