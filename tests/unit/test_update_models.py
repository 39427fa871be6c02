"""
Unit tests for partial-update payloads.
"""

import pydantic
import pytest

from homely.models.enums import Priority
from homely.models.event import EventUpdate
from homely.models.task import TaskUpdate


class TestTaskUpdate:
    @pytest.mark.parametrize("field", ["name", "priority", "is_active"])
    def test_null_rejected_for_required_columns(self, field):
        with pytest.raises(pydantic.ValidationError) as exc_info:
            TaskUpdate(**{field: None})
        assert exc_info.value.errors()[0]["loc"] == (field,)

    def test_null_clears_optional_fields(self):
        update = TaskUpdate(description=None, assigned_to=None, category_id=None, interval=None)
        assert update.model_dump(exclude_unset=True) == {
            "description": None,
            "assigned_to": None,
            "category_id": None,
            "interval": None,
        }

    def test_omitted_fields_stay_unset(self):
        assert TaskUpdate(priority=Priority.LOW).model_dump(exclude_unset=True) == {"priority": Priority.LOW}


class TestEventUpdate:
    def test_null_priority_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            EventUpdate(priority=None)

    def test_null_assignee_unassigns(self):
        assert EventUpdate(assigned_to=None).model_dump(exclude_unset=True) == {"assigned_to": None}
