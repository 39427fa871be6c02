"""
Recurrence interval value type.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from homely.utils.datetime_utils import add_months, add_years


class Interval(BaseModel):
    """Composite recurrence interval. Absent and zero components are equivalent."""

    model_config = ConfigDict(frozen=True)

    years: Optional[int] = Field(None, ge=0)
    months: Optional[int] = Field(None, ge=0)
    weeks: Optional[int] = Field(None, ge=0)
    days: Optional[int] = Field(None, ge=0)

    @property
    def is_recurring(self) -> bool:
        return any(value and value > 0 for value in (self.years, self.months, self.weeks, self.days))

    def next_date(self, base: date) -> Optional[date]:
        """
        Compute the next occurrence after ``base``.

        Components are applied in order: years, months, weeks, days. Month and
        year steps clamp to the last day of the target month, so Jan 31 plus
        one month is Feb 28 (or 29) and Feb 29 plus one year is Feb 28.

        Returns:
            The next due date, or None for a one-off interval.
        """
        if not self.is_recurring:
            return None

        result = base
        if self.years and self.years > 0:
            result = add_years(result, self.years)
        if self.months and self.months > 0:
            result = add_months(result, self.months)
        if self.weeks and self.weeks > 0:
            result = result + timedelta(weeks=self.weeks)
        if self.days and self.days > 0:
            result = result + timedelta(days=self.days)
        return result

    def describe(self) -> str:
        """Human readable form, e.g. '1 year, 6 months'."""
        parts = []
        for value, unit in (
            (self.years, "year"),
            (self.months, "month"),
            (self.weeks, "week"),
            (self.days, "day"),
        ):
            if value:
                parts.append(f"{value} {unit}{'s' if value != 1 else ''}")
        return ", ".join(parts) if parts else "one-off"
