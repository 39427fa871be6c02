"""
Paged result container.
"""

from __future__ import annotations

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field, computed_field

from homely.core.exceptions import ValidationError

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a listing plus the totals needed to navigate it."""

    items: List[T] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 20

    @computed_field
    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @computed_field
    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def validate_page_request(page: int, page_size: int, max_page_size: int) -> None:
    """Raise ValidationError for out-of-range paging parameters."""
    if page < 1:
        raise ValidationError("page must be 1 or greater", field="page")
    if page_size < 1 or page_size > max_page_size:
        raise ValidationError(f"page_size must be between 1 and {max_page_size}", field="page_size")
