"""
Page-of-results model and offset/limit arithmetic.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page_number: int
    page_size: int

    def __post_init__(self) -> None:
        if self.page_number < 1:
            raise ValueError("page_number must be >= 1.")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1.")

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


def total_pages(total_count: int, page_size: int) -> int:
    if total_count <= 0:
        return 0
    return math.ceil(total_count / page_size)


class Page(BaseModel, Generic[T]):
    """
    One slice of a larger result set plus where it sits in the whole.

    `total_count` is counted over the full result set, not the slice.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[T]
    total_count: int
    page_size: int
    current_page: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool

    @classmethod
    def build(cls, items: Sequence[T], *, total_count: int, request: PageRequest) -> "Page[T]":
        pages = total_pages(total_count, request.page_size)
        return cls(
            items=list(items),
            total_count=total_count,
            page_size=request.page_size,
            current_page=request.page_number,
            total_pages=pages,
            has_previous_page=request.page_number > 1,
            has_next_page=request.page_number < pages,
        )
