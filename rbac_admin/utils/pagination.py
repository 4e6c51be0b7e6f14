"""
Offset pagination utilities.

Usage:
    GET /api/users?page=1&pageSize=10
"""

from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass
class PageParams:
    """Offset pagination parameters (page is 1-indexed)."""

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


def page_params(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize"),
) -> PageParams:
    """FastAPI dependency reading ``page`` and ``pageSize`` from the query."""
    return PageParams(page=page, page_size=page_size)


@dataclass
class Page(Generic[T]):
    """A page of items plus the total number of matching rows."""

    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size


class Pagination(BaseModel):
    """Pagination block of a list response."""

    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    page_size: int = Field(serialization_alias="pageSize")
    total_pages: int = Field(serialization_alias="totalPages")


class PageData(BaseModel, Generic[T]):
    """``data`` payload of a paginated response."""

    list: Sequence[T]
    pagination: Pagination


def paginated(page: Page, items: Sequence) -> dict:
    """Build the ``data`` payload for a page of already-serialized items."""
    return {
        "list": list(items),
        "pagination": {
            "total": page.total,
            "page": page.page,
            "page_size": page.page_size,
            "total_pages": page.total_pages,
        },
    }
