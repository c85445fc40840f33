"""Pagination helper wrapping one slice of a query result."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """A page of ``items`` starting at ``offset`` out of ``total`` matching rows.

    ``offset`` equals ``page * page_size`` for the page size the query used.
    """

    items: list[T] = Field(default_factory=list)
    page: int = Field(ge=0)
    offset: int = Field(ge=0)
    total: int = Field(ge=0)

    @computed_field
    @property
    def prev(self) -> int | None:
        """Previous page number, or None on the first page."""
        return self.page - 1 if self.page - 1 >= 0 else None

    @computed_field
    @property
    def next(self) -> int | None:
        """Next page number, or None once this page reaches the last row."""
        return self.page + 1 if (self.offset + len(self.items)) < self.total else None
