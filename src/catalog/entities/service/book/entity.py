"""Entity: Book."""

from datetime import date, datetime
from typing import Any

from pydantic import Field, field_validator

from src.catalog.entities._base import Entity


class Book(Entity):
    """A book record of the catalog.

    ``id`` is ``None`` until the store assigns one on insert.
    """

    name: str = Field(description="Title of the book")
    author: str = Field(description="Author of the book")
    publish_date: date = Field(description="Publication date")
    description: str = Field(description="Short description")

    @field_validator("publish_date", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        # The column is a TIMESTAMP; only the calendar date is meaningful
        if isinstance(value, datetime):
            return value.date()
        return value

    def same_values(self, other: "Book") -> bool:
        """Compare every field except the identifier."""
        return (
            self.name == other.name
            and self.author == other.author
            and self.publish_date == other.publish_date
            and self.description == other.description
        )
