"""Binding of submitted book forms."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.catalog.entities.service.book import Book

DATE_FORMAT = "%Y-%m-%d"
FORM_FIELDS = ("name", "author", "publishDate", "description")

_ERROR_MESSAGES = {
    "missing": "This field is required",
    "string_too_short": "This field is required",
    "string_too_long": "Maximum length is {max_length}",
}


class BookForm(BaseModel):
    """The fields of the create and edit forms. ``id`` is never bound."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=1000)
    publish_date: date = Field(alias="publishDate")
    description: str = Field(min_length=1, max_length=255)

    @field_validator("name", "author", "description", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("publish_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return datetime.strptime(value.strip(), DATE_FORMAT).date()
            except ValueError as e:
                raise ValueError("Valid date required (yyyy-MM-dd)") from e
        return value

    def to_book(self, book_id: int | None = None) -> Book:
        return Book(
            id=book_id,
            name=self.name,
            author=self.author,
            publish_date=self.publish_date,
            description=self.description,
        )

    @classmethod
    def from_book(cls, book: Book) -> dict[str, str]:
        """Form values pre-filled from an existing book."""
        return {
            "name": book.name,
            "author": book.author,
            "publishDate": book.publish_date.strftime(DATE_FORMAT),
            "description": book.description,
        }


class FormView(BaseModel):
    """Rendered create/edit form: submitted values plus per-field errors."""

    id: int | None = None
    values: dict[str, str] = Field(default_factory=dict)
    errors: dict[str, list[str]] = Field(default_factory=dict)


def _message(error: dict) -> str:
    template = _ERROR_MESSAGES.get(error["type"])
    if template is None:
        return error["msg"].removeprefix("Value error, ")
    return template.format(**(error.get("ctx") or {}))


def bind_form(data: Mapping[str, Any]) -> tuple[BookForm | None, dict[str, list[str]]]:
    """Bind submitted form data.

    Returns:
        The bound form and no errors, or None and the errors keyed by form field.
    """
    submitted = {key: data[key] for key in FORM_FIELDS if key in data}
    try:
        return BookForm.model_validate(submitted), {}
    except ValidationError as e:
        errors: dict[str, list[str]] = {}
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "form"
            errors.setdefault(field, []).append(_message(error))
        return None, errors


def submitted_values(data: Mapping[str, Any]) -> dict[str, str]:
    return {key: str(data[key]) for key in FORM_FIELDS if key in data}
