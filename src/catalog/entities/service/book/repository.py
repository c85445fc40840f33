"""Data-access layer for books."""

from __future__ import annotations

from datetime import date, datetime, time

from loguru import logger
from sqlalchemy import func, nulls_last
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from src.catalog.core.models import Page
from src.catalog.entities.service.book.entity import Book
from src.catalog.entities.service.book.table import BookTable

# 1-based column positions accepted by ``BookRepository.list``
SORTABLE_COLUMNS = {
    1: BookTable.id,
    2: BookTable.name,
    3: BookTable.author,
    4: BookTable.publish_date,
    5: BookTable.description,
}


class BookStoreError(Exception):
    """Raised when the database fails while serving a book operation."""


class InvalidSortColumnError(ValueError):
    """Raised when a sort position is not one of ``SORTABLE_COLUMNS``."""

    def __init__(self, order_by: int):
        super().__init__(
            f"Cannot sort by column {order_by}; expected one of "
            f"{sorted(SORTABLE_COLUMNS)} (negative for descending)"
        )
        self.order_by = order_by


def _as_timestamp(value: date) -> datetime:
    return datetime.combine(value, time.min)


def order_clause(order_by: int):
    """Translate a signed column position into an ORDER BY expression.

    A negative position sorts the same column descending. Nulls always sort last.
    """
    column = SORTABLE_COLUMNS.get(abs(order_by))
    if column is None:
        raise InvalidSortColumnError(order_by)
    expression = col(column).desc() if order_by < 0 else col(column).asc()
    return nulls_last(expression)


class BookRepository:
    """Data-access layer for the ``book`` table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @staticmethod
    def _to_entity(row: BookTable) -> Book:
        return Book.model_validate(row, from_attributes=True)

    def find_by_id(self, book_id: int) -> Book | None:
        """Retrieve a book from its id."""
        try:
            row = self._session.get(BookTable, book_id)
        except SQLAlchemyError as e:
            logger.exception("Failed to load book {}", book_id)
            raise BookStoreError(str(e)) from e
        if row is None:
            return None
        return self._to_entity(row)

    def list(
        self,
        page: int = 0,
        page_size: int = 10,
        order_by: int = 1,
        filter: str = "%",
    ) -> Page[Book]:
        """Return a page of books.

        Args:
            page: Page to display, starting from 0
            page_size: Number of books per page
            order_by: Signed 1-based position of the sort column
            filter: LIKE pattern applied (case-insensitively) on the name column
        """
        if page < 0:
            raise ValueError("page must be >= 0")
        if page_size <= 0:
            raise ValueError("page_size must be > 0")

        offset = page_size * page
        ordering = [order_clause(order_by)]
        if abs(order_by) != 1:
            # Stable pages when several rows share the same sort value
            ordering.append(col(BookTable.id).asc())

        matches_filter = col(BookTable.name).ilike(filter)
        statement = (
            select(BookTable)
            .where(matches_filter)
            .order_by(*ordering)
            .offset(offset)
            .limit(page_size)
        )
        count_statement = select(func.count()).select_from(BookTable).where(matches_filter)

        try:
            rows = self._session.exec(statement).all()
            total = self._session.exec(count_statement).one()
        except SQLAlchemyError as e:
            logger.exception("Failed to list books with filter {!r}", filter)
            raise BookStoreError(str(e)) from e

        return Page[Book](
            items=[self._to_entity(row) for row in rows],
            page=page,
            offset=offset,
            total=total,
        )

    def find_all(self) -> list[Book]:
        """Retrieve every book ordered by name."""
        statement = select(BookTable).order_by(col(BookTable.name).asc())
        try:
            rows = self._session.exec(statement).all()
        except SQLAlchemyError as e:
            logger.exception("Failed to load all books")
            raise BookStoreError(str(e)) from e
        return [self._to_entity(row) for row in rows]

    def update(self, book_id: int, book: Book) -> int:
        """Update every mutable field of a book.

        Returns:
            Number of affected rows (0 when the id does not exist).
        """
        try:
            row = self._session.get(BookTable, book_id)
            if row is None:
                return 0
            row.name = book.name
            row.author = book.author
            row.publish_date = _as_timestamp(book.publish_date)
            row.description = book.description
            self._session.add(row)
            self._session.flush()
        except SQLAlchemyError as e:
            logger.exception("Failed to update book {}", book_id)
            raise BookStoreError(str(e)) from e
        return 1

    def insert(self, book: Book) -> int | None:
        """Insert a new book, ignoring ``book.id``.

        Returns:
            The generated id, or None when the engine does not report one.
        """
        row = BookTable(
            name=book.name,
            author=book.author,
            publish_date=_as_timestamp(book.publish_date),
            description=book.description,
        )
        try:
            self._session.add(row)
            self._session.flush()
        except SQLAlchemyError as e:
            logger.exception("Failed to insert book {!r}", book.name)
            raise BookStoreError(str(e)) from e
        return row.id

    def delete(self, book_id: int) -> int:
        """Delete a book.

        Returns:
            Number of affected rows (0 when the id does not exist).
        """
        try:
            row = self._session.get(BookTable, book_id)
            if row is None:
                return 0
            self._session.delete(row)
            self._session.flush()
        except SQLAlchemyError as e:
            logger.exception("Failed to delete book {}", book_id)
            raise BookStoreError(str(e)) from e
        return 1
