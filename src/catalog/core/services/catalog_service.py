"""Scoped access to the book store.

Every call acquires its own session from the engine pool and releases it on
every exit path, so the methods are safe to run on executor threads.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from src.catalog.core.models import Page
from src.catalog.core.services.database.db_session import DbSessionService
from src.catalog.entities.service.book import Book, BookRepository, BookStoreError

R = TypeVar("R")


class BookCatalogService:
    def __init__(self, database_service: DbSessionService):
        self._database_service = database_service

    def _run(self, operation: Callable[[BookRepository], R]) -> R:
        try:
            with self._database_service.session_scope() as session:
                return operation(self._repository(session))
        except SQLAlchemyError as e:
            # Commit-time failures surface outside the repository
            raise BookStoreError(str(e)) from e

    @staticmethod
    def _repository(session: Session) -> BookRepository:
        return BookRepository(session)

    def find_by_id(self, book_id: int) -> Book | None:
        return self._run(lambda repo: repo.find_by_id(book_id))

    def list(
        self,
        page: int = 0,
        page_size: int = 10,
        order_by: int = 1,
        filter: str = "%",
    ) -> Page[Book]:
        return self._run(
            lambda repo: repo.list(
                page=page, page_size=page_size, order_by=order_by, filter=filter
            )
        )

    def find_all(self) -> list[Book]:
        return self._run(lambda repo: repo.find_all())

    def update(self, book_id: int, book: Book) -> int:
        return self._run(lambda repo: repo.update(book_id, book))

    def insert(self, book: Book) -> int | None:
        return self._run(lambda repo: repo.insert(book))

    def delete(self, book_id: int) -> int:
        return self._run(lambda repo: repo.delete(book_id))
