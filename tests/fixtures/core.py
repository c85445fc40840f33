from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import date

import pytest
from sqlalchemy import StaticPool
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from src.catalog.entities.service.book import Book, BookRepository


@pytest.fixture
def engine() -> Generator[Engine]:
    """In-memory SQLite engine shared across threads, with a fresh schema per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Import models to register them with the metadata
    from src.catalog.entities.service.book import BookTable  # noqa: F401

    SQLModel.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session]:
    """Create a fresh database session for testing."""
    with Session(engine, expire_on_commit=False) as session:
        try:
            yield session
        finally:
            session.rollback()


@pytest.fixture
def repository(session: Session) -> BookRepository:
    return BookRepository(session)


@pytest.fixture
def make_book() -> Callable[..., Book]:
    def _make_book(
        name: str = "Dune",
        author: str = "Herbert",
        publish_date: date = date(1965, 1, 1),
        description: str = "Sci-fi",
    ) -> Book:
        return Book(
            name=name,
            author=author,
            publish_date=publish_date,
            description=description,
        )

    return _make_book


@pytest.fixture
def form_data() -> dict[str, str]:
    """A valid create/edit form submission."""
    return {
        "name": "Dune",
        "author": "Herbert",
        "publishDate": "1965-01-01",
        "description": "Sci-fi",
    }
