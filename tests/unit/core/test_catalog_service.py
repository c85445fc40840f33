"""Unit tests for the book catalog service."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.catalog.core.services import BookCatalogService
from src.catalog.entities.service.book import BookStoreError


class TestBookCatalogService:
    """Test scoped store access through the service."""

    def test_writes_are_committed(self, catalog_service, make_book):
        """Should make an insert visible to later calls."""
        book_id = catalog_service.insert(make_book())

        found = catalog_service.find_by_id(book_id)

        assert found is not None
        assert found.name == "Dune"

    def test_list_and_find_all(self, catalog_service, make_book):
        catalog_service.insert(make_book(name="Hyperion", author="Simmons"))
        catalog_service.insert(make_book(name="Dune"))

        page = catalog_service.list(page=0, page_size=10, order_by=2, filter="%")

        assert [book.name for book in page.items] == ["Dune", "Hyperion"]
        assert [book.name for book in catalog_service.find_all()] == ["Dune", "Hyperion"]

    def test_update_and_delete_counts(self, catalog_service, make_book):
        book_id = catalog_service.insert(make_book())

        assert catalog_service.update(book_id, make_book(name="Dune Messiah")) == 1
        assert catalog_service.find_by_id(book_id).name == "Dune Messiah"
        assert catalog_service.delete(book_id) == 1
        assert catalog_service.delete(book_id) == 0

    def test_calls_from_worker_threads(self, catalog_service, make_book):
        """Should serve calls made from threads other than the creating one."""
        from concurrent.futures import ThreadPoolExecutor

        catalog_service.insert(make_book())
        with ThreadPoolExecutor(max_workers=1) as pool:
            totals = list(pool.map(lambda _: catalog_service.list().total, range(4)))

        assert totals == [1, 1, 1, 1]

    def test_database_errors_become_store_errors(self):
        """Should translate failures raised outside the repository."""
        database_service = MagicMock()
        database_service.session_scope.side_effect = OperationalError(
            "SELECT 1", {}, Exception("database is locked")
        )
        service = BookCatalogService(database_service)

        with pytest.raises(BookStoreError):
            service.find_all()
