"""Entity package: Book."""

from .entity import Book
from .repository import (
    SORTABLE_COLUMNS,
    BookRepository,
    BookStoreError,
    InvalidSortColumnError,
)
from .table import BookTable

__all__ = [
    "Book",
    "BookRepository",
    "BookStoreError",
    "BookTable",
    "InvalidSortColumnError",
    "SORTABLE_COLUMNS",
]
