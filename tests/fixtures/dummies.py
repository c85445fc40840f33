from __future__ import annotations

import threading
import time

from src.catalog.core.services import BookCatalogService


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingCatalogService(BookCatalogService):
    """Catalog service that records how many list queries reached the store."""

    def __init__(self, database_service):
        super().__init__(database_service)
        self.list_calls = 0

    def list(self, *args, **kwargs):
        self.list_calls += 1
        return super().list(*args, **kwargs)


class SlowCatalogService(BookCatalogService):
    """Catalog service whose reads outlast any short deadline.

    ``release`` lets a test finish the blocked call; ``finished`` is set once
    the late result has been produced.
    """

    def __init__(self, database_service, delay_seconds: float = 5.0):
        super().__init__(database_service)
        self.delay_seconds = delay_seconds
        self.release = threading.Event()
        self.finished = threading.Event()

    def list(self, *args, **kwargs):
        self.release.wait(self.delay_seconds)
        try:
            return super().list(*args, **kwargs)
        finally:
            self.finished.set()

    def find_by_id(self, book_id):
        self.release.wait(self.delay_seconds)
        try:
            return super().find_by_id(book_id)
        finally:
            self.finished.set()


def blocking_call(release: threading.Event, result: object, timeout: float = 5.0) -> object:
    """Block until released, then return ``result``."""
    release.wait(timeout)
    return result


def sleep_then(seconds: float, result: object) -> object:
    time.sleep(seconds)
    return result
