from dataclasses import dataclass

from src.catalog.core.services import (
    BookCatalogService,
    DbSessionService,
    ResponseCache,
    TimeoutExecutor,
)


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    catalog_service: BookCatalogService
    response_cache: ResponseCache
    executor: TimeoutExecutor
