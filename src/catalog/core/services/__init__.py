"""Core services exports."""

from .cache.response_cache import (
    CachedResponse,
    InMemoryResponseCache,
    RedisResponseCache,
    ResponseCache,
    create_response_cache,
)
from .catalog_service import BookCatalogService
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService
from .executor.timeout import OperationTimeoutError, TimeoutExecutor

__all__ = [
    # Catalog
    "BookCatalogService",
    # Response cache
    "CachedResponse",
    "InMemoryResponseCache",
    "RedisResponseCache",
    "ResponseCache",
    "create_response_cache",
    # Database
    "DbManageService",
    "DbSessionService",
    # Executor
    "OperationTimeoutError",
    "TimeoutExecutor",
]
