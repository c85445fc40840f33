"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Request

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.core.services import (
    BookCatalogService,
    DbSessionService,
    ResponseCache,
    TimeoutExecutor,
)


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service instance."""
    return get_app_dependencies(request).database_service


def get_catalog_service(request: Request) -> BookCatalogService:
    """Get the book catalog service instance."""
    return get_app_dependencies(request).catalog_service


def get_response_cache(request: Request) -> ResponseCache:
    """Get the response cache instance."""
    return get_app_dependencies(request).response_cache


def get_executor(request: Request) -> TimeoutExecutor:
    """Get the timeout-guarded executor instance."""
    return get_app_dependencies(request).executor
