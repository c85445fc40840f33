"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from loguru import logger
from starlette.responses import JSONResponse

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.api.http.routers.books import router as books_router
from src.catalog.api.http.routers.health import router as health_router
from src.catalog.api.utils.app_startup import configure_logging
from src.catalog.core.services import (
    BookCatalogService,
    DbManageService,
    DbSessionService,
    TimeoutExecutor,
    create_response_cache,
)
from src.catalog.entities.service.book import BookStoreError, InvalidSortColumnError
from src.catalog.runtime.context import get_config

__all__ = ["app", "create_app", "startup", "shutdown"]


async def startup() -> ApplicationDependencies:
    """Build the application-wide dependencies from the current configuration."""
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    database_service = DbSessionService()
    if config.database.create_tables:
        DbManageService(database_service.engine).create_all()

    response_cache = await create_response_cache(
        backend=config.cache.backend,
        redis_url=config.redis.connection_string if config.redis.enabled else None,
        key_prefix=config.cache.key_prefix,
        max_entries=config.cache.max_entries,
        socket_timeout=config.redis.socket_timeout,
    )
    executor = TimeoutExecutor(
        timeout_seconds=config.executor.timeout_seconds,
        max_workers=config.executor.max_workers,
    )

    return ApplicationDependencies(
        database_service=database_service,
        catalog_service=BookCatalogService(database_service),
        response_cache=response_cache,
        executor=executor,
    )


async def shutdown(deps: ApplicationDependencies) -> None:
    logger.info("Shutting down application")
    deps.executor.shutdown()
    await deps.response_cache.close()
    deps.database_service.dispose()


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidSortColumnError)
    async def invalid_sort_column(request: Request, exc: InvalidSortColumnError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(BookStoreError)
    async def book_store_error(request: Request, exc: BookStoreError):
        logger.bind(error_type=type(exc).__name__).error("Book store failure: {}", exc)
        return JSONResponse(status_code=500, content={"detail": "Book store failure"})


def _register_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }

        start = time.perf_counter()

        # Everything that logs within this block inherits base_ctx
        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start")
                response = await call_next(request)

                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 1),
                ).info("request.end")

                response.headers.setdefault("X-Request-ID", request_id)
                return response

            except HTTPException as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=exc.status_code,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                return JSONResponse(
                    status_code=exc.status_code,
                    content={"detail": exc.detail, "request_id": request_id},
                    headers={"X-Request-ID": request_id},
                )

            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=500,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                return JSONResponse(
                    status_code=500,
                    content={"detail": "Internal Server Error", "request_id": request_id},
                    headers={"X-Request-ID": request_id},
                )


def create_app(dependencies: ApplicationDependencies | None = None) -> FastAPI:
    """Create the catalog application.

    Args:
        dependencies: Pre-built dependencies. When omitted they are built on
            startup from the configuration and released on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if dependencies is not None:
            app.state.app_dependencies = dependencies
            yield
            return

        deps = await startup()
        app.state.app_dependencies = deps
        try:
            yield
        finally:
            await shutdown(deps)

    production = get_config().app.environment == "production"
    app = FastAPI(
        title="Book Catalog",
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None if production else "/redoc",
    )
    if dependencies is not None:
        app.state.app_dependencies = dependencies

    _register_exception_handlers(app)
    _register_request_logging(app)

    app.include_router(health_router)
    app.include_router(books_router)
    return app


configure_logging()

app = create_app()
