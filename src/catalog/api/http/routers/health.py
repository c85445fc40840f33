"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.catalog.api.http.deps import get_database_service, get_response_cache
from src.catalog.core.services import DbSessionService, InMemoryResponseCache, ResponseCache
from src.catalog.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe: 200 OK as long as the process is running."""
    return {"status": "healthy", "service": "catalog"}


@router.get("/ready", response_model=None)
async def readiness(
    database_service: DbSessionService = Depends(get_database_service),
    cache: ResponseCache = Depends(get_response_cache),
) -> dict[str, Any] | JSONResponse:
    """Readiness probe.

    Returns 200 when the database answers, 503 otherwise. The response cache
    is reported but never fails the check: an unreachable Redis only degrades
    caching.
    """
    config = get_config()

    checks: dict[str, Any] = {}

    db_healthy = database_service.health_check()
    checks["database"] = {
        "status": "healthy" if db_healthy else "unhealthy",
        "type": "sqlite" if config.database.url.startswith("sqlite") else "postgresql",
    }

    cache_healthy = await cache.is_available()
    checks["cache"] = {
        "status": "healthy" if cache_healthy else "degraded",
        "type": "in-memory" if isinstance(cache, InMemoryResponseCache) else "redis",
    }

    body = {
        "status": "ready" if db_healthy else "not_ready",
        "checks": checks,
    }
    if not db_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
