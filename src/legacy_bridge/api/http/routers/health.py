"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.legacy_bridge.api.http.app_data import ApplicationDependencies
from src.legacy_bridge.api.http.deps import get_app_dependencies
from src.legacy_bridge.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe; does not check dependencies."""
    return {"status": "healthy", "service": "legacy-bridge"}


@router.get("/ready", response_model=None)
async def readiness(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> dict[str, Any] | JSONResponse:
    """Readiness check of the database and the legacy facade.

    Returns 503 when the database is down. An unreachable facade only fails
    readiness in production.
    """
    config = get_config()
    checks: dict[str, Any] = {}
    all_healthy = True

    db_healthy = app_deps.database_service.health_check()
    checks["database"] = {"status": "healthy" if db_healthy else "unhealthy"}
    if not db_healthy:
        all_healthy = False

    legacy_healthy = await app_deps.legacy_client.health_check()
    checks["legacy_facade"] = {
        "status": "healthy" if legacy_healthy else "unhealthy",
        "base_url": app_deps.legacy_client.base_url,
    }
    if not legacy_healthy and config.app.is_production:
        all_healthy = False

    checks["profile_cache"] = {"entries": len(app_deps.profile_cache)}
    checks["logins"] = app_deps.federation_stats.snapshot()

    response = {
        "status": "ready" if all_healthy else "not_ready",
        "environment": config.app.environment,
        "checks": checks,
    }
    if not all_healthy:
        return JSONResponse(status_code=503, content=response)
    return response
