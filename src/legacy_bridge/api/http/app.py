"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger
from starlette.responses import JSONResponse

from src.legacy_bridge.api.http.app_data import ApplicationDependencies
from src.legacy_bridge.api.http.routers.federation import router as federation_router
from src.legacy_bridge.api.http.routers.health import router as health_router
from src.legacy_bridge.api.utils.app_startup import configure_logging
from src.legacy_bridge.runtime.context import get_config

__all__ = ["app", "create_app"]


async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else "unknown",
    }

    start = time.perf_counter()
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)
        except Exception as exc:
            logger.bind(
                status_code=500,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        logger.bind(
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        ).info("request.end")
        response.headers.setdefault("X-Request-ID", request_id)
        return response


def create_app(dependencies: ApplicationDependencies | None = None) -> FastAPI:
    """Build the API.

    Args:
        dependencies: Prebuilt dependencies (tests); built from the active
            configuration at startup when omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = get_config()
        if dependencies is None:
            configure_logging(config)
            config.log_summary()
        app_deps = dependencies or ApplicationDependencies.from_config(config)
        app_deps.database_service.create_all()
        app.state.app_dependencies = app_deps
        logger.info("Starting up legacy bridge in {} environment", config.app.environment)
        try:
            yield
        finally:
            logger.info("Shutting down legacy bridge")
            app_deps.profile_cache.clear()
            app_deps.database_service.dispose()

    production = get_config().app.is_production
    app = FastAPI(
        title="Legacy Identity Bridge",
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None if production else "/redoc",
    )
    app.middleware("http")(log_requests)
    app.include_router(health_router)
    app.include_router(federation_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(app, host=config.app.host, port=config.app.port, access_log=False)
