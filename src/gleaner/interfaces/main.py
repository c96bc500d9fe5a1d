from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request

from gleaner.infrastructure.config import AppConfig
from gleaner.interfaces.app_state import AppState
from gleaner.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def build_app(config: AppConfig) -> FastAPI:
    """Build the FastAPI app: configuration only.

    Resources (HTTP client, cache, adapters) are created in lifespan().
    """
    app = FastAPI(
        title="Gleaner",
        description="Detail-page extraction engine",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from gleaner.interfaces.api.extraction.router import router as extraction_router

    app.include_router(extraction_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
