"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from vegalink import __version__
from vegalink.infrastructure.config import AppConfig
from vegalink.interfaces.app_state import AppState
from vegalink.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create the FastAPI app. Configuration only, no resource initialization.

    Resources (HTTP client, cache, resolvers, providers) are created in lifespan().
    """
    app = FastAPI(
        title="vegalink",
        description="Stremio addon resolving hosting pages into playable streams",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    @app.get("/healthz")
    async def healthz() -> dict[str, str | int | list[str]]:
        """Liveness probe: 200 as long as the process is running."""
        state = app.state
        providers = getattr(state, "providers", None)
        registry = getattr(state, "host_resolvers", None)
        return {
            "status": "ok",
            "providers": len(providers) if providers else 0,
            "hosts": registry.supported_hosts if registry else [],
        }

    from vegalink.interfaces.api.stremio import router as stremio_router

    app.include_router(stremio_router)

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = response.status_code if response is not None else 500

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
