"""
Host FastAPI application.
Provides health endpoints, request IDs, CORS and the error envelope; its lifespan runs the
bootstrap pipeline, mounts the composed module router under the API prefix and then
starts module background tasks without blocking request serving.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
import uuid
from typing import Any, Iterable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import responses
from app.bootstrap import Application, bootstrap, release_resources
from app.errors import AppException, ValidationException
from app.manifest import ModuleRegistration
from app.tasks import start_module_tasks
from sdk.config import get_server_section

logger = logging.getLogger(__name__)

API_VERSION = "1.0"
APP_VERSION = "1.0.0"


class AppState:
    """Mutable per-app runtime state (readiness, bootstrap result, task handle)."""

    def __init__(self) -> None:
        self.ready = False
        self.start_time = time.time()
        self.application: Application | None = None
        self.tasks_handle: asyncio.Task | None = None


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if exc.status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return responses.error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return responses.error_response(
            ValidationException(metadata=jsonable_errors(exc.errors()))
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return responses.error_response(
            AppException(str(exc.detail), code=f"HTTP_{exc.status_code}", status=exc.status_code)
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled application error on %s %s", request.method, request.url.path)
        return responses.error_response(
            AppException("An unexpected error occurred", code="INTERNAL_ERROR", status=500)
        )


def jsonable_errors(errors: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Reduce pydantic error dicts to JSON-safe loc/msg/type."""
    return [
        {"loc": list(e.get("loc", ())), "msg": str(e.get("msg", "")), "type": str(e.get("type", ""))}
        for e in errors
    ]


def _install_standard_endpoints(app: FastAPI, state: AppState) -> None:
    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Health check endpoint."""
        modules = [m.name for m in state.application.manifests] if state.application else []
        return {
            "status": "ok",
            "ready": state.ready,
            "version": API_VERSION,
            "modules": modules,
        }

    @app.get("/health/live")
    async def health_live() -> dict[str, Any]:
        """Liveness check - indicates if the service is running."""
        return {"status": "ok", "alive": True}

    @app.get("/health/ready")
    async def health_ready() -> dict[str, Any]:
        """Readiness check - ready once bootstrap finished and routes are mounted."""
        return {
            "status": "ok" if state.ready else "not_ready",
            "ready": state.ready,
            "uptime_sec": time.time() - state.start_time,
        }

    @app.get("/version")
    async def version() -> dict[str, Any]:
        return {"api_version": API_VERSION, "app_version": APP_VERSION}


async def _shutdown(state: AppState) -> None:
    state.ready = False
    handle = state.tasks_handle
    if handle is not None and not handle.done():
        handle.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await handle
    if state.application is None:
        return
    await release_resources(state.application.container)
    logger.info("Server shut down")


def create_app(
    config: dict[str, Any],
    *,
    registrations: Iterable[ModuleRegistration] | None = None,
    database: Any = None,
    cache: Any = None,
    run_tasks: bool = True,
) -> FastAPI:
    """
    Build the host app. Bootstrap happens in the lifespan, so routes appear on startup.

    Args:
        config: Raw merged config
        registrations: Module list override (defaults to modules.MODULE_REGISTRY)
        database: Database handle override
        cache: Cache client override
        run_tasks: Start module background tasks after startup
    """
    server_cfg = get_server_section(config)
    state = AppState()
    registrations = list(registrations) if registrations is not None else None

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Server starting on %s:%d", server_cfg["host"], server_cfg["port"])
        state.application = await bootstrap(
            config, registrations=registrations, database=database, cache=cache
        )
        app.include_router(state.application.router, prefix=server_cfg["api_prefix"])
        state.ready = True
        logger.info("Server ready; API mounted at %s", server_cfg["api_prefix"] or "/")
        if run_tasks:
            state.tasks_handle = start_module_tasks(state.application.manifests)
        try:
            yield
        finally:
            await _shutdown(state)

    app = FastAPI(title="KickOffHub API", version=APP_VERSION, lifespan=lifespan)
    app.state.kickoffhub = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=server_cfg["cors_origins"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    install_error_handlers(app)
    _install_standard_endpoints(app, state)
    return app
