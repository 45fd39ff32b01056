"""FastAPI application with CORS, middleware, and exception handlers."""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from dochub import __version__
from dochub.api.dependencies import get_lock_manager
from dochub.api.middleware.auth import api_key_auth_middleware
from dochub.api.middleware.error import (
    DocHubError,
    ErrorHandlerMiddleware,
    ValidationError,
    create_error_response,
    dochub_error_handler,
)
from dochub.api.middleware.logging import request_logging_middleware
from dochub.api.routers import documents, events, health, hook, locks, projects
from dochub.db import init_models
from dochub.db.jobs import JobScheduler, LockSweepJob
from dochub.lib.config import get_settings
from dochub.lib.logging import configure_logging, get_logger

logger = get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    configure_logging()
    logger.info("application_startup", version=app.version)

    if settings.auto_create_tables:
        await init_models()

    scheduler = JobScheduler()
    if settings.lock_sweep_interval_seconds:
        sweep = LockSweepJob(get_lock_manager())
        scheduler.register_job("lock_sweep", sweep.execute, settings.lock_sweep_interval_seconds)
        await scheduler.start()

    yield

    await scheduler.stop()
    logger.info("application_shutdown")


app = FastAPI(
    title="DocHub API",
    description="Documentation hub with exclusive project locks and fingerprint-based sync",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error handler middleware (catches all exceptions)
app.add_middleware(ErrorHandlerMiddleware)

# Custom middleware
app.middleware("http")(request_logging_middleware)
app.middleware("http")(api_key_auth_middleware)


# Request ID middleware, outermost so every layer below sees the id
class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to each request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestIDMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(projects.router)
app.include_router(locks.router)
app.include_router(documents.router)
app.include_router(hook.router)
app.include_router(events.router)

app.add_exception_handler(DocHubError, dochub_error_handler)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed request bodies in the common error format with status 400."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None
    error = ValidationError(
        first.get("msg", "Invalid request"),
        field=field,
        context={"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
    )
    logger.warning("request_validation_failed", path=request.url.path, field=field)
    return create_error_response(request, error)


def serve(reload: bool = False) -> None:
    """Start the DocHub API server."""
    import uvicorn

    logger.info("serve_command", host=settings.api_host, port=settings.api_port, reload=reload)
    uvicorn.run(
        "dochub.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=reload,
    )


__all__ = ["app", "serve"]
