"""Sports Events Backend: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# CRITICAL ORDER: configure_structlog MUST be called before all other app imports
# to avoid the structlog cache pitfall (structlog caches the processor chain on first use).
from app.core.logging import configure_structlog
from app.core.config import get_settings as _get_settings_early

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else "INFO",
    json_logs=not _early_settings.debug,
)

import structlog

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.dependencies import build_notifier
from app.api.routes import api_router
from app.core.config import get_settings
from app.core.exceptions import EventLifecycleError, InvalidTransitionError, PermissionDeniedError
from app.db import init_db, close_db, init_redis, close_redis
from app.db.base import get_session_factory
from app.db.event_store import EventStore
from app.jobs.scheduler import LifecycleScheduler
from app.middleware.correlation import (
    setup_correlation_middleware,
    get_correlation_id,
)
from app.services.transition_service import TransitionExecutor

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Flipped by the SIGTERM handler; the health check returns 503 once set
    app.state.shutting_down = False

    def handle_sigterm(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", action="health_check_503_draining_connections")

    signal.signal(signal.SIGTERM, handle_sigterm)

    # Startup
    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

    await init_db()
    logger.info("db_initialized")

    # Redis is optional: without it transitions are only logged
    try:
        if await init_redis():
            logger.info("redis_initialized")
        else:
            logger.info("redis_skipped", reason="no_redis_url")
    except Exception as e:
        logger.warning("redis_init_failed", error=str(e), error_type=type(e).__name__)

    app.state.scheduler = None
    if settings.scheduler_enabled:
        store = EventStore(get_session_factory())
        executor = TransitionExecutor(store, notifier=build_notifier())
        app.state.scheduler = LifecycleScheduler(executor, store, settings)
        app.state.scheduler.start()

    yield

    # Shutdown
    logger.info("shutdown_begin")
    if app.state.scheduler is not None:
        await app.state.scheduler.stop()
    await close_redis()
    await close_db()
    logger.info("shutdown_complete")


async def lifecycle_exception_handler(request: Request, exc: EventLifecycleError) -> JSONResponse:
    """Map lifecycle errors to their HTTP status with debug_id tracking."""
    debug_id = str(uuid.uuid4())

    logger.info(
        "lifecycle_error",
        status_code=exc.status_code,
        error_type=type(exc).__name__,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=getattr(request.state, "user_id", None),
        detail=exc.message,
    )

    content: dict = {"detail": exc.message, "error": type(exc).__name__, "debug_id": debug_id}
    if isinstance(exc, InvalidTransitionError):
        content["current_status"] = exc.current
        content["target_status"] = exc.target
        content["reason"] = exc.reason
    elif isinstance(exc, PermissionDeniedError):
        content["reason"] = exc.reason

    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Global exception handler for HTTPException with debug_id tracking.

    Logs errors server-side with full context, returns sanitized response to client.
    """
    debug_id = str(uuid.uuid4())
    corr_id = get_correlation_id()

    # Extract user_id if available
    user_id = getattr(request.state, "user_id", None)

    logger.error(
        "http_exception",
        status_code=exc.status_code,
        debug_id=debug_id,
        correlation_id=corr_id,
        path=request.url.path,
        method=request.method,
        user_id=user_id,
        detail=exc.detail,
    )

    # Return sanitized response (no stack traces, no secrets)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "debug_id": debug_id},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors with debug_id tracking.

    Logs full exception with traceback, returns generic 500 to client.
    """
    debug_id = str(uuid.uuid4())
    corr_id = get_correlation_id()

    # Extract user_id if available
    user_id = getattr(request.state, "user_id", None)

    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        correlation_id=corr_id,
        path=request.url.path,
        method=request.method,
        user_id=user_id,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )

    # Return generic 500 (no internal details leaked)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "debug_id": debug_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.exception_handler(EventLifecycleError)(lifecycle_exception_handler)
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Social sports events backend - event lifecycle and reporting",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url, *settings.cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Correlation ID middleware (runs first on incoming requests)
    setup_correlation_middleware(app)

    register_exception_handlers(app)

    # Include API routes
    app.include_router(api_router, prefix="/api")

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
