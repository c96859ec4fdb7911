"""Talent Showcase API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from showcase.admin.router import router as admin_router
from showcase.aggregation.orchestrator import AggregationOrchestrator
from showcase.comments.router import router as comments_router
from showcase.config import Settings, get_settings
from showcase.core.context import get_request_id
from showcase.core.database import init_async_cassandra, shutdown_async_cassandra
from showcase.core.dependencies import ERROR_STATUS
from showcase.core.errors import ShowcaseError
from showcase.core.logging import configure_structlog, get_logger
from showcase.core.middleware import RequestContextMiddleware
from showcase.health.router import router as health_router
from showcase.moderation.state_machine import ModerationStateMachine
from showcase.mutations.coordinator import MutationCoordinator
from showcase.storage.service import FirebaseMediaStore, InMemoryMediaStore, MediaStore
from showcase.store.base import RecordStore
from showcase.store.cassandra import CassandraRecordStore
from showcase.store.memory import InMemoryRecordStore
from showcase.store.schema import COLLECTIONS, DERIVED_COUNTS
from showcase.talents.router import router as talents_router


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(
    settings, log_dir=Path(settings.log_dir), file_output=not settings.is_testing
)

logger = get_logger(__name__)


def build_media_store(settings: Settings) -> MediaStore:
    """Firebase when configured, process memory otherwise."""
    if settings.firebase_configured:
        return FirebaseMediaStore(settings)
    logger.warning(
        "media_store_in_memory",
        message="Firebase Storage not configured - uploads are kept in memory",
    )
    return InMemoryMediaStore()


def attach_services(
    app: FastAPI,
    store: RecordStore,
    media_store: MediaStore,
    settings: Settings,
) -> None:
    """Wire the aggregation and mutation layers onto ``app.state``."""
    moderation = ModerationStateMachine(settings.protected_identities)
    app.state.store = store
    app.state.media_store = media_store
    app.state.moderation = moderation
    app.state.orchestrator = AggregationOrchestrator(store)
    app.state.coordinator = MutationCoordinator(store, media_store, moderation, settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        store_backend=settings.store_backend,
    )

    media_store = build_media_store(settings)

    if settings.store_backend == "memory":
        attach_services(
            app, InMemoryRecordStore(COLLECTIONS, DERIVED_COUNTS), media_store, settings
        )
        logger.info("memory_store_initialized")
    else:
        try:
            session = await init_async_cassandra()
            store = CassandraRecordStore(
                session, settings.cassandra_keyspace, COLLECTIONS, DERIVED_COUNTS
            )
            attach_services(app, store, media_store, settings)
            logger.info("cassandra_store_initialized")
        except Exception as e:
            logger.warning(
                "database_init_skipped",
                error=str(e),
                message="Running without database connection",
            )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    if settings.store_backend == "cassandra":
        await shutdown_async_cassandra()


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    **extra: Any,
) -> ORJSONResponse:
    """Uniform error body; never carries stack traces."""
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    return ORJSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "code": code,
            "message": message,
            "status_code": status_code,
            "request_id": request_id,
            **extra,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the global handlers mapping failures to JSON error bodies."""

    @app.exception_handler(ShowcaseError)
    async def showcase_error_handler(request: Request, exc: ShowcaseError) -> ORJSONResponse:
        status_code = ERROR_STATUS.get(exc.code, status.HTTP_503_SERVICE_UNAVAILABLE)
        logger.warning(
            "showcase_error",
            error_code=exc.code,
            error=exc.message,
            path=request.url.path,
        )
        return _error_response(request, status_code, exc.code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
        )
        message = (
            str(exc.detail)
            if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
            else "Internal server error"
        )
        response = _error_response(request, exc.status_code, "http_error", message)
        for name, value in (getattr(exc, "headers", None) or {}).items():
            response.headers[name] = value
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        errors = exc.errors()
        logger.warning("request_validation_failed", errors=errors, path=request.url.path)
        details = [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", [])),
                "message": err.get("msg", "Invalid value"),
            }
            for err in errors
        ]
        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "validation_failure",
            "Validation error",
            details=details,
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "internal_error",
            "An unexpected error occurred. Please try again later.",
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    docs_enabled = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Talent feed, comments and admin moderation",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(talents_router)
    app.include_router(comments_router)
    app.include_router(admin_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Talent Showcase API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn (``showcase-api`` console script)."""
    import uvicorn

    uvicorn.run(
        "showcase.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_config=None,
    )
