import logging
import time
import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from streamflow.api.api import api_router, tags_metadata
from streamflow.config import settings
from streamflow.core.cache import cleanup_cache, init_cache
from streamflow.core.exceptions import AppException
from streamflow.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events.

    This handles:
    1. Logging setup and a database connectivity check
    2. Redis cache connection (optional)
    3. The shared outbound HTTP client
    """
    setup_logging()
    logger.info(f"Starting {settings.app_name} (Environment: {settings.environment})")

    from streamflow.database import engine

    async with engine.begin() as conn:
        await conn.exec_driver_sql("SELECT 1")
    logger.info("Database connection established")

    await init_cache()

    app.state.http_client = httpx.AsyncClient(
        timeout=settings.catalog_timeout_seconds,
        headers={"User-Agent": f"{settings.app_name}/{settings.app_version}"},
    )

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    await app.state.http_client.aclose()
    await cleanup_cache()
    await engine.dispose()
    logger.info("Application shutdown complete")


def _error_body(exc: AppException) -> dict:
    return {
        "error": exc.__class__.__name__,
        "message": exc.message,
        "details": exc.details,
    }


def create_app() -> FastAPI:
    """
    Application factory pattern.

    Tests build their own instance and override dependencies on it.
    """

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Music and video discovery API",
        openapi_tags=tags_metadata,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID middleware for tracing
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time)

        return response

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if exc.status_code >= 500:
            logger.error(
                f"{exc.__class__.__name__} on {request.method} {request.url.path}: "
                f"{exc.message} (request_id={getattr(request.state, 'request_id', None)})"
            )
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        return JSONResponse(
            status_code=400,
            content={
                "error": "ValidationError",
                "message": "Invalid request",
                "details": {"fields": fields},
            },
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", None)
        logger.exception(f"Unhandled error (request_id={request_id})")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "request_id": request_id,
                "detail": str(exc) if settings.debug else "Something went wrong",
            },
        )

    @app.get("/health")
    async def health_check():
        from streamflow.core.cache import cache_manager

        return {
            "status": "healthy",
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "cache": cache_manager.get_stats(),
            "timestamp": time.time(),
        }

    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.app_name}!",
            "docs_url": "/docs",
            "version": settings.app_version,
        }

    app.include_router(api_router, prefix="/api")

    return app


# Create the application instance
app = create_app()
