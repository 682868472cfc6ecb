"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.

The handlers here are the transport boundary: infrastructure errors that
the repositories propagate, and any other uncaught exception, are converted
to FAILED / 500, and request validation errors to INVALID / 400.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.adapters.repository.postgres import close_pool, create_pool, run_migrations
from src.api.models import ErrorResponse, FieldError
from src.api.v1 import router as v1_router
from src.config.logging_config import configure_logging
from src.config.settings import get_settings
from src.domain.exceptions import RepositoryError
from src.domain.result import ResultStatus, to_http_status

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "User registration API v1 - Register users and verify their email",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup
    - Runs migrations on startup
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Starting application...")
    logger.info("Connecting to database...")
    pool = await create_pool(settings)

    logger.info("Running database migrations...")
    await run_migrations(pool)

    # Store pool in app state for dependency injection
    app.state.pool = pool

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await close_pool(pool)


app = FastAPI(
    title="userreg",
    description="User registration API with email verification",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.exception_handler(RepositoryError)
async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """Unhandled infrastructure failure - reported as FAILED."""
    logger.exception("Unhandled repository error on %s %s", request.method, request.url.path)
    body = ErrorResponse(status=ResultStatus.FAILED, message="Internal server error")
    return JSONResponse(
        status_code=to_http_status(ResultStatus.FAILED), content=body.model_dump(mode="json")
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Any other uncaught exception - reported as FAILED."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = ErrorResponse(status=ResultStatus.FAILED, message="Internal server error")
    return JSONResponse(
        status_code=to_http_status(ResultStatus.FAILED), content=body.model_dump(mode="json")
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request body - reported as INVALID with per-field messages."""
    errors = [
        FieldError(field=str(error["loc"][-1]), message=error["msg"]) for error in exc.errors()
    ]
    body = ErrorResponse(
        status=ResultStatus.INVALID, message="Validation failed", validation_errors=errors
    )
    return JSONResponse(
        status_code=to_http_status(ResultStatus.INVALID), content=body.model_dump(mode="json")
    )


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    async with pool.connection() as conn:
        await conn.execute("SELECT 1")

    return {"status": "healthy"}
