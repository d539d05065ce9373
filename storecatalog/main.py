"""Store catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from storecatalog.api.categories import router as categories_router
from storecatalog.api.health import router as health_router
from storecatalog.api.middleware import setup_middleware
from storecatalog.api.products import router as products_router
from storecatalog.api.schemas import ErrorDetail, ErrorResponse
from storecatalog.domain.exceptions import DomainError, NotFoundError, StoreFailureError
from storecatalog.infrastructure.config import settings
from storecatalog.infrastructure.database import get_database
from storecatalog.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    configure_logging()
    logger.info(
        "Starting store catalog API",
        version=settings.api_version,
        debug=settings.debug,
    )

    database = get_database()
    if settings.database_create_tables:
        await database.create_all()
        logger.info("Database schema created")

    yield

    # Shutdown
    logger.info("Shutting down store catalog API")
    await database.dispose()


app = FastAPI(
    title="Store Catalog API",
    description="Category and product catalog backend",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(categories_router)
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    """Render an error envelope with camelCase keys."""
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True)),
    )


def domain_error_status(exc: DomainError) -> int:
    """Map a domain error family to its HTTP status."""
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, StoreFailureError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Handle domain errors with consistent format."""
    request_id = getattr(request.state, "request_id", None)
    status_code = domain_error_status(exc)

    diagnostic = None
    if isinstance(exc, StoreFailureError):
        diagnostic = exc.diagnostic
        logger.error(
            "Store failure",
            path=request.url.path,
            method=request.method,
            error_code=exc.error_code,
            error=diagnostic,
        )
    else:
        logger.info(
            "Request rejected",
            path=request.url.path,
            method=request.method,
            error_code=exc.error_code,
            status_code=status_code,
        )

    return error_response(
        status_code,
        ErrorResponse(
            error_code=exc.error_code,
            message=exc.message,
            error=diagnostic,
            details=exc.details,
            request_id=request_id,
        ),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures as 400 with per-field errors."""
    request_id = getattr(request.state, "request_id", None)

    errors = []
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" location segment
        location = [str(part) for part in error.get("loc", ())[1:]]
        errors.append(
            ErrorDetail(
                field=".".join(location) or None,
                message=error.get("msg", "Invalid value"),
                value=error.get("input"),
            )
        )

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(
            error_code="VALIDATION_ERROR",
            message="Validation failed",
            errors=errors,
            request_id=request_id,
        ),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
    else:
        error_code = "ERROR"
        message = str(detail)

    return error_response(
        exc.status_code,
        ErrorResponse(error_code=error_code, message=message, request_id=request_id),
    )
