"""API middleware for the catalog API.

Provides:
- Request ID correlation
- Error handling
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


def resolve_request_id(supplied: str | None) -> str:
    """Return the caller's request id, or a fresh one if it is unusable.

    Client ids end up in logs and response headers, so empty, overlong
    or non-printable values are replaced.
    """
    if supplied and len(supplied) <= MAX_REQUEST_ID_LENGTH and supplied.isprintable():
        return supplied
    return str(uuid4())


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each catalog request with a correlation id.

    The id is stored on ``request.state`` for error envelopes and service
    logs, bound into the structlog context for the duration of the
    request, and echoed in the ``X-Request-ID`` response header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        started = time.perf_counter()
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception:
                log_request(request, status.HTTP_500_INTERNAL_SERVER_ERROR, started)
                raise
            log_request(request, response.status_code, started)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def log_request(request: Request, status_code: int, started: float) -> None:
    """Log one finished request; server errors at warning level."""
    log = logger.warning if status_code >= 500 else logger.info
    log(
        "Request completed",
        method=request.method,
        path=request.url.path,
        query=request.url.query or None,
        status_code=status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches unhandled exceptions and returns the standard error envelope.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Handle errors uniformly.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or error response.
        """
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)

            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "success": False,
                    "errorCode": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "error": str(e),
                    "details": {},
                    "errors": [],
                    "requestId": request_id,
                },
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed),
    so the request ID is bound before the error handler runs.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIdMiddleware)
