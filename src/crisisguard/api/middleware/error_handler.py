"""
Error Handler Middleware

Consistent error handling and response formatting. Every request
gets a correlation id; unexpected exceptions become sanitized 500
responses and domain errors map to 404/409.
"""

from uuid import uuid4

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from crisisguard.config.logging_config import bind_correlation_id, clear_context, get_logger
from crisisguard.domain.exceptions import EscalationNotFoundError, InvalidTransitionError
from crisisguard.infrastructure.monitoring.sentry_integration import (
    capture_exception_with_context,
)

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Provides:
    - Correlation ID tracking for all requests
    - Consistent error response format
    - Error logging without request bodies (they carry user text)
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid4())
        bind_correlation_id(correlation_id)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response

        except Exception as e:
            logger.error(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error_type=type(e).__name__,
                exc_info=True,
            )
            capture_exception_with_context(e, correlation_id=correlation_id)

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error",
                    "correlation_id": correlation_id,
                    "message": "An unexpected error occurred. Please try again.",
                },
                headers={CORRELATION_HEADER: correlation_id},
            )

        finally:
            clear_context()


async def _not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "Not found", "message": str(exc)},
    )


async def _conflict_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "Invalid status transition", "message": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP status codes."""
    app.add_exception_handler(EscalationNotFoundError, _not_found_handler)
    app.add_exception_handler(InvalidTransitionError, _conflict_handler)
