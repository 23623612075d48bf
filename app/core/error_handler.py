"""
Error handling and sanitization

Sanitize error messages to prevent internal information leakage:
- Catalog errors -> mapped to 404/400/502/500 with their code
- Database errors -> generic message
- Stack traces -> logged only, not returned to client
"""
import logging
import traceback
from typing import Union

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.exceptions import CatalogError, http_status_for

logger = logging.getLogger(__name__)

# Patterns that indicate internal/sensitive error information
SENSITIVE_PATTERNS = [
    "password",
    "secret",
    "token",
    "key",
    "credential",
    "sqlalchemy",
    "asyncpg",
    "psycopg",
    "postgresql",
    "sqlite",
    "botocore",
    "traceback",
    "file \"",
    "line ",
    "/app/",
    "\\app\\",
]


def is_sensitive_error(message: str) -> bool:
    """Check if error message contains sensitive information."""
    message_lower = message.lower()
    return any(pattern in message_lower for pattern in SENSITIVE_PATTERNS)


def sanitize_error_message(error: Union[str, Exception]) -> str:
    """
    Sanitize an error message for safe client exposure.

    Returns the full message in DEBUG mode, a generic message when the text
    looks like it leaks internals, and a truncated message otherwise.
    """
    if isinstance(error, str):
        message = error
    else:
        message = str(error)

    if settings.DEBUG:
        return message

    if is_sensitive_error(message):
        return "An internal error occurred. Please try again later."

    if len(message) > 200:
        return message[:200] + "..."

    return message


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Map catalog errors raised by the services to JSON responses."""
    status_code = http_status_for(exc)

    if status_code >= 500:
        logger.error(
            f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}",
            extra={"error": exc.to_dict()},
        )
        details = exc.details if settings.DEBUG else {}
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        details = exc.details

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.code,
            "message": sanitize_error_message(exc.message),
            "details": details,
        },
    )


class ErrorSanitizationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to catch unhandled exceptions and sanitize error responses.

    - In production: Returns generic error, logs full details
    - In development: Returns full error for debugging
    """

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except HTTPException:
            # Let FastAPI handle HTTPExceptions normally
            raise
        except Exception as e:
            error_id = f"{request.client.host if request.client else 'unknown'}-{id(e)}"
            logger.error(
                f"Unhandled exception [{error_id}]: {type(e).__name__}: {str(e)}\n"
                f"Path: {request.url.path}\n"
                f"Method: {request.method}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )

            if settings.DEBUG:
                return JSONResponse(
                    status_code=500,
                    content={
                        "error": "internal_error",
                        "message": str(e),
                        "type": type(e).__name__,
                        "error_id": error_id,
                    }
                )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "internal_error",
                    "message": "An unexpected error occurred. Please try again later.",
                    "error_id": error_id,
                }
            )
