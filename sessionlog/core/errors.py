"""
=============================================================================
SESSIONLOG - ERROR HANDLING MODULE
=============================================================================
Domain error taxonomy and global exception handlers.

Errors:
- ValidationError  (422): malformed input rejected before reaching the store
- AuthError        (401): authentication failures (status may be overridden)
- AuthzError       (403): non-administrator calling administrative operations
- NotFoundError    (404): delete target does not exist
- PersistenceError (503): store unreachable or read/write failure

Usage:
    # In main.py
    from sessionlog.core.errors import register_exception_handlers
    register_exception_handlers(app)
=============================================================================
"""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sessionlog.core.config import settings

logger = logging.getLogger(__name__)


class SessionLogError(Exception):
    """Base error carrying a client-safe message and an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(SessionLogError):
    status_code = 422


class AuthError(SessionLogError):
    """Authentication error."""

    status_code = 401


class AuthzError(SessionLogError):
    status_code = 403


class NotFoundError(SessionLogError):
    status_code = 404


class PersistenceError(SessionLogError):
    """The store could not be reached or rejected the operation."""

    status_code = 503


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(SessionLogError)
    async def domain_exception_handler(request: Request, exc: SessionLogError):
        if isinstance(exc, PersistenceError):
            logger.error(
                "Persistence failure on %s %s: %s",
                request.method,
                request.url.path,
                exc.message,
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": "Service temporarily unavailable"},
            )

        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all handler for unhandled exceptions.

        - Logs the full traceback for debugging
        - Returns a generic error message to prevent info leakage
        - In debug mode, includes more details
        """
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}:\n"
            f"{traceback.format_exc()}"
        )

        if settings.DEBUG:
            return JSONResponse(
                status_code=500,
                content={
                    "detail": "Internal Server Error",
                    "error_type": type(exc).__name__,
                    "message": str(exc),
                    "path": request.url.path,
                },
            )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal Server Error",
                "message": "An unexpected error occurred. Please try again later.",
            },
        )
