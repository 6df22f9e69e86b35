"""
Global exception handling for the application.
Standardizes error responses and keeps internal failure causes out of them.
"""

from typing import Any, Dict, List, Optional

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    """Resource not found error."""
    def __init__(self, entity: str = "Entity", id: Optional[str] = None):
        self.entity = entity
        self.id = id
        message = f"{entity} not found" if id is None else f"{entity} '{id}' not found"
        super().__init__(message, status.HTTP_404_NOT_FOUND, {"entity": entity, "id": id})


class ValidationError(AppError):
    """Malformed input payload. Field-level messages are safe to expose."""
    def __init__(self, message: str = "Validation failed", errors: Optional[List[Dict[str, Any]]] = None):
        self.errors = errors or []
        super().__init__(message, status.HTTP_400_BAD_REQUEST, {"errors": self.errors})


class AuthenticationError(AppError):
    """Authentication failure error.

    ``message`` is what the client sees. ``reason`` is the internal cause,
    logged but never serialized.
    """
    def __init__(self, message: str = "Unauthorized", reason: Optional[str] = None):
        self.reason = reason or message
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class ForbiddenError(AppError):
    """Authorization failure error."""
    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_403_FORBIDDEN, details)


class DatabaseError(AppError):
    """Storage or internal-consistency failure. ``cause`` is for logs only."""
    def __init__(self, message: str = "Database operation failed", cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


class MappingError(Exception):
    """A persisted row failed domain validation."""
    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class TokenError(Exception):
    """A token could not be signed or verified."""


def _error_body(request: Request, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> dict:
    body = {"code": code, "message": message, "path": request.url.path}
    if details:
        body["details"] = details
    return {"error": body}


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions globally."""

    if isinstance(exc, DatabaseError):
        logger.error(
            "Database error",
            path=request.url.path,
            error=exc.message,
            cause=repr(exc.cause) if exc.cause else None,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, "DatabaseError", "An internal error occurred. Please try again later."),
        )

    if isinstance(exc, AuthenticationError):
        logger.warning("Authentication failed", path=request.url.path, reason=exc.reason)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, "AuthenticationError", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    if isinstance(exc, AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.__class__.__name__, exc.message, exc.details),
        )

    logger.exception("Unexpected error occurred", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, "InternalServerError", "An unexpected error occurred. Please try again later."),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI request-shape errors as 400s in the same envelope."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(request, "ValidationError", "Request validation failed", {"errors": errors}),
    )


def register_exception_handlers(app) -> None:
    """Attach the handlers to a FastAPI app."""
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppError, global_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
