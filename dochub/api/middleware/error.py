"""Error taxonomy and global exception handler middleware.

Every failure surfaced to callers carries a machine-readable ``error_code``
and a ``context`` payload (current lock holder, violated bounds, ...).
"""

import traceback
from datetime import datetime
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from dochub.lib.clock import isoformat_z
from dochub.lib.logging import get_logger

logger = get_logger(__name__)


class DocHubError(Exception):
    """Base exception for DocHub errors with context."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    ):
        """
        Initialize DocHub error.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional context for the caller
            status_code: HTTP status code
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.context = context or {}
        self.status_code = status_code


class ValidationError(DocHubError):
    """Validation error with field context."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            context=ctx,
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class AuthenticationError(DocHubError):
    """Missing or invalid API key."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class NotFoundError(DocHubError):
    """Resource not found error."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        message: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        ctx = context or {}
        ctx["resource_type"] = resource_type
        ctx["resource_id"] = resource_id
        super().__init__(
            message=message or f"{resource_type} not found: {resource_id}",
            error_code="NOT_FOUND",
            context=ctx,
            status_code=status.HTTP_404_NOT_FOUND,
        )


class ConflictError(DocHubError):
    """Resource conflict error."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            error_code="CONFLICT",
            context=context,
            status_code=status.HTTP_409_CONFLICT,
        )


class LockConflictError(ConflictError):
    """Project is already locked by someone else."""

    def __init__(
        self,
        project_id: str,
        locked_by: str,
        locked_at: datetime,
        expires_at: datetime | None = None,
    ):
        super().__init__(
            message="Project is already locked",
            context={
                "projectId": project_id,
                "lockedBy": locked_by,
                "lockedAt": isoformat_z(locked_at),
                "expiresAt": isoformat_z(expires_at) if expires_at else None,
            },
        )
        self.error_code = "PROJECT_LOCKED"
        self.project_id = project_id
        self.locked_by = locked_by
        self.locked_at = locked_at
        self.expires_at = expires_at


class UnavailableError(DocHubError):
    """Transient storage failure; the operation is safe to retry."""

    def __init__(
        self,
        operation: str,
        context: dict[str, Any] | None = None,
    ):
        ctx = context or {}
        ctx["operation"] = operation
        ctx["retryable"] = True
        super().__init__(
            message=f"Operation '{operation}' is temporarily unavailable, retry later",
            error_code="UNAVAILABLE",
            context=ctx,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )


def create_error_response(
    request: Request,
    error: DocHubError,
) -> JSONResponse:
    """
    Create a standardized error response with context.

    Args:
        request: FastAPI request
        error: DocHub error

    Returns:
        JSON response with error details
    """
    request_id = getattr(request.state, "request_id", "unknown")

    response_body = {
        "error": {
            "code": error.error_code,
            "message": error.message,
            "context": error.context,
        },
        "request_id": request_id,
        "path": request.url.path,
    }

    return JSONResponse(
        status_code=error.status_code,
        content=response_body,
    )


async def dochub_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler rendering DocHubError subclasses."""
    if not isinstance(exc, DocHubError):
        raise exc
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "dochub_error",
        error_code=exc.error_code,
        message=exc.message,
        context=exc.context,
        path=request.url.path,
        request_id=getattr(request.state, "request_id", "unknown"),
    )
    return create_error_response(request, exc)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to catch and format all exceptions with context.

    Ensures consistent error response format across the API.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except DocHubError as e:
            return await dochub_error_handler(request, e)
        except Exception as e:
            request_id = getattr(request.state, "request_id", "unknown")

            logger.error(
                "unhandled_error",
                error=str(e),
                error_type=type(e).__name__,
                path=request.url.path,
                request_id=request_id,
                traceback=traceback.format_exc(),
            )

            generic_error = DocHubError(
                message="An unexpected error occurred",
                error_code="INTERNAL_ERROR",
                context={
                    "error_type": type(e).__name__,
                },
            )
            return create_error_response(request, generic_error)


__all__ = [
    "DocHubError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "LockConflictError",
    "UnavailableError",
    "ErrorHandlerMiddleware",
    "create_error_response",
    "dochub_error_handler",
]
