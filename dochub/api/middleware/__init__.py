"""API middleware modules."""

from dochub.api.middleware.auth import api_key_auth_middleware
from dochub.api.middleware.error import (
    ConflictError,
    DocHubError,
    ErrorHandlerMiddleware,
    LockConflictError,
    NotFoundError,
    UnavailableError,
    ValidationError,
)
from dochub.api.middleware.logging import request_logging_middleware

__all__ = [
    "api_key_auth_middleware",
    "request_logging_middleware",
    "ErrorHandlerMiddleware",
    "DocHubError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "LockConflictError",
    "UnavailableError",
]
