"""API key authentication middleware."""

import secrets
from collections.abc import Awaitable, Callable

from fastapi import Request
from starlette.responses import Response

from dochub.api.middleware.error import AuthenticationError, create_error_response
from dochub.lib.config import get_settings
from dochub.lib.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

# Paths that bypass authentication
BYPASS_PATHS = {
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
}


def is_valid_api_key(api_key: str | None) -> bool:
    """Compare a presented key with the configured one; no key configured accepts all."""
    if settings.api_key is None:
        return True
    return api_key is not None and secrets.compare_digest(api_key, settings.api_key)


async def api_key_auth_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Verify API key for protected endpoints."""
    if (
        settings.api_key is None
        or request.url.path in BYPASS_PATHS
        or request.url.path.startswith("/docs")
    ):
        return await call_next(request)

    api_key = request.headers.get("X-API-Key")

    if not api_key:
        logger.warning(
            "missing_api_key",
            path=request.url.path,
            method=request.method,
        )
        return create_error_response(request, AuthenticationError("Missing API key"))

    if not is_valid_api_key(api_key):
        logger.warning(
            "invalid_api_key",
            path=request.url.path,
            method=request.method,
        )
        return create_error_response(request, AuthenticationError("Invalid API key"))

    return await call_next(request)
