"""HTTP client for the DocHub API with configurable timeouts.

Used by polling clients (session-start checks, editors) that reconcile a
local copy of project documentation against the platform.
"""

from typing import Any

import httpx

from dochub.lib.logging import get_logger

logger = get_logger(__name__)


# Default timeout values by operation type
DEFAULT_TIMEOUTS = {
    "connect": 10.0,
    "read": 30.0,
    "write": 30.0,
    "pool": 10.0,
}


class TimeoutConfig:
    """Timeout configuration for HTTP requests."""

    def __init__(
        self,
        connect: float = DEFAULT_TIMEOUTS["connect"],
        read: float = DEFAULT_TIMEOUTS["read"],
        write: float = DEFAULT_TIMEOUTS["write"],
        pool: float = DEFAULT_TIMEOUTS["pool"],
    ):
        self.connect = connect
        self.read = read
        self.write = write
        self.pool = pool

    def to_httpx(self) -> httpx.Timeout:
        """Convert to httpx Timeout object."""
        return httpx.Timeout(
            connect=self.connect,
            read=self.read,
            write=self.write,
            pool=self.pool,
        )


# Preset timeout configurations
TIMEOUT_PRESETS = {
    "default": TimeoutConfig(),
    "quick": TimeoutConfig(connect=5.0, read=10.0, write=10.0, pool=5.0),
    # Full sync pulls every document of a project
    "sync": TimeoutConfig(connect=10.0, read=120.0, write=30.0, pool=10.0),
}


class APIError(Exception):
    """API error with status code and the server's error payload."""

    def __init__(self, status_code: int, message: str, details: dict[str, Any] | None = None):
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{status_code}] {message}")


class PlatformClient:
    """
    Async client for the lock, fingerprint and sync endpoints.

    Example:
        async with PlatformClient("http://localhost:8000", api_key="...") as client:
            status = await client.get_status("cabc...")
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: TimeoutConfig | str = "default",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the DocHub API
            api_key: Value sent as ``X-API-Key``
            timeout: Timeout configuration or preset name
            transport: Optional httpx transport (e.g. ASGI transport in tests)
        """
        if isinstance(timeout, str):
            timeout = TIMEOUT_PRESETS.get(timeout, TIMEOUT_PRESETS["default"])

        self._timeout = timeout
        self._base_url = base_url or "http://localhost:8000"
        self._headers = {"X-API-Key": api_key} if api_key else {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async client."""
        if self._client is None or self._client.is_closed:
            client_kwargs: dict[str, Any] = {
                "base_url": self._base_url,
                "timeout": self._timeout.to_httpx(),
                "headers": self._headers,
            }
            if self._transport is not None:
                client_kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**client_kwargs)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _handle_response(response: httpx.Response) -> Any:
        """Return the decoded JSON body or raise APIError."""
        if response.status_code >= 400:
            try:
                error = response.json().get("error", {})
                message = error.get("message") or response.text
                details = error.get("context", {})
            except (ValueError, AttributeError):
                message = response.text or f"HTTP {response.status_code}"
                details = {}
            raise APIError(response.status_code, message, details)
        return response.json()

    async def _request(
        self,
        method: str,
        url: str,
        json: dict[str, Any] | None = None,
        timeout: str | None = None,
    ) -> Any:
        client = await self._get_client()
        request_timeout = TIMEOUT_PRESETS[timeout].to_httpx() if timeout else None

        logger.debug("http_request", method=method, url=url)

        try:
            kwargs: dict[str, Any] = {"json": json}
            if request_timeout is not None:
                kwargs["timeout"] = request_timeout
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error("http_request_timeout", method=method, url=url, error=str(e))
            raise
        except httpx.HTTPError as e:
            logger.error("http_request_error", method=method, url=url, error=str(e))
            raise

        logger.debug("http_response", method=method, url=url, status_code=response.status_code)
        return self._handle_response(response)

    async def get_status(self, project_id: str) -> dict[str, Any]:
        """Lock status: ``{locked, lockedBy?, lockedAt?, expiresAt?}``."""
        return await self._request("GET", f"/api/hook/status/{project_id}")

    async def get_fingerprint(self, project_id: str) -> dict[str, Any]:
        """Current fingerprint: ``{fingerprint, documentCount}``."""
        return await self._request("GET", f"/api/hook/docs/{project_id}")

    async def full_sync(self, project_id: str) -> dict[str, Any]:
        """Full content pull: ``{documents: [{fileName, content, hash}], fingerprint}``."""
        return await self._request("POST", f"/api/hook/sync/{project_id}", timeout="sync")

    async def acquire_lock(
        self, project_id: str, locked_by: str, reason: str | None = None
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"lockedBy": locked_by}
        if reason is not None:
            body["reason"] = reason
        return await self._request("POST", f"/api/projects/{project_id}/lock", json=body)

    async def release_lock(self, project_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/api/projects/{project_id}/lock")

    async def extend_lock(self, project_id: str, minutes: int | None = None) -> dict[str, Any]:
        body = {"minutes": minutes} if minutes is not None else {}
        return await self._request("POST", f"/api/projects/{project_id}/lock/extend", json=body)

    async def __aenter__(self) -> "PlatformClient":
        await self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.close()


__all__ = [
    "APIError",
    "PlatformClient",
    "TimeoutConfig",
    "TIMEOUT_PRESETS",
]
