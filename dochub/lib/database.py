"""Database retry helpers for transient storage failures.

Lock acquisition runs inside a short serializable transaction; timeouts,
serialization failures and dropped connections are transient and safe to
retry, while constraint violations are not.
"""

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)

from dochub.lib.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


# Transient error types that should be retried
TRANSIENT_ERRORS = (
    DisconnectionError,
    InterfaceError,
    OperationalError,
    asyncio.TimeoutError,
)

TRANSIENT_MESSAGES = (
    "connection",
    "timeout",
    "unavailable",
    "reset by peer",
    "broken pipe",
    "too many connections",
    "could not serialize",
    "serialization failure",
    "deadlock detected",
    "database is locked",
)


class DatabaseRetryConfig:
    """Configuration for database retry behavior."""

    def __init__(
        self,
        max_retries: int = 1,
        initial_delay: float = 0.05,
        max_delay: float = 1.0,
        exponential_base: float = 2.0,
    ):
        """
        Initialize retry configuration.

        Args:
            max_retries: Maximum number of retry attempts
            initial_delay: Initial delay between retries in seconds
            max_delay: Maximum delay between retries in seconds
            exponential_base: Base for exponential backoff
        """
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base


DEFAULT_RETRY_CONFIG = DatabaseRetryConfig()


def is_transient_error(exc: BaseException) -> bool:
    """
    Check if an exception is a transient database error.

    Args:
        exc: Exception to check

    Returns:
        True if the error is transient and should be retried
    """
    if isinstance(exc, IntegrityError):
        return False

    if isinstance(exc, TRANSIENT_ERRORS):
        return True

    if isinstance(exc, DBAPIError):
        error_str = str(exc).lower()
        return any(msg in error_str for msg in TRANSIENT_MESSAGES)

    return False


async def with_retry(
    operation: Callable[[], Coroutine[Any, Any, T]],
    config: DatabaseRetryConfig | None = None,
    operation_name: str = "database_operation",
) -> T:
    """
    Execute a database operation, retrying transient failures.

    Non-transient exceptions propagate immediately. When retries are
    exhausted the last transient exception is re-raised.

    Args:
        operation: Async function to execute
        config: Retry configuration (uses default if None)
        operation_name: Name for logging

    Returns:
        Result of the operation
    """
    config = config or DEFAULT_RETRY_CONFIG

    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if not is_transient_error(e):
                raise

            if attempt >= config.max_retries:
                logger.error(
                    "db_retry_exhausted",
                    operation=operation_name,
                    attempts=attempt + 1,
                    error=str(e) or type(e).__name__,
                )
                raise

            delay = min(
                config.initial_delay * (config.exponential_base**attempt),
                config.max_delay,
            )

            logger.warning(
                "db_retry_attempt",
                operation=operation_name,
                attempt=attempt + 1,
                max_retries=config.max_retries,
                delay_seconds=delay,
                error=str(e) or type(e).__name__,
            )

            attempt += 1
            await asyncio.sleep(delay)


__all__ = [
    "DatabaseRetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "TRANSIENT_ERRORS",
    "is_transient_error",
    "with_retry",
]
