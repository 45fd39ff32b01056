"""Project lock service for exclusive editing.

Per project the lock cycles Unlocked -> Locked(owner, expiry) -> Unlocked.
``extend`` moves the expiry of a live lock; an expired lock is treated as
absent by every read and removed lazily when next touched.
"""

from datetime import timedelta
from typing import Any

from dochub.api.middleware.error import (
    LockConflictError,
    NotFoundError,
    UnavailableError,
    ValidationError,
)
from dochub.core.lock_store import LockStore
from dochub.core.notifications import NotificationSink
from dochub.db.models import ProjectLock
from dochub.lib.config import Settings, get_settings
from dochub.lib.database import DatabaseRetryConfig, is_transient_error, with_retry
from dochub.lib.logging import get_logger

logger = get_logger(__name__)

LOCKED_BY_MAX_LENGTH = 100
REASON_MAX_LENGTH = 500
MIN_EXTEND_MINUTES = 1


class LockManager:
    """Public lock operations: acquire, release, extend and query."""

    def __init__(
        self,
        store: LockStore | None = None,
        notifier: NotificationSink | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.store = store or LockStore(
            isolation_level=self.settings.lock_isolation_level,
            transaction_timeout=self.settings.lock_transaction_timeout_seconds,
        )
        self.notifier = notifier
        self._retry_config = DatabaseRetryConfig(max_retries=self.settings.lock_acquire_retries)

    @staticmethod
    def _validate_locked_by(locked_by: Any) -> str:
        if not isinstance(locked_by, str):
            raise ValidationError("lockedBy must be a string", field="lockedBy")
        value = locked_by.strip()
        if not value or len(value) > LOCKED_BY_MAX_LENGTH:
            raise ValidationError(
                f"lockedBy must be between 1 and {LOCKED_BY_MAX_LENGTH} characters",
                field="lockedBy",
                context={"min_length": 1, "max_length": LOCKED_BY_MAX_LENGTH, "length": len(value)},
            )
        return value

    @staticmethod
    def _validate_reason(reason: Any) -> str | None:
        if reason is None:
            return None
        if not isinstance(reason, str):
            raise ValidationError("reason must be a string", field="reason")
        value = reason.strip()
        if len(value) > REASON_MAX_LENGTH:
            raise ValidationError(
                f"reason must be at most {REASON_MAX_LENGTH} characters",
                field="reason",
                context={"max_length": REASON_MAX_LENGTH, "length": len(value)},
            )
        return value or None

    def _validate_minutes(self, minutes: Any) -> int:
        maximum = self.settings.lock_max_extend_minutes
        if minutes is None:
            return self.settings.lock_default_ttl_minutes
        if isinstance(minutes, bool) or not isinstance(minutes, int):
            raise ValidationError("minutes must be an integer", field="minutes")
        if not MIN_EXTEND_MINUTES <= minutes <= maximum:
            raise ValidationError(
                f"minutes must be between {MIN_EXTEND_MINUTES} and {maximum}",
                field="minutes",
                context={"min": MIN_EXTEND_MINUTES, "max": maximum, "value": minutes},
            )
        return minutes

    def _notify(self, event: str, *args: Any) -> None:
        """Fire-and-forget delivery; failures are logged, never raised."""
        if self.notifier is None:
            return
        try:
            getattr(self.notifier, event)(*args)
        except Exception as e:
            logger.warning(
                "lock_notification_failed",
                notification=event,
                project_id=args[0] if args else None,
                error=str(e),
            )

    async def acquire(
        self,
        project_id: str,
        locked_by: str,
        reason: str | None = None,
        ttl_minutes: int | None = None,
    ) -> ProjectLock:
        """
        Acquire the lock of a project.

        Args:
            project_id: Project to lock
            locked_by: Identity of the holder (1-100 chars after trimming)
            reason: Optional note shown to others (max 500 chars)
            ttl_minutes: Lock lifetime; defaults to the configured TTL

        Returns:
            The new lock, expiring ``ttl_minutes`` from now

        Raises:
            ValidationError: Malformed ``locked_by``/``reason``/``ttl_minutes``
            LockConflictError: Someone holds a live lock; carries the holder
            NotFoundError: The project does not exist
            UnavailableError: Storage kept failing transiently
        """
        holder = self._validate_locked_by(locked_by)
        note = self._validate_reason(reason)
        if ttl_minutes is not None and (
            isinstance(ttl_minutes, bool) or not isinstance(ttl_minutes, int) or ttl_minutes < 1
        ):
            raise ValidationError("ttl must be a positive number of minutes", field="ttl_minutes")
        ttl = timedelta(minutes=ttl_minutes or self.settings.lock_default_ttl_minutes)

        try:
            lock = await with_retry(
                lambda: self.store.try_create(project_id, holder, note, ttl),
                config=self._retry_config,
                operation_name="lock_acquire",
            )
        except LockConflictError as e:
            logger.info(
                "lock_conflict",
                project_id=project_id,
                requested_by=holder,
                locked_by=e.locked_by,
            )
            raise
        except Exception as e:
            if is_transient_error(e):
                raise UnavailableError("lock_acquire", context={"projectId": project_id}) from e
            raise

        logger.info(
            "lock_acquired",
            project_id=project_id,
            locked_by=lock.locked_by,
            expires_at=lock.expires_at.isoformat() if lock.expires_at else None,
        )
        self._notify("on_lock_acquired", project_id, lock.locked_by, lock.locked_at)

        return lock

    async def release(self, project_id: str) -> dict[str, Any]:
        """Release the lock of a project. Releasing an unlocked project is not an error."""
        released = await self.store.delete(project_id)

        if not released:
            return {"released": False, "message": "No lock exists"}

        logger.info("lock_released", project_id=project_id)
        self._notify("on_lock_released", project_id)
        return {"released": True}

    async def extend(self, project_id: str, minutes: int | None = None) -> ProjectLock:
        """
        Push the expiry of a live lock to ``now + minutes``.

        Raises:
            ValidationError: ``minutes`` outside [1, lock_max_extend_minutes]
            NotFoundError: No active lock exists
        """
        minutes = self._validate_minutes(minutes)

        if await self.query(project_id) is None:
            raise NotFoundError("Lock", project_id, message="No active lock found")

        now = self.store.clock()
        expires_at = now + timedelta(minutes=minutes)
        lock = await self.store.update(project_id, expires_at, now)
        if lock is None:
            raise NotFoundError("Lock", project_id, message="No active lock found")

        logger.info(
            "lock_extended",
            project_id=project_id,
            minutes=minutes,
            expires_at=expires_at.isoformat(),
        )
        return lock

    async def query(self, project_id: str) -> ProjectLock | None:
        """Return the live lock of a project, removing an expired one on the way."""
        lock = await self.store.get(project_id)
        if lock is None:
            return None

        now = self.store.clock()
        if lock.is_expired(now):
            if await self.store.delete_if_expired(project_id, now):
                logger.info("lock_expired_removed", project_id=project_id, previous_holder=lock.locked_by)
            return None

        return lock

    async def is_locked(self, project_id: str) -> bool:
        """Check if a project is currently locked."""
        return await self.query(project_id) is not None

    async def cleanup_expired(self) -> int:
        """Clean up every expired lock."""
        count = await self.store.delete_expired(self.store.clock())

        if count > 0:
            logger.info("expired_locks_cleaned", count=count)

        return count


__all__ = ["LockManager", "LOCKED_BY_MAX_LENGTH", "REASON_MAX_LENGTH"]
