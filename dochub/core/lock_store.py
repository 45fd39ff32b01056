"""Durable, race-free storage of project locks.

At most one live lock exists per project. Check-and-create runs as one
isolated unit: a per-project in-process mutex serializes callers sharing
this store, the transaction runs at SERIALIZABLE isolation, and the unique
constraint on ``project_locks.project_id`` rejects whichever concurrent
insert loses across processes.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dochub.api.middleware.error import LockConflictError, NotFoundError
from dochub.db.models import ProjectLock
from dochub.db.repository import ProjectLockRepository, ProjectRepository
from dochub.lib.clock import as_utc, utcnow
from dochub.lib.logging import get_logger

logger = get_logger(__name__)


class KeyedMutex:
    """Per-key asyncio locks; entries are dropped once nobody holds or awaits them."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class LockStore:
    """Atomic persistence of the single-lock-per-project invariant."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
        isolation_level: str | None = "SERIALIZABLE",
        transaction_timeout: float = 5.0,
    ):
        if session_factory is None:
            from dochub.db import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory
        self.clock = clock
        self._isolation_level = isolation_level
        self._transaction_timeout = transaction_timeout
        self._mutex = KeyedMutex()

    @asynccontextmanager
    async def _transaction(self, isolated: bool = False) -> AsyncIterator[AsyncSession]:
        """Session committed on clean exit; closing it otherwise rolls back."""
        async with self._session_factory() as session:
            if isolated and self._isolation_level:
                await session.connection(
                    execution_options={"isolation_level": self._isolation_level}
                )
            yield session
            await session.commit()

    @staticmethod
    def _conflict(existing: ProjectLock) -> LockConflictError:
        return LockConflictError(
            project_id=existing.project_id,
            locked_by=existing.locked_by,
            locked_at=as_utc(existing.locked_at),
            expires_at=as_utc(existing.expires_at) if existing.expires_at else None,
        )

    async def try_create(
        self,
        project_id: str,
        locked_by: str,
        reason: str | None,
        ttl: timedelta,
    ) -> ProjectLock:
        """
        Atomically create the lock of a project.

        An expired lock found on the way is replaced.

        Raises:
            LockConflictError: A live lock is held; carries the current holder
            NotFoundError: The project does not exist
            asyncio.TimeoutError: The transaction exceeded its timeout
        """
        async with self._mutex.hold(project_id):
            return await asyncio.wait_for(
                self._create(project_id, locked_by, reason, ttl),
                timeout=self._transaction_timeout,
            )

    async def _create(
        self,
        project_id: str,
        locked_by: str,
        reason: str | None,
        ttl: timedelta,
    ) -> ProjectLock:
        now = self.clock()
        try:
            async with self._transaction(isolated=True) as session:
                locks = ProjectLockRepository(session)

                existing = await locks.get_by_project(project_id)
                if existing is not None:
                    if not existing.is_expired(now):
                        raise self._conflict(existing)
                    # Flushed before the insert so the unique key is free
                    await locks.delete(existing.id)
                    logger.info(
                        "lock_expired_removed",
                        project_id=project_id,
                        previous_holder=existing.locked_by,
                    )

                if not await ProjectRepository(session).exists(project_id):
                    raise NotFoundError("Project", project_id)

                lock = await locks.create(
                    project_id=project_id,
                    locked_by=locked_by,
                    reason=reason,
                    locked_at=now,
                    expires_at=now + ttl,
                )
        except IntegrityError as e:
            # Another writer committed first, or the project vanished meanwhile
            winner = await self.get(project_id)
            if winner is None or winner.is_expired(now):
                raise NotFoundError("Project", project_id) from e
            raise self._conflict(winner) from e

        return lock

    async def get(self, project_id: str) -> ProjectLock | None:
        """Plain read of the stored lock, expired or not."""
        async with self._transaction() as session:
            return await ProjectLockRepository(session).get_by_project(project_id)

    async def delete(self, project_id: str) -> bool:
        """Delete the lock of a project; True if a row existed."""
        async with self._mutex.hold(project_id):
            async with self._transaction() as session:
                return await ProjectLockRepository(session).delete_by_project(project_id)

    async def update(
        self, project_id: str, new_expires_at: datetime, now: datetime
    ) -> ProjectLock | None:
        """Move the expiry of a lock that is still live at ``now``; None otherwise."""
        async with self._mutex.hold(project_id):
            async with self._transaction() as session:
                return await ProjectLockRepository(session).update_live(
                    project_id, now, expires_at=new_expires_at
                )

    async def delete_if_expired(self, project_id: str, now: datetime) -> bool:
        """Remove the project's lock only if it has expired by ``now``."""
        async with self._transaction() as session:
            removed = await ProjectLockRepository(session).cleanup_expired(now, project_id)
        return removed > 0

    async def delete_expired(self, now: datetime) -> int:
        """Remove every expired lock; returns how many were removed."""
        async with self._transaction() as session:
            return await ProjectLockRepository(session).cleanup_expired(now)


__all__ = ["KeyedMutex", "LockStore"]
