"""Expired-lock sweep job.

Expiry is lazy: an expired lock lingers until the next read touches it.
The sweep bounds how long such rows accumulate in storage.
"""

from typing import Any

from dochub.core.locking import LockManager
from dochub.lib.logging import get_logger

logger = get_logger(__name__)


class LockSweepJob:
    """Job deleting every lock whose expiry has passed."""

    def __init__(self, lock_manager: LockManager):
        self.lock_manager = lock_manager

    async def execute(self) -> dict[str, Any]:
        """
        Execute the sweep.

        Returns:
            Dictionary with the number of removed locks and the cutoff used.
        """
        cutoff = self.lock_manager.store.clock()
        logger.info("lock_sweep_started", cutoff=cutoff.isoformat())

        removed = await self.lock_manager.store.delete_expired(cutoff)

        result = {"locks_removed": removed, "cutoff": cutoff.isoformat()}
        logger.info("lock_sweep_completed", **result)
        return result


__all__ = ["LockSweepJob"]
