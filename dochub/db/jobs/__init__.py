"""Database jobs for background tasks."""

from dochub.db.jobs.scheduler import JobScheduler
from dochub.db.jobs.sweep import LockSweepJob

__all__ = [
    "JobScheduler",
    "LockSweepJob",
]
