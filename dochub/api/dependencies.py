"""Shared service instances and FastAPI dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dochub.core.documents import ContentSource, DocumentService, NullContentSource
from dochub.core.locking import LockManager
from dochub.core.notifications import EventBroadcaster
from dochub.core.projects import ProjectService
from dochub.db import get_db
from dochub.lib.config import get_settings

# Process-wide instances: the lock manager owns the per-project mutexes
_broadcaster: EventBroadcaster | None = None
_lock_manager: LockManager | None = None
_content_source: ContentSource | None = None


def get_broadcaster() -> EventBroadcaster:
    """Get or create the global event broadcaster."""
    global _broadcaster
    if _broadcaster is None:
        _broadcaster = EventBroadcaster(queue_size=get_settings().notification_queue_size)
    return _broadcaster


def get_lock_manager() -> LockManager:
    """Get or create the global lock manager."""
    global _lock_manager
    if _lock_manager is None:
        _lock_manager = LockManager(notifier=get_broadcaster())
    return _lock_manager


def get_content_source() -> ContentSource:
    """Get the configured content source."""
    global _content_source
    if _content_source is None:
        _content_source = NullContentSource()
    return _content_source


def set_content_source(source: ContentSource | None) -> None:
    """Install the content source used by sync endpoints."""
    global _content_source
    _content_source = source


def reset_services() -> None:
    """Drop the global instances so the next request builds fresh ones."""
    global _broadcaster, _lock_manager, _content_source
    _broadcaster = None
    _lock_manager = None
    _content_source = None


def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


def get_document_service(
    db: AsyncSession = Depends(get_db),
    content_source: ContentSource = Depends(get_content_source),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
) -> DocumentService:
    return DocumentService(db, content_source=content_source, notifier=broadcaster)


__all__ = [
    "get_broadcaster",
    "get_lock_manager",
    "get_content_source",
    "set_content_source",
    "reset_services",
    "get_project_service",
    "get_document_service",
]
