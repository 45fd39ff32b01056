"""Core services package."""

from dochub.core.documents import ContentSource, DocumentService, NullContentSource, RemoteDocument
from dochub.core.fingerprint import EMPTY_FINGERPRINT, Fingerprint, compute_fingerprint
from dochub.core.lock_store import KeyedMutex, LockStore
from dochub.core.locking import LockManager
from dochub.core.notifications import EventBroadcaster, NotificationSink
from dochub.core.projects import ProjectService

__all__ = [
    "LockManager",
    "LockStore",
    "KeyedMutex",
    "DocumentService",
    "ContentSource",
    "NullContentSource",
    "RemoteDocument",
    "ProjectService",
    "EventBroadcaster",
    "NotificationSink",
    "Fingerprint",
    "EMPTY_FINGERPRINT",
    "compute_fingerprint",
]
