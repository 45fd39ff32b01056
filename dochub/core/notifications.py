"""Lock and document event broadcasting.

Events fan out to per-project rooms of subscriber queues. Publishing never
blocks: a subscriber whose buffer is full misses the event.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Protocol

from dochub.lib.clock import isoformat_z
from dochub.lib.logging import get_logger

logger = get_logger(__name__)

LOCK_ACQUIRED = "lock:acquired"
LOCK_RELEASED = "lock:released"
DOC_UPDATED = "doc:updated"


class NotificationSink(Protocol):
    """Receiver of lock and document events; calls must not block."""

    def on_lock_acquired(self, project_id: str, locked_by: str, locked_at: datetime) -> None: ...

    def on_lock_released(self, project_id: str) -> None: ...

    def on_document_updated(self, project_id: str, file_name: str, hash: str) -> None: ...


class EventBroadcaster:
    """In-process publisher of project events to subscribed queues."""

    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._rooms: dict[str, set[asyncio.Queue[dict[str, Any]]]] = {}

    def subscribe(self, project_id: str) -> asyncio.Queue[dict[str, Any]]:
        """Register a new subscriber queue for a project room."""
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=self._queue_size)
        self._rooms.setdefault(project_id, set()).add(queue)
        logger.debug("subscriber_joined", project_id=project_id, room_size=len(self._rooms[project_id]))
        return queue

    def unsubscribe(self, project_id: str, queue: asyncio.Queue[dict[str, Any]]) -> None:
        """Remove a subscriber queue; empty rooms are dropped."""
        room = self._rooms.get(project_id)
        if room is None:
            return
        room.discard(queue)
        if not room:
            del self._rooms[project_id]
        logger.debug("subscriber_left", project_id=project_id)

    @asynccontextmanager
    async def subscription(self, project_id: str) -> AsyncIterator[asyncio.Queue[dict[str, Any]]]:
        """Subscribe for the duration of a ``with`` block."""
        queue = self.subscribe(project_id)
        try:
            yield queue
        finally:
            self.unsubscribe(project_id, queue)

    def subscriber_count(self, project_id: str) -> int:
        return len(self._rooms.get(project_id, ()))

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    def publish(self, project_id: str, event: dict[str, Any]) -> int:
        """
        Deliver an event to every subscriber of the project room.

        Returns:
            Number of subscribers the event was queued for
        """
        delivered = 0
        for queue in list(self._rooms.get(project_id, ())):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(
                    "event_dropped_queue_full",
                    project_id=project_id,
                    event_type=event.get("type"),
                )
        logger.info(
            "event_broadcast",
            project_id=project_id,
            event_type=event.get("type"),
            delivered=delivered,
        )
        return delivered

    def on_lock_acquired(self, project_id: str, locked_by: str, locked_at: datetime) -> None:
        self.publish(
            project_id,
            {
                "type": LOCK_ACQUIRED,
                "projectId": project_id,
                "lockedBy": locked_by,
                "lockedAt": isoformat_z(locked_at),
            },
        )

    def on_lock_released(self, project_id: str) -> None:
        self.publish(project_id, {"type": LOCK_RELEASED, "projectId": project_id})

    def on_document_updated(self, project_id: str, file_name: str, hash: str) -> None:
        self.publish(
            project_id,
            {
                "type": DOC_UPDATED,
                "projectId": project_id,
                "fileName": file_name,
                "hash": hash,
            },
        )


__all__ = [
    "LOCK_ACQUIRED",
    "LOCK_RELEASED",
    "DOC_UPDATED",
    "NotificationSink",
    "EventBroadcaster",
]
