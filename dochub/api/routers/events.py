"""WebSocket push of lock and document events.

Clients join the room of one project and receive ``lock:acquired``,
``lock:released`` and ``doc:updated`` events as JSON messages.
"""

import asyncio

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from dochub.api.dependencies import get_broadcaster
from dochub.api.middleware.auth import is_valid_api_key
from dochub.core.notifications import EventBroadcaster
from dochub.db import SessionLocal
from dochub.db.repository import ProjectRepository
from dochub.lib.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["events"])

CLOSE_UNAUTHORIZED = 4401
CLOSE_NOT_FOUND = 4404


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    """Consume client frames until the connection goes away."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws/projects/{project_id}")
async def project_events(
    websocket: WebSocket,
    project_id: str,
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
) -> None:
    """Stream the events of one project until the client disconnects."""
    await websocket.accept()

    api_key = websocket.query_params.get("apiKey") or websocket.headers.get("x-api-key")
    if not is_valid_api_key(api_key):
        logger.warning("websocket_unauthorized", project_id=project_id)
        await websocket.close(code=CLOSE_UNAUTHORIZED, reason="Invalid API key")
        return

    async with SessionLocal() as session:
        exists = await ProjectRepository(session).exists(project_id)
    if not exists:
        await websocket.close(code=CLOSE_NOT_FOUND, reason="Project not found")
        return

    async with broadcaster.subscription(project_id) as queue:
        await websocket.send_json({"type": "subscribed", "projectId": project_id})
        logger.info("websocket_subscribed", project_id=project_id)

        disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
        next_event: asyncio.Task | None = None
        try:
            while True:
                next_event = asyncio.create_task(queue.get())
                done, _ = await asyncio.wait(
                    {next_event, disconnected},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if disconnected in done:
                    break
                await websocket.send_json(next_event.result())
        except WebSocketDisconnect:
            pass
        finally:
            for task in (next_event, disconnected):
                if task is not None and not task.done():
                    task.cancel()
            logger.info("websocket_unsubscribed", project_id=project_id)
