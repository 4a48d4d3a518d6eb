"""
WebSocket feed of new messages for the signed-in user's inbox.

The socket authenticates with ?token=<access token>, receives a snapshot of
the inbox, then one frame per new message. Clients may send
{"type": "mark_read", "id": "<message id>"} to update the counter.
"""

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from typing import Any, Dict, Optional
from uuid import UUID
import asyncio
import json
import logging

from townwrent.models.user import User
from townwrent.services.auth import AuthService
from townwrent.services.message import MessageService
from townwrent.services.notifications import NotificationHub, InboxState
from townwrent.utils.dependencies import get_auth_service, get_message_service, get_notification_hub
from townwrent.utils.exceptions import APIException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["Realtime"])


async def _handle_client_frame(
    text: str,
    state: InboxState,
    user: User,
    message_service: MessageService
) -> Optional[Dict[str, Any]]:
    """Apply a client frame; returns the frame to send back, if any."""
    try:
        payload = json.loads(text)
    except ValueError:
        return {"type": "error", "message": "Invalid JSON"}

    if not isinstance(payload, dict) or payload.get("type") != "mark_read":
        return {"type": "error", "message": "Unsupported frame"}

    message_id = str(payload.get("id") or "")
    try:
        await message_service.mark_read(UUID(message_id), user)
    except ValueError:
        return {"type": "error", "message": "Invalid message id"}
    except APIException as e:
        return {"type": "error", "message": e.detail}

    state.mark_read(message_id)
    return {"type": "read", "id": message_id, "unread_count": state.unread_count}


@router.websocket("/messages")
async def inbox_feed(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    auth_service: AuthService = Depends(get_auth_service),
    message_service: MessageService = Depends(get_message_service),
    hub: NotificationHub = Depends(get_notification_hub)
):
    try:
        user = await auth_service.get_current_user(token or "")
    except APIException as e:
        logger.info(f"Rejected realtime connection: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    # Subscribe before the snapshot so no insert falls between the two
    subscription = hub.subscribe(user.id)
    state = InboxState()
    receive_task: Optional[asyncio.Task] = None
    event_task: Optional[asyncio.Task] = None

    try:
        messages = await message_service.get_inbox(user)
        state.load([m.to_dict() for m in messages])
        await websocket.send_json({"type": "snapshot", **state.snapshot()})

        while True:
            if receive_task is None:
                receive_task = asyncio.ensure_future(websocket.receive_text())
            if event_task is None:
                event_task = asyncio.ensure_future(subscription.get())

            done, _ = await asyncio.wait({receive_task, event_task}, return_when=asyncio.FIRST_COMPLETED)

            if event_task in done:
                event = event_task.result()
                event_task = None
                state.on_insert(event["record"])
                await websocket.send_json({
                    "type": event["event"].lower(),
                    "message": event["record"],
                    "unread_count": state.unread_count,
                })

            if receive_task in done:
                text = receive_task.result()
                receive_task = None
                reply = await _handle_client_frame(text, state, user, message_service)
                if reply:
                    await websocket.send_json(reply)
    except WebSocketDisconnect:
        logger.debug(f"Realtime connection closed for user {user.id}")
    finally:
        for task in (receive_task, event_task):
            if task is not None and not task.done():
                task.cancel()
        hub.unsubscribe(subscription)
