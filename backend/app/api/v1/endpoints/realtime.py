"""
Realtime websocket for admin dashboards.

Protocol (JSON text frames, {"event": <name>, "data": <payload>}):
- client -> server: joinAdminRoom, ping
- server -> client: joinedAdminRoom, newRegistration, pong, error
"""
import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.core.config import settings
from app.core.logging_config import logger
from app.services.admin_channel import admin_channel, ChannelEvent

router = APIRouter(tags=["Realtime"])


@router.websocket(settings.ADMIN_WS_PATH)
async def admin_websocket(websocket: WebSocket):
    """
    Connect with: ws://host/ws

    Send {"event": "joinAdminRoom"} to start receiving newRegistration
    events. Membership does not survive a reconnect; join again.
    """
    connection_id = await admin_channel.connect(websocket)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await admin_channel.send_to(connection_id, ChannelEvent.ERROR, {"message": "Messages must be JSON"})
                continue

            event = message.get("event") if isinstance(message, dict) else None

            if event == ChannelEvent.JOIN_ADMIN_ROOM.value:
                await admin_channel.join_admin_room(connection_id)
                await admin_channel.send_to(connection_id, ChannelEvent.JOINED_ADMIN_ROOM)

            elif event == ChannelEvent.PING.value:
                await admin_channel.send_to(connection_id, ChannelEvent.PONG)

            elif event == ChannelEvent.NEW_REGISTRATION.value:
                # Server-to-client only; never re-broadcast client input
                logger.warning(f"[AdminChannel] Ignoring client-sent {event} from {connection_id}")
                await admin_channel.send_to(
                    connection_id, ChannelEvent.ERROR,
                    {"message": f"'{event}' is a server-to-client event"}
                )

            else:
                await admin_channel.send_to(
                    connection_id, ChannelEvent.ERROR,
                    {"message": f"Unknown event: {event!r}"}
                )

    except WebSocketDisconnect:
        pass
    finally:
        await admin_channel.disconnect(connection_id)
