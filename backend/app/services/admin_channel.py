"""
Admin Channel Manager

Realtime fan-out of registration events to admin dashboards:
- Connection bookkeeping for every open websocket
- A single "admin" room joined with the joinAdminRoom event
- Best-effort, at-most-once newRegistration broadcasts

Nothing is queued for members that are offline at publish time; a
reconnecting dashboard re-fetches the list to resynchronize.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket

from app.core.config import settings
from app.core.logging_config import logger


class ChannelEvent(str, Enum):
    """Websocket event names"""
    # Client -> server
    JOIN_ADMIN_ROOM = "joinAdminRoom"
    PING = "ping"

    # Server -> client
    JOINED_ADMIN_ROOM = "joinedAdminRoom"
    NEW_REGISTRATION = "newRegistration"
    PONG = "pong"
    ERROR = "error"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ChannelConnection:
    """One open websocket"""
    websocket: WebSocket
    connection_id: str
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    joined_at: Optional[datetime] = None


class AdminChannelManager:
    """
    Manages websocket connections and the admin room.

    Membership changes are guarded by an asyncio.Lock; sends happen on a
    snapshot of the room so a slow member never blocks join/leave.
    """

    def __init__(self):
        self._connections: Dict[str, ChannelConnection] = {}
        self._admin_room: Set[str] = set()
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    @property
    def admin_count(self) -> int:
        return len(self._admin_room)

    def is_admin_member(self, connection_id: str) -> bool:
        return connection_id in self._admin_room

    async def connect(self, websocket: WebSocket) -> str:
        """Accept the websocket and register it; returns its connection id"""
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        async with self._lock:
            self._connections[connection_id] = ChannelConnection(websocket=websocket, connection_id=connection_id)
        logger.info(f"[AdminChannel] Connected {connection_id} ({self.connection_count} open)")
        return connection_id

    async def disconnect(self, connection_id: str) -> None:
        """Forget the connection; membership ends with the transport"""
        async with self._lock:
            self._connections.pop(connection_id, None)
            self._admin_room.discard(connection_id)
        logger.info(f"[AdminChannel] Disconnected {connection_id} ({self.connection_count} open)")

    async def join_admin_room(self, connection_id: str) -> bool:
        async with self._lock:
            connection = self._connections.get(connection_id)
            if connection is None:
                return False
            self._admin_room.add(connection_id)
            connection.joined_at = datetime.now(timezone.utc)
        logger.info(f"[AdminChannel] {connection_id} joined admin room ({self.admin_count} members)")
        return True

    async def send_to(self, connection_id: str, event: ChannelEvent, data: Optional[Dict[str, Any]] = None) -> bool:
        """Send one event to one connection; a failed send drops the connection"""
        connection = self._connections.get(connection_id)
        if connection is None:
            return False
        message: Dict[str, Any] = {"event": event.value}
        if data is not None:
            message["data"] = data
        try:
            await connection.websocket.send_json(message)
            return True
        except Exception as e:
            logger.error(f"[AdminChannel] Error sending to {connection_id}: {e}")
            await self.disconnect(connection_id)
            return False

    async def broadcast_to_admins(self, event: ChannelEvent, data: Dict[str, Any]) -> int:
        """Send to every current admin room member; returns the delivered count"""
        async with self._lock:
            members: List[ChannelConnection] = [
                self._connections[cid] for cid in self._admin_room if cid in self._connections
            ]

        if not members:
            return 0

        message = {"event": event.value, "data": data}
        dead: List[str] = []
        for connection in members:
            try:
                await connection.websocket.send_json(message)
            except Exception as e:
                logger.error(f"[AdminChannel] Error broadcasting to {connection.connection_id}: {e}")
                dead.append(connection.connection_id)

        for connection_id in dead:
            await self.disconnect(connection_id)

        delivered = len(members) - len(dead)
        logger.log_broadcast(event.value, recipients=delivered, failed=len(dead))
        return delivered

    async def publish_new_registration(self, registration: Dict[str, Any]) -> int:
        """
        Push a stored registration to the admin room.

        Never raises: this runs after the HTTP response and its failures
        are only logged.
        """
        try:
            payload = {
                **registration,
                "eventSource": settings.EVENT_SOURCE,
                "timestamp": utc_timestamp(),
            }
            return await self.broadcast_to_admins(ChannelEvent.NEW_REGISTRATION, payload)
        except Exception as e:
            registration_id = registration.get("id") if isinstance(registration, dict) else None
            logger.log_error_with_context(e, context="publish newRegistration", registration_id=registration_id)
            return 0


admin_channel = AdminChannelManager()
