from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket

from .runtime_connections import ConnectionIndex
from .runtime_constants import EVENT_ACK
from .runtime_registry import SessionStore
from .runtime_utils import sanitize_room_code

logger = logging.getLogger(__name__)


def build_frame(event: str, payload: Any = None) -> dict[str, Any]:
    frame: dict[str, Any] = {"event": event}
    if payload is not None:
        frame["data"] = payload
    return frame


class MessageRouter:
    """Fan-out on top of the registry and connection index.

    Delivery is fire-and-forget: failed sends are logged and dropped. The router
    only reads the registry and index, it never changes them.
    """

    def __init__(
        self,
        store: SessionStore,
        connections: ConnectionIndex,
        stats: dict[str, int] | None = None,
    ) -> None:
        self._store = store
        self._connections = connections
        self._sockets: dict[str, WebSocket] = {}
        self._stats = stats if stats is not None else {}

    def attach(self, connection_id: str, websocket: WebSocket) -> None:
        self._sockets[connection_id] = websocket

    def detach(self, connection_id: str) -> WebSocket | None:
        return self._sockets.pop(connection_id, None)

    def is_attached(self, connection_id: str) -> bool:
        return connection_id in self._sockets

    @property
    def attached_count(self) -> int:
        return len(self._sockets)

    async def to_connection(self, connection_id: str, event: str, payload: Any = None) -> None:
        await self._send_safe(connection_id, build_frame(event, payload))

    async def send_ack(
        self,
        connection_id: str,
        request_event: str,
        request_id: str | int | None,
        payload: dict[str, Any],
    ) -> None:
        frame = build_frame(EVENT_ACK, payload)
        frame["ackFor"] = request_event
        frame["requestId"] = request_id
        await self._send_safe(connection_id, frame)

    async def to_room(self, room_code: str, event: str, payload: Any = None) -> None:
        frame = build_frame(event, payload)
        for connection_id in self._connections.connections_in(sanitize_room_code(room_code)):
            await self._send_safe(connection_id, frame, room_code=room_code)

    async def to_room_except(
        self,
        room_code: str,
        sender_connection_id: str,
        event: str,
        payload: Any = None,
    ) -> None:
        frame = build_frame(event, payload)
        for connection_id in self._connections.connections_in(sanitize_room_code(room_code)):
            if connection_id == sender_connection_id:
                continue
            await self._send_safe(connection_id, frame, room_code=room_code)

    async def to_host(self, room_code: str, event: str, payload: Any = None) -> None:
        host = self._store.host_of(room_code)
        if host is None:
            return
        await self._send_safe(host.connection_id, build_frame(event, payload), room_code=room_code)

    async def _send_safe(
        self,
        connection_id: str,
        frame: dict[str, Any],
        room_code: str | None = None,
    ) -> None:
        websocket = self._sockets.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_json(frame)
        except Exception as exc:
            # Connection may already be closed.
            self._stats["sendFailures"] = int(self._stats.get("sendFailures", 0)) + 1
            logger.debug(
                "[SEND_FAIL] room=%s connection=%s event=%s reason=%r",
                room_code or "-",
                connection_id,
                frame.get("event"),
                exc,
            )
