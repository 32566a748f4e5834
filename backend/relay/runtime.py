from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

from fastapi import WebSocket, WebSocketDisconnect

from .config import Settings, settings as default_settings
from .games.payloads import validate_game_payload
from .runtime_connections import ConnectionIndex
from .runtime_constants import (
    EVENT_CONNECTED,
    EVENT_CONTROLLER_INPUT,
    EVENT_DRAWING_CLEAR,
    EVENT_DRAWING_UPDATE,
    EVENT_GAME_STARTED,
    EVENT_GAME_STATE_UPDATE,
    EVENT_PLAYER_GUESS,
    EVENT_PLAYER_JOINED,
    EVENT_PLAYER_LEFT,
    EVENT_PLAYER_READY,
    EVENT_ROOM_ENDED,
    HOST_DISCONNECT_REASON,
    ROOM_EXPIRED_REASON,
    TEARDOWN_TIMER_KEY,
)
from .runtime_errors import NotInRoom, PlayerNotFound, RoomNotFound, Unauthorized
from .runtime_message_handlers import handle_message, parse_client_frame
from .runtime_registry import SessionStore
from .runtime_router import MessageRouter
from .runtime_state_builders import (
    build_player_payload,
    build_room_info,
    build_room_summary,
    build_roster,
    build_roster_change,
)
from .runtime_types import Player, Room
from .runtime_utils import now_ms, random_id, sanitize_room_code

logger = logging.getLogger(__name__)


class RelayRuntime:
    def __init__(
        self,
        settings: Settings | None = None,
        store: SessionStore | None = None,
        connections: ConnectionIndex | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.store = store or SessionStore(code_length=self.settings.room_code_length)
        self.connections = connections or ConnectionIndex()
        self._ws_stats: dict[str, int] = {
            "connectAttempts": 0,
            "disconnects": 0,
            "messageReceived": 0,
            "sendFailures": 0,
            "roomsCreated": 0,
            "roomsClosed": 0,
            "roomsExpired": 0,
            "playersJoined": 0,
            "playersLeft": 0,
            "playersRebound": 0,
            "rejectRoomNotFound": 0,
            "rejectNotInRoom": 0,
            "rejectPlayerNotFound": 0,
            "unauthorizedDropped": 0,
            "invalidPayloads": 0,
            "activeConnections": 0,
            "peakConnections": 0,
        }
        self.router = MessageRouter(self.store, self.connections, stats=self._ws_stats)
        # Every event runs to completion under this lock, which keeps per-room delivery FIFO.
        self.lock = asyncio.Lock()
        self._sweep_task: asyncio.Task[None] | None = None

    @property
    def active_rooms_count(self) -> int:
        return len(self.store)

    def _increment_stat(self, key: str, amount: int = 1) -> None:
        self._ws_stats[key] = int(self._ws_stats.get(key, 0)) + amount

    def _on_connect(self) -> None:
        self._increment_stat("connectAttempts")
        active_connections = int(self._ws_stats.get("activeConnections", 0)) + 1
        self._ws_stats["activeConnections"] = active_connections
        if active_connections > int(self._ws_stats.get("peakConnections", 0)):
            self._ws_stats["peakConnections"] = active_connections

    def _on_disconnect(self) -> None:
        self._increment_stat("disconnects")
        active_connections = max(0, int(self._ws_stats.get("activeConnections", 0)) - 1)
        self._ws_stats["activeConnections"] = active_connections

    def _log_ws_event(self, event: str, level: int = logging.INFO, **fields: object) -> None:
        logger.log(
            level,
            "ws.%s %s",
            event,
            json.dumps(fields, ensure_ascii=False, separators=(",", ":")),
        )

    async def get_ws_stats(self) -> dict[str, Any]:
        async with self.lock:
            room_summaries = [
                build_room_summary(room, len(self.connections.connections_in(room.code)))
                for room in self.store.rooms()
            ]

        room_summaries.sort(key=lambda item: int(item.get("players", 0)), reverse=True)

        return {
            "generatedAt": now_ms(),
            "activeRooms": len(room_summaries),
            "stats": dict(self._ws_stats),
            "rooms": room_summaries[:50],
        }

    async def start(self) -> None:
        if self.settings.room_idle_timeout_seconds <= 0:
            return
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop(), name="relay:idle-sweep")

    async def shutdown(self) -> None:
        if self._sweep_task is not None and not self._sweep_task.done():
            self._sweep_task.cancel()
        self._sweep_task = None

        async with self.lock:
            for room in self.store.rooms():
                self._clear_timers(room)
                self.connections.unbind_room(room.code)
                self.store.delete_room(room.code)

        self._ws_stats["activeConnections"] = 0

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def open_connection(self, websocket: WebSocket) -> str:
        connection_id = random_id()
        self.router.attach(connection_id, websocket)
        self._on_connect()
        await self.router.to_connection(connection_id, EVENT_CONNECTED, {"connectionId": connection_id})
        return connection_id

    async def handle_websocket(self, websocket: WebSocket) -> None:
        await websocket.accept()
        connection_id = await self.open_connection(websocket)
        self._log_ws_event("connect", level=logging.DEBUG, connectionId=connection_id)

        disconnect_code: int | None = None
        disconnect_reason = "unknown"

        try:
            while True:
                raw = await websocket.receive_text()
                envelope = parse_client_frame(raw)
                if envelope is None:
                    continue
                self._increment_stat("messageReceived")
                await self.handle_event(
                    connection_id,
                    envelope.event,
                    envelope.data,
                    request_id=envelope.requestId,
                )
        except WebSocketDisconnect as exc:
            disconnect_code = exc.code
            disconnect_reason = "websocket_disconnect"
        except Exception:
            disconnect_reason = "server_error"
            logger.exception("Unexpected websocket error for connection %s", connection_id)
        finally:
            await self.disconnect(connection_id, reason=disconnect_reason, close_code=disconnect_code)

    async def handle_event(
        self,
        connection_id: str,
        event: str,
        data: Any = None,
        request_id: str | int | None = None,
    ) -> None:
        async with self.lock:
            room_code = self.connections.room_of(connection_id)
            if room_code:
                self.store.touch(room_code)
            await handle_message(self, connection_id, event, data, request_id)

    async def disconnect(
        self,
        connection_id: str,
        reason: str = "unknown",
        close_code: int | None = None,
    ) -> None:
        async with self.lock:
            if self.router.detach(connection_id) is not None:
                self._on_disconnect()
            await self._release_connection(connection_id, reason=reason, close_code=close_code)

    # ------------------------------------------------------------------
    # Lifecycle operations. Callers hold ``self.lock``.
    # ------------------------------------------------------------------

    def _resolve(self, connection_id: str) -> tuple[Room, Player] | None:
        room_code = self.connections.room_of(connection_id)
        if room_code is None:
            return None
        room = self.store.get_room(room_code)
        if room is None:
            return None
        for player in room.players.values():
            if player.connection_id == connection_id:
                return room, player
        return None

    async def create_room(self, connection_id: str) -> dict[str, Any]:
        await self._release_connection(connection_id, reason="create_room")

        room, host = self.store.create_room(connection_id)
        self.connections.bind(connection_id, room.code)
        self._increment_stat("roomsCreated")
        self._log_ws_event("room_created", roomCode=room.code, hostId=host.id)
        return {
            "success": True,
            "roomCode": room.code,
            "player": build_player_payload(host),
        }

    async def join_room(
        self,
        connection_id: str,
        room_code: Any,
        player_name: Any = None,
    ) -> dict[str, Any]:
        code = sanitize_room_code(room_code)
        try:
            if not self.store.is_joinable(code):
                raise RoomNotFound()
            await self._release_connection(connection_id, reason="join_room")
            player = self.store.join_room(code, player_name, connection_id)
        except RoomNotFound:
            self._log_ws_event("join_rejected", level=logging.WARNING, roomCode=code or "-")
            raise

        room = self.store.require_room(code)
        self.connections.bind(connection_id, room.code)
        self._increment_stat("playersJoined")
        self._log_ws_event(
            "player_joined",
            roomCode=room.code,
            playerId=player.id,
            name=player.name,
            players=len(room.players),
        )

        await self.router.to_room(room.code, EVENT_PLAYER_JOINED, build_roster_change(room, player))
        return {
            "success": True,
            "player": build_player_payload(player),
            "players": build_roster(room),
        }

    async def get_room_info(self, connection_id: str) -> dict[str, Any]:
        room_code = self.connections.room_of(connection_id)
        if room_code is None:
            raise NotInRoom()
        room = self.store.get_room(room_code)
        if room is None:
            raise RoomNotFound()
        return build_room_info(room)

    async def get_player_info(self, connection_id: str, player_id: str) -> dict[str, Any]:
        found = self.store.find_player_by_id(player_id) if player_id else None
        if found is None:
            self._log_ws_event("rebind_rejected", level=logging.WARNING, playerId=player_id or "-")
            raise PlayerNotFound()

        room, player = found
        current = self._resolve(connection_id)
        if current is not None and current[1] is not player:
            await self._release_connection(connection_id, reason="rebind")

        previous_connection_id = player.connection_id
        if previous_connection_id != connection_id:
            if self.connections.room_of(previous_connection_id) == room.code:
                self.connections.unbind(previous_connection_id)
            player.connection_id = connection_id
        self.connections.bind(connection_id, room.code)
        self._increment_stat("playersRebound")
        self._log_ws_event(
            "player_rebound",
            roomCode=room.code,
            playerId=player.id,
            isHost=player.is_host,
            replaced=previous_connection_id != connection_id,
        )

        return {
            "success": True,
            "player": build_player_payload(player),
            "roomCode": room.code,
            "currentGame": room.current_game,
        }

    async def start_game(self, connection_id: str, game_name: str) -> None:
        resolved = self._resolve(connection_id)
        if resolved is None:
            return
        room, player = resolved
        if not player.is_host:
            raise Unauthorized()
        if room.phase == "ending":
            return

        self.store.set_current_game(room.code, game_name)
        self._log_ws_event("game_started", roomCode=room.code, gameName=game_name)
        await self.router.to_room(room.code, EVENT_GAME_STARTED, {"gameName": game_name})

    async def update_game_state(self, connection_id: str, data: Any) -> None:
        room_code = self.connections.room_of(connection_id)
        if room_code is None or room_code not in self.store:
            return

        patch = validate_game_payload(data, strict=self.settings.strict_game_payloads)
        self.store.merge_game_state(room_code, patch)
        await self.router.to_room_except(room_code, connection_id, EVENT_GAME_STATE_UPDATE, patch)

    async def relay_controller_input(self, connection_id: str, data: dict[str, Any]) -> None:
        resolved = self._resolve(connection_id)
        if resolved is None:
            return
        room, player = resolved
        payload = {"playerId": player.id}
        payload.update((key, value) for key, value in data.items() if key != "playerId")
        await self.router.to_host(room.code, EVENT_CONTROLLER_INPUT, payload)

    async def relay_draw_point(self, connection_id: str, point: dict[str, Any]) -> None:
        room_code = self.connections.room_of(connection_id)
        if room_code is None:
            return
        await self.router.to_room(room_code, EVENT_DRAWING_UPDATE, point)

    async def relay_clear_canvas(self, connection_id: str) -> None:
        room_code = self.connections.room_of(connection_id)
        if room_code is None:
            return
        await self.router.to_room(room_code, EVENT_DRAWING_CLEAR)

    async def relay_guess(self, connection_id: str, guess: str) -> None:
        resolved = self._resolve(connection_id)
        if resolved is None:
            return
        room, player = resolved
        await self.router.to_host(room.code, EVENT_PLAYER_GUESS, {"playerId": player.id, "guess": guess})

    async def relay_player_ready(self, connection_id: str) -> None:
        resolved = self._resolve(connection_id)
        if resolved is None:
            return
        room, player = resolved
        await self.router.to_host(room.code, EVENT_PLAYER_READY, {"playerId": player.id})

    async def end_room(self, connection_id: str) -> None:
        resolved = self._resolve(connection_id)
        if resolved is None:
            return
        room, player = resolved
        if not player.is_host:
            raise Unauthorized()

        self._log_ws_event("room_ended", roomCode=room.code, players=len(room.players))
        await self.router.to_room(room.code, EVENT_ROOM_ENDED)
        self._teardown_room(room, reason="end_room")

    async def sweep_idle_rooms(self) -> int:
        timeout_ms = self.settings.room_idle_timeout_seconds * 1000
        if timeout_ms <= 0:
            return 0

        expired = self.store.idle_rooms(timeout_ms)
        for room in expired:
            await self.router.to_room(room.code, EVENT_ROOM_ENDED, {"reason": ROOM_EXPIRED_REASON})
            self._increment_stat("roomsExpired")
            self._log_ws_event("room_expired", roomCode=room.code, players=len(room.players))
            self._teardown_room(room, reason="idle")
        return len(expired)

    async def _release_connection(
        self,
        connection_id: str,
        reason: str = "unknown",
        close_code: int | None = None,
    ) -> None:
        room_code = self.connections.room_of(connection_id)
        if room_code is None:
            return

        resolved = self._resolve(connection_id)
        if resolved is None:
            self.connections.unbind(connection_id)
            return

        room, player = resolved
        self.connections.unbind(connection_id)

        if player.is_host:
            if room.phase == "ending":
                return
            room.phase = "ending"
            self._log_ws_event(
                "host_disconnected",
                roomCode=room.code,
                reason=reason,
                closeCode=close_code,
                graceMs=self.settings.host_disconnect_grace_ms,
            )
            await self.router.to_room(room.code, EVENT_ROOM_ENDED, {"reason": HOST_DISCONNECT_REASON})
            self._schedule_timer(
                room,
                TEARDOWN_TIMER_KEY,
                self.settings.host_disconnect_grace_ms,
                self._finish_host_teardown,
            )
            return

        removed = self.store.remove_player(room.code, player.id)
        if removed is None:
            return
        self._increment_stat("playersLeft")
        self._log_ws_event(
            "player_left",
            roomCode=room.code,
            playerId=removed.id,
            reason=reason,
            closeCode=close_code,
        )
        await self.router.to_room(room.code, EVENT_PLAYER_LEFT, build_roster_change(room, removed))

    async def _finish_host_teardown(self, room: Room) -> None:
        self._teardown_room(room, reason="host_disconnected")

    def _teardown_room(self, room: Room, reason: str) -> None:
        self._clear_timers(room)
        released = self.connections.unbind_room(room.code)
        for player in room.players.values():
            if self.connections.room_of(player.connection_id) == room.code:
                self.connections.unbind(player.connection_id)

        if self.store.get_room(room.code) is room:
            self.store.delete_room(room.code)
            self._increment_stat("roomsClosed")
        self._log_ws_event("room_closed", roomCode=room.code, reason=reason, released=len(released))

    def _cancel_timer(self, room: Room, key: str) -> None:
        task = room.timers.get(key)
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()
        room.timers[key] = None

    def _clear_timers(self, room: Room) -> None:
        for key in list(room.timers):
            self._cancel_timer(room, key)

    def _schedule_timer(
        self,
        room: Room,
        key: str,
        delay_ms: int,
        callback: Callable[[Room], Awaitable[None]],
    ) -> None:
        self._cancel_timer(room, key)
        delay_s = max(0, delay_ms or 0) / 1000

        async def runner() -> None:
            try:
                await asyncio.sleep(delay_s)
            except asyncio.CancelledError:
                return
            async with self.lock:
                await callback(room)

        room.timers[key] = asyncio.create_task(runner(), name=f"{room.code}:{key}")

    async def _sweep_loop(self) -> None:
        interval_s = self.settings.room_sweep_interval_seconds
        while True:
            await asyncio.sleep(interval_s)
            try:
                async with self.lock:
                    await self.sweep_idle_rooms()
            except Exception:
                logger.exception("Idle room sweep failed")


runtime = RelayRuntime()
