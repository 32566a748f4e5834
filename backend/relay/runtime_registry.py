from __future__ import annotations

from typing import Any, Iterator

from .runtime_constants import HOST_NAME, PLAYER_COLORS, ROOM_CODE_LENGTH
from .runtime_errors import RoomNotFound
from .runtime_types import Player, Room
from .runtime_utils import (
    default_player_name,
    new_room_code,
    now_ms,
    random_id,
    sanitize_player_name,
    sanitize_room_code,
)


class SessionStore:
    """In-memory registry of rooms and their players.

    Not thread-safe; every call is expected to run under the runtime lock.
    """

    def __init__(self, code_length: int = ROOM_CODE_LENGTH) -> None:
        self._rooms: dict[str, Room] = {}
        self._code_length = code_length

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: object) -> bool:
        return code in self._rooms

    def rooms(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))

    def create_room(self, host_connection_id: str) -> tuple[Room, Player]:
        created_at = now_ms()
        code = new_room_code(self._rooms, self._code_length)
        host = Player(
            id=random_id(),
            connection_id=host_connection_id,
            name=HOST_NAME,
            color=PLAYER_COLORS[0],
            is_host=True,
        )
        room = Room(code=code, created_at=created_at, last_activity_at=created_at)
        room.players[host.id] = host
        self._rooms[code] = room
        return room, host

    def get_room(self, code: Any) -> Room | None:
        return self._rooms.get(sanitize_room_code(code))

    def require_room(self, code: Any) -> Room:
        room = self.get_room(code)
        if room is None:
            raise RoomNotFound()
        return room

    def is_joinable(self, code: Any) -> bool:
        room = self.get_room(code)
        # A room in its grace window is already gone as far as newcomers are concerned.
        return room is not None and room.phase != "ending"

    def join_room(self, code: Any, name: Any, connection_id: str) -> Player:
        if not self.is_joinable(code):
            raise RoomNotFound()
        room = self.require_room(code)

        player_count = len(room.players)
        player = Player(
            id=random_id(),
            connection_id=connection_id,
            name=sanitize_player_name(name, default_player_name(player_count)),
            color=PLAYER_COLORS[player_count % len(PLAYER_COLORS)],
            is_host=False,
        )
        room.players[player.id] = player
        room.last_activity_at = now_ms()
        return player

    def find_player_by_connection(self, connection_id: str) -> tuple[Room, Player] | None:
        for room in self._rooms.values():
            for player in room.players.values():
                if player.connection_id == connection_id:
                    return room, player
        return None

    def find_player_by_id(self, player_id: str) -> tuple[Room, Player] | None:
        for room in self._rooms.values():
            player = room.players.get(player_id)
            if player is not None:
                return room, player
        return None

    def host_of(self, code: Any) -> Player | None:
        room = self.get_room(code)
        if room is None:
            return None
        return room.host

    def remove_player(self, code: Any, player_id: str) -> Player | None:
        room = self.get_room(code)
        if room is None:
            return None
        removed = room.players.pop(player_id, None)
        if removed is not None:
            room.last_activity_at = now_ms()
        return removed

    def delete_room(self, code: Any) -> Room | None:
        return self._rooms.pop(sanitize_room_code(code), None)

    def merge_game_state(self, code: Any, patch: dict[str, Any]) -> dict[str, Any]:
        room = self.require_room(code)
        room.game_state.update(patch)
        room.last_activity_at = now_ms()
        return room.game_state

    def set_current_game(self, code: Any, game_name: str | None) -> Room:
        room = self.require_room(code)
        room.current_game = game_name
        room.game_state = {}
        room.phase = "playing"
        room.last_activity_at = now_ms()
        return room

    def touch(self, code: Any) -> None:
        room = self.get_room(code)
        if room is not None:
            room.last_activity_at = now_ms()

    def idle_rooms(self, older_than_ms: int) -> list[Room]:
        cutoff = now_ms() - older_than_ms
        return [
            room
            for room in self._rooms.values()
            if room.phase != "ending" and room.last_activity_at <= cutoff
        ]
