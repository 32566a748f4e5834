from __future__ import annotations

from typing import Any

from .runtime_errors import RelayError
from .runtime_types import Player, Room


def build_player_payload(player: Player) -> dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "color": player.color,
        "isHost": player.is_host,
    }


def build_roster(room: Room) -> list[dict[str, Any]]:
    return [build_player_payload(player) for player in room.players.values()]


def build_roster_change(room: Room, player: Player) -> dict[str, Any]:
    return {
        "player": build_player_payload(player),
        "players": build_roster(room),
    }


def build_room_info(room: Room) -> dict[str, Any]:
    return {
        "success": True,
        "roomCode": room.code,
        "players": build_roster(room),
        "currentGame": room.current_game,
        "gameState": dict(room.game_state),
    }


def build_room_summary(room: Room, connections: int) -> dict[str, Any]:
    return {
        "roomCode": room.code,
        "players": len(room.players),
        "connections": connections,
        "phase": room.phase,
        "currentGame": room.current_game,
        "createdAt": room.created_at,
    }


def build_failure_ack(error: RelayError) -> dict[str, Any]:
    return {
        "success": False,
        "error": error.message,
        "code": error.code,
    }
