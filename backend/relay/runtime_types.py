from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Literal

RoomPhase = Literal["created", "playing", "ending"]


@dataclass
class Player:
    id: str
    connection_id: str
    name: str
    color: str
    is_host: bool = False


@dataclass
class Room:
    code: str
    created_at: int
    players: dict[str, Player] = field(default_factory=dict)
    current_game: str | None = None
    game_state: dict[str, Any] = field(default_factory=dict)
    phase: RoomPhase = "created"
    last_activity_at: int = 0
    timers: dict[str, asyncio.Task[None] | None] = field(default_factory=dict)

    @property
    def host(self) -> Player | None:
        for player in self.players.values():
            if player.is_host:
                return player
        return None
