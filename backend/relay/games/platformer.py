from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PlatformerRacer(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str | None = None
    color: str | None = None


class PlatformerPosition(BaseModel):
    model_config = ConfigDict(extra="allow")

    playerId: str
    x: float
    y: float


class PlatformerStanding(BaseModel):
    model_config = ConfigDict(extra="allow")

    playerId: str
    name: str | None = None
    placement: int | None = None
    time: float | None = None


class PlatformerInit(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["platformer-init"]
    players: list[PlatformerRacer] = Field(default_factory=list)


class PlatformerStart(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["platformer-start"]


class PlatformerUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["platformer-update"]
    players: list[PlatformerPosition] = Field(default_factory=list)


class PlatformerPlayerFinished(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["platformer-player-finished"]
    playerId: str
    placement: int | None = None
    time: float | None = None


class PlatformerEnd(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["platformer-end"]
    standings: list[PlatformerStanding] = Field(default_factory=list)


PLATFORMER_PAYLOADS: dict[str, type[BaseModel]] = {
    "platformer-init": PlatformerInit,
    "platformer-start": PlatformerStart,
    "platformer-update": PlatformerUpdate,
    "platformer-player-finished": PlatformerPlayerFinished,
    "platformer-end": PlatformerEnd,
}
