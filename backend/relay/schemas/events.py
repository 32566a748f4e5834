from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientEnvelope(BaseModel):
    event: str = Field(min_length=1, max_length=64)
    data: Any = None
    requestId: str | int | None = None


class JoinRoomRequest(BaseModel):
    roomCode: str = Field(default="", max_length=64)
    playerName: str | None = None

    @field_validator("roomCode", mode="before")
    @classmethod
    def coerce_room_code(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("playerName", mode="before")
    @classmethod
    def coerce_player_name(cls, value: Any) -> str | None:
        return None if value is None else str(value)


class GetPlayerInfoRequest(BaseModel):
    playerId: str = Field(default="", max_length=128)

    @field_validator("playerId", mode="before")
    @classmethod
    def coerce_player_id(cls, value: Any) -> str:
        return "" if value is None else str(value)


class StartGameRequest(BaseModel):
    gameName: str = Field(min_length=1, max_length=64)


class DrawPointPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    x: float
    y: float
    color: str | None = None
    size: float | None = None
    isNewStroke: bool | None = None


class SubmitGuessRequest(BaseModel):
    guess: str = ""

    @field_validator("guess", mode="before")
    @classmethod
    def coerce_guess(cls, value: Any) -> str:
        return "" if value is None else str(value)


class PlayerReadyRequest(BaseModel):
    playerId: str | None = None
