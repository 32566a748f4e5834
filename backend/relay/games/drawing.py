from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DrawingScore(BaseModel):
    model_config = ConfigDict(extra="allow")

    playerId: str
    name: str | None = None
    color: str | None = None
    score: float = 0
    guessed: bool | None = None


class DrawingInit(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["drawing-init"]
    drawerIndex: int = Field(ge=0)
    drawerId: str | None = None
    word: str


class DrawingRoundStart(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["drawing-round-start"]
    drawerIndex: int = Field(ge=0)
    drawerId: str | None = None
    word: str
    roundNumber: int = Field(ge=1)


class DrawingNextRound(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["drawing-next-round"]
    drawerIndex: int = Field(ge=0)
    drawerId: str | None = None
    word: str
    roundNumber: int = Field(ge=1)


class DrawingCorrectGuess(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["drawing-correct-guess"]
    playerId: str
    points: float


class DrawingRoundEnd(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["drawing-round-end"]
    word: str
    scores: list[DrawingScore] = Field(default_factory=list)


class DrawingGameEnd(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["drawing-game-end"]
    scores: list[DrawingScore] = Field(default_factory=list)


DRAWING_PAYLOADS: dict[str, type[BaseModel]] = {
    "drawing-init": DrawingInit,
    "drawing-round-start": DrawingRoundStart,
    "drawing-next-round": DrawingNextRound,
    "drawing-correct-guess": DrawingCorrectGuess,
    "drawing-round-end": DrawingRoundEnd,
    "drawing-game-end": DrawingGameEnd,
}
