from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class QuizQuestion(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | str
    question: str
    options: list[str] = Field(default_factory=list)
    category: str | None = None


class QuizScore(BaseModel):
    model_config = ConfigDict(extra="allow")

    playerId: str
    name: str | None = None
    color: str | None = None
    score: float = 0
    answered: bool | None = None
    answer: int | None = None


class QuizInit(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["quiz-init"]
    questions: list[QuizQuestion]


class QuizQuestionStart(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["quiz-question-start"]
    questionIndex: int = Field(ge=0)


class QuizQuestionEnd(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["quiz-question-end"]
    correctAnswer: int
    scores: list[QuizScore] = Field(default_factory=list)


class QuizFinal(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["quiz-final"]
    scores: list[QuizScore] = Field(default_factory=list)


QUIZ_PAYLOADS: dict[str, type[BaseModel]] = {
    "quiz-init": QuizInit,
    "quiz-question-start": QuizQuestionStart,
    "quiz-question-end": QuizQuestionEnd,
    "quiz-final": QuizFinal,
}
