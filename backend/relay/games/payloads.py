from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError

from ..runtime_errors import InvalidPayload
from .drawing import DRAWING_PAYLOADS
from .platformer import PLATFORMER_PAYLOADS
from .quiz import QUIZ_PAYLOADS

GAME_PAYLOAD_MODELS: dict[str, type[BaseModel]] = {
    **QUIZ_PAYLOADS,
    **DRAWING_PAYLOADS,
    **PLATFORMER_PAYLOADS,
}


def payload_kind(data: dict[str, Any]) -> str | None:
    kind = data.get("type")
    if isinstance(kind, str) and kind:
        return kind
    return None


def validate_game_payload(data: Any, *, strict: bool = False) -> dict[str, Any]:
    """Check a game-state patch and return it untouched.

    Known kinds must match their schema. Untyped or unknown patches are opaque
    and pass through unless *strict* is set.
    """
    if not isinstance(data, dict):
        raise InvalidPayload("Game state update must be an object")

    kind = payload_kind(data)
    model = GAME_PAYLOAD_MODELS.get(kind) if kind else None
    if model is None:
        if strict:
            raise InvalidPayload(f"Unknown game payload kind: {kind or '-'}")
        return data

    try:
        model.model_validate(data)
    except ValidationError as exc:
        raise InvalidPayload(f"Malformed {kind} payload") from exc
    return data
