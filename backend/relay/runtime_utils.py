from __future__ import annotations

import random
import time
import uuid
from collections.abc import Container
from typing import Any

from .runtime_constants import (
    DEFAULT_PLAYER_NAME_TEMPLATE,
    MAX_ROOM_CODE_INPUT_LENGTH,
    ROOM_CODE_CHARS,
    ROOM_CODE_LENGTH,
)


def now_ms() -> int:
    return int(time.time() * 1000)


def random_id() -> str:
    return str(uuid.uuid4())


def random_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    return "".join(random.choice(ROOM_CODE_CHARS) for _ in range(max(4, length)))


def new_room_code(taken: Container[str], length: int = ROOM_CODE_LENGTH) -> str:
    """Return a code that is not in *taken*.

    With 32**6 codes a collision is rare, so the loop is left unbounded.
    """
    while True:
        code = random_room_code(length)
        if code not in taken:
            return code


def sanitize_room_code(raw: Any) -> str:
    value = str(raw or "").strip().upper()
    filtered = "".join(ch for ch in value if ch.isalnum())
    return filtered[:MAX_ROOM_CODE_INPUT_LENGTH]


def default_player_name(index: int) -> str:
    return DEFAULT_PLAYER_NAME_TEMPLATE.format(index=index)


def sanitize_player_name(raw: Any, fallback: str) -> str:
    if raw is None:
        return fallback
    value = str(raw).strip()
    return value or fallback
