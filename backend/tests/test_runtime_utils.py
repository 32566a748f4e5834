from __future__ import annotations

import re

import pytest

from relay import runtime_utils
from relay.runtime_constants import ROOM_CODE_CHARS
from relay.runtime_utils import (
    default_player_name,
    new_room_code,
    random_id,
    random_room_code,
    sanitize_player_name,
    sanitize_room_code,
)


def test_random_room_code_is_six_uppercase_alphanumerics():
    for _ in range(200):
        code = random_room_code()
        assert len(code) == 6
        assert re.fullmatch(r"[A-Z0-9]{6}", code)
        assert all(ch in ROOM_CODE_CHARS for ch in code)


def test_new_room_code_retries_until_unused(monkeypatch: pytest.MonkeyPatch):
    candidates = iter(["AAAAAA", "BBBBBB", "CCCCCC"])
    monkeypatch.setattr(runtime_utils, "random_room_code", lambda length=6: next(candidates))

    assert new_room_code({"AAAAAA", "BBBBBB"}) == "CCCCCC"


def test_random_id_is_unique():
    ids = {random_id() for _ in range(1000)}
    assert len(ids) == 1000


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("ab12cd", "AB12CD"),
        ("  ab12cd ", "AB12CD"),
        ("ab-12_cd", "AB12CD"),
        (None, ""),
        ("abcdefghijk", "ABCDEFGH"),
    ],
)
def test_sanitize_room_code(raw, expected):
    assert sanitize_room_code(raw) == expected


def test_sanitize_player_name_defaults_only_empty_names():
    assert sanitize_player_name("Alice", "Player 1") == "Alice"
    assert sanitize_player_name("   ", "Player 1") == "Player 1"
    assert sanitize_player_name(None, "Player 2") == "Player 2"
    long_name = "x" * 80
    assert sanitize_player_name(long_name, "Player 1") == long_name


def test_default_player_name():
    assert default_player_name(3) == "Player 3"
