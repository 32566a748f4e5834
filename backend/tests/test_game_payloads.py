from __future__ import annotations

import pytest

from relay.games.payloads import GAME_PAYLOAD_MODELS, payload_kind, validate_game_payload
from relay.runtime_errors import InvalidPayload


def test_every_game_has_registered_kinds():
    prefixes = {kind.split("-", 1)[0] for kind in GAME_PAYLOAD_MODELS}
    assert prefixes == {"quiz", "drawing", "platformer"}


def test_payload_kind():
    assert payload_kind({"type": "quiz-final"}) == "quiz-final"
    assert payload_kind({"type": ""}) is None
    assert payload_kind({"type": 3}) is None
    assert payload_kind({"score": 1}) is None


def test_known_kind_is_returned_untouched():
    patch = {
        "type": "quiz-question-end",
        "correctAnswer": 2,
        "scores": [{"playerId": "p1", "score": 300, "extra": "kept"}],
        "questionIndex": 4,
    }

    assert validate_game_payload(patch) is patch


@pytest.mark.parametrize(
    "patch",
    [
        {"type": "quiz-question-start"},
        {"type": "quiz-question-start", "questionIndex": -1},
        {"type": "drawing-correct-guess", "points": 10},
        {"type": "drawing-round-start", "drawerIndex": 0, "word": "cat", "roundNumber": 0},
        {"type": "quiz-init", "questions": "nope"},
    ],
)
def test_malformed_known_kind_is_rejected(patch):
    with pytest.raises(InvalidPayload):
        validate_game_payload(patch)


def test_opaque_patches_pass_through_unless_strict():
    untyped = {"score": 10}
    unknown = {"type": "trivia-bonus", "value": 1}

    assert validate_game_payload(untyped) is untyped
    assert validate_game_payload(unknown) is unknown
    with pytest.raises(InvalidPayload):
        validate_game_payload(untyped, strict=True)
    with pytest.raises(InvalidPayload):
        validate_game_payload(unknown, strict=True)


@pytest.mark.parametrize("patch", [None, [1, 2], "state", 5])
def test_non_object_patch_is_rejected(patch):
    with pytest.raises(InvalidPayload):
        validate_game_payload(patch)
