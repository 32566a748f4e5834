from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from .runtime_constants import (
    EVENT_CLEAR_CANVAS,
    EVENT_CONTROLLER_INPUT,
    EVENT_CREATE_ROOM,
    EVENT_DRAW_POINT,
    EVENT_END_ROOM,
    EVENT_GAME_STATE_UPDATE,
    EVENT_GET_PLAYER_INFO,
    EVENT_GET_ROOM_INFO,
    EVENT_JOIN_ROOM,
    EVENT_PLAYER_READY,
    EVENT_START_GAME,
    EVENT_SUBMIT_GUESS,
    REQUEST_EVENTS,
)
from .runtime_errors import InvalidPayload, RelayError, Unauthorized
from .runtime_state_builders import build_failure_ack
from .schemas.events import (
    ClientEnvelope,
    DrawPointPayload,
    GetPlayerInfoRequest,
    JoinRoomRequest,
    PlayerReadyRequest,
    StartGameRequest,
    SubmitGuessRequest,
)

if TYPE_CHECKING:
    from .runtime import RelayRuntime

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_REJECT_STAT_BY_CODE = {
    "ROOM_NOT_FOUND": "rejectRoomNotFound",
    "NOT_IN_ROOM": "rejectNotInRoom",
    "PLAYER_NOT_FOUND": "rejectPlayerNotFound",
    "INVALID_PAYLOAD": "invalidPayloads",
}


def parse_client_frame(raw: str) -> ClientEnvelope | None:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("Ignoring non-JSON frame")
        return None
    if not isinstance(data, dict):
        return None
    try:
        return ClientEnvelope.model_validate(data)
    except ValidationError:
        logger.debug("Ignoring frame without a valid envelope")
        return None


def _parse(model: type[ModelT], data: Any) -> ModelT:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidPayload()
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidPayload() from exc


async def _send_ack(
    runtime: "RelayRuntime",
    connection_id: str,
    request_event: str,
    request_id: str | int | None,
    response: dict[str, Any],
) -> None:
    await runtime.router.send_ack(connection_id, request_event, request_id, response)


async def _handle_request(
    runtime: "RelayRuntime",
    connection_id: str,
    message_type: str,
    data: Any,
) -> dict[str, Any]:
    if message_type == EVENT_CREATE_ROOM:
        return await runtime.create_room(connection_id)

    if message_type == EVENT_JOIN_ROOM:
        request = _parse(JoinRoomRequest, data)
        return await runtime.join_room(connection_id, request.roomCode, request.playerName)

    if message_type == EVENT_GET_ROOM_INFO:
        return await runtime.get_room_info(connection_id)

    if message_type == EVENT_GET_PLAYER_INFO:
        request = _parse(GetPlayerInfoRequest, data)
        return await runtime.get_player_info(connection_id, request.playerId.strip())

    raise InvalidPayload(f"Unsupported request: {message_type}")


async def handle_message(
    runtime: "RelayRuntime",
    connection_id: str,
    message_type: str,
    data: Any = None,
    request_id: str | int | None = None,
) -> None:
    if message_type in REQUEST_EVENTS:
        try:
            response = await _handle_request(runtime, connection_id, message_type, data)
        except RelayError as exc:
            runtime._increment_stat(_REJECT_STAT_BY_CODE.get(exc.code, "invalidPayloads"))
            response = build_failure_ack(exc)
        await _send_ack(runtime, connection_id, message_type, request_id, response)
        return

    try:
        await _handle_relay(runtime, connection_id, message_type, data)
    except Unauthorized:
        runtime._increment_stat("unauthorizedDropped")
        logger.debug("Dropped host-only %s from connection %s", message_type, connection_id)
    except RelayError as exc:
        runtime._increment_stat(_REJECT_STAT_BY_CODE.get(exc.code, "invalidPayloads"))
        logger.warning("Dropped %s from connection %s: %s", message_type, connection_id, exc.message)


async def _handle_relay(
    runtime: "RelayRuntime",
    connection_id: str,
    message_type: str,
    data: Any,
) -> None:
    if message_type == EVENT_START_GAME:
        request = _parse(StartGameRequest, data)
        await runtime.start_game(connection_id, request.gameName)
        return

    if message_type == EVENT_GAME_STATE_UPDATE:
        await runtime.update_game_state(connection_id, data)
        return

    if message_type == EVENT_CONTROLLER_INPUT:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidPayload("Controller input must be an object")
        await runtime.relay_controller_input(connection_id, data)
        return

    if message_type == EVENT_DRAW_POINT:
        _parse(DrawPointPayload, data)
        await runtime.relay_draw_point(connection_id, data)
        return

    if message_type == EVENT_CLEAR_CANVAS:
        await runtime.relay_clear_canvas(connection_id)
        return

    if message_type == EVENT_SUBMIT_GUESS:
        request = _parse(SubmitGuessRequest, data)
        await runtime.relay_guess(connection_id, request.guess)
        return

    if message_type == EVENT_PLAYER_READY:
        _parse(PlayerReadyRequest, data)
        await runtime.relay_player_ready(connection_id)
        return

    if message_type == EVENT_END_ROOM:
        await runtime.end_room(connection_id)
        return

    logger.debug("Ignoring unknown event %s from connection %s", message_type, connection_id)
