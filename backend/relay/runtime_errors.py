from __future__ import annotations


class RelayError(Exception):
    code = "RELAY_ERROR"
    message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class RoomNotFound(RelayError):
    code = "ROOM_NOT_FOUND"
    message = "Room not found"


class NotInRoom(RelayError):
    code = "NOT_IN_ROOM"
    message = "Not in a room"


class PlayerNotFound(RelayError):
    code = "PLAYER_NOT_FOUND"
    message = "Player not found"


class InvalidPayload(RelayError):
    code = "INVALID_PAYLOAD"
    message = "Invalid payload"


class Unauthorized(RelayError):
    """Host-only operation from a non-host connection; dropped, never acked."""

    code = "UNAUTHORIZED"
    message = "Only the host can do that"
