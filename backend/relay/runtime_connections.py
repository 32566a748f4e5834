from __future__ import annotations


class ConnectionIndex:
    """Maps each live connection to the code of the room it belongs to."""

    def __init__(self) -> None:
        self._room_by_connection: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._room_by_connection)

    def bind(self, connection_id: str, room_code: str) -> None:
        # Re-inserting keeps connections_in() in most-recent-bind order.
        self._room_by_connection.pop(connection_id, None)
        self._room_by_connection[connection_id] = room_code

    def unbind(self, connection_id: str) -> str | None:
        return self._room_by_connection.pop(connection_id, None)

    def room_of(self, connection_id: str) -> str | None:
        return self._room_by_connection.get(connection_id)

    def connections_in(self, room_code: str) -> list[str]:
        return [
            connection_id
            for connection_id, code in self._room_by_connection.items()
            if code == room_code
        ]

    def unbind_room(self, room_code: str) -> list[str]:
        released = self.connections_in(room_code)
        for connection_id in released:
            self._room_by_connection.pop(connection_id, None)
        return released
