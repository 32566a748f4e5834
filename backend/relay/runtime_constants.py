from __future__ import annotations

PLAYER_COLORS: tuple[str, ...] = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#FFA07A",
    "#98D8C8",
    "#F7DC6F",
    "#BB8FCE",
    "#85C1E2",
)
ROOM_CODE_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6
MAX_ROOM_CODE_INPUT_LENGTH = 8
HOST_NAME = "Host"
DEFAULT_PLAYER_NAME_TEMPLATE = "Player {index}"
HOST_DISCONNECT_REASON = "Host disconnected"
ROOM_EXPIRED_REASON = "Room expired"
TEARDOWN_TIMER_KEY = "teardown"

# Client -> server
EVENT_CREATE_ROOM = "create-room"
EVENT_JOIN_ROOM = "join-room"
EVENT_GET_ROOM_INFO = "get-room-info"
EVENT_GET_PLAYER_INFO = "get-player-info"
EVENT_START_GAME = "start-game"
EVENT_GAME_STATE_UPDATE = "game-state-update"
EVENT_CONTROLLER_INPUT = "controller-input"
EVENT_DRAW_POINT = "draw-point"
EVENT_CLEAR_CANVAS = "clear-canvas"
EVENT_SUBMIT_GUESS = "submit-guess"
EVENT_PLAYER_READY = "player-ready"
EVENT_END_ROOM = "end-room"

# Server -> client
EVENT_ACK = "ack"
EVENT_CONNECTED = "connected"
EVENT_PLAYER_JOINED = "player-joined"
EVENT_PLAYER_LEFT = "player-left"
EVENT_GAME_STARTED = "game-started"
EVENT_ROOM_ENDED = "room-ended"
EVENT_DRAWING_UPDATE = "drawing-update"
EVENT_DRAWING_CLEAR = "drawing-clear"
EVENT_PLAYER_GUESS = "player-guess"

REQUEST_EVENTS: frozenset[str] = frozenset(
    {
        EVENT_CREATE_ROOM,
        EVENT_JOIN_ROOM,
        EVENT_GET_ROOM_INFO,
        EVENT_GET_PLAYER_INFO,
    }
)
