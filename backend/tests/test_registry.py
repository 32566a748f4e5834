from __future__ import annotations

import pytest

from relay.runtime_constants import PLAYER_COLORS
from relay.runtime_errors import RoomNotFound
from relay.runtime_registry import SessionStore


def test_create_room_registers_host(store: SessionStore):
    room, host = store.create_room("conn-host")

    assert room.code in store
    assert len(room.code) == 6
    assert host.is_host is True
    assert host.name == "Host"
    assert host.color == PLAYER_COLORS[0]
    assert host.connection_id == "conn-host"
    assert list(room.players) == [host.id]
    assert room.current_game is None
    assert room.game_state == {}
    assert room.phase == "created"


def test_active_room_codes_are_unique(store: SessionStore):
    codes = {store.create_room(f"conn-{index}")[0].code for index in range(300)}
    assert len(codes) == 300
    assert len(store) == 300


def test_join_room_assigns_palette_color_and_default_name(store: SessionStore):
    room, _ = store.create_room("conn-host")

    alice = store.join_room(room.code.lower(), "Alice", "conn-a")
    second = store.join_room(room.code, "", "conn-b")

    assert alice.name == "Alice"
    assert alice.is_host is False
    assert alice.color == PLAYER_COLORS[1]
    assert second.name == "Player 2"
    assert second.color == PLAYER_COLORS[2]
    assert [player.name for player in room.players.values()] == ["Host", "Alice", "Player 2"]


def test_join_room_colors_wrap_around_palette(store: SessionStore):
    room, _ = store.create_room("conn-host")
    joined = [store.join_room(room.code, None, f"conn-{index}") for index in range(len(PLAYER_COLORS))]

    assert joined[-1].color == PLAYER_COLORS[0]


def test_join_unknown_room_raises(store: SessionStore):
    with pytest.raises(RoomNotFound):
        store.join_room("ZZZZZZ", "Alice", "conn-a")


def test_join_room_in_grace_window_raises(store: SessionStore):
    room, _ = store.create_room("conn-host")
    room.phase = "ending"

    with pytest.raises(RoomNotFound):
        store.join_room(room.code, "Alice", "conn-a")


def test_player_ids_are_unique_across_rooms(store: SessionStore):
    ids = set()
    for index in range(20):
        room, host = store.create_room(f"host-{index}")
        ids.add(host.id)
        for seat in range(5):
            ids.add(store.join_room(room.code, None, f"conn-{index}-{seat}").id)
    assert len(ids) == 20 * 6


def test_find_player_by_connection_and_id(store: SessionStore):
    room, host = store.create_room("conn-host")
    alice = store.join_room(room.code, "Alice", "conn-a")

    assert store.find_player_by_connection("conn-a") == (room, alice)
    assert store.find_player_by_id(host.id) == (room, host)
    assert store.find_player_by_connection("missing") is None
    assert store.find_player_by_id("missing") is None


def test_host_is_found_by_flag_not_position(store: SessionStore):
    room, host = store.create_room("conn-host")
    alice = store.join_room(room.code, "Alice", "conn-a")
    # Move the host to the end of the roster to make sure nobody relies on order.
    room.players.pop(host.id)
    room.players[host.id] = host

    assert store.host_of(room.code) is host
    assert next(iter(room.players.values())) is alice


def test_remove_player_and_delete_room(store: SessionStore):
    room, _ = store.create_room("conn-host")
    alice = store.join_room(room.code, "Alice", "conn-a")

    assert store.remove_player(room.code, alice.id) is alice
    assert store.remove_player(room.code, alice.id) is None
    assert alice.id not in room.players

    assert store.delete_room(room.code) is room
    assert room.code not in store
    assert store.delete_room(room.code) is None


def test_merge_game_state_is_shallow_and_last_write_wins(store: SessionStore):
    room, _ = store.create_room("conn-host")

    store.merge_game_state(room.code, {"a": 1})
    store.merge_game_state(room.code, {"b": 2})
    store.merge_game_state(room.code, {"a": 3, "nested": {"x": 1}})
    store.merge_game_state(room.code, {"nested": {"y": 2}})

    assert room.game_state == {"a": 3, "b": 2, "nested": {"y": 2}}


def test_set_current_game_resets_state(store: SessionStore):
    room, _ = store.create_room("conn-host")
    store.merge_game_state(room.code, {"a": 1})

    store.set_current_game(room.code, "quiz")

    assert room.current_game == "quiz"
    assert room.game_state == {}
    assert room.phase == "playing"


def test_merge_game_state_on_missing_room_raises(store: SessionStore):
    with pytest.raises(RoomNotFound):
        store.merge_game_state("NOPE00", {"a": 1})


def test_idle_rooms_skips_recent_and_ending(store: SessionStore):
    stale, _ = store.create_room("conn-1")
    fresh, _ = store.create_room("conn-2")
    ending, _ = store.create_room("conn-3")
    stale.last_activity_at = 0
    ending.last_activity_at = 0
    ending.phase = "ending"

    assert store.idle_rooms(60_000) == [stale]
    assert fresh not in store.idle_rooms(60_000)


def test_is_joinable(store: SessionStore):
    room, _ = store.create_room("conn-host")

    assert store.is_joinable(room.code.lower()) is True
    assert store.is_joinable("ZZZZZZ") is False
    room.phase = "ending"
    assert store.is_joinable(room.code) is False
