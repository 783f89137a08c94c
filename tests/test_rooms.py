import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rummikub.errors import ErrorKind
from rummikub.rooms import ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH, RoomRegistry, RoomStatus


def _room_with(registry, *names):
    code = registry.create_room("p0", names[0])
    for idx, name in enumerate(names[1:], start=1):
        assert registry.join_room(code, f"p{idx}", name)
    return code


def test_room_codes_use_unambiguous_alphabet():
    registry = RoomRegistry(rng_seed=1)
    code = registry.create_room("host", "Host")
    assert len(code) == ROOM_CODE_LENGTH
    assert set(code) <= set(ROOM_CODE_ALPHABET)
    assert registry.get_player_room("host") == code


def test_separate_registries_do_not_share_rooms():
    first = RoomRegistry(rng_seed=1)
    second = RoomRegistry(rng_seed=1)
    code = first.create_room("host", "Host")
    assert second.get_room(code) is None


def test_join_rejections():
    registry = RoomRegistry(rng_seed=2)
    assert registry.join_room("NOPE42", "x", "X").kind == ErrorKind.LOOKUP

    code = _room_with(registry, "A", "B", "C", "D")
    result = registry.join_room(code, "p9", "Late")
    assert result.error == "Room is full"

    assert registry.join_room(code, "p1", "B").kind == ErrorKind.RULE


def test_only_host_starts_with_enough_players():
    registry = RoomRegistry(rng_seed=3)
    code = registry.create_room("p0", "A")
    assert registry.start_game(code, "p0").error == "Need at least 2 players to start"

    registry.join_room(code, "p1", "B")
    assert registry.start_game(code, "p1").error == "Only the host can start the game"
    assert registry.start_game(code, "p0")
    assert registry.start_game(code, "p0").error == "Game already started"
    assert registry.join_room(code, "p2", "C").error == "Game already in progress"


def test_started_game_deals_in_join_order():
    registry = RoomRegistry(rng_seed=4)
    code = _room_with(registry, "A", "B", "C")
    registry.start_game(code, "p0")

    game = registry.get_game(code)
    assert game.player_order == ["p0", "p1", "p2"]
    assert game.pool.size == 106 - 3 * 14
    assert game.turn_start.player_id == "p0"

    view = registry.get_room(code)
    assert view.status == RoomStatus.PLAYING
    assert [p.tile_count for p in view.players] == [14, 14, 14]
    assert view.to_dict()["status"] == "playing"


def test_leave_reassigns_host_and_removes_from_game():
    registry = RoomRegistry(rng_seed=5)
    code = _room_with(registry, "A", "B", "C")
    registry.start_game(code, "p0")

    assert registry.leave_room("p0")
    view = registry.get_room(code)
    assert view.host_id == "p1"
    assert registry.room_players(code) == ["p1", "p2"]
    game = registry.get_game(code)
    assert "p0" not in game.players
    assert game.pool.size == 106 - 2 * 14
    assert registry.get_player_room("p0") is None


def test_last_player_leaving_closes_room():
    registry = RoomRegistry(rng_seed=6)
    code = _room_with(registry, "A")
    registry.leave_room("p0")
    assert registry.get_room(code) is None
    assert registry.leave_room("p0").kind == ErrorKind.LOOKUP


def test_connectivity_reaches_the_game():
    registry = RoomRegistry(rng_seed=7)
    code = _room_with(registry, "A", "B")
    registry.start_game(code, "p0")
    registry.set_player_connected("p1", False)

    with registry.locked(code) as game:
        views = {p.id: p for p in game.get_state(code).players}
    assert views["p1"].is_connected is False
    assert registry.get_room(code).players[1].is_connected is False


def test_locked_yields_game_and_end_game_finishes_room():
    registry = RoomRegistry(rng_seed=8)
    code = _room_with(registry, "A", "B")
    with registry.locked(code) as game:
        assert game is None
    registry.start_game(code, "p0")
    with registry.locked(code) as game:
        assert game.draw_tile("p0")
    registry.end_game(code)
    assert registry.get_room(code).status == RoomStatus.FINISHED

    with pytest.raises(KeyError):
        with registry.locked("ZZZZZZ"):
            pass


def test_create_room_twice_is_a_caller_error():
    registry = RoomRegistry(rng_seed=9)
    registry.create_room("p0", "A")
    with pytest.raises(ValueError):
        registry.create_room("p0", "A")


def test_room_closed_after_lookup_is_not_revived(monkeypatch):
    registry = RoomRegistry(rng_seed=10)
    code = _room_with(registry, "A")
    stale = registry._room(code)
    registry.leave_room("p0")
    # every call resolves the room before it takes the room lock
    monkeypatch.setattr(registry, "_room", lambda _code: stale)

    assert registry.join_room(code, "p1", "B").kind == ErrorKind.LOOKUP
    assert registry.get_player_room("p1") is None
    assert registry.start_game(code, "p0").kind == ErrorKind.LOOKUP
    assert stale.game is None
    assert registry.leave_room("p0").kind == ErrorKind.LOOKUP
    assert registry.set_player_connected("p0", False).kind == ErrorKind.LOOKUP
    with pytest.raises(KeyError):
        with registry.locked(code):
            pass

    monkeypatch.undo()
    assert registry.get_room(code) is None
    assert registry.create_room("p1", "B")
