import random

import pytest

from arena.config import MAX_X, MAX_Y
from arena.models import MovePayload
from arena.movement import MovementIngest, coerce_axis


def _move(movement, player_id, x, y):
    return movement.apply(player_id, MovePayload(x=x, y=y))


def test_out_of_range_move_is_clamped(registry, movement, make_conn):
    for _ in range(3):
        registry.admit(make_conn())

    _move(movement, 1, 9999, -50)
    player = registry.get(1)
    assert (player.x, player.y) == (580, 0)


@pytest.mark.parametrize("bad", ["abc", None, True, {"n": 1}, [3], float("nan")])
def test_non_numeric_axis_keeps_current_coordinate(registry, movement, make_conn, bad):
    p = registry.admit(make_conn())
    _move(movement, p.id, bad, 200)
    player = registry.get(p.id)
    assert player.x == 50
    assert player.y == 200


def test_numeric_strings_and_infinity_are_accepted():
    assert coerce_axis("120", 5, MAX_X) == 120
    assert coerce_axis(float("inf"), 5, MAX_X) == MAX_X
    assert coerce_axis(float("-inf"), 5, MAX_Y) == 0
    assert coerce_axis(0, 5, MAX_X) == 0


def test_integers_beyond_float_range_clamp_to_bounds():
    huge = 10 ** 400
    assert coerce_axis(huge, 5, MAX_X) == MAX_X
    assert coerce_axis(-huge, 5, MAX_Y) == 0


def test_huge_integer_move_is_clamped(sessions, registry, make_conn):
    mover, watcher = make_conn(), make_conn()
    sessions.connect(mover)
    sessions.connect(watcher)
    watcher.clear()

    sessions.handle_message(0, '{"type": "move", "payload": {"x": 1' + "0" * 400 + ', "y": 60}}')
    assert (registry.get(0).x, registry.get(0).y) == (MAX_X, 60)
    assert watcher.sent == [{"type": "player_moved", "payload": {"id": 0, "x": MAX_X, "y": 60}}]


def test_random_moves_stay_in_bounds_and_max_x_never_drops(registry, movement, make_conn):
    rng = random.Random(3)
    p = registry.admit(make_conn())
    prev_max = registry.get(p.id).max_x
    for _ in range(500):
        x = rng.uniform(-2000, 2000)
        y = rng.uniform(-2000, 2000)
        _move(movement, p.id, x, y)
        player = registry.get(p.id)
        assert 0 <= player.x <= MAX_X
        assert 0 <= player.y <= MAX_Y
        assert player.max_x >= prev_max
        assert player.max_x >= player.x
        prev_max = player.max_x


def test_move_is_broadcast_to_others_only(registry, movement, make_conn):
    mover_conn, other_conn = make_conn(), make_conn()
    mover = registry.admit(mover_conn)
    registry.admit(other_conn)

    _move(movement, mover.id, 70, 80)
    assert mover_conn.sent == []
    assert other_conn.sent == [
        {"type": "player_moved", "payload": {"id": mover.id, "x": 70, "y": 80}},
    ]


def test_unchanged_position_is_not_broadcast(registry, movement, make_conn):
    mover = registry.admit(make_conn())
    other = make_conn()
    registry.admit(other)

    # Spawn is (50, 50)
    _move(movement, mover.id, 50, 50)
    assert other.sent == []

    _move(movement, mover.id, -10, "nope")
    assert other.of_type("player_moved")[0]["payload"] == {"id": mover.id, "x": 0, "y": 50}
    other.clear()

    # Clamps onto the position already broadcast
    _move(movement, mover.id, -99, "nope")
    assert other.sent == []


def test_move_from_unknown_player_is_discarded(registry, movement, make_conn):
    watcher = make_conn()
    registry.admit(watcher)
    assert _move(movement, 77, 100, 100) is None
    assert watcher.sent == []


def test_optional_leaderboard_on_score_increase(registry, broadcaster, leaderboard, make_conn):
    ingest = MovementIngest(registry, broadcaster, leaderboard, leaderboard_on_score_change=True)
    conn = make_conn()
    p = registry.admit(conn)

    ingest.apply(p.id, MovePayload(x=200, y=50))
    assert conn.types() == ["leaderboard_update"]

    conn.clear()
    ingest.apply(p.id, MovePayload(x=100, y=50))
    assert conn.sent == []
