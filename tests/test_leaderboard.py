from arena.leaderboard import compute_leaderboard
from arena.models import MovePayload, Player


def _player(pid, max_x, color="#123456"):
    return Player(id=pid, x=0, y=0, color=color, max_x=max_x)


def test_orders_by_max_x_descending(registry, movement, leaderboard, make_conn):
    for _ in range(3):
        registry.admit(make_conn())
    movement.apply(0, MovePayload(x=300, y=60))
    movement.apply(1, MovePayload(x=450, y=60))
    movement.apply(2, MovePayload(x=100, y=60))

    entries = leaderboard.compute()
    assert [e.id for e in entries] == [1, 0, 2]
    assert [e.score for e in entries] == [450, 300, 100]


def test_truncates_to_five():
    entries = compute_leaderboard([_player(i, i * 10) for i in range(9)])
    assert len(entries) == 5
    assert [e.id for e in entries] == [8, 7, 6, 5, 4]


def test_ties_rank_lower_id_first():
    entries = compute_leaderboard([_player(4, 200), _player(2, 200), _player(3, 250)])
    assert [e.id for e in entries] == [3, 2, 4]


def test_score_rounds_to_nearest():
    entries = compute_leaderboard([_player(0, 100.5), _player(1, 99.4)])
    assert [e.score for e in entries] == [101, 99]


def test_entries_carry_colour():
    (entry,) = compute_leaderboard([_player(0, 10, color="#ABCDEF")])
    assert entry.model_dump() == {"id": 0, "score": 10, "color": "#ABCDEF"}


def test_empty_registry_gives_empty_board(leaderboard):
    assert leaderboard.compute() == []


def test_broadcast_reaches_every_connection(registry, leaderboard, make_conn):
    conns = [make_conn() for _ in range(2)]
    for c in conns:
        registry.admit(c)

    assert leaderboard.broadcast() == 2
    for c in conns:
        (msg,) = c.sent
        assert msg["type"] == "leaderboard_update"
        assert [e["id"] for e in msg["payload"]] == [0, 1]


def test_send_to_departed_player_is_noop(registry, leaderboard, make_conn):
    p = registry.admit(make_conn())
    registry.remove(p.id)
    assert leaderboard.send_to(p.id) is False
