"""Shared fixtures: an in-memory connection double and wired-up components."""
import json
import random

import pytest

from arena.broadcast.player_broadcaster import PlayerBroadcaster
from arena.leaderboard import LeaderboardAggregator
from arena.movement import MovementIngest
from arena.registry import ConnectionRegistry
from arena.session import SessionLifecycle


class FakeConnection:
    """Records every frame sent to it; can be told to fail or go dead."""

    def __init__(self, fail=False, live=True):
        self.sent = []
        self.fail = fail
        self.live = live

    @property
    def is_live(self):
        return self.live

    def send(self, text):
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.sent.append(json.loads(text))

    def of_type(self, msg_type):
        return [m for m in self.sent if m["type"] == msg_type]

    def types(self):
        return [m["type"] for m in self.sent]

    def clear(self):
        self.sent.clear()


class EdgeSpawnRandom(random.Random):
    """Spawns every player at the low end of the spawn ranges (x=50, y=50)."""

    def randint(self, a, b):
        return a


@pytest.fixture
def registry():
    return ConnectionRegistry(rng=EdgeSpawnRandom(1234))


@pytest.fixture
def broadcaster(registry):
    return PlayerBroadcaster(registry)


@pytest.fixture
def leaderboard(registry, broadcaster):
    return LeaderboardAggregator(registry, broadcaster)


@pytest.fixture
def movement(registry, broadcaster, leaderboard):
    return MovementIngest(registry, broadcaster, leaderboard, leaderboard_on_score_change=False)


@pytest.fixture
def sessions(registry, broadcaster, leaderboard, movement):
    return SessionLifecycle(registry, broadcaster, leaderboard, movement, scheduler=None)


@pytest.fixture
def make_conn():
    def _make(**kwargs):
        return FakeConnection(**kwargs)
    return _make
