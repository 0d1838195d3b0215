"""
Connection registry — the single source of truth for who is connected.

Maps player id → (Player, connection handle). Ids come from a process-wide
counter and are never reused. All methods are synchronous and never await,
so on the event loop each call is atomic with respect to every other
connection's callbacks.
"""
from __future__ import annotations

import itertools
import random
from typing import Iterator, Optional, Protocol

from arena.config import (
    COLOR_BRIGHTNESS_FLOOR, COLOR_MAX_ATTEMPTS, MAX_X, MAX_Y,
    SPAWN_X_RANGE, SPAWN_Y_RANGE,
)
from arena.models import Player


class Connection(Protocol):
    """What the registry needs from a transport handle."""

    @property
    def is_live(self) -> bool: ...

    def send(self, text: str) -> None: ...


# ── Colours ───────────────────────────────────────────────────────────────────

def _channels(color: str) -> tuple[int, int, int]:
    value = int(color[1:], 16)
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


def is_near_white(color: str, floor: int = COLOR_BRIGHTNESS_FLOOR) -> bool:
    return all(c > floor for c in _channels(color))


def random_color(rng: random.Random, max_attempts: int = COLOR_MAX_ATTEMPTS) -> str:
    """Random ``#RRGGBB`` colour that is not near-white.

    Re-rolls up to ``max_attempts`` times; if every roll is too light the last
    one is darkened by capping each channel at the brightness floor.
    """
    color = "#000000"
    for _ in range(max_attempts):
        color = "#%06X" % rng.randrange(0x1000000)
        if not is_near_white(color):
            return color
    r, g, b = (min(c, COLOR_BRIGHTNESS_FLOOR) for c in _channels(color))
    return "#%02X%02X%02X" % (r, g, b)


# ── Registry ──────────────────────────────────────────────────────────────────

class ConnectionRegistry:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._ids = itertools.count()
        self._players: dict[int, Player] = {}
        self._connections: dict[int, Connection] = {}

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players

    def admit(self, connection: Connection) -> Player:
        """Create, register and return a Player for a newly accepted connection."""
        spawn_x = min(self._rng.randint(*SPAWN_X_RANGE), MAX_X)
        spawn_y = min(self._rng.randint(*SPAWN_Y_RANGE), MAX_Y)
        player = Player(
            id=next(self._ids),
            x=spawn_x,
            y=spawn_y,
            color=random_color(self._rng),
            max_x=spawn_x,
        )
        self._players[player.id] = player
        self._connections[player.id] = connection
        return player

    def remove(self, player_id: int) -> Optional[Player]:
        """Drop a player. Returns the removed record, or None if already gone."""
        self._connections.pop(player_id, None)
        return self._players.pop(player_id, None)

    def get(self, player_id: int) -> Optional[Player]:
        return self._players.get(player_id)

    def update_position(self, player_id: int, x: float, y: float) -> Optional[Player]:
        """Write a new position and raise the high-water mark; the only mutator."""
        player = self._players.get(player_id)
        if player is None:
            return None
        player.x = x
        player.y = y
        player.max_x = max(player.max_x, x)
        return player

    def snapshot(self) -> list[Player]:
        """Copies of every registered player, ordered by id."""
        return [self._players[pid].model_copy() for pid in sorted(self._players)]

    def connection(self, player_id: int) -> Optional[Connection]:
        return self._connections.get(player_id)

    def recipients(self, exclude_id: Optional[int] = None) -> Iterator[tuple[int, Connection]]:
        """Live connections other than ``exclude_id``, for fan-out only."""
        for pid, conn in list(self._connections.items()):
            if pid != exclude_id and conn.is_live:
                yield pid, conn
