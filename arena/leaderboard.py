"""
Leaderboard — top-N players by furthest rightward position reached.

compute_leaderboard() is pure; LeaderboardAggregator adds the registry read
and the broadcast.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable

from arena.broadcast.player_broadcaster import PlayerBroadcaster
from arena.config import LEADERBOARD_SIZE
from arena.models import LeaderboardEntry, Player
from arena.protocol import leaderboard_event
from arena.registry import ConnectionRegistry

log = logging.getLogger(__name__)


def _score(max_x: float) -> int:
    # Half rounds up; round() would send 2.5 to 2
    return math.floor(max_x + 0.5)


def compute_leaderboard(players: Iterable[Player], limit: int = LEADERBOARD_SIZE) -> list[LeaderboardEntry]:
    """Rank by max_x descending; equal max_x puts the lower id first."""
    ranked = sorted(players, key=lambda p: (-p.max_x, p.id))
    return [
        LeaderboardEntry(id=p.id, score=_score(p.max_x), color=p.color)
        for p in ranked[:limit]
    ]


class LeaderboardAggregator:
    def __init__(
        self,
        registry: ConnectionRegistry,
        broadcaster: PlayerBroadcaster,
        limit: int = LEADERBOARD_SIZE,
    ) -> None:
        self._registry = registry
        self._broadcaster = broadcaster
        self.limit = limit

    def compute(self) -> list[LeaderboardEntry]:
        return compute_leaderboard(self._registry.snapshot(), self.limit)

    def broadcast(self) -> int:
        """Send the current leaderboard to every live connection."""
        entries = self.compute()
        delivered = self._broadcaster.broadcast(leaderboard_event(entries))
        log.debug("Leaderboard (%d entries) sent to %d connections", len(entries), delivered)
        return delivered

    def send_to(self, player_id: int) -> bool:
        """Push the leaderboard to one player; False if it has left."""
        if player_id not in self._registry:
            return False
        return self._broadcaster.send_to(player_id, leaderboard_event(self.compute()))
