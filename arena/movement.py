"""
Movement ingest — applies a client's proposed position to its own Player.

Bad input is coerced, never rejected: a non-numeric axis keeps the player's
current coordinate, an out-of-range one is clamped into the playfield.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Optional

from arena.broadcast.player_broadcaster import PlayerBroadcaster
from arena.config import LEADERBOARD_ON_SCORE_CHANGE, MAX_X, MAX_Y
from arena.leaderboard import LeaderboardAggregator
from arena.models import MovePayload, Player
from arena.protocol import player_moved_event
from arena.registry import ConnectionRegistry

log = logging.getLogger(__name__)


def _as_number(value: Any) -> Optional[float]:
    """Numeric reading of a raw JSON value, or None when it has none."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # Integers beyond float range clamp like infinities
            number = math.inf if value > 0 else -math.inf
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def coerce_axis(value: Any, current: float, upper: float) -> float:
    number = _as_number(value)
    if number is None:
        return current
    return max(0.0, min(upper, number))


class MovementIngest:
    def __init__(
        self,
        registry: ConnectionRegistry,
        broadcaster: PlayerBroadcaster,
        leaderboard: Optional[LeaderboardAggregator] = None,
        leaderboard_on_score_change: bool = LEADERBOARD_ON_SCORE_CHANGE,
    ) -> None:
        self._registry = registry
        self._broadcaster = broadcaster
        self._leaderboard = leaderboard
        self.leaderboard_on_score_change = leaderboard_on_score_change

    def apply(self, player_id: int, payload: MovePayload) -> Optional[Player]:
        """Clamp, store and fan out a move. Returns the updated player.

        Returns None when the player is no longer registered; the move is
        discarded silently.
        """
        player = self._registry.get(player_id)
        if player is None:
            log.debug("Dropping move from departed player %d", player_id)
            return None

        new_x = coerce_axis(payload.x, player.x, MAX_X)
        new_y = coerce_axis(payload.y, player.y, MAX_Y)
        if new_x == player.x and new_y == player.y:
            return player

        old_max_x = player.max_x
        player = self._registry.update_position(player_id, new_x, new_y)

        # The sender has already applied its own move locally
        self._broadcaster.broadcast(player_moved_event(player), exclude_id=player_id)

        if self.leaderboard_on_score_change and self._leaderboard is not None and player.max_x > old_max_x:
            self._leaderboard.broadcast()
        return player
