"""
Session lifecycle — admission, inbound dispatch and departure of connections.

connect() and disconnect() are synchronous: the registry mutation and the
announcements it triggers happen in one uninterrupted step on the event loop.
"""
from __future__ import annotations

import logging
from typing import Optional, Union

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from arena.broadcast.player_broadcaster import PlayerBroadcaster
from arena.config import LEADERBOARD_WELCOME_DELAY_MS
from arena.errors import MalformedMessage
from arena.leaderboard import LeaderboardAggregator
from arena.models import MoveMessage, Player
from arena.movement import MovementIngest
from arena.protocol import (
    init_event, parse_inbound, player_joined_event, player_left_event,
)
from arena.registry import Connection, ConnectionRegistry
from arena.scheduler.jobs import schedule_welcome_leaderboard

log = logging.getLogger(__name__)


class SessionLifecycle:
    def __init__(
        self,
        registry: ConnectionRegistry,
        broadcaster: PlayerBroadcaster,
        leaderboard: LeaderboardAggregator,
        movement: MovementIngest,
        scheduler: Optional[AsyncIOScheduler] = None,
        welcome_delay_ms: Optional[int] = LEADERBOARD_WELCOME_DELAY_MS,
    ) -> None:
        self._registry = registry
        self._broadcaster = broadcaster
        self._leaderboard = leaderboard
        self._movement = movement
        self.scheduler = scheduler
        self.welcome_delay_ms = welcome_delay_ms

    def connect(self, connection: Connection) -> Player:
        """Admit a connection, send it the world, announce it to everyone else."""
        player = self._registry.admit(connection)
        log.info("Player %d connected (%d online)", player.id, len(self._registry))

        self._broadcaster.send_to(player.id, init_event(player.id, self._registry.snapshot()))
        self._broadcaster.broadcast(player_joined_event(player), exclude_id=player.id)

        if self.scheduler is not None and self.welcome_delay_ms is not None:
            schedule_welcome_leaderboard(self.scheduler, self._leaderboard, player.id, self.welcome_delay_ms)
        return player

    def disconnect(self, player_id: int) -> bool:
        """Remove and announce a departure. Safe to call more than once.

        Returns True only for the call that actually removed the player.
        """
        if self._registry.remove(player_id) is None:
            return False
        log.info("Player %d disconnected (%d online)", player_id, len(self._registry))

        self._broadcaster.broadcast(player_left_event(player_id))
        self._leaderboard.broadcast()
        return True

    def handle_message(self, player_id: int, raw: Union[str, bytes]) -> None:
        """Dispatch one inbound frame; malformed frames are logged and dropped."""
        try:
            message = parse_inbound(raw)
        except MalformedMessage as exc:
            log.warning("Ignoring frame from player %d [%s]: %s", player_id, exc.code, exc.message)
            return

        if isinstance(message, MoveMessage):
            self._movement.apply(player_id, message.payload)
