"""
Leaderboard timers, run by APScheduler on the server's event loop.

  every LEADERBOARD_INTERVAL_MS       → leaderboard job       — broadcast to all
  LEADERBOARD_WELCOME_DELAY_MS after  → welcome_<id> job      — push to one
  a player's admission                                          new connection
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from arena.config import LEADERBOARD_INTERVAL_MS

if TYPE_CHECKING:
    from arena.leaderboard import LeaderboardAggregator

log = logging.getLogger(__name__)

LEADERBOARD_JOB_ID = "leaderboard"


def _welcome_job_id(player_id: int) -> str:
    return f"welcome_{player_id}"


# Jobs must be coroutines so they run on the event loop, not in a worker thread
async def _broadcast_leaderboard(aggregator: LeaderboardAggregator) -> None:
    aggregator.broadcast()


async def _welcome_leaderboard(aggregator: LeaderboardAggregator, player_id: int) -> None:
    if not aggregator.send_to(player_id):
        log.debug("Welcome leaderboard skipped: player %d already left", player_id)


def register_leaderboard_job(
    scheduler: AsyncIOScheduler,
    aggregator: LeaderboardAggregator,
    interval_ms: int = LEADERBOARD_INTERVAL_MS,
) -> None:
    """Add the periodic leaderboard broadcast (idempotent via replace_existing)."""
    scheduler.add_job(
        _broadcast_leaderboard,
        "interval",
        seconds=interval_ms / 1000.0,
        args=[aggregator],
        id=LEADERBOARD_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )


def schedule_welcome_leaderboard(
    scheduler: AsyncIOScheduler,
    aggregator: LeaderboardAggregator,
    player_id: int,
    delay_ms: int,
) -> None:
    """One-shot leaderboard push to a freshly admitted player."""
    run_date = datetime.now(timezone.utc) + timedelta(milliseconds=delay_ms)
    scheduler.add_job(
        _welcome_leaderboard,
        "date",
        run_date=run_date,
        args=[aggregator, player_id],
        id=_welcome_job_id(player_id),
        replace_existing=True,
    )


def setup_scheduler(
    aggregator: LeaderboardAggregator,
    interval_ms: Optional[int] = LEADERBOARD_INTERVAL_MS,
) -> AsyncIOScheduler:
    """Create and start the scheduler; a None interval disables the periodic job."""
    scheduler = AsyncIOScheduler(timezone="UTC")
    if interval_ms is not None:
        register_leaderboard_job(scheduler, aggregator, interval_ms)
        log.info("Leaderboard broadcast every %d ms", interval_ms)
    scheduler.start()
    return scheduler
