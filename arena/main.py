"""
FastAPI application entry point.

Routes:
  GET  /          → static/index.html (the game client)
  WS   /          game channel, one connection per player

Static:
  /static/        → client bundle (client.js, styles)

Messages are JSON envelopes {"type": ..., "payload": ...}:
  server → client   init, player_joined, player_moved, player_left,
                    leaderboard_update
  client → server   move
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from arena.broadcast.player_broadcaster import Outbox, PlayerBroadcaster
from arena.config import (
    HOST, INDEX_HTML, LEADERBOARD_INTERVAL_MS, LEADERBOARD_ON_SCORE_CHANGE,
    LEADERBOARD_WELCOME_DELAY_MS, LOG_LEVEL, PORT, STATIC_DIR,
)
from arena.leaderboard import LeaderboardAggregator
from arena.movement import MovementIngest
from arena.registry import ConnectionRegistry
from arena.scheduler.jobs import setup_scheduler
from arena.session import SessionLifecycle

log = logging.getLogger("uvicorn.error")


def create_app(
    registry: Optional[ConnectionRegistry] = None,
    leaderboard_interval_ms: Optional[int] = LEADERBOARD_INTERVAL_MS,
    welcome_delay_ms: Optional[int] = LEADERBOARD_WELCOME_DELAY_MS,
    leaderboard_on_score_change: bool = LEADERBOARD_ON_SCORE_CHANGE,
) -> FastAPI:
    """Build an app with its own registry. A None delay disables that timer."""
    if registry is None:
        registry = ConnectionRegistry()
    broadcaster = PlayerBroadcaster(registry)
    leaderboard = LeaderboardAggregator(registry, broadcaster)
    movement = MovementIngest(registry, broadcaster, leaderboard, leaderboard_on_score_change)
    sessions = SessionLifecycle(registry, broadcaster, leaderboard, movement, welcome_delay_ms=welcome_delay_ms)

    # ── Lifespan ──────────────────────────────────────────────────────────────

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.scheduler = setup_scheduler(leaderboard, leaderboard_interval_ms)
        sessions.scheduler = app.state.scheduler
        yield
        sessions.scheduler = None
        app.state.scheduler.shutdown(wait=False)

    app = FastAPI(title="Arena", lifespan=lifespan)
    app.state.registry = registry
    app.state.leaderboard = leaderboard
    app.state.sessions = sessions

    if STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # ── Client ────────────────────────────────────────────────────────────────

    @app.get("/")
    async def index():
        if not INDEX_HTML.exists():
            raise HTTPException(404, "index.html not found")
        return FileResponse(str(INDEX_HTML), media_type="text/html")

    # ── WebSocket game channel ────────────────────────────────────────────────

    @app.websocket("/")
    async def ws_player(websocket: WebSocket):
        await websocket.accept()

        outbox = Outbox()
        player = sessions.connect(outbox)
        writer = asyncio.create_task(outbox.pump(websocket))
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes") or b""
                sessions.handle_message(player.id, raw)
        except WebSocketDisconnect:
            pass
        except Exception:
            log.exception("WebSocket error for player %d", player.id)
        finally:
            outbox.close()
            writer.cancel()
            try:
                with suppress(asyncio.CancelledError):
                    await writer
            finally:
                sessions.disconnect(player.id)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    log.info("Starting arena on %s:%d", HOST, PORT)
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL)


if __name__ == "__main__":
    run()
