"""
In-memory fan-out to connected players.

Each connection owns an Outbox — a bounded asyncio.Queue of serialized frames
drained by that connection's writer task. Broadcasting only enqueues, so a
slow or broken peer can never stall the event loop or the other recipients.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import WebSocket

from arena.config import OUTBOX_MAX_PENDING
from arena.errors import OutboxClosed
from arena.models import ServerEvent
from arena.registry import ConnectionRegistry

log = logging.getLogger(__name__)


class Outbox:
    """Connection handle stored in the registry for one WebSocket."""

    def __init__(self, maxsize: int = OUTBOX_MAX_PENDING) -> None:
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def is_live(self) -> bool:
        return not self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def send(self, text: str) -> None:
        """Enqueue a frame. Raises OutboxClosed or asyncio.QueueFull."""
        if self._closed:
            raise OutboxClosed()
        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull:
            log.warning("Outbox full with %d frames pending", self.pending)
            raise

    def close(self) -> None:
        self._closed = True

    async def pump(self, websocket: WebSocket) -> None:
        """Writer task: drain queued frames onto the socket until it fails."""
        try:
            while True:
                text = await self._queue.get()
                await websocket.send_text(text)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.warning("Outbound writer stopped: %r", exc)
        finally:
            self._closed = True


class PlayerBroadcaster:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    def broadcast(self, event: ServerEvent, exclude_id: Optional[int] = None) -> int:
        """Deliver to every live connection except ``exclude_id``.

        Serializes once. Per-recipient failures are logged and skipped.
        Returns the number of successful deliveries.
        """
        text = event.encode()
        delivered = 0
        for player_id, conn in self._registry.recipients(exclude_id):
            try:
                conn.send(text)
            except Exception as exc:
                log.warning("Send of %s to player %d failed: %r", event.type, player_id, exc)
                continue
            delivered += 1
        return delivered

    def send_to(self, player_id: int, event: ServerEvent) -> bool:
        conn = self._registry.connection(player_id)
        if conn is None or not conn.is_live:
            return False
        try:
            conn.send(event.encode())
        except Exception as exc:
            log.warning("Send of %s to player %d failed: %r", event.type, player_id, exc)
            return False
        return True
