"""Pydantic models for players, leaderboard rows and wire messages."""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# ── Player ────────────────────────────────────────────────────────────────────

class Player(BaseModel):
    """Public state of one connected player.

    The connection handle is not part of this record; the registry keeps it
    alongside, keyed by the same id.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int
    x: float
    y: float
    color: str
    max_x: float = Field(alias="maxX")


class LeaderboardEntry(BaseModel):
    id: int
    score: int
    color: str


# ── Inbound ───────────────────────────────────────────────────────────────────

class MovePayload(BaseModel):
    # Raw values; coercion to coordinates happens in movement ingest
    x: Any = None
    y: Any = None


class MoveMessage(BaseModel):
    type: Literal["move"]
    payload: MovePayload = Field(default_factory=MovePayload)


# ── Outbound ──────────────────────────────────────────────────────────────────

EventType = Literal["init", "player_joined", "player_moved", "player_left", "leaderboard_update"]


class ServerEvent(BaseModel):
    type: EventType
    payload: Any

    def encode(self) -> str:
        return self.model_dump_json(by_alias=True)
