"""
Wire protocol — JSON envelopes of the form {"type": ..., "payload": ...}.

Inbound frames are parsed into models; outbound events are built here so
every component emits identical payload shapes.
"""
from __future__ import annotations

import json
from typing import Iterable, Union

from pydantic import ValidationError

from arena.errors import INVALID_JSON, INVALID_MESSAGE, UNKNOWN_TYPE, MalformedMessage
from arena.models import LeaderboardEntry, MoveMessage, Player, ServerEvent

INBOUND_TYPES = {
    "move": MoveMessage,
}


def parse_inbound(raw: Union[str, bytes]) -> MoveMessage:
    """
    Parse one client frame.

    Raises:
        MalformedMessage: invalid JSON, a non-object envelope, an unknown
            ``type`` or a payload that does not fit the message model.
    """
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise MalformedMessage(INVALID_JSON, str(exc)) from exc

    if not isinstance(data, dict):
        raise MalformedMessage(INVALID_MESSAGE, "envelope must be a JSON object")

    msg_type = data.get("type")
    model = INBOUND_TYPES.get(msg_type) if isinstance(msg_type, str) else None
    if model is None:
        raise MalformedMessage(UNKNOWN_TYPE, f"unknown message type: {msg_type!r}")

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MalformedMessage(INVALID_MESSAGE, str(exc)) from exc


# ── Outbound builders ─────────────────────────────────────────────────────────

def init_event(player_id: int, players: Iterable[Player]) -> ServerEvent:
    return ServerEvent(
        type="init",
        payload={"id": player_id, "players": {p.id: p for p in players}},
    )


def player_joined_event(player: Player) -> ServerEvent:
    return ServerEvent(type="player_joined", payload=player)


def player_moved_event(player: Player) -> ServerEvent:
    return ServerEvent(type="player_moved", payload={"id": player.id, "x": player.x, "y": player.y})


def player_left_event(player_id: int) -> ServerEvent:
    return ServerEvent(type="player_left", payload={"id": player_id})


def leaderboard_event(entries: list[LeaderboardEntry]) -> ServerEvent:
    return ServerEvent(type="leaderboard_update", payload=entries)
