"""Network protocol.

JSON messages over WebSocket:
- client → server: ClientMsg (lobby requests, game actions)
- server → client: ServerMsg (events, state snapshots, errors)
- every message carries a ``type`` field used for routing
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ==================== Message types ====================


class MsgType(Enum):
    """Network message types"""

    # ---- connection ----
    HEARTBEAT = "heartbeat"
    HEARTBEAT_ACK = "heartbeat_ack"     # also the welcome message
    ERROR = "error"

    # ---- lobby (client → server) ----
    GAME_CREATE = "game_create"
    GAME_JOIN = "game_join"
    GAME_LEAVE = "game_leave"
    GAME_LIST = "game_list"

    # ---- lobby (server → client) ----
    GAME_CREATED = "game_created"
    GAME_JOINED = "game_joined"
    GAME_LEFT = "game_left"
    GAME_LISTING = "game_listing"

    # ---- play ----
    GAME_ACTION = "game_action"         # client → server, wraps an action envelope
    GAME_EVENT = "game_event"           # server → client, one engine event
    GAME_STATE = "game_state"           # server → client, redacted snapshot


# ==================== Messages ====================


@dataclass
class ServerMsg:
    """Server → client message

    Wire format:
    {
        "type": "game_event",
        "seq": 42,
        "timestamp": 1706000000.0,
        "data": { ... }
    }
    """
    type: MsgType
    data: dict[str, Any] = field(default_factory=dict)
    seq: int = 0                # per-game event sequence number
    timestamp: float = field(default_factory=time.time)

    def to_json(self) -> str:
        return json.dumps({
            "type": self.type.value,
            "seq": self.seq,
            "timestamp": self.timestamp,
            "data": self.data,
        }, ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str) -> ServerMsg:
        obj = json.loads(raw)
        return cls(
            type=MsgType(obj["type"]),
            data=obj.get("data", {}),
            seq=obj.get("seq", 0),
            timestamp=obj.get("timestamp", 0.0),
        )

    # ---------- factories ----------

    @classmethod
    def error(cls, message: str, code: str = "BAD_REQUEST",
              details: dict[str, Any] | None = None) -> ServerMsg:
        data: dict[str, Any] = {"message": message, "code": code}
        if details:
            data["details"] = details
        return cls(type=MsgType.ERROR, data=data)

    @classmethod
    def game_error(cls, error: Any) -> ServerMsg:
        """Rejected action (a ``skirmish.errors.GameError``)."""
        return cls(type=MsgType.ERROR, data=error.to_dict())

    @classmethod
    def welcome(cls, player_id: str) -> ServerMsg:
        return cls(type=MsgType.HEARTBEAT_ACK, data={"player_id": player_id})

    @classmethod
    def heartbeat_ack(cls) -> ServerMsg:
        return cls(type=MsgType.HEARTBEAT_ACK)

    @classmethod
    def game_created(cls, game_id: str, info: dict[str, Any]) -> ServerMsg:
        return cls(type=MsgType.GAME_CREATED, data={"game_id": game_id, **info})

    @classmethod
    def game_joined(cls, game_id: str, player_id: str, player_name: str) -> ServerMsg:
        return cls(type=MsgType.GAME_JOINED, data={
            "game_id": game_id,
            "player_id": player_id,
            "player_name": player_name,
        })

    @classmethod
    def game_left(cls, game_id: str) -> ServerMsg:
        return cls(type=MsgType.GAME_LEFT, data={"game_id": game_id})

    @classmethod
    def game_listing(cls, games: list[dict[str, Any]]) -> ServerMsg:
        return cls(type=MsgType.GAME_LISTING, data={"games": games})

    @classmethod
    def game_event(cls, event: dict[str, Any], seq: int = 0) -> ServerMsg:
        """One engine event (``GameEvent.to_dict()``)."""
        return cls(type=MsgType.GAME_EVENT, seq=seq, data=event)

    @classmethod
    def game_state(cls, state: dict[str, Any], seq: int = 0) -> ServerMsg:
        return cls(type=MsgType.GAME_STATE, seq=seq, data=state)


@dataclass
class ClientMsg:
    """Client → server message

    Wire format:
    {
        "type": "game_action",
        "timestamp": 1706000000.0,
        "data": { ... }
    }

    ``player_id`` is always overwritten by the server with the id it assigned
    to the connection.
    """
    type: MsgType
    player_id: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_json(self) -> str:
        return json.dumps({
            "type": self.type.value,
            "player_id": self.player_id,
            "timestamp": self.timestamp,
            "data": self.data,
        }, ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str) -> ClientMsg:
        obj = json.loads(raw)
        return cls(
            type=MsgType(obj["type"]),
            player_id=obj.get("player_id", ""),
            data=obj.get("data", {}),
            timestamp=obj.get("timestamp", 0.0),
        )

    # ---------- factories ----------

    @classmethod
    def heartbeat(cls) -> ClientMsg:
        return cls(type=MsgType.HEARTBEAT)

    @classmethod
    def game_create(cls, player_name: str, quick_game: bool = False,
                    max_players: int = 4) -> ClientMsg:
        return cls(type=MsgType.GAME_CREATE, data={
            "player_name": player_name,
            "quick_game": quick_game,
            "max_players": max_players,
        })

    @classmethod
    def game_join(cls, game_id: str, player_name: str) -> ClientMsg:
        return cls(type=MsgType.GAME_JOIN, data={
            "game_id": game_id,
            "player_name": player_name,
        })

    @classmethod
    def game_leave(cls) -> ClientMsg:
        return cls(type=MsgType.GAME_LEAVE)

    @classmethod
    def game_list(cls) -> ClientMsg:
        return cls(type=MsgType.GAME_LIST)

    @classmethod
    def game_action(cls, action_type: str, payload: dict[str, Any] | None = None) -> ClientMsg:
        return cls(type=MsgType.GAME_ACTION, data={
            "type": action_type,
            "payload": payload or {},
        })


# ==================== Snapshot redaction ====================


def redact_state(state: dict[str, Any], viewer_id: str | None) -> dict[str, Any]:
    """Hide what ``viewer_id`` may not see in a ``GameState.to_dict()``.

    Other players' hands and every deck become counts; face-down prepared
    cards of other players become counts; the environment and item decks
    become counts. Cards in play, discard piles and items on the board stay
    public. Returns a new dict.
    """
    view = dict(state)

    players = []
    for player in state.get("players", []):
        p = dict(player)
        p["deck_count"] = len(p.pop("deck", []))
        if p["id"] != viewer_id:
            p["hand_count"] = len(p.pop("hand", []))
        players.append(p)
    view["players"] = players

    prepared = {}
    for env_id, piles in state.get("prepared_cards", {}).items():
        prepared[env_id] = {
            pid: cards if pid == viewer_id else len(cards)
            for pid, cards in piles.items()
        }
    view["prepared_cards"] = prepared

    view["environment_deck_count"] = len(view.pop("environment_deck", []))
    view["item_deck_count"] = len(view.pop("item_deck", []))
    return view


def parse_message(raw: str) -> tuple[str, dict]:
    """Return ``(type_str, full_dict)`` without building a message object."""
    obj = json.loads(raw)
    return obj.get("type", ""), obj
