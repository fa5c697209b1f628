"""
Outbound game events.

The engine never calls listeners while it mutates state. It appends events to
an ``EventQueue`` in emission order; the caller drains the queue after
``process`` returns and relays the events to clients.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(Enum):
    """Event kinds sent to clients."""

    GAME_UPDATED = "GAME_UPDATED"
    PLAYER_JOINED = "PLAYER_JOINED"
    PLAYER_LEFT = "PLAYER_LEFT"
    PHASE_CHANGED = "PHASE_CHANGED"
    CARD_PREPARED = "CARD_PREPARED"
    SKIRMISH_INITIATED = "SKIRMISH_INITIATED"
    CARD_PLAYED = "CARD_PLAYED"
    ITEM_TAKEN = "ITEM_TAKEN"
    PLAYER_PASSED = "PLAYER_PASSED"
    SKIRMISH_ENDED = "SKIRMISH_ENDED"
    GAME_ENDED = "GAME_ENDED"


@dataclass(frozen=True)
class GameEvent:
    """
    A single event.
    ``data`` holds JSON-safe values only (ids, dicts, numbers).
    """

    type: EventType
    game_id: str
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "game_id": self.game_id,
            "timestamp": self.timestamp,
            "data": self.data,
        }


class EventQueue:
    """
    Pending events for one game plus a bounded history of drained ones.
    Not thread-safe on its own; the engine guards it with its lock.
    """

    def __init__(self, game_id: str, max_history: int = 100):
        self.game_id = game_id
        self._pending: list[GameEvent] = []
        self._history: deque[GameEvent] = deque(maxlen=max_history)

    def emit(self, event_type: EventType, **data: Any) -> GameEvent:
        """Queue an event and return it."""
        event = GameEvent(type=event_type, game_id=self.game_id, data=data)
        self._pending.append(event)
        return event

    def drain(self) -> list[GameEvent]:
        """Take all pending events, oldest first."""
        events, self._pending = self._pending, []
        self._history.extend(events)
        return events

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def get_history(self, count: int = 10) -> list[GameEvent]:
        """Most recent drained events."""
        return list(self._history)[-count:]
