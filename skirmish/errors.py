"""Game errors.

Rule violations cross the action boundary as values: ``GameEngine.process``
returns a ``GameError`` and leaves the state untouched. Inside the engine a
validator raises ``ActionRejected`` to abort the handler; ``process`` turns it
back into the value.

Programming errors (an illegal phase transition, corrupt save data) are plain
exceptions and propagate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from i18n import t as _t


class ErrorCode(Enum):
    """Closed set of rule-violation codes."""

    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    GAME_FULL = "GAME_FULL"
    INVALID_MOVE = "INVALID_MOVE"
    NOT_PLAYER_TURN = "NOT_PLAYER_TURN"
    PLAYER_NOT_IN_GAME = "PLAYER_NOT_IN_GAME"
    WRONG_PHASE = "WRONG_PHASE"
    INSUFFICIENT_CARDS = "INSUFFICIENT_CARDS"
    ENVIRONMENT_NOT_READY = "ENVIRONMENT_NOT_READY"
    HAND_LIMIT_EXCEEDED = "HAND_LIMIT_EXCEEDED"
    CANNOT_PLAY_CARD = "CANNOT_PLAY_CARD"
    ITEM_NOT_AVAILABLE = "ITEM_NOT_AVAILABLE"


@dataclass(frozen=True)
class GameError:
    """A rejected action.

    Attributes:
        code: machine-readable reason
        message: localised human-readable text
        details: extra context (ids, counts), JSON-safe
    """

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, code: ErrorCode, message_key: str | None = None, **details: Any) -> GameError:
        """Build an error whose message is looked up in the i18n tables.

        ``message_key`` defaults to ``error.<code>``; ``details`` are used both
        as format arguments and as the error details.
        """
        key = message_key or f"error.{code.value}"
        return cls(code=code, message=_t(key, **details), details=dict(details))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            data["details"] = dict(self.details)
        return data

    def __str__(self) -> str:
        if self.details:
            return f"{self.code.value}: {self.message} | Details: {self.details}"
        return f"{self.code.value}: {self.message}"


class ActionRejected(Exception):
    """Raised by engine validators; carries the ``GameError`` to return."""

    def __init__(self, error: GameError):
        super().__init__(str(error))
        self.error = error

    @classmethod
    def of(cls, code: ErrorCode, message_key: str | None = None, **details: Any) -> ActionRejected:
        return cls(GameError.of(code, message_key, **details))


class SaveDataError(Exception):
    """Save data is unreadable, from a newer schema, or inconsistent."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message
