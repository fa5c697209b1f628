"""
Player actions.

A closed set of frozen dataclasses, one per action type. The engine matches
on the concrete class; clients send the JSON envelope
``{"type", "player_id", "payload"}`` which ``Action.from_envelope`` decodes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from .errors import ActionRejected, ErrorCode


class ActionType(Enum):
    """Action types"""
    READY_UP = "READY_UP"
    PREPARE_CARD = "PREPARE_CARD"
    INITIATE_SKIRMISH = "INITIATE_SKIRMISH"
    PLAY_CARD = "PLAY_CARD"
    TAKE_ITEM = "TAKE_ITEM"
    PASS = "PASS"
    DISCARD_TO_HAND_LIMIT = "DISCARD_TO_HAND_LIMIT"


@dataclass(frozen=True)
class Action:
    """
    Base class of all actions.
    ``player_id`` is the acting player.
    """
    action_type: ClassVar[ActionType]
    player_id: str

    def payload(self) -> dict[str, Any]:
        return {}

    def to_envelope(self) -> dict[str, Any]:
        return {
            "type": self.action_type.value,
            "player_id": self.player_id,
            "payload": self.payload(),
        }

    @staticmethod
    def from_envelope(envelope: Any) -> Action:
        """
        Decode a client envelope. Unknown payload fields are ignored.

        Raises:
            ActionRejected: INVALID_MOVE for an unknown type or a malformed
                or missing payload field
        """
        if not isinstance(envelope, dict):
            raise _invalid("envelope must be an object")
        try:
            action_type = ActionType(envelope.get("type"))
        except ValueError:
            raise ActionRejected.of(
                ErrorCode.INVALID_MOVE, "error.unknown_action", action_type=str(envelope.get("type"))
            ) from None

        player_id = envelope.get("player_id")
        if not isinstance(player_id, str) or not player_id:
            raise _invalid("player_id")

        payload = envelope.get("payload") or {}
        if not isinstance(payload, dict):
            raise _invalid("payload")

        cls = ACTION_CLASSES[action_type]
        return cls.from_payload(player_id, payload)

    @classmethod
    def from_payload(cls, player_id: str, payload: dict[str, Any]) -> Action:
        return cls(player_id=player_id)


@dataclass(frozen=True)
class ReadyUp(Action):
    """Mark the player ready (setup only)."""
    action_type: ClassVar[ActionType] = ActionType.READY_UP


@dataclass(frozen=True)
class PrepareCard(Action):
    """Prepare a hand card face-down at an environment."""
    action_type: ClassVar[ActionType] = ActionType.PREPARE_CARD
    card_id: str = ""
    environment_id: str = ""

    def payload(self) -> dict[str, Any]:
        return {"card_id": self.card_id, "environment_id": self.environment_id}

    @classmethod
    def from_payload(cls, player_id: str, payload: dict[str, Any]) -> Action:
        return cls(
            player_id=player_id,
            card_id=_require_str(payload, "card_id"),
            environment_id=_require_str(payload, "environment_id"),
        )


@dataclass(frozen=True)
class InitiateSkirmish(Action):
    """Start a skirmish at an environment."""
    action_type: ClassVar[ActionType] = ActionType.INITIATE_SKIRMISH
    environment_id: str = ""

    def payload(self) -> dict[str, Any]:
        return {"environment_id": self.environment_id}

    @classmethod
    def from_payload(cls, player_id: str, payload: dict[str, Any]) -> Action:
        return cls(player_id=player_id, environment_id=_require_str(payload, "environment_id"))


@dataclass(frozen=True)
class PlayCard(Action):
    """Play a hand card into the active skirmish."""
    action_type: ClassVar[ActionType] = ActionType.PLAY_CARD
    card_id: str = ""

    def payload(self) -> dict[str, Any]:
        return {"card_id": self.card_id}

    @classmethod
    def from_payload(cls, player_id: str, payload: dict[str, Any]) -> Action:
        return cls(player_id=player_id, card_id=_require_str(payload, "card_id"))


@dataclass(frozen=True)
class TakeItem(Action):
    """Take an item at the active environment, paying its discard cost."""
    action_type: ClassVar[ActionType] = ActionType.TAKE_ITEM
    item_id: str = ""
    discarded_card_ids: tuple[str, ...] = field(default_factory=tuple)

    def payload(self) -> dict[str, Any]:
        return {"item_id": self.item_id, "discarded_card_ids": list(self.discarded_card_ids)}

    @classmethod
    def from_payload(cls, player_id: str, payload: dict[str, Any]) -> Action:
        return cls(
            player_id=player_id,
            item_id=_require_str(payload, "item_id"),
            discarded_card_ids=_str_list(payload, "discarded_card_ids", required=False),
        )


@dataclass(frozen=True)
class Pass(Action):
    """Pass for the rest of the skirmish."""
    action_type: ClassVar[ActionType] = ActionType.PASS


@dataclass(frozen=True)
class DiscardToHandLimit(Action):
    """Discard specific hand cards to get within the phase hand limit."""
    action_type: ClassVar[ActionType] = ActionType.DISCARD_TO_HAND_LIMIT
    discarded_card_ids: tuple[str, ...] = field(default_factory=tuple)

    def payload(self) -> dict[str, Any]:
        return {"discarded_card_ids": list(self.discarded_card_ids)}

    @classmethod
    def from_payload(cls, player_id: str, payload: dict[str, Any]) -> Action:
        return cls(
            player_id=player_id,
            discarded_card_ids=_str_list(payload, "discarded_card_ids", required=True),
        )


ACTION_CLASSES: dict[ActionType, type[Action]] = {
    cls.action_type: cls
    for cls in (ReadyUp, PrepareCard, InitiateSkirmish, PlayCard, TakeItem, Pass, DiscardToHandLimit)
}


# ==================== Payload helpers ====================


def _invalid(field_name: str) -> ActionRejected:
    return ActionRejected.of(ErrorCode.INVALID_MOVE, "error.malformed_payload", field=field_name)


def _require_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise _invalid(key)
    return value


def _str_list(payload: dict[str, Any], key: str, required: bool) -> tuple[str, ...]:
    value = payload.get(key)
    if value is None and not required:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise _invalid(key)
    return tuple(value)
