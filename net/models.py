"""Pydantic validation models for network messages.

The server validates every raw frame with these models before building the
internal ClientMsg, rejecting wrong field types and missing fields.

Design:
  - validation models are separate from the protocol dataclasses
  - failures raise pydantic.ValidationError, handled by the caller
  - the outer frame uses extra="forbid"; action payloads ignore unknown fields
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skirmish.actions import ActionType

# ====================================================================== #
#  Client → server                                                         #
# ====================================================================== #


class ClientMsgModel(BaseModel):
    """Outer client frame"""

    model_config = ConfigDict(extra="forbid")

    type: str
    player_id: str = ""
    timestamp: float = 0.0
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("type")
    @classmethod
    def type_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("message type must not be empty")
        return v


class GameCreateData(BaseModel):
    """game_create data"""

    model_config = ConfigDict(extra="forbid")

    player_name: str = Field(min_length=1, max_length=20)
    quick_game: bool = False
    max_players: int = Field(default=4, ge=2, le=4)


class GameJoinData(BaseModel):
    """game_join data"""

    model_config = ConfigDict(extra="forbid")

    player_name: str = Field(min_length=1, max_length=20)
    game_id: str = Field(min_length=1, max_length=36)


class ActionPayload(BaseModel):
    """Action payload; camelCase names from browser clients are accepted."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    card_id: str | None = Field(default=None, alias="cardId", min_length=1)
    environment_id: str | None = Field(default=None, alias="environmentId", min_length=1)
    item_id: str | None = Field(default=None, alias="itemId", min_length=1)
    discarded_card_ids: list[str] | None = Field(default=None, alias="discardedCardIds")


class GameActionData(BaseModel):
    """game_action data: the action envelope minus the player id"""

    model_config = ConfigDict(extra="ignore")

    type: ActionType
    payload: ActionPayload = Field(default_factory=ActionPayload)

    def to_envelope(self, player_id: str) -> dict[str, Any]:
        """Engine envelope for the connection's own player id."""
        return {
            "type": self.type.value,
            "player_id": player_id,
            "payload": self.payload.model_dump(exclude_none=True),
        }


# ====================================================================== #
#  Message type → data model                                               #
# ====================================================================== #

# Types without an entry only get the outer frame checked.
DATA_VALIDATORS: dict[str, type[BaseModel]] = {
    "game_create": GameCreateData,
    "game_join": GameJoinData,
    "game_action": GameActionData,
}


def validate_client_message(raw_json: str) -> tuple[ClientMsgModel, BaseModel | None]:
    """Validate a raw JSON frame.

    Steps:
      1. ClientMsgModel.model_validate_json checks the outer frame
      2. the DATA_VALIDATORS entry for ``type`` checks ``data``

    Returns:
        the frame model and the validated data model (None if the type has
        no data model)

    Raises:
        pydantic.ValidationError: validation failed
    """
    msg = ClientMsgModel.model_validate_json(raw_json)
    validator_cls = DATA_VALIDATORS.get(msg.type)
    data = validator_cls.model_validate(msg.data) if validator_cls is not None else None
    return msg, data
