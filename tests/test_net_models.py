"""Tests for net.models pydantic validation."""

import json

import pytest
from pydantic import ValidationError

from net.models import (
    ClientMsgModel, GameActionData, GameCreateData, GameJoinData, validate_client_message,
)
from skirmish.actions import ActionType


def frame(msg_type, data=None, **extra):
    return json.dumps({"type": msg_type, "data": data or {}, **extra})


class TestClientFrame:
    def test_minimal_frame(self):
        msg, data = validate_client_message(frame("heartbeat"))
        assert msg.type == "heartbeat"
        assert data is None

    def test_unknown_top_level_field(self):
        with pytest.raises(ValidationError):
            validate_client_message(frame("heartbeat", rogue=True))

    def test_empty_type(self):
        with pytest.raises(ValidationError):
            ClientMsgModel(type="  ")

    def test_not_json(self):
        with pytest.raises(ValidationError):
            validate_client_message("{oops")

    def test_player_id_is_a_string(self):
        msg, _ = validate_client_message(frame("game_list", player_id="abc"))
        assert msg.player_id == "abc"


class TestLobbyData:
    def test_game_create(self):
        _, data = validate_client_message(frame("game_create", {"player_name": "Alice", "quick_game": True}))
        assert isinstance(data, GameCreateData)
        assert data.quick_game is True
        assert data.max_players == 4

    @pytest.mark.parametrize("max_players", [1, 5])
    def test_game_create_seat_bounds(self, max_players):
        with pytest.raises(ValidationError):
            GameCreateData(player_name="Alice", max_players=max_players)

    def test_game_create_name_required(self):
        with pytest.raises(ValidationError):
            validate_client_message(frame("game_create", {"player_name": ""}))

    def test_game_join(self):
        _, data = validate_client_message(frame("game_join", {"player_name": "Bob", "game_id": "g1"}))
        assert isinstance(data, GameJoinData)
        assert data.game_id == "g1"


class TestGameAction:
    def test_snake_case_payload(self):
        _, data = validate_client_message(frame("game_action", {
            "type": "PREPARE_CARD",
            "payload": {"card_id": "c1", "environment_id": "e1"},
        }))
        assert data.type is ActionType.PREPARE_CARD
        assert data.to_envelope("p1") == {
            "type": "PREPARE_CARD",
            "player_id": "p1",
            "payload": {"card_id": "c1", "environment_id": "e1"},
        }

    def test_camel_case_payload(self):
        data = GameActionData.model_validate({
            "type": "TAKE_ITEM",
            "payload": {"itemId": "i1", "discardedCardIds": ["c1"], "note": "ignored"},
        })
        assert data.to_envelope("p1")["payload"] == {"item_id": "i1", "discarded_card_ids": ["c1"]}

    def test_unknown_action_type(self):
        with pytest.raises(ValidationError):
            GameActionData.model_validate({"type": "TELEPORT"})

    def test_wrong_field_type(self):
        with pytest.raises(ValidationError):
            GameActionData.model_validate({"type": "PLAY_CARD", "payload": {"card_id": ["c1"]}})
