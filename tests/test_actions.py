"""Tests for skirmish.actions envelope decoding."""

import pytest

from skirmish.actions import (
    ACTION_CLASSES, Action, ActionType, DiscardToHandLimit, Pass, PlayCard, PrepareCard, TakeItem,
)
from skirmish.errors import ActionRejected, ErrorCode


class TestFromEnvelope:
    def test_prepare_card(self):
        action = Action.from_envelope({
            "type": "PREPARE_CARD",
            "player_id": "p1",
            "payload": {"card_id": "c1", "environment_id": "e1", "extra": 1},
        })
        assert action == PrepareCard(player_id="p1", card_id="c1", environment_id="e1")

    def test_pass_without_payload(self):
        assert Action.from_envelope({"type": "PASS", "player_id": "p1"}) == Pass(player_id="p1")

    def test_take_item_discards_optional(self):
        action = Action.from_envelope({"type": "TAKE_ITEM", "player_id": "p1", "payload": {"item_id": "i1"}})
        assert action == TakeItem(player_id="p1", item_id="i1", discarded_card_ids=())

    def test_discard_requires_list(self):
        with pytest.raises(ActionRejected) as exc_info:
            Action.from_envelope({"type": "DISCARD_TO_HAND_LIMIT", "player_id": "p1", "payload": {}})
        assert exc_info.value.error.code == ErrorCode.INVALID_MOVE
        assert exc_info.value.error.details == {"field": "discarded_card_ids"}

    @pytest.mark.parametrize("envelope", [
        "not a dict",
        {"type": "TELEPORT", "player_id": "p1"},
        {"type": "PASS"},
        {"type": "PASS", "player_id": ""},
        {"type": "PLAY_CARD", "player_id": "p1", "payload": {"card_id": 7}},
        {"type": "PLAY_CARD", "player_id": "p1", "payload": ["c1"]},
        {"type": "DISCARD_TO_HAND_LIMIT", "player_id": "p1", "payload": {"discarded_card_ids": [1]}},
    ])
    def test_malformed_envelopes(self, envelope):
        with pytest.raises(ActionRejected) as exc_info:
            Action.from_envelope(envelope)
        assert exc_info.value.error.code == ErrorCode.INVALID_MOVE


class TestEnvelopes:
    def test_every_type_has_a_class(self):
        assert set(ACTION_CLASSES) == set(ActionType)

    def test_to_envelope(self):
        action = DiscardToHandLimit(player_id="p1", discarded_card_ids=("c1", "c2"))
        assert action.to_envelope() == {
            "type": "DISCARD_TO_HAND_LIMIT",
            "player_id": "p1",
            "payload": {"discarded_card_ids": ["c1", "c2"]},
        }

    def test_envelope_decodes_back(self):
        action = PlayCard(player_id="p2", card_id="c9")
        assert Action.from_envelope(action.to_envelope()) == action

    def test_actions_are_frozen(self):
        action = Pass(player_id="p1")
        with pytest.raises(AttributeError):
            action.player_id = "p2"
