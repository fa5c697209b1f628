"""Tests for net.protocol messages and snapshot redaction."""

import json
import random

from net.protocol import ClientMsg, MsgType, ServerMsg, parse_message, redact_state
from skirmish.actions import PrepareCard, ReadyUp
from skirmish.card import Environment
from skirmish.config import GameConfig
from skirmish.engine import GameEngine
from skirmish.errors import ErrorCode, GameError


class TestServerMsg:
    def test_json_round_trip(self):
        msg = ServerMsg.game_event({"type": "PHASE_CHANGED"}, seq=3)
        back = ServerMsg.from_json(msg.to_json())
        assert back.type == MsgType.GAME_EVENT
        assert back.seq == 3
        assert back.data == {"type": "PHASE_CHANGED"}

    def test_error(self):
        msg = ServerMsg.error("bad", details={"x": 1})
        assert msg.data == {"message": "bad", "code": "BAD_REQUEST", "details": {"x": 1}}

    def test_game_error(self):
        error = GameError(code=ErrorCode.GAME_FULL, message="full", details={"max_players": 2})
        assert ServerMsg.game_error(error).data == {
            "code": "GAME_FULL", "message": "full", "details": {"max_players": 2},
        }

    def test_welcome(self):
        msg = ServerMsg.welcome("abc")
        assert msg.type == MsgType.HEARTBEAT_ACK
        assert msg.data == {"player_id": "abc"}

    def test_unicode_not_escaped(self):
        assert "交锋" in ServerMsg.error("交锋").to_json()


class TestClientMsg:
    def test_game_action(self):
        msg = ClientMsg.game_action("PASS")
        assert msg.data == {"type": "PASS", "payload": {}}
        assert ClientMsg.from_json(msg.to_json()).type == MsgType.GAME_ACTION

    def test_parse_message(self):
        msg_type, obj = parse_message(ClientMsg.game_create("Alice", quick_game=True).to_json())
        assert msg_type == "game_create"
        assert obj["data"]["quick_game"] is True


class TestRedaction:
    def _state(self):
        engine = GameEngine("g1", config=GameConfig(), rng=random.Random(5))
        engine.add_player("p1", "Alice")
        engine.add_player("p2", "Bob")
        engine.process(ReadyUp(player_id="p1"))
        engine.process(ReadyUp(player_id="p2"))
        card = engine.state.get_player("p1").hand[0]
        env = engine.state.environments[0]
        env.environment = Environment(id=env.id, title="Outskirts")
        engine.process(PrepareCard(player_id="p1", card_id=card.id, environment_id=env.id))
        return engine.to_dict(), env.id

    def test_own_hand_visible_others_counted(self):
        state, _ = self._state()
        view = redact_state(state, "p1")
        me, other = view["players"]
        assert len(me["hand"]) == 3
        assert "hand" not in other
        assert other["hand_count"] == 3

    def test_decks_become_counts(self):
        state, _ = self._state()
        view = redact_state(state, "p1")
        assert all("deck" not in p for p in view["players"])
        assert view["players"][0]["deck_count"] == 24 - 4
        assert "environment_deck" not in view
        assert view["environment_deck_count"] == 16
        assert view["item_deck_count"] == 27

    def test_prepared_cards_hidden_from_others(self):
        state, env_id = self._state()
        assert len(redact_state(state, "p1")["prepared_cards"][env_id]["p1"]) == 1
        assert redact_state(state, "p2")["prepared_cards"][env_id]["p1"] == 1

    def test_input_not_modified(self):
        state, _ = self._state()
        before = json.dumps(state, sort_keys=True)
        redact_state(state, "p2")
        assert json.dumps(state, sort_keys=True) == before

    def test_spectator_sees_no_hands(self):
        state, _ = self._state()
        view = redact_state(state, None)
        assert all("hand" not in p for p in view["players"])
