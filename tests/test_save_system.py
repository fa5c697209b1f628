"""Tests for skirmish.save_system."""

import json
import random

import pytest

from skirmish.actions import PrepareCard, ReadyUp
from skirmish.config import GameConfig
from skirmish.engine import GameEngine
from skirmish.enums import GamePhase
from skirmish.errors import SaveDataError
from skirmish.pass_policy import PassPolicy
from skirmish.save_system import (
    SCHEMA_VERSION, apply_migrations, load_game, restore_engine, save_game, serialize_engine,
)


def running_engine(config=None):
    engine = GameEngine("g1", config=config or GameConfig(), rng=random.Random(11))
    engine.add_player("p1", "Alice")
    engine.add_player("p2", "Bob")
    engine.process(ReadyUp(player_id="p1"))
    engine.process(ReadyUp(player_id="p2"))
    return engine


class TestSerialize:
    def test_payload_shape(self):
        data = serialize_engine(running_engine())
        assert data["schema_version"] == SCHEMA_VERSION
        assert data["state"]["phase"] == "handbuilding"
        assert data["rules"]["skirmish_threshold"] == 8
        assert data["rules"]["pass_policy"] == "discard"
        json.dumps(data)

    def test_round_trip_state(self):
        engine = running_engine()
        restored = restore_engine(serialize_engine(engine), GameConfig())
        assert restored.to_dict() == engine.to_dict()
        assert restored.fsm.current == GamePhase.HANDBUILDING

    def test_restored_engine_continues_identically(self):
        engine = running_engine()
        restored = restore_engine(serialize_engine(engine), GameConfig())
        assert restored.rng.random() == engine.rng.random()

        for game in (engine, restored):
            card = game.state.get_player("p1").hand[0]
            assert game.process(PrepareCard(player_id="p1", card_id=card.id,
                                            environment_id=game.state.environments[1].id)) is None
        assert [c.id for c in restored.state.get_player("p1").hand] == \
            [c.id for c in engine.state.get_player("p1").hand]

    def test_rules_travel_with_save(self):
        config = GameConfig(skirmish_threshold=5, pass_policy=PassPolicy.REDISTRIBUTE)
        data = serialize_engine(running_engine(config))
        restored = restore_engine(data, GameConfig())
        assert restored.config.skirmish_threshold == 5
        assert restored.config.pass_policy is PassPolicy.REDISTRIBUTE


class TestMigrations:
    def test_v1_upgrade(self):
        data = serialize_engine(running_engine())
        del data["schema_version"]
        del data["rules"]
        del data["rng_state"]
        del data["state"]["next_color_slot"]

        migrated = apply_migrations(data)
        assert migrated["schema_version"] == 2
        assert migrated["state"]["next_color_slot"] == 2
        engine = restore_engine(migrated, GameConfig())
        assert len(engine.state.players) == 2

    def test_newer_schema_rejected(self):
        with pytest.raises(SaveDataError):
            apply_migrations({"schema_version": SCHEMA_VERSION + 1})


class TestRestoreErrors:
    def test_corrupt_state(self):
        data = serialize_engine(running_engine())
        data["state"]["phase"] = "intermission"
        with pytest.raises(SaveDataError):
            restore_engine(data, GameConfig())

    def test_missing_state(self):
        data = serialize_engine(running_engine())
        del data["state"]
        with pytest.raises(SaveDataError):
            restore_engine(data, GameConfig())

    def test_unknown_rule_field(self):
        data = serialize_engine(running_engine())
        data["rules"]["websocket_port"] = 1
        with pytest.raises(SaveDataError):
            restore_engine(data, GameConfig())

    def test_index_out_of_range(self):
        data = serialize_engine(running_engine())
        data["state"]["current_player_index"] = 5
        with pytest.raises(SaveDataError):
            restore_engine(data, GameConfig())

    def test_active_environment_off_board(self):
        data = serialize_engine(running_engine())
        data["state"]["active_environment_id"] = "elsewhere"
        with pytest.raises(SaveDataError):
            restore_engine(data, GameConfig())


class TestFiles:
    def test_save_and_load(self, tmp_path):
        engine = running_engine()
        path = save_game(engine, tmp_path / "game.json")
        loaded = load_game(path, GameConfig())
        assert loaded.to_dict() == engine.to_dict()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SaveDataError):
            load_game(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(SaveDataError):
            load_game(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_game(tmp_path / "nope.json")
