"""Save and restore games.

Features:
- serialize a whole engine (state, rule parameters, RNG state) to JSON-safe data
- rebuild an engine that behaves identically from that data
- schema versioning with chained migrations
"""

from __future__ import annotations

import dataclasses
import json
import logging
import random
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from .config import GameConfig, get_config
from .engine import GameEngine
from .errors import SaveDataError
from .pass_policy import PassPolicy
from .state import GameState

logger = logging.getLogger(__name__)

SAVE_DIR = "saves"

# ==================== Schema versions ====================

SCHEMA_VERSION: int = 2

# source schema -> (target schema, migration fn)
_MIGRATIONS: dict[int, tuple[int, Callable[[dict[str, Any]], dict[str, Any]]]] = {}

# Config fields that change rule behaviour and therefore travel with the save.
RULE_FIELDS = (
    "min_players",
    "environment_slots",
    "items_per_environment",
    "skirmish_threshold",
    "handbuilding_hand_size",
    "skirmish_hand_limit",
    "pass_policy",
)


def register_migration(from_schema: int, to_schema: int):
    """Decorator registering a save migration.

    Args:
        from_schema: source schema version
        to_schema: target schema version (must be > from_schema)
    """

    def decorator(fn: Callable[[dict[str, Any]], dict[str, Any]]):
        _MIGRATIONS[from_schema] = (to_schema, fn)
        return fn

    return decorator


@register_migration(from_schema=1, to_schema=2)
def _migrate_v1_to_v2(data: dict[str, Any]) -> dict[str, Any]:
    """v1 -> v2: colour slot counter and rule parameters were added."""
    state = data.setdefault("state", {})
    state.setdefault("next_color_slot", len(state.get("players", [])))
    data.setdefault("rules", {})
    data.setdefault("rng_state", None)
    data["schema_version"] = 2
    return data


def apply_migrations(data: dict[str, Any]) -> dict[str, Any]:
    """Upgrade save data to the current schema.

    Data without ``schema_version`` is treated as schema 1.

    Raises:
        SaveDataError: newer schema than supported, or no migration path
    """
    schema = data.get("schema_version", 1)

    if schema > SCHEMA_VERSION:
        raise SaveDataError(
            f"Save schema {schema} is newer than the supported {SCHEMA_VERSION}",
            {"schema_version": schema},
        )

    while schema < SCHEMA_VERSION:
        if schema not in _MIGRATIONS:
            raise SaveDataError(f"No migration from schema {schema} to {SCHEMA_VERSION}")
        target, fn = _MIGRATIONS[schema]
        logger.info("Migrating save: schema %d → %d", schema, target)
        data = fn(data)
        schema = target

    return data


# ==================== Serialization ====================


def serialize_rng(rng: random.Random) -> list[Any]:
    version, internal, gauss_next = rng.getstate()
    return [version, list(internal), gauss_next]


def restore_rng(data: list[Any] | None) -> random.Random | None:
    if data is None:
        return None
    version, internal, gauss_next = data
    rng = random.Random()
    rng.setstate((version, tuple(internal), gauss_next))
    return rng


def serialize_rules(config: GameConfig) -> dict[str, Any]:
    rules = {}
    for name in RULE_FIELDS:
        value = getattr(config, name)
        rules[name] = value.value if isinstance(value, PassPolicy) else value
    return rules


def serialize_engine(engine: GameEngine) -> dict[str, Any]:
    """Serialize a complete engine.

    Returns:
        JSON-safe dict holding everything needed to rebuild the game
    """
    with engine._lock:
        return {
            "schema_version": SCHEMA_VERSION,
            "saved_at": datetime.now().isoformat(),
            "timestamp": time.time(),
            "rules": serialize_rules(engine.config),
            "rng_state": serialize_rng(engine.rng),
            "state": engine.state.to_dict(),
        }


def restore_engine(data: dict[str, Any], config: GameConfig | None = None) -> GameEngine:
    """Rebuild an engine from ``serialize_engine`` output.

    Rule parameters from the save override ``config`` (default: the process
    config); network and logging settings come from ``config``.

    Raises:
        SaveDataError: the data cannot be migrated or is inconsistent
    """
    data = apply_migrations(dict(data))
    base = config or get_config()
    try:
        rules = dict(data.get("rules") or {})
        if "pass_policy" in rules:
            rules["pass_policy"] = PassPolicy(rules["pass_policy"])
        unknown = set(rules) - set(RULE_FIELDS)
        if unknown:
            raise SaveDataError("Unknown rule fields in save", {"fields": sorted(unknown)})
        engine_config = dataclasses.replace(base, **rules)
        state = GameState.from_dict(data["state"])
        rng = restore_rng(data.get("rng_state"))
    except (KeyError, TypeError, ValueError) as e:
        raise SaveDataError(f"Corrupt save data: {e}") from e

    _check_consistency(state)
    logger.info("Restored game %s in phase %s", state.id, state.phase.value)
    return GameEngine(config=engine_config, rng=rng, state=state)


def _check_consistency(state: GameState) -> None:
    if state.players and not 0 <= state.current_player_index < len(state.players):
        raise SaveDataError(
            "current_player_index out of range",
            {"index": state.current_player_index, "players": len(state.players)},
        )
    env_ids = {e.id for e in state.environments}
    if state.active_environment_id is not None and state.active_environment_id not in env_ids:
        raise SaveDataError("active environment is not on the board",
                            {"environment_id": state.active_environment_id})


# ==================== Files ====================


def save_game(engine: GameEngine, filepath: str | Path | None = None) -> str:
    """Write a save file.

    Args:
        engine: the game
        filepath: target path (generated under ``saves/`` when None)

    Returns:
        the path written
    """
    if filepath is None:
        save_dir = Path(SAVE_DIR)
        save_dir.mkdir(exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = save_dir / f"save_{engine.game_id[:8]}_{ts}.json"

    data = serialize_engine(engine)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    logger.info("Saved game %s to %s", engine.game_id, filepath)
    return str(filepath)


def load_game(filepath: str | Path, config: GameConfig | None = None) -> GameEngine:
    """Read a save file and rebuild the engine.

    Raises:
        FileNotFoundError: missing file
        SaveDataError: invalid JSON or unusable data
    """
    with open(filepath, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SaveDataError(f"Save file is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SaveDataError("Save file must contain an object")
    return restore_engine(data, config)
