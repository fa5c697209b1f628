"""Game configuration (single source of truth).

Every tunable game parameter is defined here and may be overridden from an
environment variable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from .pass_policy import PassPolicy


def _get_env_float(key: str, default: float) -> float:
    """Read a float from the environment."""
    value = os.environ.get(key)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            pass
    return default


def _get_env_int(key: str, default: int) -> int:
    """Read an int from the environment."""
    value = os.environ.get(key)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            pass
    return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Read a bool from the environment."""
    value = os.environ.get(key, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    elif value in ("false", "0", "no", "off"):
        return False
    return default


def _get_env_policy(key: str, default: PassPolicy) -> PassPolicy:
    value = os.environ.get(key, "").strip().lower()
    try:
        return PassPolicy(value) if value else default
    except ValueError:
        return default


@dataclass(frozen=True)
class GameConfig:
    """Game configuration (immutable).

    Environment overrides:
    - SKIRMISH_MAX_PLAYERS: seats per game
    - SKIRMISH_QUICK_TARGET / SKIRMISH_STANDARD_TARGET: skirmish wins needed
    - SKIRMISH_THRESHOLD: prepared cards needed to initiate a skirmish
    - SKIRMISH_HAND_SIZE / SKIRMISH_HAND_LIMIT: handbuilding size, skirmish limit
    - SKIRMISH_PASS_POLICY: "discard" or "redistribute"
    """

    # ==================== Table ====================
    min_players: int = 2
    max_players: int = field(
        default_factory=lambda: _get_env_int("SKIRMISH_MAX_PLAYERS", 4)
    )
    environment_slots: int = 3
    items_per_environment: int = 1

    # ==================== Rules ====================
    quick_target: int = field(
        default_factory=lambda: _get_env_int("SKIRMISH_QUICK_TARGET", 2)
    )
    standard_target: int = field(
        default_factory=lambda: _get_env_int("SKIRMISH_STANDARD_TARGET", 3)
    )
    skirmish_threshold: int = field(
        default_factory=lambda: _get_env_int("SKIRMISH_THRESHOLD", 8)
    )
    handbuilding_hand_size: int = field(
        default_factory=lambda: _get_env_int("SKIRMISH_HAND_SIZE", 3)
    )
    skirmish_hand_limit: int = field(
        default_factory=lambda: _get_env_int("SKIRMISH_HAND_LIMIT", 10)
    )
    pass_policy: PassPolicy = field(
        default_factory=lambda: _get_env_policy("SKIRMISH_PASS_POLICY", PassPolicy.DISCARD)
    )

    # ==================== Network ====================
    websocket_host: str = field(
        default_factory=lambda: os.environ.get("SKIRMISH_WS_HOST", "0.0.0.0")
    )
    websocket_port: int = field(
        default_factory=lambda: _get_env_int("SKIRMISH_WS_PORT", 8765)
    )
    ws_max_message_size: int = field(
        default_factory=lambda: _get_env_int("SKIRMISH_WS_MAX_MSG_SIZE", 65_536)
    )
    heartbeat_timeout: float = field(
        default_factory=lambda: _get_env_float("SKIRMISH_WS_HB_TIMEOUT", 60.0)
    )

    # ==================== Logging and locale ====================
    log_level: str = field(
        default_factory=lambda: os.environ.get("SKIRMISH_LOG_LEVEL", "INFO")
    )
    locale: str = field(
        default_factory=lambda: os.environ.get("SKIRMISH_LOCALE", "en_US")
    )
    debug_mode: bool = field(
        default_factory=lambda: _get_env_bool("SKIRMISH_DEBUG", False)
    )

    @classmethod
    def from_env(cls) -> GameConfig:
        """Build a config from the current environment."""
        return cls()

    def target_for(self, quick_game: bool) -> int:
        """Skirmish wins needed to win the game."""
        return self.quick_target if quick_game else self.standard_target

    def get(self, key: str, default: Any = None) -> Any:
        """Dict-style access."""
        return getattr(self, key, default)


_config: GameConfig | None = None


def get_config() -> GameConfig:
    """Lazily created process-wide config."""
    global _config
    if _config is None:
        _config = GameConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached config (used by tests)."""
    global _config
    _config = None
