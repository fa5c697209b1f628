"""In-memory game repository.

Maps game id → engine and player id → game id. Owned by the transport; the
rules engine itself keeps no process-wide state.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Any

from skirmish.config import GameConfig, get_config
from skirmish.engine import GameEngine
from skirmish.errors import ErrorCode, GameError

logger = logging.getLogger(__name__)


class GameRepository:
    """Thread-safe registry of running games."""

    def __init__(self, config: GameConfig | None = None):
        self.config = config or get_config()
        self._games: dict[str, GameEngine] = {}
        self._player_games: dict[str, str] = {}
        self._lock = threading.Lock()

    def create(self, quick_game: bool = False, max_players: int | None = None,
               rng: random.Random | None = None) -> GameEngine:
        """Create and register a new game."""
        engine = GameEngine(quick_game=quick_game, max_players=max_players,
                            config=self.config, rng=rng)
        with self._lock:
            self._games[engine.game_id] = engine
        logger.info("Registered game %s", engine.game_id)
        return engine

    def add(self, engine: GameEngine) -> None:
        """Register an existing engine (e.g. one restored from a save)."""
        with self._lock:
            self._games[engine.game_id] = engine
            for player in engine.state.players:
                self._player_games[player.id] = engine.game_id

    def get(self, game_id: str) -> GameEngine | None:
        with self._lock:
            return self._games.get(game_id)

    def require(self, game_id: str) -> GameEngine | GameError:
        """The engine, or a GAME_NOT_FOUND error value."""
        engine = self.get(game_id)
        if engine is None:
            return GameError.of(ErrorCode.GAME_NOT_FOUND, game_id=game_id)
        return engine

    def remove(self, game_id: str) -> GameEngine | None:
        with self._lock:
            engine = self._games.pop(game_id, None)
            self._player_games = {
                pid: gid for pid, gid in self._player_games.items() if gid != game_id
            }
        if engine is not None:
            logger.info("Removed game %s", game_id)
        return engine

    # ==================== Players ====================

    def bind_player(self, player_id: str, game_id: str) -> None:
        with self._lock:
            self._player_games[player_id] = game_id

    def unbind_player(self, player_id: str) -> str | None:
        with self._lock:
            return self._player_games.pop(player_id, None)

    def game_of(self, player_id: str) -> GameEngine | None:
        with self._lock:
            game_id = self._player_games.get(player_id)
            return self._games.get(game_id) if game_id else None

    # ==================== Listing ====================

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    def list_games(self) -> list[dict[str, Any]]:
        with self._lock:
            engines = list(self._games.values())
        summaries = []
        for engine in engines:
            state = engine.snapshot()
            summaries.append({
                "game_id": state.id,
                "phase": state.phase.value,
                "player_count": len(state.players),
                "max_players": state.max_players,
                "target_skirmishes": state.target_skirmishes,
            })
        return summaries
