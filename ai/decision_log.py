"""Bot decision log.

Records the candidates, the chosen move and the reason for each bot decision,
for debugging bots and balancing card data. Off by default; a disabled logger
does nothing.

Usage:
    decisions = DecisionLogger(enabled=True)
    bot = RandomBot(rng, decisions)
    ...
    decisions.export_json("decisions.json")
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BotDecision:
    """One bot decision."""

    timestamp: float = field(default_factory=time.time)
    player_id: str = ""
    tier: str = ""  # "random", "greedy"
    phase: str = ""  # game phase value
    action: str = ""  # action type value
    candidates: int = 0
    chosen: dict[str, Any] = field(default_factory=dict)
    reason: str = ""
    score: float = 0.0


class DecisionLogger:
    """Collects ``BotDecision`` entries when enabled."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._history: list[BotDecision] = []

    @property
    def history(self) -> list[BotDecision]:
        return self._history

    def log(self, decision: BotDecision) -> None:
        if not self.enabled:
            return
        self._history.append(decision)
        logger.debug(
            "Bot[%s] %s %s: %s of %d (reason=%s, score=%.2f)",
            decision.tier, decision.player_id, decision.phase,
            decision.action, decision.candidates, decision.reason, decision.score,
        )

    def clear(self) -> None:
        self._history.clear()

    def export_json(self, path: str | Path) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump([asdict(d) for d in self._history], f, indent=2, ensure_ascii=False)

    def summary(self) -> dict[str, Any]:
        """Counts per action type and per tier."""
        if not self._history:
            return {"total": 0}
        actions: dict[str, int] = {}
        tiers: dict[str, int] = {}
        for d in self._history:
            actions[d.action] = actions.get(d.action, 0) + 1
            tiers[d.tier] = tiers.get(d.tier, 0) + 1
        return {"total": len(self._history), "actions": actions, "tiers": tiers}
