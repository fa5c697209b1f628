"""Skirmish scoring.

Decoupled from the engine so that winner determination can be tested on plain
score lists. Winner: highest power; tie-break: more cards in play; still tied:
no winner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .power import BoardContext, PowerCalculator
from .state import EnvironmentState, GameState


@dataclass(slots=True)
class ScoreResult:
    """One player's result for one skirmish."""

    player_id: str
    player_name: str
    power: int
    cards_in_play: int
    is_winner: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "power": self.power,
            "cards_in_play": self.cards_in_play,
            "is_winner": self.is_winner,
        }


def determine_winner(scores: list[ScoreResult]) -> ScoreResult | None:
    """Pick the unique best score, or None on a full tie (or no scores).

    Marks the winner's ``is_winner`` flag.
    """
    if not scores:
        return None
    best = max(scores, key=lambda s: (s.power, s.cards_in_play))
    contenders = [
        s for s in scores if (s.power, s.cards_in_play) == (best.power, best.cards_in_play)
    ]
    if len(contenders) > 1:
        return None
    best.is_winner = True
    return best


class ScoringResolver:
    """Computes every seated player's score at an environment."""

    def __init__(self, calculator: PowerCalculator | None = None):
        self.calculator = calculator or PowerCalculator()

    def score(self, state: GameState, env: EnvironmentState) -> list[ScoreResult]:
        """Scores in seating order."""
        results = []
        for player in state.players:
            ctx = BoardContext.for_player(state, env, player.id)
            results.append(
                ScoreResult(
                    player_id=player.id,
                    player_name=player.name,
                    power=self.calculator.total_power(ctx),
                    cards_in_play=len(ctx.own_cards),
                )
            )
        return results

    def resolve(self, state: GameState, env: EnvironmentState) -> tuple[list[ScoreResult], ScoreResult | None]:
        scores = self.score(state, env)
        return scores, determine_winner(scores)


def standings(state: GameState) -> list[dict[str, Any]]:
    """Final standings, most skirmishes won first (stable on seat order)."""
    ranked = sorted(state.players, key=lambda p: p.skirmishes_won, reverse=True)
    return [
        {"player_id": p.id, "player_name": p.name, "skirmishes_won": p.skirmishes_won}
        for p in ranked
    ]
