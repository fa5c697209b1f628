"""Legality checker: may this card be played (or prepared) here?"""

from __future__ import annotations

from .card import PlayerCard
from .enums import CardType
from .environments import get_environment_rule
from .player import Player
from .power import BoardContext
from .state import EnvironmentState, GameState


class LegalityChecker:
    """Global restrictions first, then the environment's own rule."""

    def can_play(self, card: PlayerCard, state: GameState, env: EnvironmentState, player_id: str) -> bool:
        # Fire suppresses Beasts
        if card.type == CardType.BEAST and env.has_type_in_play(CardType.FIRE):
            return False
        ctx = BoardContext.for_player(state, env, player_id)
        return get_environment_rule(env.title).can_play(card, ctx)

    def can_prepare(self, state: GameState, env: EnvironmentState, player: Player) -> bool:
        return get_environment_rule(env.title).can_prepare(state, env, player)

    def playable_cards(self, state: GameState, env: EnvironmentState, player: Player) -> list[PlayerCard]:
        return [c for c in player.hand if self.can_play(c, state, env, player.id)]
