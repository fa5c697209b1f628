"""Power calculator.

Effective power is computed fresh whenever it is needed and never cached:

1. base power, or for ``DYNAMIC`` cards the value of the resolver registered
   under the card title (unregistered titles resolve to 0);
2. Water: every Water card in play at the environment gives Electric cards
   +2 and Fire cards -2;
3. Acolyte: +3 when the owner has strictly more Acolytes in play at the
   environment than every opponent;
4. clamp at 0.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .card import PlayerCard
from .enums import CardType
from .state import EnvironmentState, GameState

logger = logging.getLogger(__name__)

WATER_MODIFIER = 2
ACOLYTE_BONUS = 3


@dataclass(frozen=True)
class BoardContext:
    """What one player sees at one environment.

    Attributes:
        player_id: the card owner / acting player
        own_cards: that player's cards in play
        opponent_cards: in-play cards of every other seated player, one list
            each (empty lists included)
    """

    player_id: str
    own_cards: tuple[PlayerCard, ...]
    opponent_cards: tuple[tuple[PlayerCard, ...], ...]

    @classmethod
    def for_player(cls, state: GameState, env: EnvironmentState, player_id: str) -> BoardContext:
        return cls(
            player_id=player_id,
            own_cards=tuple(env.cards_of(player_id)),
            opponent_cards=tuple(tuple(env.cards_of(p.id)) for p in state.opponents_of(player_id)),
        )

    @property
    def all_cards(self) -> list[PlayerCard]:
        cards = list(self.own_cards)
        for opponent in self.opponent_cards:
            cards.extend(opponent)
        return cards

    def count_all(self, card_type: CardType) -> int:
        return sum(1 for c in self.all_cards if c.type == card_type)

    def has_acolyte_majority(self) -> bool:
        """Strictly more Acolytes in play than every opponent (vacuously true alone)."""
        mine = sum(1 for c in self.own_cards if c.type == CardType.ACOLYTE)
        return all(
            mine > sum(1 for c in opponent if c.type == CardType.ACOLYTE)
            for opponent in self.opponent_cards
        )


# ==================== Dynamic power resolvers ====================

DynamicPowerResolver = Callable[[PlayerCard, BoardContext], int]

_DYNAMIC_RESOLVERS: dict[str, DynamicPowerResolver] = {}


def register_dynamic_power(title: str):
    """Decorator registering the base-power resolver of a ``DYNAMIC`` card."""

    def decorator(fn: DynamicPowerResolver) -> DynamicPowerResolver:
        _DYNAMIC_RESOLVERS[title] = fn
        return fn

    return decorator


def get_dynamic_resolver(title: str) -> DynamicPowerResolver | None:
    return _DYNAMIC_RESOLVERS.get(title)


@register_dynamic_power("Channel Power")
def _channel_power(card: PlayerCard, ctx: BoardContext) -> int:
    """Largest number of cards any single opponent has in play."""
    return max((len(cards) for cards in ctx.opponent_cards), default=0)


# ==================== Calculator ====================


class PowerCalculator:
    """Stateless; one shared instance is enough."""

    def base_power(self, card: PlayerCard, ctx: BoardContext) -> int:
        if card.is_dynamic:
            resolver = get_dynamic_resolver(card.title)
            if resolver is None:
                logger.debug("No dynamic power resolver for %s; using 0", card.title)
                return 0
            return resolver(card, ctx)
        return card.power if isinstance(card.power, int) else 0

    def effective_power(self, card: PlayerCard, ctx: BoardContext) -> int:
        power = self.base_power(card, ctx)

        water = ctx.count_all(CardType.WATER)
        if card.type == CardType.ELECTRIC:
            power += WATER_MODIFIER * water
        elif card.type == CardType.FIRE:
            power -= WATER_MODIFIER * water

        if card.type == CardType.ACOLYTE and ctx.has_acolyte_majority():
            power += ACOLYTE_BONUS

        return max(0, power)

    def total_power(self, ctx: BoardContext) -> int:
        """Sum of effective power over the player's cards in play."""
        return sum(self.effective_power(card, ctx) for card in ctx.own_cards)
