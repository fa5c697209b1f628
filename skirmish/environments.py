"""Per-environment rules.

Each environment title may have one ``EnvironmentRule`` subclass registered
with ``@register_environment_rule``. The engine calls the rule hooks at fixed
points; titles without a registered rule get ``EnvironmentRule`` itself, which
restricts nothing and does nothing. Adding an environment means adding one
class here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .enums import CardType
from .pass_policy import PassPolicy

if TYPE_CHECKING:
    from .card import PlayerCard
    from .player import Player
    from .power import BoardContext
    from .state import EnvironmentState, GameState

logger = logging.getLogger(__name__)


class EnvironmentRule:
    """Default rule: permissive, no side effects."""

    title: str = ""

    # Cards prepared here are public (sent in CARD_PREPARED events).
    prepared_face_up: bool = False

    def can_prepare(self, state: GameState, env: EnvironmentState, player: Player) -> bool:
        return True

    def can_play(self, card: PlayerCard, ctx: BoardContext) -> bool:
        return True

    def on_skirmish_start(self, state: GameState, env: EnvironmentState) -> None:
        pass

    def on_card_play(self, state: GameState, env: EnvironmentState, player: Player, card: PlayerCard) -> None:
        pass

    def on_pass(self, state: GameState, env: EnvironmentState, player: Player, policy: PassPolicy) -> PassPolicy:
        """Return the pass policy that applies here."""
        return policy

    def on_skirmish_end(self, state: GameState, env: EnvironmentState) -> None:
        pass


_RULES: dict[str, EnvironmentRule] = {}
_DEFAULT_RULE = EnvironmentRule()


def register_environment_rule(cls: type[EnvironmentRule]) -> type[EnvironmentRule]:
    """Class decorator: register one instance under ``cls.title``."""
    if not cls.title:
        raise ValueError(f"{cls.__name__} must define a title")
    _RULES[cls.title] = cls()
    return cls


def get_environment_rule(title: str) -> EnvironmentRule:
    return _RULES.get(title, _DEFAULT_RULE)


def registered_titles() -> list[str]:
    return sorted(_RULES)


# ==================== Rules ====================


@register_environment_rule
class Badlands(EnvironmentRule):
    title = "Badlands"

    def can_play(self, card: PlayerCard, ctx: BoardContext) -> bool:
        return card.type != CardType.FIRE


@register_environment_rule
class Desert(EnvironmentRule):
    title = "Desert"

    def can_play(self, card: PlayerCard, ctx: BoardContext) -> bool:
        return card.type != CardType.WATER


@register_environment_rule
class HallowedGround(EnvironmentRule):
    """Elemental cards need an Acolyte majority over every opponent."""

    title = "Hallowed Ground"
    restricted = frozenset({CardType.WATER, CardType.FIRE, CardType.ELECTRIC})

    def can_play(self, card: PlayerCard, ctx: BoardContext) -> bool:
        if card.type not in self.restricted:
            return True
        return ctx.has_acolyte_majority()


@register_environment_rule
class Volcano(EnvironmentRule):
    title = "Volcano"

    def on_pass(self, state: GameState, env: EnvironmentState, player: Player, policy: PassPolicy) -> PassPolicy:
        return PassPolicy.DISCARD


@register_environment_rule
class MagneticMaar(EnvironmentRule):
    title = "Magnetic Maar"

    def can_prepare(self, state: GameState, env: EnvironmentState, player: Player) -> bool:
        return False


@register_environment_rule
class GlassRiver(EnvironmentRule):
    title = "Glass River"
    prepared_face_up = True


@register_environment_rule
class Graveyard(EnvironmentRule):
    """Every player's discarded Acolytes enter play when the skirmish starts."""

    title = "Graveyard"

    def on_skirmish_start(self, state: GameState, env: EnvironmentState) -> None:
        for player in state.players:
            acolytes = [c for c in player.discard_pile if c.type == CardType.ACOLYTE]
            if not acolytes:
                continue
            player.discard_pile = [c for c in player.discard_pile if c.type != CardType.ACOLYTE]
            env.cards_in_play.setdefault(player.id, []).extend(acolytes)
            logger.debug("Graveyard: %s brings back %d acolyte(s)", player.id, len(acolytes))
