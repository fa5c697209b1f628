"""What happens to a player's remaining hand when they pass a skirmish.

The printed rules move the leftover cards to the other environments; the
first server release simply discarded them. Both behaviours are kept and
selected per game through ``GameConfig.pass_policy``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .player import Player
    from .state import GameState

logger = logging.getLogger(__name__)


class PassPolicy(Enum):
    """Disposal policy for the hand of a passing player."""

    DISCARD = "discard"  # leftover hand goes to the discard pile
    REDISTRIBUTE = "redistribute"  # leftover hand is prepared on the other environments


@dataclass(slots=True)
class PassOutcome:
    """Where the passing player's cards went, by card id."""

    discarded: list[str] = field(default_factory=list)
    redistributed: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"discarded": list(self.discarded), "redistributed": dict(self.redistributed)}


def dispose_hand(
    state: GameState,
    player: Player,
    policy: PassPolicy,
    target_environment_ids: list[str],
) -> PassOutcome:
    """Empty ``player.hand`` according to ``policy``.

    Redistribution deals the cards round robin, in hand order, onto
    ``target_environment_ids`` (board order). With no eligible target the
    cards are discarded.
    """
    outcome = PassOutcome()
    cards = list(player.hand)
    player.hand.clear()
    if not cards:
        return outcome

    if policy is PassPolicy.REDISTRIBUTE and target_environment_ids:
        for index, card in enumerate(cards):
            env_id = target_environment_ids[index % len(target_environment_ids)]
            state.prepared_for(env_id, player.id).append(card)
            outcome.redistributed.setdefault(env_id, []).append(card.id)
        logger.debug(
            "Player %s redistributed %d card(s) over %s",
            player.id, len(cards), target_environment_ids,
        )
        return outcome

    player.discard_pile.extend(cards)
    outcome.discarded = [c.id for c in cards]
    return outcome
