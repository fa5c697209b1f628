"""Deck factory.

Turns the static catalogue into shuffled decks of concrete cards. The factory
holds no game state; its only dependency is the injected ``random.Random``,
which makes every deck (card ids included) reproducible from a seed.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass

from .card import CardCatalog, Environment, Item, PlayerCard, get_catalog, image_path
from .state import EnvironmentState

logger = logging.getLogger(__name__)

PLAYER_CARD_FOLDER = "Player Decks"
ENVIRONMENT_FOLDER = "Environments"
ITEM_FOLDER = "Items"


@dataclass
class BoardSetup:
    """Initial shared board: live environments plus the remaining decks."""

    environments: list[EnvironmentState]
    environment_deck: list[Environment]
    item_deck: list[Item]


class DeckFactory:
    """Builds shuffled decks from catalogue definitions.

    Args:
        rng: source of randomness. Pass ``random.Random(seed)`` for
            reproducible games; the default is seeded from the OS.
        catalog: card definitions, defaults to the packaged data
    """

    def __init__(self, rng: random.Random | None = None, catalog: CardCatalog | None = None):
        self.rng = rng if rng is not None else random.Random(random.SystemRandom().getrandbits(64))
        self.catalog = catalog or get_catalog()

    def new_id(self) -> str:
        return str(uuid.UUID(int=self.rng.getrandbits(128), version=4))

    def shuffle(self, cards: list) -> list:
        """Shuffle in place (Fisher-Yates) and return the list."""
        self.rng.shuffle(cards)
        return cards

    # ==================== Decks ====================

    def player_deck(self) -> list[PlayerCard]:
        """A full, freshly shuffled player deck with new card ids."""
        deck = [
            PlayerCard(
                id=self.new_id(),
                title=d["title"],
                type=d["type"],
                power=d["power"],
                effect=d.get("effect", ""),
                image=image_path(PLAYER_CARD_FOLDER, d["title"]),
            )
            for d in self.catalog.player_cards
        ]
        return self.shuffle(deck)

    def environment_deck(self) -> list[Environment]:
        deck = [
            Environment(
                id=self.new_id(),
                title=d["title"],
                description=d.get("description", ""),
                image=image_path(ENVIRONMENT_FOLDER, d["title"]),
            )
            for d in self.catalog.environments
        ]
        return self.shuffle(deck)

    def item_deck(self) -> list[Item]:
        deck = [
            Item(
                id=self.new_id(),
                title=d["title"],
                category=d["category"],
                description=d.get("description", ""),
                discard_cost=d.get("discard_cost", 0),
                image=image_path(ITEM_FOLDER, d["title"]),
            )
            for d in self.catalog.items
        ]
        return self.shuffle(deck)

    # ==================== Board ====================

    def board(self, slots: int = 3, items_per_environment: int = 1) -> BoardSetup:
        """Deal ``slots`` environments, each seeded with its items.

        The item deck is shuffled independently of the environment deck.
        """
        environment_deck = self.environment_deck()
        item_deck = self.item_deck()
        environments = []
        for _ in range(min(slots, len(environment_deck))):
            env = EnvironmentState(environment=environment_deck.pop(0))
            env.items.extend(draw_items(item_deck, items_per_environment))
            environments.append(env)
        logger.debug("Dealt environments: %s", [e.title for e in environments])
        return BoardSetup(environments, environment_deck, item_deck)


def draw_items(item_deck: list[Item], count: int) -> list[Item]:
    """Take up to ``count`` items from the front of ``item_deck``."""
    drawn = item_deck[:count]
    del item_deck[:count]
    return drawn
