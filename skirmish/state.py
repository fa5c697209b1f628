"""Canonical game state.

``GameState`` is owned by exactly one ``GameEngine``; nothing outside the
engine mutates it. Readers get a deep copy through ``GameEngine.snapshot``.
"""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from typing import Any

from .card import Environment, Item, PlayerCard
from .enums import CardType, GamePhase
from .player import Player


@dataclass
class EnvironmentState:
    """One of the three live environments plus its per-skirmish data."""

    environment: Environment
    items: list[Item] = field(default_factory=list)
    cards_in_play: dict[str, list[PlayerCard]] = field(default_factory=dict)
    used_items: dict[str, list[Item]] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.environment.id

    @property
    def title(self) -> str:
        return self.environment.title

    def find_item(self, item_id: str) -> Item | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def cards_of(self, player_id: str) -> list[PlayerCard]:
        return self.cards_in_play.get(player_id, [])

    def all_cards_in_play(self) -> list[PlayerCard]:
        return [card for cards in self.cards_in_play.values() for card in cards]

    def has_type_in_play(self, card_type: CardType) -> bool:
        return any(c.type == card_type for c in self.all_cards_in_play())

    def to_dict(self) -> dict[str, Any]:
        return {
            "environment": self.environment.to_dict(),
            "items": [i.to_dict() for i in self.items],
            "cards_in_play": {
                pid: [c.to_dict() for c in cards] for pid, cards in self.cards_in_play.items()
            },
            "used_items": {
                pid: [i.to_dict() for i in items] for pid, items in self.used_items.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnvironmentState:
        return cls(
            environment=Environment.from_dict(data["environment"]),
            items=[Item.from_dict(i) for i in data.get("items", [])],
            cards_in_play={
                pid: [PlayerCard.from_dict(c) for c in cards]
                for pid, cards in data.get("cards_in_play", {}).items()
            },
            used_items={
                pid: [Item.from_dict(i) for i in items]
                for pid, items in data.get("used_items", {}).items()
            },
        )


@dataclass
class GameState:
    """Root aggregate of one game.

    Invariants:
        - ``0 <= current_player_index < len(players)`` while players is non-empty
        - ``prepared_cards`` has exactly one entry per live environment id
    """

    id: str
    phase: GamePhase = GamePhase.SETUP
    turn: int = 0
    players: list[Player] = field(default_factory=list)
    current_player_index: int = 0
    environments: list[EnvironmentState] = field(default_factory=list)
    # environment id -> player id -> face-down cards, in preparation order
    prepared_cards: dict[str, dict[str, list[PlayerCard]]] = field(default_factory=dict)
    environment_deck: list[Environment] = field(default_factory=list)
    item_deck: list[Item] = field(default_factory=list)
    item_discard: list[Item] = field(default_factory=list)
    active_environment_id: str | None = None
    skirmish_initiator_id: str | None = None
    max_players: int = 4
    target_skirmishes: int = 3
    next_color_slot: int = 0
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    # ==================== Players ====================

    def get_player(self, player_id: str) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_index(self, player_id: str) -> int:
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return -1

    @property
    def current_player(self) -> Player | None:
        if not self.players:
            return None
        return self.players[self.current_player_index]

    def opponents_of(self, player_id: str) -> list[Player]:
        return [p for p in self.players if p.id != player_id]

    # ==================== Environments ====================

    def get_environment(self, environment_id: str | None) -> EnvironmentState | None:
        for env in self.environments:
            if env.id == environment_id:
                return env
        return None

    @property
    def active_environment(self) -> EnvironmentState | None:
        return self.get_environment(self.active_environment_id)

    def prepared_for(self, environment_id: str, player_id: str) -> list[PlayerCard]:
        """Prepared pile of one player at one environment (created on demand)."""
        return self.prepared_cards.setdefault(environment_id, {}).setdefault(player_id, [])

    def prepared_count(self, environment_id: str) -> int:
        """Prepared cards at an environment across all players."""
        piles = self.prepared_cards.get(environment_id, {})
        return sum(len(cards) for cards in piles.values())

    # ==================== Copy / serialization ====================

    def touch(self) -> None:
        self.updated_at = time.time()

    def copy(self) -> GameState:
        """Deep copy sharing no mutable structure with this state."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "phase": self.phase.value,
            "turn": self.turn,
            "players": [p.to_dict() for p in self.players],
            "current_player_index": self.current_player_index,
            "environments": [e.to_dict() for e in self.environments],
            "prepared_cards": {
                env_id: {pid: [c.to_dict() for c in cards] for pid, cards in piles.items()}
                for env_id, piles in self.prepared_cards.items()
            },
            "environment_deck": [e.to_dict() for e in self.environment_deck],
            "item_deck": [i.to_dict() for i in self.item_deck],
            "item_discard": [i.to_dict() for i in self.item_discard],
            "active_environment_id": self.active_environment_id,
            "skirmish_initiator_id": self.skirmish_initiator_id,
            "max_players": self.max_players,
            "target_skirmishes": self.target_skirmishes,
            "next_color_slot": self.next_color_slot,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameState:
        return cls(
            id=data["id"],
            phase=GamePhase(data["phase"]),
            turn=data.get("turn", 0),
            players=[Player.from_dict(p) for p in data.get("players", [])],
            current_player_index=data.get("current_player_index", 0),
            environments=[EnvironmentState.from_dict(e) for e in data.get("environments", [])],
            prepared_cards={
                env_id: {pid: [PlayerCard.from_dict(c) for c in cards] for pid, cards in piles.items()}
                for env_id, piles in data.get("prepared_cards", {}).items()
            },
            environment_deck=[Environment.from_dict(e) for e in data.get("environment_deck", [])],
            item_deck=[Item.from_dict(i) for i in data.get("item_deck", [])],
            item_discard=[Item.from_dict(i) for i in data.get("item_discard", [])],
            active_environment_id=data.get("active_environment_id"),
            skirmish_initiator_id=data.get("skirmish_initiator_id"),
            max_players=data.get("max_players", 4),
            target_skirmishes=data.get("target_skirmishes", 3),
            next_color_slot=data.get("next_color_slot", len(data.get("players", []))),
            created_at=data.get("created_at", time.time()),
            updated_at=data.get("updated_at", time.time()),
        )
