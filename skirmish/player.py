"""Player zones and flags."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .card import PlayerCard
from .enums import PlayerColor


@dataclass
class Player:
    """A seated player.

    ``deck`` is the ordered draw pile (index 0 is the next draw); the
    discard pile is unordered. Only the engine mutates a Player.
    """

    id: str
    name: str
    color: PlayerColor
    hand: list[PlayerCard] = field(default_factory=list)
    deck: list[PlayerCard] = field(default_factory=list)
    discard_pile: list[PlayerCard] = field(default_factory=list)
    skirmishes_won: int = 0
    is_ready: bool = False
    is_connected: bool = True
    has_passed: bool = False

    # ==================== Queries ====================

    @property
    def hand_count(self) -> int:
        return len(self.hand)

    def find_in_hand(self, card_id: str) -> PlayerCard | None:
        for card in self.hand:
            if card.id == card_id:
                return card
        return None

    def has_in_hand(self, card_ids: list[str]) -> bool:
        """True if every id is a distinct card currently in hand."""
        if len(set(card_ids)) != len(card_ids):
            return False
        return all(self.find_in_hand(cid) is not None for cid in card_ids)

    # ==================== Zone moves ====================

    def draw(self, count: int) -> list[PlayerCard]:
        """Move up to ``count`` cards from the front of the deck into hand."""
        drawn = self.deck[:count]
        del self.deck[:count]
        self.hand.extend(drawn)
        return drawn

    def draw_up_to(self, hand_size: int) -> list[PlayerCard]:
        return self.draw(max(0, hand_size - len(self.hand)))

    def take_from_hand(self, card_id: str) -> PlayerCard:
        card = self.find_in_hand(card_id)
        if card is None:
            raise KeyError(card_id)
        self.hand.remove(card)
        return card

    def discard_from_hand(self, card_ids: list[str]) -> list[PlayerCard]:
        discarded = [self.take_from_hand(cid) for cid in card_ids]
        self.discard_pile.extend(discarded)
        return discarded

    def trim_hand(self, limit: int) -> list[PlayerCard]:
        """Discard from the end of the hand until it holds ``limit`` cards."""
        if len(self.hand) <= limit:
            return []
        excess = self.hand[limit:]
        del self.hand[limit:]
        self.discard_pile.extend(excess)
        return excess

    # ==================== Serialization ====================

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color.value,
            "hand": [c.to_dict() for c in self.hand],
            "deck": [c.to_dict() for c in self.deck],
            "discard_pile": [c.to_dict() for c in self.discard_pile],
            "skirmishes_won": self.skirmishes_won,
            "is_ready": self.is_ready,
            "is_connected": self.is_connected,
            "has_passed": self.has_passed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Player:
        return cls(
            id=data["id"],
            name=data["name"],
            color=PlayerColor(data["color"]),
            hand=[PlayerCard.from_dict(c) for c in data.get("hand", [])],
            deck=[PlayerCard.from_dict(c) for c in data.get("deck", [])],
            discard_pile=[PlayerCard.from_dict(c) for c in data.get("discard_pile", [])],
            skirmishes_won=data.get("skirmishes_won", 0),
            is_ready=data.get("is_ready", False),
            is_connected=data.get("is_connected", True),
            has_passed=data.get("has_passed", False),
        )

    def __repr__(self) -> str:
        return f"Player({self.id}, {self.name}, hand={len(self.hand)})"
