"""Card, environment and item value types, plus the static catalogue loader."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .enums import CardType, ItemCategory

# Power sentinel: the card's power is resolved by title at scoring time.
DYNAMIC = "?"
# Discard-cost sentinel: the cost depends on what the player chooses to discard.
VARIABLE = "?"

DATA_DIR = Path(__file__).parent / "data"


def image_path(folder: str, title: str) -> str:
    """Image reference for a card title, e.g. ``/cards/Items/loot-chest.png``."""
    filename = "-".join(title.lower().split())
    return f"/cards/{folder}/{filename}.png"


@dataclass(frozen=True, slots=True)
class PlayerCard:
    """A player card.

    Attributes:
        id: unique per physical card; stays the same as the card changes zones
        title: card name, also the key for dynamic power resolvers
        type: one of the seven card categories
        power: base power, or ``DYNAMIC``
        effect: rules text
        image: image reference
    """

    id: str
    title: str
    type: CardType
    power: int | str
    effect: str = ""
    image: str = ""

    def __post_init__(self):
        if isinstance(self.type, str):
            object.__setattr__(self, "type", CardType(self.type))

    @property
    def is_dynamic(self) -> bool:
        return self.power == DYNAMIC

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type.value,
            "power": self.power,
            "effect": self.effect,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlayerCard:
        return cls(
            id=data["id"],
            title=data["title"],
            type=CardType(data["type"]),
            power=data["power"],
            effect=data.get("effect", ""),
            image=data.get("image", ""),
        )

    def __str__(self) -> str:
        return f"{self.title}({self.power})"


@dataclass(frozen=True, slots=True)
class Environment:
    """A shared board location. Its title selects the environment rule."""

    id: str
    title: str
    description: str = ""
    image: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Environment:
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            image=data.get("image", ""),
        )


@dataclass(frozen=True, slots=True)
class Item:
    """A board resource, taken during a skirmish at a discard cost."""

    id: str
    title: str
    category: ItemCategory
    description: str = ""
    discard_cost: int | str = 0
    image: str = ""

    def __post_init__(self):
        if isinstance(self.category, str):
            object.__setattr__(self, "category", ItemCategory(self.category))

    @property
    def has_variable_cost(self) -> bool:
        return self.discard_cost == VARIABLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "description": self.description,
            "discard_cost": self.discard_cost,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Item:
        return cls(
            id=data["id"],
            title=data["title"],
            category=ItemCategory(data["category"]),
            description=data.get("description", ""),
            discard_cost=data.get("discard_cost", 0),
            image=data.get("image", ""),
        )


class CardCatalog:
    """Static card, environment and item definitions.

    Definitions carry no ids; the deck factory stamps fresh ids each time it
    builds a deck from them.
    """

    def __init__(self, data_dir: str | Path | None = None):
        self.data_dir = Path(data_dir) if data_dir else DATA_DIR
        self.player_cards: list[dict[str, Any]] = self._load("player_cards.json")
        self.environments: list[dict[str, Any]] = self._load("environments.json")
        self.items: list[dict[str, Any]] = self._load("items.json")

    def _load(self, filename: str) -> list[dict[str, Any]]:
        path = self.data_dir / filename
        if not path.exists():
            raise FileNotFoundError(f"Card data file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        definitions = []
        for entry in data:
            count = entry.get("count", 1)
            definition = {k: v for k, v in entry.items() if k != "count"}
            definitions.extend(dict(definition) for _ in range(count))
        return definitions


_default_catalog: CardCatalog | None = None


def get_catalog() -> CardCatalog:
    """Shared read-only catalogue loaded from the packaged data files."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = CardCatalog()
    return _default_catalog
