"""Phase and card-category enums.

Kept apart from engine.py so that state, rules and scoring modules can import
them without pulling in the engine.
"""

from enum import Enum


class GamePhase(Enum):
    """Game phase."""

    SETUP = "setup"  # lobby, waiting for players to ready up
    HANDBUILDING = "handbuilding"  # preparing cards face-down
    SKIRMISH = "skirmish"  # playing cards at the active environment
    FINISHED = "finished"


class CardType(Enum):
    """Player card category."""

    ACOLYTE = "Acolyte"
    BEAST = "Beast"
    COLOSSUS = "Colossus"
    DIVINE_GIFT = "Divine Gift"
    ELECTRIC = "Electric"
    FIRE = "Fire"
    WATER = "Water"


class ItemCategory(Enum):
    """Item category."""

    PERK = "Perk"
    DISCARD = "Discard"


class PlayerColor(Enum):
    """Deck colour, assigned by join slot."""

    BLACK = "black"
    BROWN = "brown"
    TAN = "tan"
    WHITE = "white"


# Join slot -> colour. Slots are never reused within a game.
PLAYER_COLORS: tuple[PlayerColor, ...] = (
    PlayerColor.BLACK,
    PlayerColor.BROWN,
    PlayerColor.TAN,
    PlayerColor.WHITE,
)
