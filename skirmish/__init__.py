"""
Skirmish rules engine.

Phase state machine, validated action pipeline, power and legality rules,
skirmish scoring, deck building and save/restore for one game per engine.
"""

from .actions import (
    Action, ActionType, DiscardToHandLimit, InitiateSkirmish, Pass, PlayCard,
    PrepareCard, ReadyUp, TakeItem,
)
from .card import DYNAMIC, VARIABLE, CardCatalog, Environment, Item, PlayerCard
from .config import GameConfig, get_config, reset_config
from .engine import GameEngine
from .enums import CardType, GamePhase, ItemCategory, PlayerColor
from .errors import ActionRejected, ErrorCode, GameError, SaveDataError
from .events import EventType, GameEvent
from .pass_policy import PassPolicy
from .phase_fsm import InvalidPhaseTransition
from .player import Player
from .state import EnvironmentState, GameState

__all__ = [
    # actions
    'Action', 'ActionType', 'ReadyUp', 'PrepareCard', 'InitiateSkirmish',
    'PlayCard', 'TakeItem', 'Pass', 'DiscardToHandLimit',
    # cards
    'DYNAMIC', 'VARIABLE', 'CardCatalog', 'PlayerCard', 'Environment', 'Item',
    'CardType', 'ItemCategory', 'PlayerColor',
    # engine and state
    'GameEngine', 'GamePhase', 'GameState', 'EnvironmentState', 'Player',
    'GameConfig', 'get_config', 'reset_config', 'PassPolicy',
    # events and errors
    'EventType', 'GameEvent', 'ErrorCode', 'GameError', 'ActionRejected',
    'SaveDataError', 'InvalidPhaseTransition',
]
