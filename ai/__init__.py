"""Bots that play games through the public action API."""

from .bot import BotRun, BotStrategy, GreedyBot, RandomBot, legal_moves, run_bot_game
from .decision_log import BotDecision, DecisionLogger

__all__ = [
    'BotStrategy', 'RandomBot', 'GreedyBot', 'legal_moves', 'run_bot_game', 'BotRun',
    'BotDecision', 'DecisionLogger',
]
