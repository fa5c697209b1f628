"""Bots that play through the public action API.

A bot only reads a snapshot and submits actions, the same way a network
client would. ``RandomBot`` picks uniformly among legal moves (with a bias
toward starting skirmishes so games progress); ``GreedyBot`` plays its
strongest card and passes once it leads the board.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Protocol

from skirmish.actions import (
    Action, DiscardToHandLimit, InitiateSkirmish, Pass, PlayCard, PrepareCard,
    ReadyUp, TakeItem,
)
from skirmish.engine import GameEngine
from skirmish.enums import GamePhase
from skirmish.power import BoardContext
from skirmish.state import GameState

from .decision_log import BotDecision, DecisionLogger

logger = logging.getLogger(__name__)


class BotStrategy(Protocol):
    """Choose one action for ``player_id`` or None when there is nothing to do."""

    def choose(self, engine: GameEngine, player_id: str) -> Action | None:
        ...


# ==================== Move generation ====================

def legal_moves(engine: GameEngine, state: GameState, player_id: str,
                rng: random.Random) -> list[Action]:
    """Actions the engine would accept from ``player_id`` right now.

    Variable item costs get one randomly sized discard; hand-limit discards
    are returned alone since they must come first.
    """
    player = state.get_player(player_id)
    if player is None:
        return []

    if state.phase == GamePhase.SETUP:
        return [] if player.is_ready else [ReadyUp(player_id)]

    current = state.current_player
    if current is None or current.id != player_id:
        return []

    limit = engine.hand_limit(state.phase)
    if len(player.hand) > limit:
        excess = rng.sample(player.hand, len(player.hand) - limit)
        return [DiscardToHandLimit(player_id, tuple(c.id for c in excess))]

    moves: list[Action] = []
    if state.phase == GamePhase.HANDBUILDING:
        threshold = engine.config.skirmish_threshold
        for env in state.environments:
            if state.prepared_count(env.id) >= threshold:
                moves.append(InitiateSkirmish(player_id, env.id))
            if engine.legality.can_prepare(state, env, player):
                moves.extend(PrepareCard(player_id, card.id, env.id) for card in player.hand)

    elif state.phase == GamePhase.SKIRMISH and not player.has_passed:
        env = state.active_environment
        if env is None:
            return []
        moves.extend(PlayCard(player_id, card.id) for card in engine.legality.playable_cards(state, env, player))
        for item in (env.items if player.hand else []):
            if item.has_variable_cost:
                size = rng.randint(1, len(player.hand))
                picked = rng.sample(player.hand, size)
                moves.append(TakeItem(player_id, item.id, tuple(c.id for c in picked)))
            elif item.discard_cost <= len(player.hand):
                picked = rng.sample(player.hand, item.discard_cost)
                moves.append(TakeItem(player_id, item.id, tuple(c.id for c in picked)))
        moves.append(Pass(player_id))

    return moves


# ==================== Strategies ====================

class RandomBot:
    """Uniform choice among legal moves; starts a ready skirmish when it can."""

    tier = "random"

    def __init__(self, rng: random.Random | None = None,
                 decisions: DecisionLogger | None = None):
        self.rng = rng or random.Random()
        self.decisions = decisions or DecisionLogger(enabled=False)

    def choose(self, engine: GameEngine, player_id: str) -> Action | None:
        state = engine.snapshot()
        moves = legal_moves(engine, state, player_id, self.rng)
        if not moves:
            return None
        initiations = [m for m in moves if isinstance(m, InitiateSkirmish)]
        action = self.rng.choice(initiations or moves)
        self._record(state, player_id, moves, action, "initiate_first" if initiations else "random")
        return action

    def _record(self, state: GameState, player_id: str, moves: list[Action],
                action: Action, reason: str, score: float = 0.0) -> None:
        self.decisions.log(BotDecision(
            player_id=player_id,
            tier=self.tier,
            phase=state.phase.value,
            action=action.action_type.value,
            candidates=len(moves),
            chosen=action.payload(),
            reason=reason,
            score=score,
        ))


class GreedyBot(RandomBot):
    """Plays its strongest legal card; passes once it leads the skirmish."""

    tier = "greedy"

    def choose(self, engine: GameEngine, player_id: str) -> Action | None:
        state = engine.snapshot()
        moves = legal_moves(engine, state, player_id, self.rng)
        if not moves:
            return None
        if state.phase != GamePhase.SKIRMISH or len(moves) == 1:
            return super().choose(engine, player_id)

        env = state.active_environment
        power = engine.power
        mine = power.total_power(BoardContext.for_player(state, env, player_id))
        best_other = max(
            (power.total_power(BoardContext.for_player(state, env, p.id))
             for p in state.opponents_of(player_id)),
            default=0,
        )
        if mine > best_other:
            action = next(m for m in moves if isinstance(m, Pass))
            self._record(state, player_id, moves, action, "leading", float(mine - best_other))
            return action

        player = state.get_player(player_id)
        ctx = BoardContext.for_player(state, env, player_id)
        plays = [m for m in moves if isinstance(m, PlayCard)]
        if not plays:
            return super().choose(engine, player_id)

        def strength(move: PlayCard) -> int:
            card = player.find_in_hand(move.card_id)
            return power.effective_power(card, ctx)

        action = max(plays, key=strength)
        self._record(state, player_id, moves, action, "strongest_card", float(strength(action)))
        return action


# ==================== Driver ====================

@dataclass
class BotRun:
    """Outcome of ``run_bot_game``."""
    actions: int = 0
    finished: bool = False
    stalled_player_id: str | None = None
    rejected: list[str] = field(default_factory=list)


def run_bot_game(engine: GameEngine, bots: dict[str, BotStrategy],
                 max_actions: int = 2000, on_step=None) -> BotRun:
    """Let bots play ``engine`` until it finishes, stalls or hits ``max_actions``.

    Players must already be seated. ``on_step(engine, action)`` is called after
    each accepted action. A stall is a turn where the current player has no
    legal move, e.g. an empty hand with every deck exhausted.
    """
    run = BotRun()
    for player_id, bot in bots.items():
        if engine.state.phase != GamePhase.SETUP:
            break
        action = bot.choose(engine, player_id)
        if action is not None:
            _submit(engine, action, run, on_step)

    while run.actions < max_actions and engine.state.phase != GamePhase.FINISHED:
        current = engine.state.current_player
        if current is None:
            break
        bot = bots.get(current.id)
        action = bot.choose(engine, current.id) if bot is not None else None
        if action is None:
            run.stalled_player_id = current.id
            logger.info("Game %s stalled on %s", engine.game_id, current.id)
            break
        _submit(engine, action, run, on_step)

    run.finished = engine.state.phase == GamePhase.FINISHED
    return run


def _submit(engine: GameEngine, action: Action, run: BotRun, on_step) -> None:
    error = engine.process(action)
    run.actions += 1
    if error is not None:
        # a rejected bot move is a bug in move generation, not a game event
        logger.warning("Bot move %s rejected: %s", action.action_type.value, error.code.value)
        run.rejected.append(error.code.value)
    elif on_step is not None:
        on_step(engine, action)
