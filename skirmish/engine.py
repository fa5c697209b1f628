"""
Game engine.

Owns one ``GameState`` and is the only code that mutates it. Every change goes
through ``process`` (player actions) or the join/leave/connection methods, all
of which hold the engine lock for their whole duration. Rule violations come
back as ``GameError`` values with the state untouched; events are queued and
read with ``drain_events``.
"""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable
from typing import Any

from .actions import (
    Action,
    DiscardToHandLimit,
    InitiateSkirmish,
    Pass,
    PlayCard,
    PrepareCard,
    ReadyUp,
    TakeItem,
)
from .card import CardCatalog, PlayerCard
from .config import GameConfig, get_config
from .deck import DeckFactory, draw_items
from .enums import PLAYER_COLORS, GamePhase
from .environments import get_environment_rule
from .errors import ActionRejected, ErrorCode, GameError
from .events import EventQueue, EventType, GameEvent
from .legality import LegalityChecker
from .pass_policy import dispose_hand
from .phase_fsm import PhaseFSM
from .player import Player
from .power import PowerCalculator
from .scoring import ScoringResolver, standings
from .state import EnvironmentState, GameState

logger = logging.getLogger(__name__)


class GameEngine:
    """
    Rules engine for one game.

    Args:
        game_id: id of the game; generated from the RNG when omitted
        quick_game: two skirmish wins end the game instead of three
        max_players: seats, capped by the configured maximum
        config: rule and table parameters, defaults to ``get_config()``
        rng: randomness for decks and ids; seed it for reproducible games
        catalog: card definitions, defaults to the packaged data
    """

    def __init__(
        self,
        game_id: str | None = None,
        *,
        quick_game: bool = False,
        max_players: int | None = None,
        config: GameConfig | None = None,
        rng: random.Random | None = None,
        catalog: CardCatalog | None = None,
        state: GameState | None = None,
    ):
        self.config = config or get_config()
        self.factory = DeckFactory(rng, catalog)
        self.legality = LegalityChecker()
        self.power = PowerCalculator()
        self.scoring = ScoringResolver(self.power)
        self._lock = threading.RLock()

        if state is None:
            state = self._new_state(game_id or self.factory.new_id(), quick_game, max_players)
        self.state = state
        self.fsm = PhaseFSM(state.phase)
        self.events = EventQueue(state.id)

        self._handlers: dict[type[Action], Callable[[Any], None]] = {
            ReadyUp: self._ready_up,
            PrepareCard: self._prepare_card,
            InitiateSkirmish: self._initiate_skirmish,
            PlayCard: self._play_card,
            TakeItem: self._take_item,
            Pass: self._pass,
            DiscardToHandLimit: self._discard_to_hand_limit,
        }

    def _new_state(self, game_id: str, quick_game: bool, max_players: int | None) -> GameState:
        board = self.factory.board(self.config.environment_slots, self.config.items_per_environment)
        state = GameState(
            id=game_id,
            environments=board.environments,
            environment_deck=board.environment_deck,
            item_deck=board.item_deck,
            max_players=min(max_players or self.config.max_players, self.config.max_players),
            target_skirmishes=self.config.target_for(quick_game),
        )
        for env in state.environments:
            state.prepared_cards[env.id] = {}
        logger.info("Created game %s (target %d)", game_id, state.target_skirmishes)
        return state

    @property
    def game_id(self) -> str:
        return self.state.id

    @property
    def rng(self) -> random.Random:
        return self.factory.rng

    # ==================== Public API ====================

    def process(self, action: Action) -> GameError | None:
        """Validate and apply one action. Returns None on success."""
        with self._lock:
            handler = self._handlers.get(type(action))
            try:
                if handler is None:
                    raise ActionRejected.of(
                        ErrorCode.INVALID_MOVE, "error.unknown_action",
                        action_type=type(action).__name__,
                    )
                handler(action)
            except ActionRejected as exc:
                logger.debug("Rejected %s from %s: %s", type(action).__name__,
                             getattr(action, "player_id", "?"), exc.error)
                return exc.error
            self.state.touch()
            return None

    def process_envelope(self, envelope: Any) -> GameError | None:
        """Decode a client envelope and process it."""
        try:
            action = Action.from_envelope(envelope)
        except ActionRejected as exc:
            return exc.error
        return self.process(action)

    def add_player(self, player_id: str, name: str) -> GameError | None:
        with self._lock:
            state = self.state
            if state.phase != GamePhase.SETUP:
                return GameError.of(ErrorCode.WRONG_PHASE, phase=state.phase.value)
            if len(state.players) >= state.max_players or state.next_color_slot >= len(PLAYER_COLORS):
                return GameError.of(ErrorCode.GAME_FULL, max_players=state.max_players)
            if state.get_player(player_id) is not None:
                return GameError.of(ErrorCode.PLAYER_NOT_IN_GAME, "error.already_joined",
                                    player_id=player_id)

            player = Player(
                id=player_id,
                name=name,
                color=PLAYER_COLORS[state.next_color_slot],
                deck=self.factory.player_deck(),
            )
            state.next_color_slot += 1
            state.players.append(player)
            for piles in state.prepared_cards.values():
                piles[player_id] = []
            state.touch()

            logger.info("Player %s (%s) joined game %s", player_id, name, state.id)
            self._emit(EventType.PLAYER_JOINED, player=_public_player(player))
            return None

    def remove_player(self, player_id: str) -> GameError | None:
        with self._lock:
            state = self.state
            index = state.player_index(player_id)
            if index < 0:
                return GameError.of(ErrorCode.PLAYER_NOT_IN_GAME, player_id=player_id)

            player = state.players.pop(index)
            if index < state.current_player_index:
                state.current_player_index -= 1
            if state.players:
                state.current_player_index %= len(state.players)
            else:
                state.current_player_index = 0
            # The leaving player's cards leave with them.
            for piles in state.prepared_cards.values():
                piles.pop(player_id, None)
            for env in state.environments:
                env.cards_in_play.pop(player_id, None)
                env.used_items.pop(player_id, None)
            state.touch()

            logger.info("Player %s left game %s", player_id, state.id)
            self._emit(EventType.PLAYER_LEFT, player=_public_player(player))

            if state.phase == GamePhase.SETUP:
                self._check_start()
            elif state.phase != GamePhase.FINISHED:
                if len(state.players) < self.config.min_players:
                    self._end_game(None)
                elif state.phase == GamePhase.SKIRMISH:
                    self._settle_skirmish_turn()
            return None

    def set_player_connection(self, player_id: str, connected: bool) -> GameError | None:
        with self._lock:
            player = self.state.get_player(player_id)
            if player is None:
                return GameError.of(ErrorCode.PLAYER_NOT_IN_GAME, player_id=player_id)
            player.is_connected = connected
            self.state.touch()
            self._emit_updated(player_id=player_id, is_connected=connected)
            return None

    def snapshot(self) -> GameState:
        """Deep copy of the state; changing it does not affect the engine."""
        with self._lock:
            return self.state.copy()

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return self.state.to_dict()

    def drain_events(self) -> list[GameEvent]:
        with self._lock:
            return self.events.drain()

    def can_player_act(self, player_id: str) -> bool:
        """True if it is this player's turn in an active phase."""
        with self._lock:
            current = self.state.current_player
            return (
                self.state.phase in (GamePhase.HANDBUILDING, GamePhase.SKIRMISH)
                and current is not None
                and current.id == player_id
            )

    def is_full(self) -> bool:
        with self._lock:
            return len(self.state.players) >= self.state.max_players

    def hand_limit(self, phase: GamePhase | None = None) -> int:
        phase = phase or self.state.phase
        if phase == GamePhase.SKIRMISH:
            return self.config.skirmish_hand_limit
        return self.config.handbuilding_hand_size

    # ==================== Validation helpers ====================

    def _require_phase(self, *phases: GamePhase) -> None:
        if self.state.phase not in phases:
            raise ActionRejected.of(
                ErrorCode.WRONG_PHASE, phase=self.state.phase.value,
                expected=", ".join(p.value for p in phases),
            )

    def _require_player(self, player_id: str) -> Player:
        player = self.state.get_player(player_id)
        if player is None:
            raise ActionRejected.of(ErrorCode.PLAYER_NOT_IN_GAME, player_id=player_id)
        return player

    def _require_turn(self, player: Player) -> None:
        current = self.state.current_player
        if current is None or current.id != player.id:
            raise ActionRejected.of(ErrorCode.NOT_PLAYER_TURN, player_id=player.id)

    def _require_not_passed(self, player: Player) -> None:
        if player.has_passed:
            raise ActionRejected.of(ErrorCode.INVALID_MOVE, "error.already_passed", player_id=player.id)

    def _require_in_hand(self, player: Player, card_id: str) -> PlayerCard:
        card = player.find_in_hand(card_id)
        if card is None:
            raise ActionRejected.of(ErrorCode.INVALID_MOVE, "error.card_not_in_hand", card_id=card_id)
        return card

    def _require_environment(self, environment_id: str) -> EnvironmentState:
        env = self.state.get_environment(environment_id)
        if env is None:
            raise ActionRejected.of(ErrorCode.INVALID_MOVE, "error.unknown_environment",
                                    environment_id=environment_id)
        return env

    def _active_environment(self) -> EnvironmentState:
        env = self.state.active_environment
        if env is None:
            raise RuntimeError(f"Game {self.state.id} is in a skirmish without an active environment")
        return env

    # ==================== Handlers ====================

    def _ready_up(self, action: ReadyUp) -> None:
        self._require_phase(GamePhase.SETUP)
        player = self._require_player(action.player_id)

        player.is_ready = True
        self._emit_updated(player_id=player.id, is_ready=True)
        self._check_start()

    def _prepare_card(self, action: PrepareCard) -> None:
        self._require_phase(GamePhase.HANDBUILDING)
        player = self._require_player(action.player_id)
        self._require_turn(player)
        card = self._require_in_hand(player, action.card_id)
        env = self._require_environment(action.environment_id)
        if not self.legality.can_prepare(self.state, env, player):
            raise ActionRejected.of(ErrorCode.INVALID_MOVE, "error.cannot_prepare_here",
                                    environment=env.title)

        player.hand.remove(card)
        self.state.prepared_for(env.id, player.id).append(card)
        player.draw(1)

        data: dict[str, Any] = {
            "player_id": player.id,
            "environment_id": env.id,
            "card_id": card.id,
        }
        if get_environment_rule(env.title).prepared_face_up:
            data["card"] = card.to_dict()
        self._emit(EventType.CARD_PREPARED, **data)
        self._next_turn()

    def _initiate_skirmish(self, action: InitiateSkirmish) -> None:
        self._require_phase(GamePhase.HANDBUILDING)
        player = self._require_player(action.player_id)
        self._require_turn(player)
        env = self._require_environment(action.environment_id)
        prepared = self.state.prepared_count(env.id)
        if prepared < self.config.skirmish_threshold:
            raise ActionRejected.of(ErrorCode.ENVIRONMENT_NOT_READY, prepared=prepared,
                                    required=self.config.skirmish_threshold)

        self._start_skirmish(env, player)

    def _play_card(self, action: PlayCard) -> None:
        self._require_phase(GamePhase.SKIRMISH)
        player = self._require_player(action.player_id)
        self._require_turn(player)
        self._require_not_passed(player)
        card = self._require_in_hand(player, action.card_id)
        env = self._active_environment()
        if not self.legality.can_play(card, self.state, env, player.id):
            raise ActionRejected.of(ErrorCode.CANNOT_PLAY_CARD, card=card.title, environment=env.title)

        player.hand.remove(card)
        env.cards_in_play.setdefault(player.id, []).append(card)
        get_environment_rule(env.title).on_card_play(self.state, env, player, card)

        self._emit(EventType.CARD_PLAYED, player_id=player.id, environment_id=env.id,
                   card=card.to_dict())
        self._after_skirmish_action()

    def _take_item(self, action: TakeItem) -> None:
        self._require_phase(GamePhase.SKIRMISH)
        player = self._require_player(action.player_id)
        self._require_turn(player)
        self._require_not_passed(player)
        if not player.hand:
            raise ActionRejected.of(ErrorCode.INSUFFICIENT_CARDS, required=1, available=0)
        env = self._active_environment()
        item = env.find_item(action.item_id)
        if item is None:
            raise ActionRejected.of(ErrorCode.ITEM_NOT_AVAILABLE, item_id=action.item_id)

        discarded = list(action.discarded_card_ids)
        if item.has_variable_cost:
            if not discarded:
                raise ActionRejected.of(ErrorCode.INSUFFICIENT_CARDS, required=1, available=0)
        elif item.discard_cost > 0:
            if item.discard_cost > len(player.hand):
                raise ActionRejected.of(ErrorCode.INSUFFICIENT_CARDS, required=item.discard_cost,
                                        available=len(player.hand))
            if len(discarded) != item.discard_cost:
                raise ActionRejected.of(ErrorCode.INSUFFICIENT_CARDS, required=item.discard_cost,
                                        available=len(discarded))
        else:
            discarded = []
        if not player.has_in_hand(discarded):
            raise ActionRejected.of(ErrorCode.INVALID_MOVE, "error.discard_not_in_hand")

        player.discard_from_hand(discarded)
        env.items.remove(item)
        env.used_items.setdefault(player.id, []).append(item)

        self._emit(EventType.ITEM_TAKEN, player_id=player.id, environment_id=env.id,
                   item=item.to_dict(), discarded_card_ids=discarded)
        self._after_skirmish_action()

    def _pass(self, action: Pass) -> None:
        self._require_phase(GamePhase.SKIRMISH)
        player = self._require_player(action.player_id)
        self._require_turn(player)
        self._require_not_passed(player)
        env = self._active_environment()

        player.has_passed = True
        policy = get_environment_rule(env.title).on_pass(self.state, env, player, self.config.pass_policy)
        targets = [
            e.id for e in self.state.environments
            if e.id != env.id and self.legality.can_prepare(self.state, e, player)
        ]
        outcome = dispose_hand(self.state, player, policy, targets)

        self._emit(EventType.PLAYER_PASSED, player_id=player.id, policy=policy.value,
                   **outcome.to_dict())
        self._after_skirmish_action()

    def _discard_to_hand_limit(self, action: DiscardToHandLimit) -> None:
        self._require_phase(GamePhase.HANDBUILDING, GamePhase.SKIRMISH)
        player = self._require_player(action.player_id)
        discarded = list(action.discarded_card_ids)
        if not player.has_in_hand(discarded):
            raise ActionRejected.of(ErrorCode.INVALID_MOVE, "error.discard_not_in_hand")
        limit = self.hand_limit()
        remaining = len(player.hand) - len(discarded)
        if remaining > limit:
            raise ActionRejected.of(ErrorCode.HAND_LIMIT_EXCEEDED, hand=remaining, limit=limit)

        player.discard_from_hand(discarded)
        self._emit_updated(player_id=player.id, discarded_card_ids=discarded)

    # ==================== Flow ====================

    def _check_start(self) -> None:
        state = self.state
        if (
            state.phase == GamePhase.SETUP
            and len(state.players) >= self.config.min_players
            and all(p.is_ready for p in state.players)
        ):
            self._start_handbuilding()

    def _start_handbuilding(self) -> None:
        self._change_phase(GamePhase.HANDBUILDING)
        state = self.state
        state.turn = 1
        state.current_player_index = 0
        for player in state.players:
            player.draw_up_to(self.config.handbuilding_hand_size)
            player.has_passed = False
        logger.info("Game %s: handbuilding started with %d players", state.id, len(state.players))
        self._emit(EventType.PHASE_CHANGED, phase=state.phase.value, previous=GamePhase.SETUP.value,
                   turn=state.turn, current_player_id=state.current_player.id)

    def _start_skirmish(self, env: EnvironmentState, initiator: Player) -> None:
        self._change_phase(GamePhase.SKIRMISH)
        state = self.state
        state.active_environment_id = env.id
        state.skirmish_initiator_id = initiator.id

        piles = state.prepared_cards.get(env.id, {})
        trimmed: dict[str, list[str]] = {}
        for player in state.players:
            player.hand.extend(piles.get(player.id, []))
            excess = player.trim_hand(self.config.skirmish_hand_limit)
            if excess:
                trimmed[player.id] = [c.id for c in excess]
            player.has_passed = False
        state.prepared_cards[env.id] = {p.id: [] for p in state.players}
        env.cards_in_play = {}
        env.used_items = {}

        get_environment_rule(env.title).on_skirmish_start(state, env)
        state.current_player_index = state.player_index(initiator.id)

        logger.info("Game %s: skirmish at %s initiated by %s", state.id, env.title, initiator.id)
        self._emit(EventType.SKIRMISH_INITIATED, environment_id=env.id, environment_title=env.title,
                   initiator_id=initiator.id, trimmed=trimmed)

    def _skirmish_over(self) -> bool:
        return all(p.has_passed or not p.hand for p in self.state.players)

    def _after_skirmish_action(self) -> None:
        if self._skirmish_over():
            self._end_skirmish()
        else:
            self._next_turn()

    def _settle_skirmish_turn(self) -> None:
        """After a departure: end the skirmish or move off an inactive seat."""
        if self._skirmish_over():
            self._end_skirmish()
            return
        current = self.state.current_player
        if current is not None and (current.has_passed or not current.hand):
            self._next_turn()

    def _next_turn(self) -> None:
        state = self.state
        count = len(state.players)
        state.turn += 1
        index = (state.current_player_index + 1) % count
        if state.phase == GamePhase.SKIRMISH:
            # Players who passed or hold no cards have nothing left to do.
            for step in range(1, count + 1):
                candidate = (state.current_player_index + step) % count
                player = state.players[candidate]
                if not player.has_passed and player.hand:
                    index = candidate
                    break
        state.current_player_index = index
        self._emit_updated()

    def _end_skirmish(self) -> None:
        state = self.state
        env = self._active_environment()
        scores, winner = self.scoring.resolve(state, env)
        get_environment_rule(env.title).on_skirmish_end(state, env)

        winning_player = state.get_player(winner.player_id) if winner else None
        if winning_player is not None:
            winning_player.skirmishes_won += 1

        retired_id, retired_title = env.id, env.title
        self._cleanup_environment(env)
        logger.info("Game %s: skirmish ended, winner %s", state.id,
                    winning_player.id if winning_player else None)
        self._emit(EventType.SKIRMISH_ENDED, environment_id=retired_id, environment_title=retired_title,
                   scores=[s.to_dict() for s in scores],
                   winner=winner.to_dict() if winner else None,
                   new_environment_id=env.id)

        if winning_player is not None and winning_player.skirmishes_won >= state.target_skirmishes:
            self._end_game(winning_player)
        else:
            self._start_next_round()

    def _cleanup_environment(self, env: EnvironmentState) -> None:
        """Discard the skirmish leftovers and replace the environment."""
        state = self.state
        for player_id, cards in env.cards_in_play.items():
            owner = state.get_player(player_id)
            if owner is not None:
                owner.discard_pile.extend(cards)
        env.cards_in_play = {}
        state.item_discard.extend(env.items)
        for items in env.used_items.values():
            state.item_discard.extend(items)
        env.items = []
        env.used_items = {}

        if state.environment_deck:
            retired_id = env.id
            env.environment = state.environment_deck.pop(0)
            env.items.extend(draw_items(state.item_deck, self.config.items_per_environment))
            state.prepared_cards.pop(retired_id, None)
            state.prepared_cards[env.id] = {p.id: [] for p in state.players}
            logger.debug("Environment %s replaced by %s", retired_id, env.title)

    def _start_next_round(self) -> None:
        state = self.state
        initiator_index = state.player_index(state.skirmish_initiator_id or "")
        self._change_phase(GamePhase.HANDBUILDING)
        state.active_environment_id = None
        state.skirmish_initiator_id = None
        for player in state.players:
            player.has_passed = False
            player.draw_up_to(self.config.handbuilding_hand_size)
        if initiator_index >= 0:
            state.current_player_index = initiator_index
        self._next_turn()
        self._emit(EventType.PHASE_CHANGED, phase=state.phase.value, previous=GamePhase.SKIRMISH.value,
                   turn=state.turn, current_player_id=state.current_player.id)

    def _end_game(self, winner: Player | None) -> None:
        state = self.state
        previous = state.phase
        self._change_phase(GamePhase.FINISHED)
        state.active_environment_id = None
        state.skirmish_initiator_id = None
        logger.info("Game %s finished (from %s), winner %s", state.id, previous.value,
                    winner.id if winner else None)
        self._emit(EventType.GAME_ENDED,
                   winner=_public_player(winner) if winner else None,
                   final_scores=standings(state))

    def _change_phase(self, target: GamePhase) -> None:
        self.fsm.transition(target)
        self.state.phase = target

    # ==================== Events ====================

    def _emit(self, event_type: EventType, **data: Any) -> None:
        self.events.emit(event_type, **data)

    def _emit_updated(self, **data: Any) -> None:
        state = self.state
        current = state.current_player
        self.events.emit(
            EventType.GAME_UPDATED,
            phase=state.phase.value,
            turn=state.turn,
            current_player_id=current.id if current else None,
            **data,
        )


def _public_player(player: Player) -> dict[str, Any]:
    """Player fields every client may see."""
    return {
        "id": player.id,
        "name": player.name,
        "color": player.color.value,
        "skirmishes_won": player.skirmishes_won,
        "is_ready": player.is_ready,
        "is_connected": player.is_connected,
    }
