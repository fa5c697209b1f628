"""Game phase finite state machine.

Validates phase changes so the engine can never jump, for example, from setup
straight into a skirmish.
"""

from __future__ import annotations

import logging

from .enums import GamePhase

logger = logging.getLogger(__name__)

# key: current phase, value: phases it may move to
VALID_TRANSITIONS: dict[GamePhase, set[GamePhase]] = {
    GamePhase.SETUP: {GamePhase.HANDBUILDING},
    GamePhase.HANDBUILDING: {GamePhase.SKIRMISH, GamePhase.FINISHED},
    GamePhase.SKIRMISH: {GamePhase.HANDBUILDING, GamePhase.FINISHED},
    GamePhase.FINISHED: set(),
}


class InvalidPhaseTransition(Exception):
    """Raised on a transition missing from ``VALID_TRANSITIONS``."""

    def __init__(self, current_phase: GamePhase, target_phase: GamePhase):
        super().__init__(
            f"Invalid phase transition: {current_phase.name} → {target_phase.name}"
        )
        self.from_phase = current_phase
        self.to_phase = target_phase


class PhaseFSM:
    """Holds the current phase and checks every transition.

    Usage::

        fsm = PhaseFSM()
        fsm.transition(GamePhase.HANDBUILDING)  # OK
        fsm.transition(GamePhase.SETUP)         # raises InvalidPhaseTransition
    """

    def __init__(self, phase: GamePhase = GamePhase.SETUP) -> None:
        self._phase: GamePhase = phase

    @property
    def current(self) -> GamePhase:
        return self._phase

    def transition(self, target: GamePhase) -> None:
        """Move to ``target``.

        Raises:
            InvalidPhaseTransition: if the move is not in the table
        """
        valid = VALID_TRANSITIONS.get(self._phase, set())
        if target not in valid:
            raise InvalidPhaseTransition(self._phase, target)
        logger.debug("Phase transition: %s → %s", self._phase.name, target.name)
        self._phase = target

    def can_transition(self, target: GamePhase) -> bool:
        return target in VALID_TRANSITIONS.get(self._phase, set())

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS.get(self._phase)
