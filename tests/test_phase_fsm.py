"""Tests for skirmish.phase_fsm."""

import pytest

from skirmish.enums import GamePhase
from skirmish.phase_fsm import VALID_TRANSITIONS, InvalidPhaseTransition, PhaseFSM


class TestPhaseFSM:
    def test_initial_phase_is_setup(self):
        assert PhaseFSM().current == GamePhase.SETUP

    def test_full_game_cycle(self):
        fsm = PhaseFSM()
        fsm.transition(GamePhase.HANDBUILDING)
        fsm.transition(GamePhase.SKIRMISH)
        fsm.transition(GamePhase.HANDBUILDING)
        fsm.transition(GamePhase.SKIRMISH)
        fsm.transition(GamePhase.FINISHED)
        assert fsm.current == GamePhase.FINISHED
        assert fsm.is_terminal

    def test_cannot_skip_handbuilding(self):
        fsm = PhaseFSM()
        with pytest.raises(InvalidPhaseTransition) as exc_info:
            fsm.transition(GamePhase.SKIRMISH)
        assert exc_info.value.from_phase == GamePhase.SETUP
        assert exc_info.value.to_phase == GamePhase.SKIRMISH
        assert fsm.current == GamePhase.SETUP

    def test_finished_is_terminal(self):
        fsm = PhaseFSM(GamePhase.FINISHED)
        for phase in GamePhase:
            assert not fsm.can_transition(phase)

    def test_handbuilding_can_finish(self):
        fsm = PhaseFSM(GamePhase.HANDBUILDING)
        assert fsm.can_transition(GamePhase.FINISHED)
        assert not fsm.can_transition(GamePhase.SETUP)

    def test_every_phase_has_an_entry(self):
        assert set(VALID_TRANSITIONS) == set(GamePhase)
