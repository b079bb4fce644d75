"""Tests for the phase machine."""

import pytest

from impostor.engine.errors import InvalidTransition
from impostor.engine.phases import GamePhase, initial_phase, phase_name, transition


@pytest.mark.parametrize("current,target", [
    (GamePhase.REVEAL, GamePhase.PLAYING),
    (GamePhase.PLAYING, GamePhase.VOTING),
    (GamePhase.PLAYING, GamePhase.IMPOSTOR_WINS),
    (GamePhase.VOTING, GamePhase.FINISHED),
])
def test_allowed_transitions(current, target):
    assert transition(current, target) is target


@pytest.mark.parametrize("current,target", [
    (GamePhase.REVEAL, GamePhase.VOTING),
    (GamePhase.PLAYING, GamePhase.FINISHED),
    (GamePhase.VOTING, GamePhase.PLAYING),
    (GamePhase.FINISHED, GamePhase.PLAYING),
    (GamePhase.IMPOSTOR_WINS, GamePhase.VOTING),
    (GamePhase.PLAYING, GamePhase.PLAYING),
])
def test_forbidden_transitions(current, target):
    with pytest.raises(InvalidTransition):
        transition(current, target)


def test_terminal_phases():
    assert GamePhase.FINISHED.is_terminal
    assert GamePhase.IMPOSTOR_WINS.is_terminal
    assert not GamePhase.VOTING.is_terminal


def test_all_bot_tables_skip_reveal():
    assert initial_phase(all_bots=True) == GamePhase.PLAYING
    assert initial_phase(all_bots=False) == GamePhase.REVEAL


def test_phase_names():
    assert phase_name(GamePhase.PLAYING, 2) == "round_2"
    assert phase_name(GamePhase.IMPOSTOR_WINS, 1) == "impostor_wins"
