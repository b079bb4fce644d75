"""Tests for the description engine."""

from dataclasses import replace

import pytest

from conftest import make_state
from impostor.engine.descriptions import (
    DescriptionEngine,
    can_start_voting,
    is_duplicate,
    leaks_secret,
    normalize,
)
from impostor.engine.errors import DuplicateDescription, EmptyDescription, InvalidPhase, NotYourTurn
from impostor.engine.phases import GamePhase
from impostor.engine.state import SKIPPED_TEXT, Description

NAMES = ["Ana", "Luis", "Marta"]


@pytest.fixture
def engine():
    return DescriptionEngine()


def test_normalize_folds_accents_and_case():
    assert normalize("  Canción ") == "cancion"
    assert normalize("ÁRBOL") == "arbol"


def test_leak_is_a_substring_match():
    assert leaks_secret("mi guitarra es roja", "GUITARRA")
    assert not leaks_secret("instrumento", "GUITARRA")
    assert leaks_secret("Guitarist", "guitar")
    assert not leaks_secret("anything", "")


def test_duplicates_ignore_accents_and_case():
    said = (Description("Ana", "Música", 1),)
    assert is_duplicate("musica", said)
    assert not is_duplicate("ritmo", said)


def test_record_appends_without_advancing(engine):
    state = make_state(NAMES, impostor="Marta")

    new_state, leaked = engine.record(state, "Ana", "  Strings ")

    assert not leaked
    assert new_state.descriptions == (Description("Ana", "Strings", 1),)
    assert new_state.current_turn_position == 0
    assert state.descriptions == ()


def test_out_of_turn_is_rejected(engine):
    state = make_state(NAMES, impostor="Marta")
    with pytest.raises(NotYourTurn):
        engine.record(state, "Luis", "Strings")


def test_empty_description_is_rejected(engine):
    state = make_state(NAMES, impostor="Marta")
    with pytest.raises(EmptyDescription):
        engine.record(state, "Ana", "   ")


def test_duplicate_keeps_transcript_unchanged(engine):
    state = make_state(NAMES, impostor="Marta")
    state, _ = engine.record(state, "Ana", "Música")
    state = state.with_next_turn()

    with pytest.raises(DuplicateDescription):
        engine.record(state, "Luis", "MUSICA")
    assert len(state.descriptions) == 1


def test_duplicates_are_checked_across_rounds(engine):
    state = make_state(NAMES, impostor="Marta")
    state = replace(state, descriptions=(Description("Marta", "Rock", 1),), current_round=2)

    with pytest.raises(DuplicateDescription):
        engine.record(state, "Ana", "rock")


def test_impostor_leak_ends_the_game(engine):
    state = make_state(NAMES, impostor="Ana", word="GUITARRA")

    new_state, leaked = engine.record(state, "Ana", "mi guitarra es roja")

    assert leaked
    assert new_state.phase == GamePhase.IMPOSTOR_WINS
    assert new_state.descriptions[-1].text == "mi guitarra es roja"


def test_impostor_safe_word_does_not_leak(engine):
    state = make_state(NAMES, impostor="Ana", word="GUITARRA")

    new_state, leaked = engine.record(state, "Ana", "instrumento")

    assert not leaked
    assert new_state.phase == GamePhase.PLAYING


def test_innocent_saying_the_word_is_not_a_leak(engine):
    state = make_state(NAMES, impostor="Marta", word="GUITARRA")

    new_state, leaked = engine.record(state, "Ana", "guitarra")

    assert not leaked
    assert new_state.phase == GamePhase.PLAYING


def test_descriptions_only_while_playing(engine):
    state = make_state(NAMES, impostor="Marta", phase=GamePhase.VOTING)
    with pytest.raises(InvalidPhase):
        engine.record(state, "Ana", "Strings")


def test_skip_records_placeholder(engine):
    state = make_state(NAMES, impostor="Marta")
    state = replace(state, descriptions=(Description("Luis", SKIPPED_TEXT, 1),))

    new_state = engine.skip(state, "Ana")

    assert new_state.descriptions[-1].skipped
    assert new_state.descriptions[-1].player_name == "Ana"


def test_voting_gate_opens_after_full_round():
    state = make_state(NAMES, impostor="Marta")
    assert not can_start_voting(state)

    said = tuple(Description(n, f"word{i}", 1) for i, n in enumerate(NAMES))
    assert can_start_voting(replace(state, descriptions=said))
    assert not can_start_voting(replace(state, descriptions=said, current_round=2))
    assert not can_start_voting(replace(state, descriptions=said, phase=GamePhase.VOTING))
