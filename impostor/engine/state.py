"""Immutable game state snapshot.

Every change to a game produces a new ``GameState`` via ``dataclasses.replace``.
The orchestrator holds the only reference to the current snapshot.
"""

import random
from dataclasses import dataclass, replace
from typing import Optional

from .config import Difficulty, GameConfig
from .phases import GamePhase, initial_phase
from .roles import GamePlayer, assign_roles
from .turns import TurnOrder

SKIPPED_TEXT = "(skipped)"


@dataclass(frozen=True)
class Description:
    """One entry of the description transcript."""

    player_name: str
    text: str
    round: int

    @property
    def skipped(self) -> bool:
        return self.text == SKIPPED_TEXT


@dataclass(frozen=True)
class Vote:
    """One cast vote."""

    voter_name: str
    voted_for_name: str
    is_bot: bool = False


@dataclass(frozen=True)
class GameState:
    """The aggregate root of one game."""

    phase: GamePhase
    players: tuple[GamePlayer, ...]
    turn_order: TurnOrder
    word: str
    hint: str
    difficulty: Difficulty
    current_turn_position: int = 0
    current_round: int = 1
    descriptions: tuple[Description, ...] = ()
    votes: tuple[Vote, ...] = ()
    voting_order: tuple[str, ...] = ()
    current_voter_index: int = 0
    muted: bool = False
    show_hint: bool = True
    result_announced: bool = False

    @property
    def roster_size(self) -> int:
        return len(self.players)

    @property
    def all_bots(self) -> bool:
        return all(p.is_bot for p in self.players)

    @property
    def all_seen(self) -> bool:
        return all(p.has_seen_word for p in self.players)

    @property
    def impostors(self) -> list[GamePlayer]:
        return [p for p in self.players if p.is_impostor]

    @property
    def current_player(self) -> GamePlayer:
        """Player whose turn it is at the current position."""
        return self.players[self.turn_order.seat_at(self.current_turn_position)]

    @property
    def current_voter(self) -> Optional[GamePlayer]:
        """Player expected to vote next, None outside voting or once all voted."""
        if self.phase != GamePhase.VOTING:
            return None
        if self.current_voter_index >= len(self.voting_order):
            return None
        return self.player(self.voting_order[self.current_voter_index])

    def player(self, name: str) -> GamePlayer:
        """Look a player up by name."""
        for p in self.players:
            if p.name == name:
                return p
        raise KeyError(name)

    def has_player(self, name: str) -> bool:
        return any(p.name == name for p in self.players)

    def with_phase(self, phase: GamePhase) -> "GameState":
        return replace(self, phase=phase)

    def with_next_turn(self) -> "GameState":
        """Move the turn cursor forward by exactly one position."""
        return replace(self, current_turn_position=self.current_turn_position + 1)

    def with_player(self, updated: GamePlayer) -> "GameState":
        players = tuple(updated if p.name == updated.name else p for p in self.players)
        return replace(self, players=players)


def create_game_state(
    config: GameConfig,
    word: str,
    hint: str,
    rng: Optional[random.Random] = None,
    muted: bool = False,
) -> GameState:
    """Deal a fresh game from the setup configuration.

    Draws impostors and the turn order from ``rng``. An all-bot table starts
    directly in the playing phase.
    """
    rng = rng or random.Random()
    players = assign_roles(config.roster, config.impostor_count, word, hint, rng)
    return GameState(
        phase=initial_phase(all(p.is_bot for p in players)),
        players=players,
        turn_order=TurnOrder.shuffled(len(players), rng),
        word=word,
        hint=hint,
        difficulty=config.difficulty,
        muted=muted,
        show_hint=config.allow_impostor_hint,
    )
