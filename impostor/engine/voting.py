"""Voting: order, ballot collection, tally and outcome."""

import random
from collections import Counter
from dataclasses import dataclass, replace
from typing import Literal, Optional, Sequence

from .descriptions import can_start_voting
from .errors import InvalidPhase, InvalidVote, NotYourTurn
from .phases import GamePhase, transition
from .roles import GamePlayer
from .state import GameState, Vote


@dataclass(frozen=True)
class VoteResult:
    """Outcome of a finished vote."""

    accused: str
    accused_votes: int
    impostor_caught: bool
    tally: tuple[tuple[str, int], ...]
    impostors: tuple[str, ...]

    @property
    def winner(self) -> Literal["innocents", "impostors"]:
        return "innocents" if self.impostor_caught else "impostors"


def build_voting_order(players: Sequence[GamePlayer]) -> tuple[str, ...]:
    """Humans vote first in roster order, then bots in roster order."""
    humans = [p.name for p in players if not p.is_bot]
    bots = [p.name for p in players if p.is_bot]
    return tuple(humans + bots)


def tally(votes: Sequence[Vote]) -> list[tuple[str, int]]:
    """Count votes per target, most voted first.

    Ties keep the order in which targets were first voted for.
    """
    return Counter(v.voted_for_name for v in votes).most_common()


def match_player_name(response: str, candidates: Sequence[str]) -> Optional[str]:
    """Map a free-form reply onto a player name.

    Tries an exact case-insensitive match, then a case-insensitive substring
    match in either direction.

    Returns:
        The matched name, or None when nothing matches.
    """
    reply = response.lower().strip().strip(".!\"'")
    if not reply:
        return None

    for name in candidates:
        if name.lower() == reply:
            return name

    for name in candidates:
        if name.lower() in reply or reply in name.lower():
            return name

    return None


class VotingEngine:
    """Applies votes to game state snapshots."""

    def start(self, state: GameState) -> GameState:
        """Enter the voting phase.

        Raises:
            InvalidPhase: If the current round is not complete yet.
        """
        if not can_start_voting(state):
            raise InvalidPhase("Everyone has to speak this round before voting")
        return replace(
            state,
            phase=transition(state.phase, GamePhase.VOTING),
            votes=(),
            voting_order=build_voting_order(state.players),
            current_voter_index=0,
        )

    def candidates(self, state: GameState, voter_name: str) -> list[str]:
        """Players the voter may vote for."""
        return [p.name for p in state.players if p.name != voter_name]

    def submit(self, state: GameState, voter_name: str, voted_for_name: str) -> GameState:
        """Record a vote from the current voter.

        Moves to the finished phase after the last voter.

        Raises:
            InvalidPhase: Outside the voting phase.
            NotYourTurn: If someone else is expected to vote.
            InvalidVote: For a self vote or an unknown target.
        """
        if state.phase != GamePhase.VOTING:
            raise InvalidPhase(f"Votes are only accepted while voting, not {state.phase.value}")
        voter = state.current_voter
        if voter is None or voter.name != voter_name:
            expected = voter.name if voter else "nobody"
            raise NotYourTurn(f"It's {expected}'s vote, not {voter_name}'s")
        if voted_for_name == voter_name:
            raise InvalidVote("You cannot vote for yourself")
        if not state.has_player(voted_for_name):
            raise InvalidVote(f"Unknown player: {voted_for_name}")

        vote = Vote(voter_name=voter_name, voted_for_name=voted_for_name, is_bot=voter.is_bot)
        next_index = state.current_voter_index + 1
        new_state = replace(state, votes=state.votes + (vote,), current_voter_index=next_index)
        if next_index >= len(state.voting_order):
            new_state = new_state.with_phase(transition(state.phase, GamePhase.FINISHED))
        return new_state

    def random_target(self, state: GameState, voter_name: str, rng: Optional[random.Random] = None) -> str:
        """Uniform random choice among the other players."""
        return (rng or random).choice(self.candidates(state, voter_name))

    def result(self, state: GameState) -> Optional[VoteResult]:
        """Decide the vote outcome, None until the vote is finished."""
        if state.phase != GamePhase.FINISHED:
            return None
        counts = tally(state.votes)
        if not counts:
            return None
        accused, accused_votes = counts[0]
        return VoteResult(
            accused=accused,
            accused_votes=accused_votes,
            impostor_caught=state.player(accused).is_impostor,
            tally=tuple(counts),
            impostors=tuple(p.name for p in state.impostors),
        )
