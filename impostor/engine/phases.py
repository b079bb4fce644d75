"""Game phase definitions and transitions."""

from enum import Enum

from .errors import InvalidTransition


class GamePhase(Enum):
    """Phases of the impostor game."""
    REVEAL = "reveal"                # Each human privately views their card
    PLAYING = "playing"              # Players take turns giving descriptions
    VOTING = "voting"                # Players vote for the suspected impostor
    FINISHED = "finished"            # Votes are in, result decided by the tally
    IMPOSTOR_WINS = "impostor-wins"  # An impostor said the secret word

    @property
    def is_terminal(self) -> bool:
        """Terminal phases are only left through a new game."""
        return self in (GamePhase.FINISHED, GamePhase.IMPOSTOR_WINS)

    def can_move_to(self, target: "GamePhase") -> bool:
        """Check whether the phase machine has an edge to ``target``."""
        return target in TRANSITIONS[self]


TRANSITIONS: dict[GamePhase, frozenset[GamePhase]] = {
    GamePhase.REVEAL: frozenset({GamePhase.PLAYING}),
    GamePhase.PLAYING: frozenset({GamePhase.VOTING, GamePhase.IMPOSTOR_WINS}),
    GamePhase.VOTING: frozenset({GamePhase.FINISHED}),
    GamePhase.FINISHED: frozenset(),
    GamePhase.IMPOSTOR_WINS: frozenset(),
}


def transition(current: GamePhase, target: GamePhase) -> GamePhase:
    """Validate a phase change and return the new phase.

    Args:
        current: Phase the game is in.
        target: Phase the game wants to enter.

    Returns:
        The target phase.

    Raises:
        InvalidTransition: If there is no edge from ``current`` to ``target``.
    """
    if not current.can_move_to(target):
        raise InvalidTransition(
            f"Cannot move from {current.value} to {target.value}"
        )
    return target


def initial_phase(all_bots: bool) -> GamePhase:
    """Pick the starting phase. Bots need no reveal."""
    return GamePhase.PLAYING if all_bots else GamePhase.REVEAL


def phase_name(phase: GamePhase, round_number: int) -> str:
    """Get a human-readable phase name with round number."""
    if phase == GamePhase.PLAYING:
        return f"round_{round_number}"
    return phase.value.replace("-", "_")
