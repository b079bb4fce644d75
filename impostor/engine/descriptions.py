"""Description turns: validation, leak detection and the transcript."""

import unicodedata
from dataclasses import replace

from .errors import DuplicateDescription, EmptyDescription, InvalidPhase, NotYourTurn
from .phases import GamePhase, transition
from .state import SKIPPED_TEXT, Description, GameState


def normalize(text: str) -> str:
    """Fold text for comparison: no accents, lowercase, trimmed."""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.lower().strip()


def leaks_secret(text: str, word: str) -> bool:
    """True when the normalized text contains the normalized secret word.

    Substring match, so "my guitarist" leaks "guitar".
    """
    secret = normalize(word)
    return bool(secret) and secret in normalize(text)


def is_duplicate(text: str, descriptions: tuple[Description, ...]) -> bool:
    """True when the text was already said anywhere in this game."""
    candidate = normalize(text)
    return any(normalize(d.text) == candidate for d in descriptions)


def can_start_voting(state: GameState) -> bool:
    """Voting opens once everyone has spoken in the current round."""
    return (
        state.phase == GamePhase.PLAYING
        and len(state.descriptions) >= state.roster_size * state.current_round
    )


class DescriptionEngine:
    """Applies description turns to game state snapshots.

    Methods never mutate the given state. They either return a new snapshot
    or raise a ``GameError`` and leave everything untouched.
    """

    def check_turn(self, state: GameState, player_name: str) -> None:
        """Ensure it is ``player_name``'s turn to describe."""
        if state.phase != GamePhase.PLAYING:
            raise InvalidPhase(f"Descriptions are only accepted while playing, not {state.phase.value}")
        current = state.current_player
        if current.name != player_name:
            raise NotYourTurn(f"It's {current.name}'s turn, not {player_name}'s")

    def check(self, state: GameState, player_name: str, text: str) -> str:
        """Validate a submission and return the cleaned text.

        Raises:
            InvalidPhase: Outside the playing phase.
            NotYourTurn: If someone else holds the turn.
            EmptyDescription: If the text is blank.
            DuplicateDescription: If the text was already said this game.
        """
        self.check_turn(state, player_name)
        text = text.strip()
        if not text:
            raise EmptyDescription("Say something before submitting")
        if is_duplicate(text, state.descriptions):
            raise DuplicateDescription(f'"{text}" was already said. Pick another word.')
        return text

    def record(self, state: GameState, player_name: str, text: str) -> tuple[GameState, bool]:
        """Append a description for the current player.

        The turn is not advanced here. When an impostor leaks the secret word
        the description is still recorded and the game ends.

        Returns:
            The new state and whether the secret word leaked.
        """
        text = self.check(state, player_name, text)
        entry = Description(player_name=player_name, text=text, round=state.current_round)
        new_state = replace(state, descriptions=state.descriptions + (entry,))

        leaked = state.player(player_name).is_impostor and leaks_secret(text, state.word)
        if leaked:
            new_state = new_state.with_phase(transition(state.phase, GamePhase.IMPOSTOR_WINS))
        return new_state, leaked

    def skip(self, state: GameState, player_name: str) -> GameState:
        """Record a skipped turn. It still counts toward round completion."""
        self.check_turn(state, player_name)
        entry = Description(player_name=player_name, text=SKIPPED_TEXT, round=state.current_round)
        return replace(state, descriptions=state.descriptions + (entry,))
