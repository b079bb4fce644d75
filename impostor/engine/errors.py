"""Errors raised when a player action is rejected by the game rules."""


class GameError(Exception):
    """Base class for rejected game actions.

    A rejected action never mutates the game state. Callers show the message
    to the player and let them try again.
    """


class InvalidPhase(GameError):
    """The action is not allowed in the current phase."""


class InvalidTransition(GameError):
    """The phase machine has no edge between the two phases."""


class NotYourTurn(GameError):
    """The acting player is not the one whose turn it is."""


class EmptyDescription(GameError):
    """A description was submitted with no text."""


class DuplicateDescription(GameError):
    """The description was already said earlier in this game."""


class InvalidVote(GameError):
    """The vote targets the voter themselves or an unknown player."""
