"""Game engine - rules enforcement, phases, turns and voting."""

from .config import AppConfig, Difficulty, GameConfig
from .errors import GameError
from .game import Game, RevealCard
from .phases import GamePhase
from .state import GameState

__all__ = ["AppConfig", "Difficulty", "GameConfig", "GameError", "Game", "RevealCard", "GamePhase", "GameState"]
