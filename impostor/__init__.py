"""Impostor: a find-the-impostor party game for humans and bots around one device."""

from .engine import Game, GameConfig, GamePhase, GameState

__all__ = ["Game", "GameConfig", "GamePhase", "GameState"]
