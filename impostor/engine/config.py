"""Game configuration: the setup handoff and runtime settings."""

from enum import Enum
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .roles import Player

MIN_PLAYERS = 3


class Difficulty(str, Enum):
    """How obvious descriptions are expected to be."""
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    LEGEND = "legend"


class PlayerConfig(BaseModel):
    """A player entry as written by the setup screen."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    is_bot: bool = Field(default=False, alias="isBot")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Player name cannot be empty")
        return value


class GameConfig(BaseModel):
    """Everything the setup stage hands to the game engine.

    Serialized with camelCase keys so the handoff layout stays
    ``{players: [{name, isBot}], impostorCount, selectedCategories,
    difficulty, allowImpostorHint}``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    players: list[PlayerConfig]
    impostor_count: int = Field(default=1, alias="impostorCount")
    selected_categories: list[str] = Field(default_factory=list, alias="selectedCategories")
    difficulty: Difficulty = Difficulty.NORMAL
    allow_impostor_hint: bool = Field(default=True, alias="allowImpostorHint")
    # Impostor bots try to guess the secret word from round 2 on
    bot_impostor_guess: bool = Field(default=False, alias="botImpostorGuess")

    @model_validator(mode="after")
    def _check_table(self) -> "GameConfig":
        if len(self.players) < MIN_PLAYERS:
            raise ValueError(f"At least {MIN_PLAYERS} players are needed, got {len(self.players)}")
        names = [p.name for p in self.players]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Player names must be unique: {', '.join(duplicates)}")
        max_impostors = len(self.players) - 1
        if not 1 <= self.impostor_count <= max_impostors:
            raise ValueError(
                f"Impostor count must be between 1 and {max_impostors}, "
                f"got {self.impostor_count}"
            )
        return self

    @property
    def roster(self) -> list[Player]:
        return [Player(name=p.name, is_bot=p.is_bot) for p in self.players]

    @property
    def bot_count(self) -> int:
        return sum(1 for p in self.players if p.is_bot)

    def to_session_json(self) -> str:
        """Serialize the handoff object written once at game start."""
        return self.model_dump_json(
            by_alias=True,
            include={"players", "impostor_count", "selected_categories", "difficulty", "allow_impostor_hint"},
        )

    @classmethod
    def from_session_json(cls, raw: Union[str, bytes]) -> "GameConfig":
        """Read the handoff object back, validating it."""
        return cls.model_validate_json(raw)


class NarrationSettings(BaseModel):
    """Narrator voice settings."""
    muted: bool = False
    timeout: float = 5.0      # Cap on how long one announcement may block the game
    char_delay: float = 0.04  # Simulated playback time per character


class BotSettings(BaseModel):
    """Suggestion service settings."""
    model: str = "google/gemini-2.5-flash"
    timeout: float = 10.0
    temperature: float = 0.8


class PacingSettings(BaseModel):
    """Pauses inserted between announcements, in seconds."""
    after_description: float = 1.0
    before_round: float = 0.5
    before_turn: float = 0.3
    before_bot_turn: float = 0.5
    before_bot_vote: float = 2.0
    before_result: float = 1.5


class LoggingSettings(BaseModel):
    level: str = "WARNING"
    games_dir: Optional[str] = "games"


class AppConfig(BaseModel):
    """Top-level configuration file layout."""
    game: GameConfig
    narration: NarrationSettings = Field(default_factory=NarrationSettings)
    bots: BotSettings = Field(default_factory=BotSettings)
    pacing: PacingSettings = Field(default_factory=PacingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_app_config(path: Union[str, Path]) -> AppConfig:
    """Load and validate the YAML configuration file.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the configuration is invalid.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return AppConfig.model_validate(data)
