"""Roster and role assignment for the impostor game."""

import random
from dataclasses import dataclass, replace
from typing import Literal, Optional, Sequence


@dataclass(frozen=True)
class Player:
    """A seat at the table, human or bot."""

    name: str
    is_bot: bool = False

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class GamePlayer:
    """A player with the attributes assigned for one game."""

    name: str
    is_bot: bool
    is_impostor: bool
    word: str
    hint: str
    has_seen_word: bool = False

    @property
    def team(self) -> Literal["innocent", "impostor"]:
        return "impostor" if self.is_impostor else "innocent"

    def mark_seen(self) -> "GamePlayer":
        """Return a copy that has viewed its card."""
        return replace(self, has_seen_word=True)

    def __str__(self) -> str:
        return self.name


def pick_impostors(
    player_count: int,
    impostor_count: int,
    rng: Optional[random.Random] = None,
) -> set[int]:
    """Choose impostor seats uniformly at random.

    Samples seat indices until ``impostor_count`` distinct ones are collected.

    Args:
        player_count: Number of seats.
        impostor_count: How many impostors to pick.
        rng: Random source, the module-level one if omitted.

    Returns:
        The chosen seat indices.
    """
    if not 0 < impostor_count <= player_count:
        raise ValueError(
            f"Impostor count ({impostor_count}) must be between 1 and "
            f"the player count ({player_count})"
        )
    rng = rng or random.Random()
    chosen: set[int] = set()
    while len(chosen) < impostor_count:
        chosen.add(rng.randrange(player_count))
    return chosen


def assign_roles(
    players: Sequence[Player],
    impostor_count: int,
    word: str,
    hint: str,
    rng: Optional[random.Random] = None,
) -> tuple[GamePlayer, ...]:
    """Deal roles and the shared secret to every player.

    Bots are marked as having seen their card, humans still need the reveal.
    """
    impostors = pick_impostors(len(players), impostor_count, rng)
    return tuple(
        GamePlayer(
            name=player.name,
            is_bot=player.is_bot,
            is_impostor=i in impostors,
            word=word,
            hint=hint,
            has_seen_word=player.is_bot,
        )
        for i, player in enumerate(players)
    )
