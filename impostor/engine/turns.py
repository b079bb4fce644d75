"""Turn order and round bookkeeping."""

import random
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TurnOrder:
    """A fixed permutation of seat indices, cycled for the whole game."""

    order: tuple[int, ...]

    def __post_init__(self):
        if sorted(self.order) != list(range(len(self.order))):
            raise ValueError(f"Turn order {self.order} is not a permutation")

    @classmethod
    def shuffled(cls, size: int, rng: Optional[random.Random] = None) -> "TurnOrder":
        """Build a uniformly random order with a Fisher-Yates shuffle."""
        rng = rng or random.Random()
        order = list(range(size))
        for i in range(size - 1, 0, -1):
            j = rng.randint(0, i)
            order[i], order[j] = order[j], order[i]
        return cls(tuple(order))

    def __len__(self) -> int:
        return len(self.order)

    def seat_at(self, position: int) -> int:
        """Seat index whose turn it is at a given turn position."""
        return self.order[position % len(self.order)]

    def window(self, start: int) -> list[int]:
        """Seats visited by the ``len(self)`` positions starting at ``start``."""
        return [self.seat_at(p) for p in range(start, start + len(self.order))]


def derive_round(description_count: int, roster_size: int) -> int:
    """Round number implied by how many descriptions have been given."""
    return description_count // roster_size + 1


def pending_round(description_count: int, roster_size: int, current_round: int) -> Optional[int]:
    """Return the round to announce before the next turn, if any.

    Args:
        description_count: Descriptions recorded so far.
        roster_size: Number of players.
        current_round: Round stored in the game state.

    Returns:
        The new round number, or None when the round has not changed.
    """
    expected = derive_round(description_count, roster_size)
    return expected if expected > current_round else None
