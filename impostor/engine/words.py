"""Secret word bank."""

import random
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Iterable, Optional, Union

import yaml

from .config import Difficulty


@dataclass(frozen=True)
class WordEntry:
    """A secret word with the hint impostors receive."""

    word: str
    hint: str
    category: str
    difficulty: Difficulty


@dataclass(frozen=True)
class Category:
    id: str
    name: str


class WordBank:
    """Words grouped by category and difficulty."""

    def __init__(self, entries: Iterable[WordEntry], categories: Iterable[Category] = ()):
        self.entries = list(entries)
        self.categories = list(categories) or [
            Category(id=c, name=c.title()) for c in dict.fromkeys(e.category for e in self.entries)
        ]

    @classmethod
    def from_dict(cls, data: dict) -> "WordBank":
        """Build a bank from the YAML layout.

        The layout is ``{category_id: {name, words: {difficulty: [[word, hint], ...]}}}``.
        """
        entries = []
        categories = []
        for category_id, category in data.items():
            categories.append(Category(id=category_id, name=category.get("name", category_id.title())))
            for level, pairs in category.get("words", {}).items():
                difficulty = Difficulty(level)
                for word, hint in pairs:
                    entries.append(WordEntry(word, hint, category_id, difficulty))
        return cls(entries, categories)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "WordBank":
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(yaml.safe_load(f) or {})

    @classmethod
    def default(cls) -> "WordBank":
        """Load the word list shipped with the package."""
        text = resources.files("impostor").joinpath("data/words.yaml").read_text(encoding="utf-8")
        return cls.from_dict(yaml.safe_load(text))

    def pool(self, categories: Iterable[str], difficulty: Difficulty) -> list[WordEntry]:
        """Words matching the filter. No categories means every category."""
        wanted = set(categories)
        return [
            e for e in self.entries
            if e.difficulty == difficulty and (not wanted or e.category in wanted)
        ]

    def draw(
        self,
        categories: Iterable[str],
        difficulty: Difficulty,
        rng: Optional[random.Random] = None,
    ) -> WordEntry:
        """Pick a random word from the filtered pool.

        Raises:
            ValueError: If no word matches the filter.
        """
        categories = list(categories)
        pool = self.pool(categories, difficulty)
        if not pool:
            raise ValueError(
                f"No words for categories {sorted(categories) or 'all'} "
                f"at difficulty {difficulty.value}"
            )
        return (rng or random).choice(pool)
