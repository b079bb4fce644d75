"""Shared fixtures for the impostor test suite."""

import asyncio
import random
from typing import Optional, Sequence

import pytest

from impostor.communication.narration import Narrator
from impostor.engine.config import Difficulty, GameConfig, PacingSettings
from impostor.engine.game import Game
from impostor.engine.phases import GamePhase
from impostor.engine.roles import GamePlayer
from impostor.engine.state import GameState
from impostor.engine.turns import TurnOrder
from impostor.engine.words import WordBank, WordEntry


class RecordingVoice:
    """Voice that remembers every announcement instead of playing it."""

    def __init__(self):
        self.spoken: list[str] = []

    async def speak(self, text: str) -> None:
        self.spoken.append(text)


class FakeSuggester:
    """Stand-in for the suggestion service with scripted answers.

    Set ``describe_reply`` / ``vote_reply`` / ``deduce_reply`` to a string or
    an exception instance. Set ``block`` to hold every call until ``release``
    is set.
    """

    def __init__(self, describe_reply="Strings", vote_reply=None, deduce_reply="Guitar"):
        self.describe_reply = describe_reply
        self.vote_reply = vote_reply
        self.deduce_reply = deduce_reply
        self.requests = []
        self.block = False
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def _answer(self, request, reply):
        self.requests.append(request)
        self.started.set()
        if self.block:
            await self.release.wait()
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def describe(self, request):
        return await self._answer(request, self.describe_reply)

    async def vote(self, request):
        return await self._answer(request, self.vote_reply)

    async def deduce(self, request):
        return await self._answer(request, self.deduce_reply)


def make_config(humans: Sequence[str] = (), bots: Sequence[str] = (), **kwargs) -> GameConfig:
    players = [{"name": n} for n in humans] + [{"name": n, "isBot": True} for n in bots]
    return GameConfig(players=players, **kwargs)


def make_state(
    names: Sequence[str],
    impostor: str,
    bots: Sequence[str] = (),
    phase: GamePhase = GamePhase.PLAYING,
    word: str = "Guitar",
    hint: str = "Strings",
    order: Optional[Sequence[int]] = None,
) -> GameState:
    """Build a state with a known impostor and a known turn order."""
    players = tuple(
        GamePlayer(
            name=n,
            is_bot=n in bots,
            is_impostor=n == impostor,
            word=word,
            hint=hint,
            has_seen_word=True,
        )
        for n in names
    )
    return GameState(
        phase=phase,
        players=players,
        turn_order=TurnOrder(tuple(order) if order is not None else tuple(range(len(names)))),
        word=word,
        hint=hint,
        difficulty=Difficulty.NORMAL,
    )


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def word_bank():
    return WordBank([WordEntry("Guitar", "Strings", "music", Difficulty.NORMAL)])


@pytest.fixture
def voice():
    return RecordingVoice()


@pytest.fixture
def narrator(voice):
    return Narrator(voice=voice, timeout=1.0)


@pytest.fixture
def suggester():
    return FakeSuggester()


@pytest.fixture
def no_pauses():
    return PacingSettings(
        after_description=0,
        before_round=0,
        before_turn=0,
        before_bot_turn=0,
        before_bot_vote=0,
        before_result=0,
    )


@pytest.fixture
def make_game(narrator, word_bank, no_pauses, rng):
    """Factory for games wired to recording narration and no pauses."""

    def _make(config: GameConfig, suggester=None, **kwargs) -> Game:
        game = Game(
            config=config,
            narrator=narrator,
            suggester=suggester,
            word_bank=word_bank,
            pacing=no_pauses,
            rng=rng,
            **kwargs,
        )
        game.new_game()
        return game

    return _make
