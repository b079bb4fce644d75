"""Tests for the bot suggestion service and its request types."""

import random

import pytest
from pydantic import ValidationError

from impostor.agents.bot import (
    FALLBACK_DESCRIPTIONS,
    REPEAT_FALLBACKS,
    SuggestionError,
    SuggestionService,
    clean_description,
    fallback_description,
    unused_substitute,
)
from impostor.agents.requests import DeduceRequest, DescribeRequest, VoteRequest, parse_request
from impostor.engine.config import Difficulty


class FakeLLM:
    """Records prompts and answers with a fixed reply."""

    def __init__(self, reply: str = "Strings"):
        self.reply = reply
        self.calls = []

    async def generate(self, system_prompt, user_prompt, model, temperature, max_tokens):
        self.calls.append({"system": system_prompt, "user": user_prompt, "temperature": temperature})
        return self.reply


def test_missing_action_means_describe():
    request = parse_request({"word": "Guitar", "isImpostor": False, "previousDescriptions": ["Rock"]})

    assert isinstance(request, DescribeRequest)
    assert request.previous_descriptions == ["Rock"]


def test_vote_payload():
    request = parse_request({
        "action": "vote",
        "word": "Guitar",
        "players": [{"name": "Ana"}, {"name": "Luis"}, {"name": "Marta"}],
        "descriptions": [{"playerName": "Ana", "text": "Rock"}],
        "voterName": "Marta",
        "voterIsImpostor": True,
    })

    assert isinstance(request, VoteRequest)
    assert request.candidates == ["Ana", "Luis"]
    assert request.descriptions[0].player_name == "Ana"


def test_deduce_payload():
    request = parse_request({"action": "deduce", "hint": "Strings", "previousDescriptions": ["Rock"]})
    assert isinstance(request, DeduceRequest)


def test_unknown_action_is_rejected():
    with pytest.raises(ValidationError):
        parse_request({"action": "dance"})


def test_vote_without_voter_is_rejected():
    with pytest.raises(ValidationError):
        parse_request({"action": "vote", "players": []})


@pytest.mark.parametrize("reply,expected", [
    ("Strings", "Strings"),
    ("Strings.", "Strings"),
    ("  rock and roll!", "rock"),
    ('"Melody"', "Melody"),
    ("**Chord**", "Chord"),
    ("", ""),
])
def test_clean_description(reply, expected):
    assert clean_description(reply) == expected


def test_fallback_prefers_unused(rng):
    options = FALLBACK_DESCRIPTIONS[Difficulty.HARD]
    used = options[:-1]
    assert fallback_description(Difficulty.HARD, rng, used) == options[-1]


def test_fallback_reuses_when_all_used(rng):
    options = FALLBACK_DESCRIPTIONS[Difficulty.EASY]
    assert fallback_description(Difficulty.EASY, rng, options) in options


def test_unused_substitute():
    assert unused_substitute(["Rock"]) == REPEAT_FALLBACKS[0]
    assert unused_substitute([REPEAT_FALLBACKS[0].upper()]) == REPEAT_FALLBACKS[1]
    assert unused_substitute(REPEAT_FALLBACKS, random.Random(1)).startswith("Something")


async def test_service_without_client_fails():
    service = SuggestionService()
    with pytest.raises(SuggestionError):
        await service.describe(DescribeRequest(word="Guitar"))


async def test_first_impostor_says_hint():
    llm = FakeLLM()
    service = SuggestionService(llm_client=llm)

    reply = await service.describe(DescribeRequest(hint="Strings", is_impostor=True))

    assert reply == "Strings"
    assert llm.calls == []


async def test_innocent_prompt_mentions_word_and_forbidden():
    llm = FakeLLM("Melody.")
    service = SuggestionService(llm_client=llm)

    reply = await service.describe(DescribeRequest(
        word="Guitar", previous_descriptions=["Rock"], difficulty=Difficulty.LEGEND,
    ))

    assert reply == "Melody"
    assert "Guitar" in llm.calls[0]["system"]
    assert "Rock" in llm.calls[0]["user"]
    assert "CRYPTIC" in llm.calls[0]["system"]


async def test_impostor_prompt_hides_word():
    llm = FakeLLM("Wood")
    service = SuggestionService(llm_client=llm)

    await service.describe(DescribeRequest(hint="Strings", is_impostor=True, previous_descriptions=["Rock"]))

    assert "IMPOSTOR" in llm.calls[0]["system"]
    assert "Strings" in llm.calls[0]["user"]


async def test_repeated_reply_is_substituted():
    service = SuggestionService(llm_client=FakeLLM("rock"))

    reply = await service.describe(DescribeRequest(word="Guitar", previous_descriptions=["Rock"]))

    assert reply == REPEAT_FALLBACKS[0]


async def test_empty_reply_fails():
    service = SuggestionService(llm_client=FakeLLM(""))
    with pytest.raises(SuggestionError):
        await service.describe(DescribeRequest(word="Guitar"))


async def test_handle_answers_with_aliases():
    service = SuggestionService(llm_client=FakeLLM("Luis"))

    reply = await service.handle({
        "action": "vote",
        "word": "Guitar",
        "players": [{"name": "Ana"}, {"name": "Luis"}],
        "descriptions": [],
        "voterName": "Ana",
    })

    assert reply == {"votedFor": "Luis"}


async def test_handle_deduce():
    service = SuggestionService(llm_client=FakeLLM("Guitar!"))
    reply = await service.handle({"action": "deduce", "hint": "Strings", "previousDescriptions": ["Rock"]})
    assert reply == {"guess": "Guitar"}


async def test_handle_describe():
    service = SuggestionService(llm_client=FakeLLM("Rock"))
    reply = await service.handle({"word": "Guitar"})
    assert reply == {"description": "Rock"}
