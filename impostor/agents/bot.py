"""Bot suggestion service: descriptions, votes and word guesses for bot players."""

import logging
import random
import re
from typing import Any, Optional, Sequence

from ..engine.config import Difficulty
from ..engine.descriptions import normalize
from ..llm.openrouter import DEFAULT_MODEL, OpenRouterClient
from .prompts import (
    DEDUCE_SYSTEM_PROMPT,
    VOTE_SYSTEM_PROMPT,
    build_deduce_prompt,
    build_impostor_prompts,
    build_innocent_prompts,
    build_vote_prompt,
    summarize_descriptions,
)
from .requests import (
    DeduceReply,
    DeduceRequest,
    DescribeRequest,
    DescriptionReply,
    VoteReply,
    VoteRequest,
    parse_request,
)

logger = logging.getLogger(__name__)

# Used by the engine when the service is unreachable
FALLBACK_DESCRIPTIONS: dict[Difficulty, list[str]] = {
    Difficulty.EASY: ["Known", "Common", "Popular", "Typical", "Classic"],
    Difficulty.NORMAL: ["Everyday", "Familiar", "Usual", "Frequent", "Normal"],
    Difficulty.HARD: ["Interesting", "Particular", "Special", "Curious", "Notable"],
    Difficulty.LEGEND: ["Abstract", "Complex", "Unique", "Rare", "Peculiar"],
}

# Substitutes for a reply that repeats an earlier description
REPEAT_FALLBACKS = ["Related", "Connected", "Linked", "Associated", "Similar", "Close", "Alike", "Akin"]


class SuggestionError(Exception):
    """The suggestion service could not produce a usable answer."""


def fallback_description(
    difficulty: Difficulty,
    rng: Optional[random.Random] = None,
    used: Sequence[str] = (),
) -> str:
    """Pick a stock description for the difficulty, preferring unused ones."""
    options = FALLBACK_DESCRIPTIONS.get(difficulty, FALLBACK_DESCRIPTIONS[Difficulty.NORMAL])
    taken = {normalize(u) for u in used}
    fresh = [o for o in options if normalize(o) not in taken]
    return (rng or random).choice(fresh or options)


def unused_substitute(used: Sequence[str], rng: Optional[random.Random] = None) -> str:
    """A "related" word nobody said yet, or a numbered filler."""
    taken = {normalize(u) for u in used}
    for word in REPEAT_FALLBACKS:
        if normalize(word) not in taken:
            return word
    return f"Something{(rng or random).randrange(100)}"


def clean_description(reply: str) -> str:
    """Keep the first word of a reply, without trailing punctuation."""
    reply = re.sub(r"[.,!?;:]+$", "", reply.strip())
    parts = [p for p in re.split(r"[\s,]+", reply) if p]
    return parts[0].strip("\"'*") if parts else ""


class SuggestionService:
    """Asks an LLM what a bot player says and who it votes for.

    Every method raises ``SuggestionError`` when no usable answer comes back.
    The engine owns the fallback policy.
    """

    def __init__(
        self,
        llm_client: Optional[OpenRouterClient] = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.8,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the service.

        Args:
            llm_client: Chat client. Without one every request fails over to the fallbacks.
            model: Model identifier passed to the client.
            temperature: Sampling temperature for descriptions.
            rng: Random source for numbered fillers.
        """
        self.llm_client = llm_client
        self.model = model
        self.temperature = temperature
        self.rng = rng or random.Random()

    async def _generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int = 50,
    ) -> str:
        """Generate a response using the LLM."""
        if self.llm_client is None:
            raise SuggestionError("No LLM client configured")
        reply = await self.llm_client.generate(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model=self.model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not reply:
            raise SuggestionError("Empty reply from the model")
        return reply

    async def describe(self, request: DescribeRequest) -> str:
        """Suggest a one-word description.

        An impostor speaking first just says its hint.
        """
        previous = request.previous_descriptions
        if request.is_impostor and not previous and request.hint:
            return request.hint

        if request.is_impostor:
            system, user = build_impostor_prompts(request.hint, previous, request.difficulty)
        else:
            system, user = build_innocent_prompts(request.word, previous, request.difficulty)

        reply = await self._generate(system, user, temperature=self.temperature, max_tokens=100)
        description = clean_description(reply)
        if not description:
            raise SuggestionError(f"Could not read a description from {reply!r}")

        used = {normalize(p) for p in previous}
        if normalize(description) in used:
            logger.debug("Model repeated %r, substituting", description)
            description = unused_substitute(previous, self.rng)
        return description

    async def vote(self, request: VoteRequest) -> str:
        """Suggest who the bot votes for. The reply is the model's raw answer."""
        summary = summarize_descriptions(request.candidates, request.descriptions)
        prompt = build_vote_prompt(request.word, summary, request.voter_is_impostor)
        return await self._generate(VOTE_SYSTEM_PROMPT, prompt, temperature=0.3)

    async def deduce(self, request: DeduceRequest) -> str:
        """Guess the secret word from the descriptions so far."""
        prompt = build_deduce_prompt(request.hint, request.previous_descriptions)
        reply = await self._generate(DEDUCE_SYSTEM_PROMPT, prompt, temperature=0.5)
        guess = clean_description(reply)
        if not guess:
            raise SuggestionError(f"Could not read a guess from {reply!r}")
        return guess

    async def handle(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Answer a raw request payload with a raw reply payload.

        Raises:
            pydantic.ValidationError: If the payload is malformed.
            SuggestionError: If no answer could be produced.
        """
        request = parse_request(payload)
        if isinstance(request, VoteRequest):
            reply = VoteReply(voted_for=await self.vote(request))
        elif isinstance(request, DeduceRequest):
            reply = DeduceReply(guess=await self.deduce(request))
        else:
            reply = DescriptionReply(description=await self.describe(request))
        return reply.model_dump(by_alias=True)
