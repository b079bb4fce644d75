"""System prompts and templates for bot players."""

from typing import Sequence

from ..engine.config import Difficulty
from .requests import DescriptionRef


DIFFICULTY_INSTRUCTIONS: dict[Difficulty, dict[str, str]] = {
    Difficulty.EASY: {
        "innocent": "Give a VERY CLEAR and OBVIOUS clue that helps the innocents. It can be almost direct.",
        "impostor": "Be very generic. Don't worry too much about sounding suspicious.",
    },
    Difficulty.NORMAL: {
        "innocent": "Give a balanced clue: useful to innocents but not too obvious to the impostor.",
        "impostor": "Try to sound convincing with something related to the general category.",
    },
    Difficulty.HARD: {
        "innocent": "Give a SUBTLE and INDIRECT clue. Only those who know the word should get it.",
        "impostor": "Be clever. Use abstract words that sound smart but vague.",
    },
    Difficulty.LEGEND: {
        "innocent": (
            "Give a VERY CRYPTIC clue. Use metaphors, cultural references or obscure connections. "
            "Almost nobody should get it easily."
        ),
        "impostor": "Be a master of deception. Use philosophical, abstract or poetic words that sound deep.",
    },
}

GAME_RULES = """
# IMPOSTOR GAME RULES

Innocents share a secret word. Impostors only get a vague hint.
Each turn a player says ONE word describing the secret word.
Nobody may repeat a word already said.
After the descriptions everyone votes for who they think the impostor is.
An impostor who says the secret word wins immediately.
"""


def _forbidden(previous: Sequence[str]) -> str:
    return ", ".join(previous) if previous else "none yet"


def build_innocent_prompts(word: str, previous: Sequence[str], difficulty: Difficulty) -> tuple[str, str]:
    """Build the (system, user) prompts for an innocent bot's description."""
    instructions = DIFFICULTY_INSTRUCTIONS[difficulty]["innocent"]
    system = f"""You are a BOT player in a game of "Impostor". You are INNOCENT and know the secret word: "{word}".
{GAME_RULES}
Give ONE related word that helps the other innocents without revealing the word to the impostor.
{instructions}
CRITICAL RULE: you cannot repeat words already said. Forbidden words: {_forbidden(previous)}.
Reply with ONE word. No explanations, no punctuation, just the word. NEVER say the secret word itself."""

    if previous:
        spoken = f"Words already said (FORBIDDEN to repeat): {_forbidden(previous)}."
    else:
        spoken = "You are the first to speak."
    user = f"""The secret word is: "{word}".
{spoken}
Give me ONE word that is not forbidden and fits the difficulty level."""
    return system, user


def build_impostor_prompts(hint: str, previous: Sequence[str], difficulty: Difficulty) -> tuple[str, str]:
    """Build the (system, user) prompts for an impostor bot's description."""
    instructions = DIFFICULTY_INSTRUCTIONS[difficulty]["impostor"]
    system = f"""You are a BOT player in a game of "Impostor". You are the IMPOSTOR and do NOT know the secret word.
{GAME_RULES}
You only have a vague hint about it: "{hint}".
Come up with ONE word that sounds related so the others believe you know the word.
{instructions}
IMPORTANT: if others already spoke, analyze their words to deduce the secret word and say something coherent.
CRITICAL RULE: you cannot repeat words already said. Forbidden words: {_forbidden(previous)}.
Reply with ONE word. No explanations, no punctuation, just the word."""

    if previous:
        analysis = (
            f"Analyze these words the others said: {_forbidden(previous)}. "
            "Try to deduce which secret word they describe and give a word that fits the pattern."
        )
    else:
        analysis = "You are the first to speak, so use your hint as a base."
    user = f"""Your hint is: "{hint}".
{analysis}
FORBIDDEN words: {_forbidden(previous)}.
Give me ONE word that is not forbidden."""
    return system, user


VOTE_SYSTEM_PROMPT = "You are a player in a social deduction game. Reply only with a player's name."


def summarize_descriptions(candidates: Sequence[str], descriptions: Sequence[DescriptionRef]) -> str:
    """List what each candidate said, one line per player."""
    said: dict[str, list[str]] = {name: [] for name in candidates}
    for d in descriptions:
        if d.player_name in said:
            said[d.player_name].append(d.text)
    lines = []
    for name in candidates:
        words = '", "'.join(said[name])
        lines.append(f'- {name}: said "{words}"' if words else f"- {name}: said nothing")
    return "\n".join(lines)


def build_vote_prompt(word: str, summary: str, voter_is_impostor: bool) -> str:
    """Build the user prompt for a bot's vote."""
    if voter_is_impostor:
        return f"""You are the IMPOSTOR in a word game. You want to go unnoticed.
These are the other players and what they said:
{summary}

Work out who looks most suspicious to the others (even though you know you are the impostor).
Vote for someone whose answers seem odd or out of place to divert attention.
Reply ONLY with the exact name of the player you vote for."""

    return f"""You are INNOCENT in a word game. The secret word is "{word}".
These are the other players and what they said:
{summary}

Analyze each player's answers:
- Innocents know the word and their answers should relate to "{word}"
- The impostor does NOT know the word and their answers may be vague, generic or off-topic

Who seems to know the least about the word? Whose answers don't fit?
Reply ONLY with the exact name of the player you think is the impostor."""


DEDUCE_SYSTEM_PROMPT = "You are a detective trying to guess a secret word from clues."


def build_deduce_prompt(hint: str, previous: Sequence[str]) -> str:
    """Build the user prompt for an impostor bot guessing the secret word."""
    return f"""You are an impostor in a word game. Your hint was "{hint}".
The players said these words: {", ".join(previous)}.
Analyze the words and try to guess the secret word.
Reply ONLY with the word you think it is, no explanation."""
