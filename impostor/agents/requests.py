"""Request and reply types for the bot suggestion service.

Payloads arrive as loose dicts keyed by an ``action`` discriminator. They
are validated into one of three request models before anything uses them.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from ..engine.config import Difficulty


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DescribeRequest(_Payload):
    """Ask for a one-word description."""
    action: Literal["describe"] = "describe"
    word: str = ""
    hint: str = ""
    is_impostor: bool = Field(default=False, alias="isImpostor")
    previous_descriptions: list[str] = Field(default_factory=list, alias="previousDescriptions")
    difficulty: Difficulty = Difficulty.NORMAL


class PlayerRef(_Payload):
    name: str


class DescriptionRef(_Payload):
    player_name: str = Field(alias="playerName")
    text: str


class VoteRequest(_Payload):
    """Ask which player a bot votes for."""
    action: Literal["vote"]
    word: str = ""
    players: list[PlayerRef] = Field(default_factory=list)
    descriptions: list[DescriptionRef] = Field(default_factory=list)
    voter_name: str = Field(alias="voterName")
    voter_is_impostor: bool = Field(default=False, alias="voterIsImpostor")

    @property
    def candidates(self) -> list[str]:
        return [p.name for p in self.players if p.name != self.voter_name]


class DeduceRequest(_Payload):
    """Ask an impostor bot to guess the secret word."""
    action: Literal["deduce"]
    hint: str = ""
    previous_descriptions: list[str] = Field(default_factory=list, alias="previousDescriptions")


SuggestionRequest = Annotated[
    Union[DescribeRequest, VoteRequest, DeduceRequest],
    Field(discriminator="action"),
]

_request_adapter: TypeAdapter = TypeAdapter(SuggestionRequest)


def parse_request(payload: dict[str, Any]) -> Union[DescribeRequest, VoteRequest, DeduceRequest]:
    """Validate a raw payload. A missing action means a description request.

    Raises:
        pydantic.ValidationError: If the payload does not fit any request type.
    """
    data = dict(payload)
    if not data.get("action"):
        data["action"] = "describe"
    return _request_adapter.validate_python(data)


class DescriptionReply(_Payload):
    description: str


class VoteReply(_Payload):
    voted_for: str = Field(alias="votedFor")


class DeduceReply(_Payload):
    guess: str
