"""Bot players: suggestion service and prompt management."""

from .bot import SuggestionError, SuggestionService

__all__ = ["SuggestionError", "SuggestionService"]
