"""Narration, dictation and logging."""

from .dictation import ConsoleDictation, DictationError
from .markdown_logger import MarkdownLogger
from .narration import ConsoleVoice, Narrator

__all__ = ["ConsoleDictation", "DictationError", "MarkdownLogger", "ConsoleVoice", "Narrator"]
