"""Dictation: capturing a human player's description."""

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from rich.console import Console


class DictationError(Exception):
    """Dictation could not start or produced nothing usable."""


@dataclass(frozen=True)
class Transcript:
    """A piece of dictated text."""
    text: str
    final: bool


class ConsoleDictation:
    """Reads a player's description from the terminal.

    ``stop`` ends the capture and keeps what was heard. ``abort`` releases a
    capture that is still waiting for input and discards whatever the
    terminal delivers afterwards. The blocked console read itself finishes in
    its worker thread once a line arrives.
    """

    def __init__(self, console: Optional[Console] = None, prompt: str = "> "):
        self.console = console or Console()
        self.prompt = prompt
        self._stopped = False
        self._ignore_results = False
        self._read: Optional[asyncio.Future] = None

    async def dictate(self) -> AsyncIterator[Transcript]:
        """Yield transcripts until a final one arrives or capture is stopped.

        Raises:
            DictationError: If there is no input to read from.
        """
        self._stopped = False
        self._ignore_results = False
        read = asyncio.ensure_future(asyncio.to_thread(self.console.input, self.prompt))
        self._read = read
        try:
            await asyncio.wait({read})
        except asyncio.CancelledError:
            read.cancel()
            raise
        finally:
            self._read = None

        if read.cancelled() or self._ignore_results:
            return
        try:
            line = read.result()
        except EOFError as e:
            raise DictationError("No input device available") from e
        yield Transcript(text=line.strip(), final=not self._stopped)

    def stop(self) -> None:
        self._stopped = True

    def abort(self) -> None:
        self._stopped = True
        self._ignore_results = True
        if self._read is not None:
            self._read.cancel()


async def capture(dictation: ConsoleDictation) -> str:
    """Run one dictation and join its final pieces, falling back to the last partial."""
    final_parts: list[str] = []
    interim = ""
    async for transcript in dictation.dictate():
        if not transcript.text:
            continue
        if transcript.final:
            final_parts.append(transcript.text)
            interim = ""
        else:
            interim = transcript.text
    text = " ".join(final_parts + ([interim] if interim else [])).strip()
    if not text:
        raise DictationError("No speech detected")
    return text
