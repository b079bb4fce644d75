"""Narration gateway: spoken announcements the game waits on."""

import asyncio
import logging
from typing import Optional, Protocol

from rich.console import Console

logger = logging.getLogger(__name__)


class Voice(Protocol):
    """Something that can play an announcement to the table."""

    async def speak(self, text: str) -> None:
        ...


class ConsoleVoice:
    """Prints announcements and holds for roughly the time speaking would take."""

    def __init__(self, console: Optional[Console] = None, char_delay: float = 0.04):
        """Initialize the voice.

        Args:
            console: Rich console to print to.
            char_delay: Seconds of simulated playback per character.
        """
        self.console = console or Console()
        self.char_delay = char_delay

    async def speak(self, text: str) -> None:
        self.console.print(f"[bold magenta]Narrator:[/bold magenta] {text}")
        await asyncio.sleep(len(text) * self.char_delay)


class Narrator:
    """Runs announcements through a voice with a bounded wait.

    ``announce`` never raises for voice problems. A failing or hanging voice
    degrades to immediate completion so the turn loop keeps moving.
    """

    def __init__(self, voice: Optional[Voice] = None, timeout: float = 5.0, muted: bool = False):
        """Initialize the narrator.

        Args:
            voice: Playback backend. Without one every announcement completes at once.
            timeout: Longest time a single announcement may block, in seconds.
            muted: Start muted.
        """
        self.voice = voice
        self.timeout = timeout
        self.muted = muted
        self._in_flight: set[asyncio.Task] = set()

    @property
    def speaking(self) -> bool:
        return bool(self._in_flight)

    async def announce(self, text: str) -> None:
        """Play an announcement and wait until it ends, fails, times out or is cancelled."""
        if self.muted or self.voice is None:
            return

        task = asyncio.create_task(self.voice.speak(text))
        self._in_flight.add(task)
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            self._in_flight.discard(task)

        if not done:
            logger.warning("Narration timed out after %.1fs: %r", self.timeout, text)
            task.cancel()
        elif not task.cancelled() and task.exception() is not None:
            logger.warning("Narration failed: %s", task.exception())

    def cancel(self) -> None:
        """Abort every announcement in flight. Waiting callers resume immediately."""
        for task in list(self._in_flight):
            task.cancel()
