"""Markdown logger for game transcripts, votes and session analytics."""

import functools
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Sequence

if TYPE_CHECKING:
    from ..engine.state import Description, GameState, Vote
    from ..engine.voting import VoteResult

logger = logging.getLogger(__name__)


def _best_effort(method):
    """Log write failures instead of raising them into the game."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except OSError as e:
            logger.warning("Could not write game record (%s): %s", method.__name__, e)
            return None

    return wrapper


class MarkdownLogger:
    """Writes game events and transcripts to markdown files."""

    def __init__(self, base_dir: str = "games"):
        """Initialize the logger.

        Args:
            base_dir: Base directory for game logs.
        """
        self.base_dir = Path(base_dir)
        self.game_dir: Optional[Path] = None
        self.game_id: Optional[str] = None

    @property
    def _game_file(self) -> Path:
        return self.game_dir / "game_state.md"

    @_best_effort
    def start_game(self, game_id: Optional[str] = None) -> Optional[Path]:
        """Start logging a new game.

        Args:
            game_id: Optional game identifier. If not provided, uses timestamp.

        Returns:
            Path to the game directory, or None if it could not be created.
        """
        if game_id is None:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S_%f")
            game_id = f"game_{timestamp}"

        self.game_id = game_id
        self.game_dir = self.base_dir / game_id
        self.game_dir.mkdir(parents=True, exist_ok=True)

        with open(self._game_file, "w", encoding="utf-8") as f:
            f.write(f"# Impostor Game - {self.game_id}\n\n")
            f.write(f"Started: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")
            f.write("---\n\n")

        return self.game_dir

    @_best_effort
    def log_setup(self, state: "GameState") -> None:
        """Log the secret, the roles and the turn order."""
        with open(self._game_file, "a", encoding="utf-8") as f:
            f.write(f"**Secret word:** {state.word} (hint: {state.hint})\n\n")
            f.write(f"**Difficulty:** {state.difficulty.value}\n\n")
            f.write("## Players\n\n")
            f.write("| Turn | Player | Kind | Role (Hidden) |\n")
            f.write("|------|--------|------|---------------|\n")
            for turn, seat in enumerate(state.turn_order.order, start=1):
                p = state.players[seat]
                kind = "bot" if p.is_bot else "human"
                f.write(f"| {turn} | {p.name} | {kind} | {p.team} |\n")
            f.write("\n---\n\n")

    @_best_effort
    def log_phase_start(self, phase: str) -> None:
        """Log the start of a game phase.

        Args:
            phase: Phase name (e.g., "round_2", "voting").
        """
        with open(self._game_file, "a", encoding="utf-8") as f:
            f.write(f"## {phase.replace('_', ' ').title()}\n\n")

    @_best_effort
    def log_descriptions(self, descriptions: Sequence["Description"]) -> None:
        """Write the full description transcript to its own file."""
        filename = "descriptions.md"
        with open(self.game_dir / filename, "w", encoding="utf-8") as f:
            f.write("# Descriptions\n\n")
            current_round = None
            for d in descriptions:
                if d.round != current_round:
                    f.write(f"\n## Round {d.round}\n\n")
                    current_round = d.round
                if d.skipped:
                    f.write(f"*{d.player_name} skipped*\n\n")
                else:
                    f.write(f"**{d.player_name}**:\n")
                    f.write(f"> {d.text}\n\n")

        with open(self._game_file, "a", encoding="utf-8") as f:
            f.write(f"*See [{filename}](./{filename}) for all descriptions*\n\n")

    @_best_effort
    def log_vote(self, votes: Sequence["Vote"], result: "VoteResult") -> None:
        """Log individual votes and totals."""
        voters_by_target: dict[str, list[str]] = {}
        for v in votes:
            voters_by_target.setdefault(v.voted_for_name, []).append(v.voter_name)

        with open(self.game_dir / "votes.md", "w", encoding="utf-8") as f:
            f.write("# Voting\n\n")

            f.write("## Individual Votes\n\n")
            f.write("| Voter | Voted For | Bot |\n")
            f.write("|-------|-----------|-----|\n")
            for v in votes:
                f.write(f"| {v.voter_name} | {v.voted_for_name} | {'yes' if v.is_bot else 'no'} |\n")

            f.write("\n## Vote Totals\n\n")
            for target, count in result.tally:
                f.write(f"- **{target}**: {count} votes ({', '.join(voters_by_target[target])})\n")

            f.write("\n## Result\n\n")
            f.write(f"**{result.accused}** was accused with {result.accused_votes} votes.\n")

        with open(self._game_file, "a", encoding="utf-8") as f:
            f.write("### Vote Result\n\n")
            f.write(f"**{result.accused}** was accused.\n\n")

    def log_impostor_win(self, player_name: str, text: str, state: "GameState") -> None:
        """Log a game that ended because an impostor said the secret word."""
        self._write_game_over(
            f"IMPOSTOR ({player_name} said \"{text}\")",
            state,
        )

    def log_game_end(self, result: "VoteResult", state: "GameState") -> None:
        """Log the game ending after the vote."""
        self._write_game_over(result.winner.upper(), state)

    @_best_effort
    def _write_game_over(self, winner: str, state: "GameState") -> None:
        with open(self._game_file, "a", encoding="utf-8") as f:
            f.write("---\n\n")
            f.write("# GAME OVER\n\n")
            f.write(f"## Winner: {winner}\n\n")

            f.write("## All Players\n\n")
            f.write("| Player | Role | Descriptions |\n")
            f.write("|--------|------|--------------|\n")
            for p in state.players:
                said = ", ".join(d.text for d in state.descriptions if d.player_name == p.name)
                f.write(f"| {p.name} | {p.team} | {said} |\n")

            f.write(f"\n\nEnded: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")

    def log_session(self, metadata: dict[str, Any]) -> None:
        """Append one row of session analytics. Failures never reach the game."""
        sessions_file = self.base_dir / "sessions.md"
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            new_file = not sessions_file.exists()
            with open(sessions_file, "a", encoding="utf-8") as f:
                if new_file:
                    f.write("# Sessions\n\n")
                    f.write("| Started | " + " | ".join(metadata) + " |\n")
                    f.write("|---------|" + "|".join("---" for _ in metadata) + "|\n")
                values = " | ".join(str(v) for v in metadata.values())
                f.write(f"| {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} | {values} |\n")
        except OSError as e:
            logger.warning("Could not record session: %s", e)
