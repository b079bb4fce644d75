"""Main entry point for Impostor."""

import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from .agents.bot import SuggestionService
from .communication.dictation import ConsoleDictation, DictationError, capture
from .communication.markdown_logger import MarkdownLogger
from .communication.narration import ConsoleVoice, Narrator
from .engine.config import AppConfig, load_app_config
from .engine.errors import GameError
from .engine.game import Game
from .engine.phases import GamePhase
from .llm.openrouter import OpenRouterClient


# Load environment variables
load_dotenv()

console = Console()

COMMANDS = "/skip, /vote, /mute, /new, /quit"


class QuitGame(Exception):
    """The table asked to stop playing."""


def load_config(config_path: str = "config/game.yaml") -> AppConfig:
    """Load game configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        console.print(f"[red]Config file not found: {config_path}[/red]")
        sys.exit(1)

    try:
        return load_app_config(path)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration in {config_path}:[/red]\n{e}")
        sys.exit(1)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def display_welcome():
    """Display welcome message."""
    console.print(Panel.fit(
        "[bold red]IMPOSTOR[/bold red]\n"
        "[dim]Who doesn't know the secret word?[/dim]",
        border_style="red",
    ))
    console.print()


def display_players(game: Game):
    """Display the table in turn order, roles hidden."""
    state = game.state
    table = Table(title="Turn Order", show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="green")

    for turn, seat in enumerate(state.turn_order.order, start=1):
        player = state.players[seat]
        table.add_row(str(turn), player.name, "bot" if player.is_bot else "human")

    console.print(table)
    console.print(f"[dim]{state.roster_size - len(state.impostors)} innocents vs "
                  f"{len(state.impostors)} impostor(s) - difficulty {state.difficulty.value}[/dim]")
    console.print()


def display_transcript(game: Game):
    state = game.state
    if not state.descriptions:
        return
    table = Table(title=f"Descriptions ({len(state.descriptions)})", show_header=True)
    table.add_column("Round", style="dim")
    table.add_column("Player", style="cyan")
    table.add_column("Said", style="white")
    for d in state.descriptions:
        table.add_row(str(d.round), d.player_name, f"[dim]{d.text}[/dim]" if d.skipped else d.text)
    console.print(table)


async def run_reveal(game: Game):
    """Pass the device around so each human sees their card in private."""
    for player in game.state.players:
        if player.has_seen_word:
            continue
        Prompt.ask(f"[yellow]Pass the device to [bold]{player.name}[/bold] and press Enter[/yellow]", default="")
        card = game.reveal_card(player.name)
        if card.is_impostor:
            hint = f"Your hint: [bold]{card.hint}[/bold]" if card.hint else "No hint - good luck!"
            console.print(Panel(f"[bold red]You are the IMPOSTOR[/bold red]\n{hint}", border_style="red"))
        else:
            console.print(Panel(f"The secret word is\n[bold green]{card.word}[/bold green]", border_style="green"))
        Prompt.ask("[dim]Press Enter to hide your card[/dim]", default="")
        console.clear()
        await game.confirm_seen(player.name)


async def run_human_turn(game: Game, dictation: ConsoleDictation):
    player = game.current_player
    if not game.turn_announced:
        await game.start_turn()
    if game.current_player is None or game.current_player.name != player.name:
        return

    console.print(f"[cyan]{player.name}[/cyan], describe the word in one word ([dim]{COMMANDS}[/dim])")
    try:
        text = await capture(dictation)
    except DictationError as e:
        console.print(f"[red]{e}[/red]")
        return

    if text.startswith("/"):
        await run_command(game, text, player.name)
        return

    try:
        await game.submit_description(player.name, text)
    except GameError as e:
        console.print(f"[red]{e}[/red]")


async def run_command(game: Game, command: str, player_name: str):
    command = command.lower()
    if command == "/skip":
        await game.skip_turn(player_name)
    elif command == "/vote":
        await maybe_start_voting(game)
    elif command == "/mute":
        game.set_muted(not game.state.muted)
        console.print(f"[dim]Narration {'muted' if game.state.muted else 'on'}[/dim]")
    elif command == "/new":
        game.reset()
        display_players(game)
    elif command == "/quit":
        raise QuitGame()
    else:
        console.print(f"[red]Unknown command. Try {COMMANDS}[/red]")


async def maybe_start_voting(game: Game):
    try:
        await game.start_voting()
    except GameError as e:
        console.print(f"[red]{e}[/red]")


async def run_human_vote(game: Game):
    voter = game.current_voter
    candidates = game.voting.candidates(game.state, voter.name)
    choice = Prompt.ask(f"[cyan]{voter.name}[/cyan], who is the impostor?", choices=candidates)
    try:
        await game.submit_vote(voter.name, choice)
    except GameError as e:
        console.print(f"[red]{e}[/red]")


async def play(game: Game, dictation: ConsoleDictation):
    """Drive one game until it ends."""
    while not game.state.phase.is_terminal:
        phase = game.state.phase
        if phase == GamePhase.REVEAL:
            await run_reveal(game)
            continue

        with console.status("[cyan]Bots are thinking...[/cyan]"):
            await game.run_bots()
        if game.state.phase != phase:
            continue

        if phase == GamePhase.PLAYING:
            if game.can_start_voting and not game.turn_announced:
                display_transcript(game)
                if Confirm.ask("[yellow]Everyone has spoken. Start voting?[/yellow]", default=False):
                    await maybe_start_voting(game)
                else:
                    await game.start_turn()
                continue
            await run_human_turn(game, dictation)

        elif phase == GamePhase.VOTING:
            if game.current_voter is not None:
                await run_human_vote(game)

    await game.announce_result()


def display_results(game: Game):
    """Display game results."""
    state = game.state
    console.print()

    if state.phase == GamePhase.IMPOSTOR_WINS:
        leak = state.descriptions[-1]
        console.print(Panel(
            f"[bold red]THE IMPOSTOR WINS![/bold red]\n"
            f"{leak.player_name} said the secret word: {leak.text}",
            border_style="red",
        ))
    else:
        result = game.result
        tally = ", ".join(f"{name}: {count}" for name, count in result.tally)
        if result.impostor_caught:
            console.print(Panel(
                f"[bold green]THE INNOCENTS WIN![/bold green]\n"
                f"{result.accused} was the impostor. ({tally})",
                border_style="green",
            ))
        else:
            console.print(Panel(
                f"[bold red]THE IMPOSTOR WINS![/bold red]\n"
                f"{result.accused} was innocent. ({tally})",
                border_style="red",
            ))

    console.print(f"The secret word was [bold]{state.word}[/bold] (hint: {state.hint})")
    console.print()

    table = Table(title="Final Standings", show_header=True, header_style="bold")
    table.add_column("Player", style="cyan")
    table.add_column("Role", style="magenta")
    table.add_column("Said", style="white")
    for player in state.players:
        team_color = "red" if player.is_impostor else "green"
        said = ", ".join(d.text for d in state.descriptions if d.player_name == player.name)
        table.add_row(player.name, f"[{team_color}]{player.team}[/{team_color}]", said)

    console.print(table)
    console.print()

    if game.game_log and game.game_log.game_dir:
        console.print(f"[dim]Game log saved to: {game.game_log.game_dir}[/dim]")


def build_game(config: AppConfig) -> Game:
    """Wire the engine to its collaborators."""
    api_key = os.getenv("OPENROUTER_API_KEY")
    llm_client = None
    if api_key:
        llm_client = OpenRouterClient(api_key=api_key, timeout=config.bots.timeout)
    else:
        console.print("[yellow]OPENROUTER_API_KEY not set - bots will use stock descriptions.[/yellow]")

    suggester = SuggestionService(
        llm_client=llm_client,
        model=config.bots.model,
        temperature=config.bots.temperature,
    )
    narrator = Narrator(
        voice=ConsoleVoice(console, char_delay=config.narration.char_delay),
        timeout=config.narration.timeout,
        muted=config.narration.muted,
    )
    games_dir = config.logging.games_dir
    return Game(
        config=config.game,
        narrator=narrator,
        suggester=suggester,
        game_log=MarkdownLogger(base_dir=games_dir) if games_dir else None,
        pacing=config.pacing,
        suggestion_timeout=config.bots.timeout,
    )


async def main():
    """Main entry point."""
    display_welcome()

    config_path = sys.argv[1] if len(sys.argv) > 1 else "config/game.yaml"
    console.print(f"[dim]Loading config from: {config_path}[/dim]")
    config = load_config(config_path)
    setup_logging(config.logging.level)

    game = build_game(config)
    dictation = ConsoleDictation(console)

    try:
        while True:
            game.new_game()
            display_players(game)
            await play(game, dictation)
            display_results(game)
            if not Confirm.ask("[yellow]Play again with the same table?[/yellow]", default=True):
                break
    except (QuitGame, KeyboardInterrupt):
        console.print("\n[yellow]Game interrupted.[/yellow]")
    finally:
        dictation.abort()
        game.leave()


def run():
    """Entry point for the CLI."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
