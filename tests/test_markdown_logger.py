"""Tests for the markdown game record."""

import logging

from conftest import make_config
from impostor.communication.markdown_logger import MarkdownLogger
from impostor.engine.phases import GamePhase


async def test_full_game_is_recorded(make_game, tmp_path):
    log = MarkdownLogger(base_dir=str(tmp_path))
    game = make_game(make_config(bots=["Marta", "Pablo", "Nico"]), game_log=log)

    await game.run_bots()
    await game.start_voting()
    await game.run_bots()

    assert game.state.phase == GamePhase.FINISHED
    record = (log.game_dir / "game_state.md").read_text(encoding="utf-8")
    assert "**Secret word:** Guitar (hint: Strings)" in record
    assert "## Round 1" in record
    assert "## Voting" in record
    assert "# GAME OVER" in record
    assert (log.game_dir / "descriptions.md").exists()
    assert "## Vote Totals" in (log.game_dir / "votes.md").read_text(encoding="utf-8")


def test_session_rows_append(tmp_path):
    log = MarkdownLogger(base_dir=str(tmp_path))

    log.log_session({"player_count": 3, "difficulty": "easy"})
    log.log_session({"player_count": 4, "difficulty": "hard"})

    lines = (tmp_path / "sessions.md").read_text(encoding="utf-8").splitlines()
    assert lines[2] == "| Started | player_count | difficulty |"
    assert len([line for line in lines if line.startswith("| 20")]) == 2


def test_session_failure_is_swallowed(tmp_path, caplog):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    log = MarkdownLogger(base_dir=str(blocker))

    with caplog.at_level(logging.WARNING):
        log.log_session({"player_count": 3})

    assert "Could not record session" in caplog.text


def test_game_record_failures_are_swallowed(tmp_path, caplog):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    log = MarkdownLogger(base_dir=str(blocker))

    with caplog.at_level(logging.WARNING):
        assert log.start_game() is None
        log.log_phase_start("voting")
        log.log_descriptions([])

    assert "Could not write game record (start_game)" in caplog.text
    assert "Could not write game record (log_descriptions)" in caplog.text
