"""Main game engine for Impostor."""

import asyncio
import logging
import random
from dataclasses import dataclass, replace
from typing import Optional

from ..agents.bot import SuggestionService, fallback_description, unused_substitute
from ..agents.requests import DeduceRequest, DescribeRequest, DescriptionRef, PlayerRef, VoteRequest
from ..communication.markdown_logger import MarkdownLogger
from ..communication.narration import Narrator
from .config import GameConfig, PacingSettings
from .descriptions import DescriptionEngine, can_start_voting, is_duplicate
from .errors import InvalidPhase
from .phases import GamePhase, phase_name, transition
from .roles import GamePlayer
from .state import Description, GameState, create_game_state
from .turns import pending_round
from .voting import VoteResult, VotingEngine, match_player_name
from .words import WordBank

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevealCard:
    """What a player sees when privately viewing their card."""
    name: str
    is_impostor: bool
    word: Optional[str]  # None for impostors
    hint: Optional[str]  # None for innocents, and for impostors when hints are off


class Game:
    """The impostor game orchestrator.

    Owns the only reference to the current ``GameState`` and replaces it on
    every change. Bots, narration and the suggestion service are awaited
    inline. Every awaiting operation captures the game generation first and
    drops its result if a new game started or the table was left meanwhile.
    """

    def __init__(
        self,
        config: GameConfig,
        narrator: Optional[Narrator] = None,
        suggester: Optional[SuggestionService] = None,
        word_bank: Optional[WordBank] = None,
        game_log: Optional[MarkdownLogger] = None,
        pacing: Optional[PacingSettings] = None,
        suggestion_timeout: float = 10.0,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the game.

        Args:
            config: Setup handoff (roster, impostor count, categories, difficulty).
            narrator: Narration gateway. Defaults to a silent one.
            suggester: Bot suggestion service. Without one bots use the fallbacks.
            word_bank: Source of the secret word. Defaults to the packaged list.
            game_log: Optional markdown game record.
            pacing: Pauses between announcements.
            suggestion_timeout: Longest wait for one suggestion, in seconds.
            rng: Random source for roles, turn order, words and fallbacks.
        """
        self.config = config
        self.narrator = narrator or Narrator()
        self.suggester = suggester
        self.word_bank = word_bank or WordBank.default()
        self.game_log = game_log
        self.pacing = pacing or PacingSettings()
        self.suggestion_timeout = suggestion_timeout
        self.rng = rng or random.Random()

        self.descriptions = DescriptionEngine()
        self.voting = VotingEngine()

        self.state: Optional[GameState] = None
        self.generation = 0
        self.turn_announced = False
        self._busy: Optional[tuple] = None
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle

    def new_game(self) -> GameState:
        """Deal a fresh game: new word, roles and turn order, same roster and config.

        Cancels narration in flight and invalidates pending bot work.
        """
        muted = self.state.muted if self.state else self.narrator.muted
        self._invalidate()

        entry = self.word_bank.draw(self.config.selected_categories, self.config.difficulty, self.rng)
        self.state = create_game_state(self.config, entry.word, entry.hint, self.rng, muted=muted)
        logger.info(
            "New game %d: %d players, %d impostor(s), starting in %s",
            self.generation, self.state.roster_size, self.config.impostor_count, self.state.phase.value,
        )

        if self.game_log:
            self.game_log.start_game()
            self.game_log.log_setup(self.state)
            self.game_log.log_phase_start(phase_name(self.state.phase, self.state.current_round))
            self.game_log.log_session({
                "player_count": self.state.roster_size,
                "bot_count": self.config.bot_count,
                "impostor_count": self.config.impostor_count,
                "difficulty": self.config.difficulty.value,
                "player_names": ", ".join(p.name for p in self.state.players),
                "allow_impostor_hint": self.config.allow_impostor_hint,
            })
        return self.state

    reset = new_game

    def leave(self) -> None:
        """Discard the game, e.g. when the players walk away from the table."""
        self._invalidate()
        self.state = None

    def set_muted(self, muted: bool) -> None:
        """Mute or unmute narration. Muting cuts off the current announcement."""
        self.narrator.muted = muted
        if muted:
            self.narrator.cancel()
        if self.state:
            self._commit(replace(self.state, muted=muted))

    def toggle_hint(self) -> bool:
        """Flip whether impostors see their hint on the reveal card."""
        state = self._require_state()
        self._commit(replace(state, show_hint=not state.show_hint))
        return self.state.show_hint

    def _invalidate(self) -> None:
        self.generation += 1
        self.narrator.cancel()
        self.turn_announced = False
        self._busy = None

    def _require_state(self) -> GameState:
        if self.state is None:
            raise InvalidPhase("No game in progress")
        return self.state

    def _commit(self, state: GameState) -> None:
        previous = self.state
        self.state = state
        if previous is not None and state.phase != previous.phase:
            logger.info("Phase %s -> %s", previous.phase.value, state.phase.value)
            if self.game_log:
                self.game_log.log_phase_start(phase_name(state.phase, state.current_round))

    def _roll_round(self) -> Optional[int]:
        """Move the stored round forward when the transcript has completed one.

        Returns:
            The new round number, or None when the round did not change.
        """
        state = self.state
        new_round = pending_round(len(state.descriptions), state.roster_size, state.current_round)
        if new_round is not None:
            self._commit(replace(state, current_round=new_round))
            if self.game_log:
                self.game_log.log_phase_start(phase_name(GamePhase.PLAYING, new_round))
            logger.info("Round %d begins", new_round)
        return new_round

    def _is_current(self, generation: int) -> bool:
        return generation == self.generation and self.state is not None

    async def _say(self, text: str) -> None:
        await self.narrator.announce(text)

    async def _pause(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    # ------------------------------------------------------------------
    # Reveal

    def reveal_card(self, name: str) -> RevealCard:
        """Show a player their role privately."""
        state = self._require_state()
        player = state.player(name)
        if player.is_impostor:
            return RevealCard(name, True, None, state.hint if state.show_hint else None)
        return RevealCard(name, False, state.word, None)

    async def confirm_seen(self, name: str) -> GameState:
        """Mark a player's card as viewed. The last one starts the game."""
        state = self._require_state()
        if state.phase != GamePhase.REVEAL:
            raise InvalidPhase(f"Cards are revealed before play, not in {state.phase.value}")
        player = state.player(name)
        if player.has_seen_word:
            return state

        state = state.with_player(player.mark_seen())
        if state.all_seen:
            state = state.with_phase(transition(state.phase, GamePhase.PLAYING))
        self._commit(state)

        if state.phase == GamePhase.PLAYING:
            await self._say("Starting the game")
        return self.state

    # ------------------------------------------------------------------
    # Turns

    @property
    def current_player(self) -> Optional[GamePlayer]:
        if self.state is None or self.state.phase != GamePhase.PLAYING:
            return None
        return self.state.current_player

    @property
    def can_start_voting(self) -> bool:
        return self.state is not None and can_start_voting(self.state)

    async def start_turn(self) -> Optional[GamePlayer]:
        """Announce the next turn, announcing a new round first when one begins.

        Returns:
            The player whose turn it is, or None if the turn was already
            announced or the game moved on meanwhile.
        """
        if self.state is None or self.state.phase != GamePhase.PLAYING or self.turn_announced:
            return None
        generation = self.generation
        self.turn_announced = True

        new_round = pending_round(len(self.state.descriptions), self.state.roster_size, self.state.current_round)
        if new_round is not None:
            await self._pause(self.pacing.before_round)
            await self._say(f"Round {new_round} begins")
            if not self._is_current(generation):
                return None
            self._roll_round()

        await self._pause(self.pacing.before_turn)
        player = self.state.current_player
        await self._say(f"It's {player.name}'s turn")
        if not self._is_current(generation):
            return None
        return player

    async def submit_description(self, player_name: str, text: str) -> Description:
        """Record a description for the player holding the turn.

        Raises:
            GameError: If the submission is rejected. The transcript is unchanged then.
        """
        async with self._lock:
            return await self._apply_description(player_name, text, self.generation)

    async def _apply_description(self, player_name: str, text: str, generation: int) -> Description:
        if self._require_state().phase == GamePhase.PLAYING:
            self._roll_round()
        position = self.state.current_turn_position
        state, leaked = self.descriptions.record(self.state, player_name, text)
        self._commit(state)
        entry = state.descriptions[-1]
        logger.debug("%s described: %s", player_name, entry.text)

        if leaked:
            logger.info("%s leaked the secret word", player_name)
            if self.game_log:
                self.game_log.log_descriptions(state.descriptions)
                self.game_log.log_impostor_win(player_name, entry.text, state)
            await self._say(f"{player_name} said the secret word: {entry.text}! The impostor wins!")
            return entry

        await self._say(f"{player_name} says: {entry.text}")
        await self._pause(self.pacing.after_description)
        self._finish_turn(generation, position)
        return entry

    def _finish_turn(self, generation: int, position: int) -> None:
        if self._is_current(generation) and self.state.current_turn_position == position:
            self._commit(self.state.with_next_turn())
            self.turn_announced = False

    async def skip_turn(self, player_name: Optional[str] = None) -> Description:
        """Pass the current turn, also cutting short a bot that is still thinking.

        Args:
            player_name: Player passing. Defaults to whoever holds the turn.
        """
        async with self._lock:
            state = self._require_state()
            generation = self.generation
            if state.phase != GamePhase.PLAYING:
                raise InvalidPhase(f"Turns can only be skipped while playing, not {state.phase.value}")
            self._roll_round()
            state = self.state
            name = player_name or state.current_player.name
            position = state.current_turn_position

            self._commit(self.descriptions.skip(state, name))
            entry = self.state.descriptions[-1]
            self._busy = None
            logger.debug("%s skipped their turn", name)

            await self._say(f"{name} skips their turn")
            self._finish_turn(generation, position)
            return entry

    async def play_bot_turn(self) -> Optional[Description]:
        """Let the bot holding the turn describe.

        Returns:
            The recorded description, or None when it is not a bot's turn,
            another bot turn is in flight, or the turn was superseded.
        """
        player = self.current_player
        if player is None or not player.is_bot or self._busy is not None:
            return None

        generation = self.generation
        position = self.state.current_turn_position
        token = ("turn", generation, position)
        self._busy = token
        try:
            await self._pause(self.pacing.before_bot_turn)
            text = await self._bot_description(player)
            async with self._lock:
                if not self._is_current(generation) or self.state.current_turn_position != position:
                    logger.debug("Dropping stale description from %s", player.name)
                    return None
                if is_duplicate(text, self.state.descriptions):
                    text = unused_substitute([d.text for d in self.state.descriptions], self.rng)
                return await self._apply_description(player.name, text, generation)
        finally:
            if self._busy == token:
                self._busy = None

    async def _bot_description(self, player: GamePlayer) -> str:
        """Ask the suggestion service, falling back to a stock phrase."""
        state = self.state
        previous = [d.text for d in state.descriptions]
        fallback = fallback_description(state.difficulty, self.rng, previous)
        if self.suggester is None:
            return fallback

        try:
            if player.is_impostor and self.config.bot_impostor_guess and state.current_round > 1:
                request = DeduceRequest(action="deduce", hint=player.hint, previous_descriptions=previous)
                text = await asyncio.wait_for(self.suggester.deduce(request), self.suggestion_timeout)
            else:
                request = DescribeRequest(
                    word="" if player.is_impostor else player.word,
                    hint=player.hint,
                    is_impostor=player.is_impostor,
                    previous_descriptions=previous,
                    difficulty=state.difficulty,
                )
                text = await asyncio.wait_for(self.suggester.describe(request), self.suggestion_timeout)
        except Exception as e:
            logger.warning("Description suggestion for %s failed, using fallback: %s", player.name, e)
            return fallback

        return text.strip() or fallback

    async def run_bots(self) -> None:
        """Play consecutive bot turns and bot votes.

        Stops when a human has to act, when a round is complete and the table
        may start voting, or when the game is over. Call ``start_turn`` to
        continue past a completed round.
        """
        generation = self.generation
        while self._is_current(generation):
            state = self.state
            if state.phase == GamePhase.PLAYING:
                if not self.turn_announced:
                    if self.can_start_voting:
                        return
                    await self.start_turn()
                    continue
                if not state.current_player.is_bot:
                    return
                if await self.play_bot_turn() is None:
                    return
            elif state.phase == GamePhase.VOTING:
                voter = state.current_voter
                if voter is None or not voter.is_bot:
                    return
                if await self.play_bot_vote() is None:
                    return
            elif state.phase == GamePhase.FINISHED:
                await self.announce_result()
                return
            else:
                return

    # ------------------------------------------------------------------
    # Voting

    @property
    def current_voter(self) -> Optional[GamePlayer]:
        return self.state.current_voter if self.state else None

    async def start_voting(self) -> GameState:
        """Close the descriptions and open the vote.

        Raises:
            InvalidPhase: If the current round is not complete.
        """
        async with self._lock:
            self._commit(self.voting.start(self._require_state()))
            self.turn_announced = False
            if self.game_log:
                self.game_log.log_descriptions(self.state.descriptions)
            await self._say("Time to vote! Who is the impostor?")
            return self.state

    async def submit_vote(self, voter_name: str, voted_for_name: str) -> GameState:
        """Record the current voter's ballot.

        Raises:
            GameError: If the vote is rejected. Nothing changes then.
        """
        async with self._lock:
            return await self._apply_vote(voter_name, voted_for_name)

    async def _apply_vote(self, voter_name: str, voted_for_name: str) -> GameState:
        generation = self.generation
        state = self.voting.submit(self._require_state(), voter_name, voted_for_name)
        self._commit(state)
        logger.debug("%s voted for %s", voter_name, voted_for_name)

        await self._say(f"{voter_name} votes for {voted_for_name}")
        if state.phase == GamePhase.FINISHED and self._is_current(generation):
            await self._say("Voting is over!")
        return self.state

    async def play_bot_vote(self) -> Optional[GameState]:
        """Let the bot expected to vote cast its ballot."""
        voter = self.current_voter
        if voter is None or not voter.is_bot or self._busy is not None:
            return None

        generation = self.generation
        index = self.state.current_voter_index
        token = ("vote", generation, index)
        self._busy = token
        try:
            await self._pause(self.pacing.before_bot_vote)
            target = await self._bot_vote_target(voter)
            async with self._lock:
                if not self._is_current(generation) or self.state.current_voter_index != index:
                    logger.debug("Dropping stale vote from %s", voter.name)
                    return None
                return await self._apply_vote(voter.name, target)
        finally:
            if self._busy == token:
                self._busy = None

    async def _bot_vote_target(self, voter: GamePlayer) -> str:
        state = self.state
        candidates = self.voting.candidates(state, voter.name)
        if self.suggester is not None:
            request = VoteRequest(
                action="vote",
                word=state.word,
                players=[PlayerRef(name=p.name) for p in state.players],
                descriptions=[DescriptionRef(player_name=d.player_name, text=d.text) for d in state.descriptions],
                voter_name=voter.name,
                voter_is_impostor=voter.is_impostor,
            )
            try:
                reply = await asyncio.wait_for(self.suggester.vote(request), self.suggestion_timeout)
            except Exception as e:
                logger.warning("Vote suggestion for %s failed, voting at random: %s", voter.name, e)
            else:
                matched = match_player_name(reply, candidates)
                if matched:
                    return matched
                logger.warning("Vote suggestion for %s named nobody (%r), voting at random", voter.name, reply)
        return self.voting.random_target(state, voter.name, self.rng)

    @property
    def result(self) -> Optional[VoteResult]:
        return self.voting.result(self.state) if self.state else None

    async def announce_result(self) -> Optional[VoteResult]:
        """Announce the vote outcome. Only the first call per game speaks.

        Returns:
            The result on the announcing call, None on every other call.
        """
        state = self.state
        if state is None or state.phase != GamePhase.FINISHED or state.result_announced:
            return None
        result = self.voting.result(state)
        if result is None:
            return None
        generation = self.generation
        self._commit(replace(state, result_announced=True))

        if self.game_log:
            self.game_log.log_vote(state.votes, result)
            self.game_log.log_game_end(result, state)

        if result.impostor_caught:
            announcement = f"{result.accused} was found out! They were the impostor. The innocents win!"
        else:
            announcement = f"{result.accused} was innocent! The impostor wins the game."
        await self._pause(self.pacing.before_result)
        if self._is_current(generation):
            await self._say(announcement)
        return result
