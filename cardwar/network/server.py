"""
In-process stand-in for a remote War server.

``SimulatedWarServer`` owns the two card piles and the game snapshot. Every
public call behaves like a network request: it waits a random latency, may
time out or fail without touching the game, and otherwise runs the real
operation. Results always come back as a ``ServerResponse`` envelope.
"""

import asyncio
import logging
import random
from dataclasses import replace
from typing import Callable, Optional, Tuple

from cardwar.common.card import Card
from cardwar.common.deck import CardQueue, Deck
from cardwar.config import WarConfig
from cardwar.network.response import ErrorKind, ServerResponse, T
from cardwar.war.resolver import resolve_round
from cardwar.war.state import GameState, RoundResult

logger = logging.getLogger(__name__)

# Each message names a transient condition so the retry controller treats it
# as retryable
SERVER_ERROR_MESSAGES = (
    "Connection lost",
    "Network unreachable",
    "Service unavailable",
    "Database connection failed",
    "Connection reset by peer",
)


class GameNotActiveError(Exception):
    """Raised inside the server when an operation needs a running game."""

    pass


class SimulatedWarServer:
    """
    Simulated remote server for War.

    The deck shuffle draws from a random source seeded with ``seed`` while
    latency and failures draw from ``network_rng``, so a fixed seed replays
    the same game no matter which calls fail along the way.
    """

    def __init__(
        self,
        config: Optional[WarConfig] = None,
        seed: Optional[int] = None,
        network_rng: Optional[random.Random] = None,
    ):
        """
        Initialize the server.

        Args:
            config: Latency and failure settings (defaults if None)
            seed: Seed for the deck shuffle
            network_rng: Random source for latency and injected failures
        """
        self.config = config or WarConfig()
        self._deck_rng = random.Random(seed)
        self._network_rng = network_rng or random.Random()

        self._player_deck: Optional[CardQueue] = None
        self._opponent_deck: Optional[CardQueue] = None
        self._state: Optional[GameState] = None

        self.call_count = 0

    @property
    def is_active(self) -> bool:
        return self._state is not None and self._state.is_active

    def deck_snapshot(self) -> Tuple[Tuple[Card, ...], Tuple[Card, ...]]:
        """Return copies of both piles, front first."""
        if self._player_deck is None or self._opponent_deck is None:
            return (), ()
        return self._player_deck.snapshot(), self._opponent_deck.snapshot()

    async def start_new_game(self) -> ServerResponse[GameState]:
        """Shuffle, deal 26 cards to each side and return the opening snapshot."""
        return await self._call("start_new_game", self._start_new_game)

    async def resolve_next_round(self) -> ServerResponse[RoundResult]:
        """Play the next round of the active game."""
        return await self._call("resolve_next_round", self._resolve_next_round)

    async def get_game_state(self) -> ServerResponse[GameState]:
        """Return the current game snapshot."""
        return await self._call("get_game_state", self._get_game_state)

    async def end_game(self) -> ServerResponse[GameState]:
        """Stop the active game and release the piles."""
        return await self._call("end_game", self._end_game)

    async def _call(
        self, operation_name: str, operation: Callable[[], T]
    ) -> ServerResponse[T]:
        self.call_count += 1
        config = self.config

        delay = self._network_rng.uniform(
            config.min_network_delay, config.max_network_delay
        )
        await asyncio.sleep(delay)

        if self._network_rng.random() < config.timeout_chance:
            await asyncio.sleep(config.timeout_duration)
            logger.info("Simulated timeout for %s", operation_name)
            return ServerResponse.failure(
                f"Request timeout after {config.timeout_duration:.1f}s",
                ErrorKind.TIMED_OUT,
                delay + config.timeout_duration,
            )

        if self._network_rng.random() < config.error_chance:
            message = self._network_rng.choice(SERVER_ERROR_MESSAGES)
            logger.info("Simulated server error for %s: %s", operation_name, message)
            return ServerResponse.failure(message, ErrorKind.SERVER_ERROR, delay)

        try:
            data = operation()
        except GameNotActiveError as e:
            logger.warning("Rejected %s: %s", operation_name, e)
            return ServerResponse.failure(str(e), ErrorKind.REJECTED, delay)

        return ServerResponse.ok(data, delay)

    def _start_new_game(self) -> GameState:
        deck = Deck().shuffle(self._deck_rng)
        self._player_deck, self._opponent_deck = deck.deal_alternately()
        self._state = GameState(
            player_card_count=self._player_deck.size,
            opponent_card_count=self._opponent_deck.size,
            is_active=True,
        )
        logger.info(
            "New game %s started. Player: %d, Opponent: %d",
            self._state.id,
            self._player_deck.size,
            self._opponent_deck.size,
        )
        return self._state

    def _resolve_next_round(self) -> RoundResult:
        if not self.is_active:
            raise GameNotActiveError("Game is not active")

        state = self._state
        result = resolve_round(self._player_deck, self._opponent_deck)
        result = replace(
            result,
            round_number=state.rounds_played + 1,
            player_cards_left=self._player_deck.size,
            opponent_cards_left=self._opponent_deck.size,
        )

        self._state = replace(
            state,
            player_card_count=self._player_deck.size,
            opponent_card_count=self._opponent_deck.size,
            last_player_card=result.player_card or state.last_player_card,
            last_opponent_card=result.opponent_card or state.last_opponent_card,
            rounds_played=result.round_number,
            total_wars=state.total_wars + (1 if result.is_war else 0),
            is_active=not result.is_game_ended,
            winner=result.winner if result.is_game_ended else None,
        )

        logger.debug(
            "Round %d: %s, Player: %d, Opponent: %d",
            result.round_number,
            result.outcome.name,
            self._player_deck.size,
            self._opponent_deck.size,
        )
        if result.is_game_ended:
            logger.info(
                "Game %s over after %d rounds, winner: %s",
                state.id,
                result.round_number,
                result.winner.label if result.winner else "draw",
            )
        return result

    def _get_game_state(self) -> GameState:
        if self._state is None:
            raise GameNotActiveError("No game has been started")
        return self._state

    def _end_game(self) -> GameState:
        if self._state is None:
            raise GameNotActiveError("No game has been started")
        self._state = replace(self._state, is_active=False)
        self._player_deck = None
        self._opponent_deck = None
        logger.info("Game %s ended", self._state.id)
        return self._state
