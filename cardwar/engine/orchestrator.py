"""
Client-side orchestration of a War session.

``GameOrchestrator`` drives the simulated server through the retry
controller, moves the phase state machine in response to what comes back,
and publishes round results for the presentation layer. Its collaborators
are passed in explicitly; ``GameOrchestrator.create`` wires the defaults.
"""

import asyncio
import logging
import random
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Union

from cardwar.config import WarConfig
from cardwar.engine.operations import AsyncOperationManager
from cardwar.engine.state_machine import GamePhase, GameStateMachine
from cardwar.events import EventEmitter, EventPriority, WarEventType
from cardwar.network.retry import RetryController
from cardwar.network.server import SimulatedWarServer
from cardwar.war.state import GameState, RoundResult

logger = logging.getLogger(__name__)


class GameOrchestrator:
    """
    Runs one War session against a (simulated) server.

    At most one round request is in flight at a time; a second request made
    while one is processing is refused rather than queued. Phase changes
    caused by a round result happen before ROUND_COMPLETE is published.

    Example:
        ```python
        orchestrator = GameOrchestrator.create(WarConfig(), seed=42)
        orchestrator.on(WarEventType.ROUND_COMPLETE, handle_round)
        if await orchestrator.start_game():
            result = await orchestrator.play_next_round()
        await orchestrator.shutdown()
        ```

    Attributes:
        server: The server to call
        retry: Retry controller wrapping every server call
        emitter: Event emitter shared with the state machine
        config: Session settings (settle windows)
        machine: The phase state machine
        event_handlers: Unsubscribe functions registered through ``on``
    """

    def __init__(
        self,
        server: SimulatedWarServer,
        retry: RetryController,
        emitter: EventEmitter,
        config: Optional[WarConfig] = None,
        operations: Optional[AsyncOperationManager] = None,
    ):
        self.server = server
        self.retry = retry
        self.emitter = emitter
        self.config = config or WarConfig()
        self.operations = operations or AsyncOperationManager()
        self.event_handlers: Dict[Union[str, WarEventType], List[Callable]] = {}

        self.machine = GameStateMachine(emitter)
        self.machine.start(GamePhase.IDLE)

        self.game_state: Optional[GameState] = None
        self.last_result: Optional[RoundResult] = None
        self._is_processing_round = False

    @classmethod
    def create(
        cls,
        config: Optional[WarConfig] = None,
        seed: Optional[int] = None,
        network_rng: Optional[random.Random] = None,
        emitter: Optional[EventEmitter] = None,
    ) -> "GameOrchestrator":
        """Build an orchestrator with a simulated server and a retry controller from ``config``."""
        config = config or WarConfig()
        server = SimulatedWarServer(config, seed=seed, network_rng=network_rng)
        retry = RetryController.from_config(config, rng=network_rng)
        return cls(server, retry, emitter or EventEmitter(), config)

    @property
    def phase(self) -> GamePhase:
        return self.machine.current_phase

    @property
    def is_processing_round(self) -> bool:
        return self._is_processing_round

    def on(
        self,
        event_type: Union[str, WarEventType],
        handler: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Register an event handler for the lifetime of this session.

        Returns:
            Function to call to unsubscribe the handler early
        """
        unsubscribe_func = self.emitter.on(event_type, handler, priority)
        self.event_handlers.setdefault(event_type, []).append(unsubscribe_func)
        return unsubscribe_func

    async def start_game(self) -> bool:
        """
        Ask the server for a new game: Idle -> Initializing -> Playing.

        Returns:
            True if the game started. On failure a SERVER_ERROR event is
            published and the session returns to Idle.
        """
        if self.phase is not GamePhase.IDLE:
            logger.warning("Cannot start a game in state: %s", self.phase.name)
            return False

        return await self.operations.run(self._start_game(), "start_game")

    async def _start_game(self) -> bool:
        self.machine.change_state(GamePhase.INITIALIZING)
        self.last_result = None

        response = await self.retry.execute_with_retry(
            self.server.start_new_game, "start_new_game"
        )
        if not response.success:
            self._fail(f"Failed to start game: {response.error_message}")
            return False

        self.game_state = response.data
        self.machine.change_state(GamePhase.PLAYING)
        self.emitter.emit(WarEventType.GAME_STARTED, {"state": response.data})
        logger.info("New game started successfully")
        return True

    async def play_next_round(self) -> Optional[RoundResult]:
        """
        Request and apply the next round.

        Returns:
            The round result, or None if the request was refused (wrong phase
            or another round in flight) or failed after retries.
        """
        if self.phase is not GamePhase.PLAYING:
            logger.warning("Cannot play round in state: %s", self.phase.name)
            return None

        if self._is_processing_round:
            logger.warning("Round already being processed")
            return None

        self._is_processing_round = True
        try:
            return await self.operations.run(self._play_round(), "play_next_round")
        finally:
            self._is_processing_round = False

    async def _play_round(self) -> Optional[RoundResult]:
        rounds_played = self.game_state.rounds_played if self.game_state else 0
        self.emitter.emit(WarEventType.ROUND_STARTED, {"round_number": rounds_played + 1})

        response = await self.retry.execute_with_retry(
            self.server.resolve_next_round, "resolve_next_round"
        )
        if not response.success:
            self._fail(f"Failed to play round: {response.error_message}")
            return None

        result: RoundResult = response.data
        self.last_result = result
        self._track_result(result)

        if result.is_war:
            self.machine.change_state(GamePhase.WAR)
            self.emitter.emit(WarEventType.WAR_STARTED, {"war_depth": result.war_depth})

        if result.is_game_ended:
            self.machine.change_state(GamePhase.GAME_OVER)
            self.emitter.emit(WarEventType.ROUND_COMPLETE, {"result": result})
            if result.is_war:
                self.emitter.emit(WarEventType.WAR_COMPLETED, {})
            self._announce_game_end(result)
            return result

        if result.is_war:
            self.emitter.emit(WarEventType.ROUND_COMPLETE, {"result": result})
            await asyncio.sleep(self.config.war_settle_delay)
            self.emitter.emit(WarEventType.WAR_COMPLETED, {})
            if self.phase is GamePhase.WAR:
                self.machine.change_state(GamePhase.PLAYING)
        else:
            self.machine.change_state(GamePhase.ROUND_COMPLETE)
            self.emitter.emit(WarEventType.ROUND_COMPLETE, {"result": result})
            # Brief pause before allowing next round
            await asyncio.sleep(self.config.round_settle_delay)
            if self.phase is GamePhase.ROUND_COMPLETE:
                self.machine.change_state(GamePhase.PLAYING)

        return result

    async def play_until_over(self, max_rounds: Optional[int] = None) -> List[RoundResult]:
        """
        Keep requesting rounds until the game ends, fails or hits ``max_rounds``.

        Returns:
            The results in the order they were played
        """
        results = []
        while self.phase is GamePhase.PLAYING:
            if max_rounds is not None and len(results) >= max_rounds:
                logger.info("Stopping after %d rounds", max_rounds)
                break
            result = await self.play_next_round()
            if result is None:
                break
            results.append(result)
        return results

    async def refresh_state(self) -> Optional[GameState]:
        """Fetch the latest snapshot from the server, keeping the old one on failure."""
        response = await self.operations.run(
            self.retry.execute_with_retry(self.server.get_game_state, "get_game_state"),
            "refresh_state",
        )
        if response.success:
            self.game_state = response.data
        else:
            logger.warning("Could not refresh game state: %s", response.error_message)
        return self.game_state

    def pause(self) -> bool:
        """Playing -> Paused. Refused while a round is being processed."""
        if self._is_processing_round:
            logger.warning("Cannot pause while a round is being processed")
            return False
        if self.phase is not GamePhase.PLAYING:
            logger.warning("Cannot pause in state: %s", self.phase.name)
            return False
        logger.info("Game paused")
        return self.machine.change_state(GamePhase.PAUSED)

    def resume(self) -> bool:
        """Paused -> Playing."""
        if self.phase is not GamePhase.PAUSED:
            logger.warning("Cannot resume in state: %s", self.phase.name)
            return False
        logger.info("Game resumed")
        return self.machine.change_state(GamePhase.PLAYING)

    def return_to_menu(self) -> bool:
        """GameOver -> Idle."""
        if self.phase is not GamePhase.GAME_OVER:
            logger.warning("Cannot return to menu in state: %s", self.phase.name)
            return False
        return self.machine.change_state(GamePhase.IDLE)

    async def end_game(self) -> bool:
        """
        Abandon the running game: Playing or Paused -> GameOver.

        The server is told to release the game; a failure to do so is logged
        and does not change the outcome.
        """
        if self._is_processing_round:
            logger.warning("Cannot end the game while a round is being processed")
            return False
        if self.phase not in (GamePhase.PLAYING, GamePhase.PAUSED):
            logger.warning("Cannot end the game in state: %s", self.phase.name)
            return False

        self.machine.change_state(GamePhase.GAME_OVER)
        self.emitter.emit(
            WarEventType.GAME_ENDED,
            {"winner": None, "abandoned": True, "state": self.game_state},
        )

        response = await self.operations.run(
            self.retry.execute_with_retry(self.server.end_game, "end_game"), "end_game"
        )
        if response.success:
            self.game_state = response.data
        else:
            logger.warning("Server did not acknowledge end of game: %s", response.error_message)
        logger.info("Game ended")
        return True

    async def shutdown(self) -> None:
        """
        Tear the session down: cancel in-flight work and drop subscriptions.
        """
        await self.operations.shutdown()

        for handlers in self.event_handlers.values():
            for unsubscribe in handlers:
                unsubscribe()
        self.event_handlers.clear()
        logger.info("Session shut down")

    def _track_result(self, result: RoundResult) -> None:
        if self.game_state is None:
            return
        # Mirror the server's bookkeeping so callers need not poll get_game_state
        self.game_state = replace(
            self.game_state,
            player_card_count=result.player_cards_left,
            opponent_card_count=result.opponent_cards_left,
            rounds_played=result.round_number,
            last_player_card=result.player_card or self.game_state.last_player_card,
            last_opponent_card=result.opponent_card or self.game_state.last_opponent_card,
            total_wars=self.game_state.total_wars + (1 if result.is_war else 0),
            is_active=not result.is_game_ended,
            winner=result.winner if result.is_game_ended else None,
        )

    def _announce_game_end(self, result: RoundResult) -> None:
        winner = result.winner
        logger.info(
            "Game Over! Winner: %s after %d rounds",
            winner.label if winner else "nobody (draw)",
            result.round_number,
        )
        self.emitter.emit(
            WarEventType.GAME_ENDED,
            {"winner": winner, "abandoned": False, "state": self.game_state},
        )

    def _fail(self, message: str) -> None:
        logger.error(message)
        self.emitter.emit(WarEventType.SERVER_ERROR, {"message": message})
        self.machine.change_state(GamePhase.IDLE)
