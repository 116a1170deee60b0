"""
Base adapter interface for cardwar.

This module defines the interface that presentation adapters implement to
follow a War session. Adapters never call the orchestrator; they only react
to the events it publishes.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from cardwar.engine.state_machine import GamePhase
from cardwar.events import EventEmitter, WarEventType
from cardwar.war.constants import Side
from cardwar.war.state import RoundResult


class PlatformAdapter(ABC):
    """
    Base interface for presentation adapters.

    ``attach`` subscribes the ``on_*`` hooks to an emitter. The hooks run
    synchronously inside ``emit``; adapters that do I/O buffer in the hooks
    and write in ``flush``.
    """

    def __init__(self):
        self._unsubscribers: List[Callable[[], None]] = []

    def attach(self, emitter: EventEmitter) -> List[Callable[[], None]]:
        """
        Subscribe this adapter to every session event on ``emitter``.

        Returns:
            The unsubscribe functions, also kept for ``detach``
        """
        subscriptions = [
            emitter.on(WarEventType.GAME_STATE_CHANGED, self._state_changed),
            emitter.on(WarEventType.ROUND_COMPLETE, self._round_complete),
            emitter.on(WarEventType.WAR_STARTED, self._war_started),
            emitter.on(WarEventType.WAR_COMPLETED, self._war_completed),
            emitter.on(WarEventType.SERVER_ERROR, self._server_error),
            emitter.on(WarEventType.GAME_ENDED, self._game_ended),
        ]
        self._unsubscribers.extend(subscriptions)
        return subscriptions

    def detach(self) -> None:
        """Remove every subscription made by ``attach``."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _state_changed(self, data):
        self.on_game_state_changed(data["new_phase"], data.get("previous_phase"))

    def _round_complete(self, data):
        self.on_round_complete(data["result"])

    def _war_started(self, data):
        self.on_war_started(data["war_depth"])

    def _war_completed(self, data):
        self.on_war_completed()

    def _server_error(self, data):
        self.on_server_error(data["message"])

    def _game_ended(self, data):
        self.on_game_ended(data.get("winner"), data.get("abandoned", False))

    @abstractmethod
    def on_game_state_changed(
        self, new_phase: GamePhase, previous_phase: Optional[GamePhase]
    ) -> None:
        """
        React to a phase change.

        Args:
            new_phase: The phase just entered
            previous_phase: The phase just left (None for the first phase)
        """
        pass

    @abstractmethod
    def on_round_complete(self, result: RoundResult) -> None:
        """
        React to a finished round.

        Args:
            result: The round result, with war details if there was one
        """
        pass

    def on_war_started(self, war_depth: int) -> None:
        pass

    def on_war_completed(self) -> None:
        pass

    def on_server_error(self, message: str) -> None:
        pass

    def on_game_ended(self, winner: Optional[Side], abandoned: bool) -> None:
        pass

    # The following methods have default implementations but can be overridden

    async def initialize(self) -> None:
        """
        Initialize the adapter.

        Called before the session starts. It can be used to set up resources.
        """
        pass

    async def flush(self) -> None:
        """Write out anything buffered by the hooks."""
        pass

    async def shutdown(self) -> None:
        """
        Shutdown the adapter.

        Detaches from the emitter and flushes buffered output.
        """
        self.detach()
        await self.flush()
