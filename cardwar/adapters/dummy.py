"""
Dummy adapter for cardwar, used for testing and simulation.

This module provides a non-interactive adapter that records every event it
sees, for automated tests, simulations and benchmarks.
"""

from typing import Any, Dict, List, Optional, Tuple

from cardwar.adapters.base import PlatformAdapter
from cardwar.engine.state_machine import GamePhase
from cardwar.war.constants import Side
from cardwar.war.state import RoundResult


class DummyAdapter(PlatformAdapter):
    """
    Dummy adapter for testing and simulation.

    Attributes:
        events: (event name, payload) pairs in the order they arrived
        phases: Every phase entered, in order
        results: Every round result seen
        verbose: Whether to print events to stdout (useful for debugging)
    """

    def __init__(self, verbose: bool = False):
        super().__init__()
        self.verbose = verbose
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        self.phases: List[GamePhase] = []
        self.results: List[RoundResult] = []
        self.errors: List[str] = []
        self.winner: Optional[Side] = None

    def _record(self, name: str, data: Dict[str, Any]) -> None:
        self.events.append((name, data))
        if self.verbose:
            print(f"Event: {name} - {data}")

    def on_game_state_changed(
        self, new_phase: GamePhase, previous_phase: Optional[GamePhase]
    ) -> None:
        self.phases.append(new_phase)
        self._record(
            "game_state_changed", {"new_phase": new_phase, "previous_phase": previous_phase}
        )

    def on_round_complete(self, result: RoundResult) -> None:
        self.results.append(result)
        self._record("round_complete", {"result": result})

    def on_war_started(self, war_depth: int) -> None:
        self._record("war_started", {"war_depth": war_depth})

    def on_war_completed(self) -> None:
        self._record("war_completed", {})

    def on_server_error(self, message: str) -> None:
        self.errors.append(message)
        self._record("server_error", {"message": message})

    def on_game_ended(self, winner: Optional[Side], abandoned: bool) -> None:
        self.winner = winner
        self._record("game_ended", {"winner": winner, "abandoned": abandoned})

    def event_names(self) -> List[str]:
        """Names of the recorded events, in order."""
        return [name for name, _ in self.events]

    def clear(self) -> None:
        """Forget everything recorded so far."""
        self.events.clear()
        self.phases.clear()
        self.results.clear()
        self.errors.clear()
        self.winner = None
