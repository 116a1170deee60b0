"""
Command-line interface adapter for cardwar.

This module renders a War session as plain text: one line per round, a short
banner for wars and a final line with the winner.
"""

from typing import Optional

from cardwar.adapters.base import PlatformAdapter
from cardwar.common.io_interface import ConsoleIOInterface, IOInterface
from cardwar.engine.state_machine import GamePhase
from cardwar.war.constants import Side
from cardwar.war.state import RoundResult


class CLIAdapter(PlatformAdapter):
    """
    Command-line interface adapter for cardwar.

    This adapter writes through an IOInterface, the console by default.
    """

    def __init__(self, io_interface: Optional[IOInterface] = None, show_phases: bool = False):
        """
        Initialize the CLI adapter.

        Args:
            io_interface: Optional IOInterface to use for output. If None, a
                          console IOInterface is used.
            show_phases: Whether to print every phase change
        """
        super().__init__()
        self.io_interface = io_interface or ConsoleIOInterface()
        self.show_phases = show_phases

    def on_game_state_changed(
        self, new_phase: GamePhase, previous_phase: Optional[GamePhase]
    ) -> None:
        if self.show_phases:
            self.io_interface.output(
                f"[{previous_phase.name if previous_phase else '-'} -> {new_phase.name}]"
            )

    def on_round_complete(self, result: RoundResult) -> None:
        if result.player_card is None:
            self.io_interface.output("No cards left to play.")
            return

        line = (
            f"Round {result.round_number}: "
            f"{result.player_card} vs {result.opponent_card}"
        )
        if result.winner is None:
            line += " - nobody takes the pot"
        else:
            line += f" - {result.winner.label} takes {result.cards_won} cards"
        line += f" ({result.player_cards_left}/{result.opponent_cards_left})"
        self.io_interface.output(line)

        if result.war is not None:
            for war_round in result.war.rounds:
                self.io_interface.output(
                    f"    war level {war_round.level}: "
                    f"{war_round.player_card} vs {war_round.opponent_card}"
                )

    def on_war_started(self, war_depth: int) -> None:
        banner = "WAR!" if war_depth <= 1 else f"WAR! x{war_depth}"
        self.io_interface.output(banner)

    def on_server_error(self, message: str) -> None:
        self.io_interface.output(f"Error: {message}")

    def on_game_ended(self, winner: Optional[Side], abandoned: bool) -> None:
        if abandoned:
            self.io_interface.output("Game abandoned.")
        elif winner is None:
            self.io_interface.output("Game over: it's a draw!")
        else:
            self.io_interface.output(f"Game over: {winner.label} wins!")
