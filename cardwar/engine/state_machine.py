"""
Game phase state machine for a War session.

This module uses the state design pattern: each phase is a ``PhaseState``
object with ``enter`` and ``exit`` hooks, and ``GameStateMachine`` moves
between them along an explicit transition table. Phases:
Idle, Initializing, Playing, War, RoundComplete, GameOver and Paused.

A change of phase runs ``exit`` on the old state, then ``enter`` on the new
one, and only then publishes GAME_STATE_CHANGED with (new, previous).
"""

import logging
import time
from enum import Enum, auto
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from cardwar.events import EventEmitter, WarEventType

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    """Phases of a War session."""

    IDLE = auto()
    INITIALIZING = auto()
    PLAYING = auto()
    WAR = auto()
    ROUND_COMPLETE = auto()
    GAME_OVER = auto()
    PAUSED = auto()


TRANSITIONS: Mapping[GamePhase, FrozenSet[GamePhase]] = {
    GamePhase.IDLE: frozenset({GamePhase.INITIALIZING}),
    GamePhase.INITIALIZING: frozenset({GamePhase.PLAYING, GamePhase.IDLE}),
    GamePhase.PLAYING: frozenset(
        {
            GamePhase.WAR,
            GamePhase.ROUND_COMPLETE,
            GamePhase.GAME_OVER,
            GamePhase.PAUSED,
            GamePhase.IDLE,
        }
    ),
    GamePhase.WAR: frozenset({GamePhase.PLAYING, GamePhase.GAME_OVER}),
    GamePhase.ROUND_COMPLETE: frozenset({GamePhase.PLAYING, GamePhase.GAME_OVER}),
    GamePhase.PAUSED: frozenset({GamePhase.PLAYING, GamePhase.GAME_OVER}),
    GamePhase.GAME_OVER: frozenset({GamePhase.IDLE}),
}


class PhaseState:
    """
    Base class for phase states.

    Subclasses set ``phase`` and may override ``enter`` and ``exit``.
    """

    phase: GamePhase

    def __init__(self):
        self.entered_at: Optional[float] = None

    def enter(self, machine: "GameStateMachine") -> None:
        """Called when the machine switches to this phase."""
        self.entered_at = time.monotonic()

    def exit(self, machine: "GameStateMachine") -> None:
        """Called when the machine leaves this phase."""
        if self.entered_at is not None:
            logger.debug(
                "Leaving %s after %.2fs", self.phase.name, time.monotonic() - self.entered_at
            )
        self.entered_at = None

    def __str__(self) -> str:
        return self.__class__.__name__


class IdleState(PhaseState):
    """No game in progress; waiting for a start request."""

    phase = GamePhase.IDLE


class InitializingState(PhaseState):
    """A new game has been requested from the server."""

    phase = GamePhase.INITIALIZING


class PlayingState(PhaseState):
    """A game is running and the next round may be requested."""

    phase = GamePhase.PLAYING


class WarState(PhaseState):
    """The last round went to war; play resumes after the settle window."""

    phase = GamePhase.WAR


class RoundCompleteState(PhaseState):
    phase = GamePhase.ROUND_COMPLETE


class GameOverState(PhaseState):
    phase = GamePhase.GAME_OVER


class PausedState(PhaseState):
    phase = GamePhase.PAUSED


def default_states() -> Iterable[PhaseState]:
    """One fresh state object per phase."""
    return [
        IdleState(),
        InitializingState(),
        PlayingState(),
        WarState(),
        RoundCompleteState(),
        GameOverState(),
        PausedState(),
    ]


class GameStateMachine:
    """
    Finite state machine over ``GamePhase``.

    Attributes:
        emitter: Receives GAME_STATE_CHANGED after every completed transition
        transitions: Allowed targets for each phase
    """

    def __init__(
        self,
        emitter: EventEmitter,
        states: Optional[Iterable[PhaseState]] = None,
        transitions: Optional[Mapping[GamePhase, FrozenSet[GamePhase]]] = None,
    ):
        self.emitter = emitter
        self.transitions = transitions or TRANSITIONS
        self._states: Dict[GamePhase, PhaseState] = {}
        self._current: Optional[PhaseState] = None
        self._previous_phase: Optional[GamePhase] = None

        for state in default_states() if states is None else states:
            self.register_state(state)

    @property
    def current_phase(self) -> Optional[GamePhase]:
        return self._current.phase if self._current else None

    @property
    def previous_phase(self) -> Optional[GamePhase]:
        return self._previous_phase

    @property
    def current_state(self) -> Optional[PhaseState]:
        return self._current

    def register_state(self, state: PhaseState) -> None:
        """Register (or replace) the state object for its phase."""
        self._states[state.phase] = state
        logger.debug("State registered: %s", state.phase.name)

    def is_registered(self, phase: GamePhase) -> bool:
        return phase in self._states

    def can_transition(self, new_phase: GamePhase) -> bool:
        if self._current is None:
            return new_phase in self._states
        return new_phase in self.transitions.get(self._current.phase, frozenset())

    def start(self, initial_phase: GamePhase = GamePhase.IDLE) -> bool:
        """Enter the initial phase. Does nothing if the machine already runs."""
        if self._current is not None:
            logger.warning("State machine already started in %s", self._current.phase.name)
            return False
        return self.change_state(initial_phase)

    def change_state(self, new_phase: GamePhase) -> bool:
        """
        Move to ``new_phase``.

        Returns:
            True if the transition happened. Re-entering the current phase,
            an unregistered phase, or a transition missing from the table
            returns False without running any hooks.
        """
        if self._current is not None and self._current.phase is new_phase:
            logger.debug("Already in state: %s", new_phase.name)
            return False

        new_state = self._states.get(new_phase)
        if new_state is None:
            logger.warning("State not registered: %s", new_phase.name)
            return False

        if not self.can_transition(new_phase):
            logger.warning(
                "Invalid transition: %s -> %s", self._current.phase.name, new_phase.name
            )
            return False

        previous_phase = self._current.phase if self._current else None

        if self._current is not None:
            self._current.exit(self)
        self._previous_phase = previous_phase
        self._current = new_state
        self._current.enter(self)

        logger.info(
            "State transition: %s -> %s",
            previous_phase.name if previous_phase else None,
            new_phase.name,
        )
        self.emitter.emit(
            WarEventType.GAME_STATE_CHANGED,
            {"new_phase": new_phase, "previous_phase": previous_phase},
        )
        return True
