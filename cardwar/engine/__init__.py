"""
Client-side engine for cardwar.

This package provides the phase state machine, the tracking of in-flight
async operations and the orchestrator that drives a session against the
simulated server.
"""

from cardwar.engine.operations import AsyncOperationManager, OperationManagerClosedError
from cardwar.engine.orchestrator import GameOrchestrator
from cardwar.engine.state_machine import GamePhase, GameStateMachine, PhaseState

__all__ = [
    "AsyncOperationManager",
    "OperationManagerClosedError",
    "GameOrchestrator",
    "GamePhase",
    "GameStateMachine",
    "PhaseState",
]
