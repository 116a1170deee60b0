"""
Transcript adapter for cardwar.

Records a session as JSON lines, one object per event, so games can be
replayed or analysed later. Event hooks only buffer; ``flush`` appends the
buffered lines to the file with aiofiles.
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional

import aiofiles

from cardwar.adapters.base import PlatformAdapter
from cardwar.engine.state_machine import GamePhase
from cardwar.war.constants import Side
from cardwar.war.state import RoundResult

logger = logging.getLogger(__name__)


class TranscriptAdapter(PlatformAdapter):
    """
    Appends session events to a JSON-lines file.

    Attributes:
        path: File the transcript is appended to
        flush_every: Flush automatically from ``maybe_flush`` once this many
            lines are buffered
    """

    def __init__(self, path: str, flush_every: int = 100):
        super().__init__()
        self.path = path
        self.flush_every = flush_every
        self._buffer: List[str] = []
        self.lines_written = 0

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def _write(self, event: str, payload: Dict[str, Any]) -> None:
        record = {"event": event, "timestamp": time.time(), **payload}
        self._buffer.append(json.dumps(record))

    def on_game_state_changed(
        self, new_phase: GamePhase, previous_phase: Optional[GamePhase]
    ) -> None:
        self._write(
            "game_state_changed",
            {
                "new_phase": new_phase.name,
                "previous_phase": previous_phase.name if previous_phase else None,
            },
        )

    def on_round_complete(self, result: RoundResult) -> None:
        self._write("round_complete", {"result": result.to_dict()})

    def on_war_started(self, war_depth: int) -> None:
        self._write("war_started", {"war_depth": war_depth})

    def on_war_completed(self) -> None:
        self._write("war_completed", {})

    def on_server_error(self, message: str) -> None:
        self._write("server_error", {"message": message})

    def on_game_ended(self, winner: Optional[Side], abandoned: bool) -> None:
        self._write(
            "game_ended",
            {"winner": winner.name if winner else None, "abandoned": abandoned},
        )

    async def maybe_flush(self) -> None:
        if len(self._buffer) >= self.flush_every:
            await self.flush()

    async def flush(self) -> None:
        """Append every buffered line to the transcript file."""
        if not self._buffer:
            return

        lines, self._buffer = self._buffer, []
        async with aiofiles.open(self.path, mode="a", encoding="utf-8") as transcript:
            await transcript.write("\n".join(lines) + "\n")
        self.lines_written += len(lines)
        logger.debug("Wrote %d transcript lines to %s", len(lines), self.path)
