"""
Tests for the example script in examples/.
"""

import importlib.util
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from cardwar.network.response import ServerResponse
from cardwar.network.server import SimulatedWarServer

DEMO_PATH = Path(__file__).resolve().parents[1] / "examples" / "war_engine_demo.py"


def load_demo():
    spec = importlib.util.spec_from_file_location("war_engine_demo", DEMO_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


async def reliable_start(self):
    return ServerResponse.ok(self._start_new_game())


@pytest.mark.asyncio
async def test_demo_stops_when_a_round_request_fails(capsys):
    demo = load_demo()
    lost = AsyncMock(return_value=ServerResponse.failure("Connection lost"))

    with patch("sys.argv", ["war_engine_demo.py", "--rounds", "4", "--seed", "3"]), patch.object(
        SimulatedWarServer, "start_new_game", new=reliable_start
    ), patch.object(SimulatedWarServer, "resolve_next_round", new=lost):
        await demo.main()

    out = capsys.readouterr().out
    assert "A round request failed, the game was dropped." in out
    assert "Taking a break" not in out
    assert "After " not in out
