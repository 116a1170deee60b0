"""
Tests for the GameOrchestrator.

Most tests drive a real SimulatedWarServer with zero delays. Event-ordering
tests use a mocked server so the round results are known in advance.
"""

import asyncio
import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from cardwar.common.card import Card, Rank, Suit
from cardwar.engine import GameOrchestrator, GamePhase
from cardwar.events import EventEmitter, WarEventType
from cardwar.network.response import ServerResponse
from cardwar.network.retry import RetryController
from cardwar.network.server import SimulatedWarServer
from cardwar.war.constants import RoundOutcome, Side
from cardwar.war.state import GameState, RoundResult, WarRound, WarSummary

KING = Card(Suit.HEARTS, Rank.KING)
SEVEN = Card(Suit.CLUBS, Rank.SEVEN)
NINE_H = Card(Suit.HEARTS, Rank.NINE)
NINE_S = Card(Suit.SPADES, Rank.NINE)

PLAIN_ROUND = RoundResult(
    player_card=KING,
    opponent_card=SEVEN,
    outcome=RoundOutcome.PLAYER_WINS,
    winner=Side.PLAYER,
    cards_won=2,
    round_number=1,
    player_cards_left=27,
    opponent_cards_left=25,
)

WAR_ROUND = RoundResult(
    player_card=NINE_H,
    opponent_card=NINE_S,
    outcome=RoundOutcome.WAR,
    winner=Side.OPPONENT,
    cards_won=10,
    war=WarSummary(rounds=(WarRound(level=1, player_card=SEVEN, opponent_card=KING),)),
    round_number=1,
    player_cards_left=21,
    opponent_cards_left=31,
)

FINAL_ROUND = RoundResult(
    player_card=KING,
    opponent_card=SEVEN,
    outcome=RoundOutcome.PLAYER_WINS,
    winner=Side.PLAYER,
    cards_won=2,
    is_game_ended=True,
    round_number=1,
    player_cards_left=52,
    opponent_cards_left=0,
)


@pytest.fixture
def orchestrator(fast_config):
    return GameOrchestrator.create(fast_config, seed=42)


@pytest.fixture
def mock_server():
    server = MagicMock(spec=SimulatedWarServer)
    server.start_new_game = AsyncMock(
        return_value=ServerResponse.ok(GameState(is_active=True))
    )
    server.resolve_next_round = AsyncMock(return_value=ServerResponse.ok(PLAIN_ROUND))
    server.get_game_state = AsyncMock(return_value=ServerResponse.ok(GameState()))
    server.end_game = AsyncMock(return_value=ServerResponse.ok(GameState()))
    return server


@pytest.fixture
def mocked_orchestrator(mock_server, fast_config):
    return GameOrchestrator(
        mock_server, RetryController(max_attempts=3, base_delay=0.0), EventEmitter(), fast_config
    )


def record_events(orchestrator):
    events = []
    orchestrator.emitter.on_any(events.append)
    return events


def names(events):
    return [name for name, _ in events]


def phases(events):
    return [data["new_phase"] for name, data in events if name == "GAME_STATE_CHANGED"]


def test_starts_idle(orchestrator):
    assert orchestrator.phase is GamePhase.IDLE
    assert orchestrator.game_state is None
    assert orchestrator.last_result is None


@pytest.mark.asyncio
async def test_start_game(orchestrator):
    events = record_events(orchestrator)

    assert await orchestrator.start_game()

    assert orchestrator.phase is GamePhase.PLAYING
    assert orchestrator.game_state.is_active
    assert orchestrator.game_state.total_cards == 52
    assert names(events) == ["GAME_STATE_CHANGED", "GAME_STATE_CHANGED", "GAME_STARTED"]
    assert phases(events) == [GamePhase.INITIALIZING, GamePhase.PLAYING]


@pytest.mark.asyncio
async def test_start_game_only_from_idle(orchestrator):
    await orchestrator.start_game()
    assert not await orchestrator.start_game()
    assert orchestrator.server.call_count == 1


@pytest.mark.asyncio
async def test_start_failure_returns_to_idle(fast_config):
    config = fast_config.with_overrides(error_chance=1.0)
    orchestrator = GameOrchestrator.create(config, seed=1)
    errors = []
    orchestrator.on(WarEventType.SERVER_ERROR, errors.append)

    assert not await orchestrator.start_game()

    assert orchestrator.phase is GamePhase.IDLE
    assert orchestrator.server.call_count == config.max_retry_attempts
    assert len(errors) == 1
    assert errors[0]["message"].startswith("Failed to start game")


@pytest.mark.asyncio
async def test_round_failure_after_retries_returns_to_idle(orchestrator, fast_config):
    await orchestrator.start_game()
    events = record_events(orchestrator)
    orchestrator.server.config = fast_config.with_overrides(error_chance=1.0)

    result = await orchestrator.play_next_round()

    assert result is None
    assert orchestrator.phase is GamePhase.IDLE
    assert orchestrator.server.call_count == 1 + fast_config.max_retry_attempts
    assert names(events) == ["ROUND_STARTED", "SERVER_ERROR", "GAME_STATE_CHANGED"]
    assert events[1][1]["message"].startswith("Failed to play round")


@pytest.mark.asyncio
async def test_play_round_requires_playing_phase(orchestrator):
    assert await orchestrator.play_next_round() is None
    assert orchestrator.server.call_count == 0


@pytest.mark.asyncio
async def test_plain_round_event_order(mocked_orchestrator):
    await mocked_orchestrator.start_game()
    events = record_events(mocked_orchestrator)

    result = await mocked_orchestrator.play_next_round()

    assert result == PLAIN_ROUND
    assert names(events) == [
        "ROUND_STARTED",
        "GAME_STATE_CHANGED",
        "ROUND_COMPLETE",
        "GAME_STATE_CHANGED",
    ]
    assert phases(events) == [GamePhase.ROUND_COMPLETE, GamePhase.PLAYING]
    assert events[2][1]["result"] == PLAIN_ROUND
    assert mocked_orchestrator.phase is GamePhase.PLAYING


@pytest.mark.asyncio
async def test_war_round_event_order(mocked_orchestrator, mock_server):
    mock_server.resolve_next_round.return_value = ServerResponse.ok(WAR_ROUND)
    await mocked_orchestrator.start_game()
    events = record_events(mocked_orchestrator)

    await mocked_orchestrator.play_next_round()

    assert names(events) == [
        "ROUND_STARTED",
        "GAME_STATE_CHANGED",
        "WAR_STARTED",
        "ROUND_COMPLETE",
        "WAR_COMPLETED",
        "GAME_STATE_CHANGED",
    ]
    assert phases(events) == [GamePhase.WAR, GamePhase.PLAYING]
    assert events[2][1] == {"war_depth": 1}
    assert mocked_orchestrator.game_state.total_wars == 1


@pytest.mark.asyncio
async def test_final_round_ends_the_game(mocked_orchestrator, mock_server):
    mock_server.resolve_next_round.return_value = ServerResponse.ok(FINAL_ROUND)
    await mocked_orchestrator.start_game()
    events = record_events(mocked_orchestrator)

    await mocked_orchestrator.play_next_round()

    assert names(events) == [
        "ROUND_STARTED",
        "GAME_STATE_CHANGED",
        "ROUND_COMPLETE",
        "GAME_ENDED",
    ]
    assert mocked_orchestrator.phase is GamePhase.GAME_OVER
    assert events[3][1]["winner"] is Side.PLAYER
    assert not events[3][1]["abandoned"]
    state = mocked_orchestrator.game_state
    assert state.winner is Side.PLAYER
    assert not state.is_active
    assert state.player_card_count == 52
    assert state.opponent_card_count == 0


@pytest.mark.asyncio
async def test_only_one_round_in_flight(orchestrator):
    await orchestrator.start_game()

    first, second = await asyncio.gather(
        orchestrator.play_next_round(), orchestrator.play_next_round()
    )

    assert isinstance(first, RoundResult)
    assert second is None
    # One start plus one round
    assert orchestrator.server.call_count == 2
    assert not orchestrator.is_processing_round


@pytest.mark.asyncio
async def test_pause_and_resume(orchestrator):
    await orchestrator.start_game()

    assert orchestrator.pause()
    assert orchestrator.phase is GamePhase.PAUSED
    assert await orchestrator.play_next_round() is None

    assert orchestrator.resume()
    assert orchestrator.phase is GamePhase.PLAYING
    assert await orchestrator.play_next_round() is not None


def test_pause_and_resume_need_the_right_phase(orchestrator):
    assert not orchestrator.pause()
    assert not orchestrator.resume()
    assert not orchestrator.return_to_menu()
    assert orchestrator.phase is GamePhase.IDLE


@pytest.mark.asyncio
async def test_pause_refused_while_round_in_flight(mocked_orchestrator, mock_server):
    called = asyncio.Event()
    release = asyncio.Event()

    async def slow_round():
        called.set()
        await release.wait()
        return ServerResponse.ok(PLAIN_ROUND)

    mock_server.resolve_next_round.side_effect = slow_round
    await mocked_orchestrator.start_game()

    round_task = asyncio.ensure_future(mocked_orchestrator.play_next_round())
    await called.wait()

    assert mocked_orchestrator.is_processing_round
    assert not mocked_orchestrator.pause()
    assert not await mocked_orchestrator.end_game()

    release.set()
    assert await round_task == PLAIN_ROUND
    assert mocked_orchestrator.pause()


@pytest.mark.asyncio
async def test_end_game_then_return_to_menu(orchestrator):
    await orchestrator.start_game()
    await orchestrator.play_next_round()
    events = record_events(orchestrator)

    assert await orchestrator.end_game()

    assert orchestrator.phase is GamePhase.GAME_OVER
    assert not orchestrator.server.is_active
    ended = [data for name, data in events if name == "GAME_ENDED"]
    assert ended[0]["abandoned"]
    assert ended[0]["winner"] is None

    assert orchestrator.return_to_menu()
    assert orchestrator.phase is GamePhase.IDLE
    assert await orchestrator.start_game()


@pytest.mark.asyncio
async def test_end_game_from_pause(orchestrator):
    await orchestrator.start_game()
    orchestrator.pause()

    assert await orchestrator.end_game()
    assert orchestrator.phase is GamePhase.GAME_OVER


@pytest.mark.asyncio
async def test_refresh_state(orchestrator):
    await orchestrator.start_game()
    await orchestrator.play_next_round()

    state = await orchestrator.refresh_state()

    assert state.rounds_played == 1
    assert state.total_cards == 52


@pytest.mark.asyncio
async def test_tracked_state_matches_server(orchestrator):
    await orchestrator.start_game()
    for _ in range(10):
        if await orchestrator.play_next_round() is None:
            break

    tracked = orchestrator.game_state
    server_state = (await orchestrator.server.get_game_state()).data
    assert tracked.rounds_played == server_state.rounds_played
    assert tracked.player_card_count == server_state.player_card_count
    assert tracked.opponent_card_count == server_state.opponent_card_count
    assert tracked.total_wars == server_state.total_wars


@pytest.mark.asyncio
async def test_full_game(orchestrator):
    await orchestrator.start_game()

    results = await orchestrator.play_until_over(max_rounds=5000)

    assert results
    assert [r.round_number for r in results] == list(range(1, len(results) + 1))
    assert orchestrator.game_state.total_cards == 52
    if results[-1].is_game_ended:
        assert orchestrator.phase is GamePhase.GAME_OVER
        assert orchestrator.game_state.winner is results[-1].winner
    else:
        assert orchestrator.phase is GamePhase.PLAYING


@pytest.mark.asyncio
async def test_play_until_over_respects_max_rounds(orchestrator):
    await orchestrator.start_game()

    results = await orchestrator.play_until_over(max_rounds=3)

    assert len(results) <= 3


@pytest.mark.asyncio
async def test_same_seed_same_game_despite_faults(fast_config):
    reliable = GameOrchestrator.create(fast_config, seed=5)
    flaky_config = fast_config.with_overrides(error_chance=0.3, max_retry_attempts=20)
    flaky = GameOrchestrator.create(flaky_config, seed=5, network_rng=random.Random(1))

    await reliable.start_game()
    await flaky.start_game()
    expected = await reliable.play_until_over(max_rounds=30)
    actual = await flaky.play_until_over(max_rounds=30)

    assert actual == expected
    assert flaky.server.call_count > reliable.server.call_count


@pytest.mark.asyncio
async def test_shutdown_cancels_round_and_drops_handlers(mocked_orchestrator, mock_server):
    called = asyncio.Event()

    async def hanging_round():
        called.set()
        await asyncio.sleep(60)

    mock_server.resolve_next_round.side_effect = hanging_round
    mocked_orchestrator.on(WarEventType.ROUND_COMPLETE, MagicMock())
    await mocked_orchestrator.start_game()

    round_task = asyncio.ensure_future(mocked_orchestrator.play_next_round())
    await called.wait()
    await mocked_orchestrator.shutdown()

    with pytest.raises(asyncio.CancelledError):
        await round_task
    assert not mocked_orchestrator.is_processing_round
    assert mocked_orchestrator.emitter.listener_count(WarEventType.ROUND_COMPLETE) == 0
    assert mocked_orchestrator.event_handlers == {}
