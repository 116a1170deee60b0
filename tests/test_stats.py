import pytest

from cardwar.stats import ConfidenceInterval, confidence_interval, summarize_games
from cardwar.war.constants import Side
from cardwar.war.state import GameState


def finished(rounds, winner, wars=0):
    return GameState(rounds_played=rounds, winner=winner, total_wars=wars)


def test_summarize_games():
    states = [
        finished(100, Side.PLAYER, wars=5),
        finished(200, Side.OPPONENT, wars=10),
        finished(300, Side.PLAYER, wars=15),
        finished(400, None, wars=20),
    ]

    summary = summarize_games(states)

    assert summary.games == 4
    assert summary.mean_rounds == 250.0
    assert summary.median_rounds == 250.0
    assert summary.std_rounds == pytest.approx(111.803, rel=1e-3)
    assert summary.min_rounds == 100
    assert summary.max_rounds == 400
    assert summary.player_win_rate == 0.5
    assert summary.opponent_win_rate == 0.25
    assert summary.draw_rate == 0.25
    assert summary.mean_wars == 12.5
    assert summary.rounds_interval.contains(250.0)
    assert summary.rounds_interval.lower < 250.0 < summary.rounds_interval.upper


def test_summary_to_dict():
    data = summarize_games([finished(10, Side.PLAYER)]).to_dict()
    assert data["games"] == 1
    assert data["rounds_interval"] == {"lower": 10.0, "upper": 10.0, "confidence": 0.95}


def test_empty_batch_is_rejected():
    with pytest.raises(ValueError):
        summarize_games([])


def test_confidence_interval_of_identical_values_has_no_width():
    interval = confidence_interval([5.0, 5.0, 5.0])
    assert interval == ConfidenceInterval(5.0, 5.0, 0.95)


def test_wider_confidence_gives_wider_interval():
    values = [10.0, 12.0, 9.0, 15.0, 11.0]
    narrow = confidence_interval(values, 0.80)
    wide = confidence_interval(values, 0.99)
    assert wide.lower < narrow.lower
    assert wide.upper > narrow.upper
