"""
Batch statistics for finished War games.

Aggregates the final ``GameState`` snapshots of many games: how long games
last, how often each side wins and how many wars a game sees.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

import numpy as np
import scipy.stats as stats

from cardwar.war.constants import Side
from cardwar.war.state import GameState


@dataclass
class ConfidenceInterval:
    """
    Represents a confidence interval with lower and upper bounds.

    Attributes:
        lower: The lower bound of the confidence interval
        upper: The upper bound of the confidence interval
        confidence: The confidence level (e.g., 0.95 for 95% confidence)
    """

    lower: float
    upper: float
    confidence: float

    def contains(self, value: float) -> bool:
        """Check if the interval contains a value."""
        return self.lower <= value <= self.upper

    def to_dict(self) -> Dict[str, float]:
        return {"lower": self.lower, "upper": self.upper, "confidence": self.confidence}


@dataclass
class GameSummary:
    """
    Aggregate over a batch of games.

    Attributes:
        games: Number of games summarized
        mean_rounds: Average rounds per game
        median_rounds: Median rounds per game
        std_rounds: Population standard deviation of rounds per game
        min_rounds: Shortest game
        max_rounds: Longest game
        player_win_rate: Share of games the player won
        opponent_win_rate: Share of games the opponent won
        draw_rate: Share of games that ended without a winner
        mean_wars: Average wars per game
        rounds_interval: Confidence interval of the mean rounds per game
    """

    games: int
    mean_rounds: float
    median_rounds: float
    std_rounds: float
    min_rounds: int
    max_rounds: int
    player_win_rate: float
    opponent_win_rate: float
    draw_rate: float
    mean_wars: float
    rounds_interval: ConfidenceInterval

    def to_dict(self) -> Dict[str, Any]:
        return {
            "games": self.games,
            "mean_rounds": self.mean_rounds,
            "median_rounds": self.median_rounds,
            "std_rounds": self.std_rounds,
            "min_rounds": self.min_rounds,
            "max_rounds": self.max_rounds,
            "player_win_rate": self.player_win_rate,
            "opponent_win_rate": self.opponent_win_rate,
            "draw_rate": self.draw_rate,
            "mean_wars": self.mean_wars,
            "rounds_interval": self.rounds_interval.to_dict(),
        }


def confidence_interval(values: List[float], confidence: float = 0.95) -> ConfidenceInterval:
    """
    Calculate a t-distribution confidence interval for the mean of ``values``.

    A single value (or identical values) gives a zero-width interval.
    """
    mean = float(np.mean(values))
    if len(values) < 2 or np.ptp(values) == 0:
        return ConfidenceInterval(mean, mean, confidence)

    std_err = stats.sem(values)
    margin = float(std_err * stats.t.ppf((1 + confidence) / 2, len(values) - 1))
    return ConfidenceInterval(mean - margin, mean + margin, confidence)


def summarize_games(states: Iterable[GameState], confidence: float = 0.95) -> GameSummary:
    """
    Summarize a batch of finished games.

    Args:
        states: Final snapshot of each game
        confidence: Confidence level for the interval on mean rounds

    Returns:
        The aggregate summary

    Raises:
        ValueError: If no games are given
    """
    states = list(states)
    if not states:
        raise ValueError("Cannot summarize an empty batch of games")

    rounds = np.array([state.rounds_played for state in states], dtype=float)
    wars = np.array([state.total_wars for state in states], dtype=float)
    winners = [state.winner for state in states]
    games = len(states)

    return GameSummary(
        games=games,
        mean_rounds=float(np.mean(rounds)),
        median_rounds=float(np.median(rounds)),
        std_rounds=float(np.std(rounds)),
        min_rounds=int(np.min(rounds)),
        max_rounds=int(np.max(rounds)),
        player_win_rate=winners.count(Side.PLAYER) / games,
        opponent_win_rate=winners.count(Side.OPPONENT) / games,
        draw_rate=winners.count(None) / games,
        mean_wars=float(np.mean(wars)),
        rounds_interval=confidence_interval(rounds.tolist(), confidence),
    )
