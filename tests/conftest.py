"""
Pytest configuration for tests at the root level.

This module contains pytest fixtures shared by the test packages.
"""

import itertools

import pytest

from cardwar.common.card import Card, Rank, Suit
from cardwar.common.deck import CardQueue
from cardwar.config import WarConfig


@pytest.fixture
def fast_config():
    """A config with no latency, no injected failures and no settle pauses."""
    return WarConfig(
        min_network_delay=0.0,
        max_network_delay=0.0,
        timeout_chance=0.0,
        error_chance=0.0,
        timeout_duration=0.0,
        retry_base_delay=0.0,
        war_settle_delay=0.0,
        round_settle_delay=0.0,
    )


@pytest.fixture
def make_pile():
    """
    Build a CardQueue from rank values, front first.

    Suits rotate per value so the same rank can appear more than once.
    """

    def _make_pile(*values):
        suits = {}
        cards = []
        for value in values:
            suit_cycle = suits.setdefault(value, itertools.cycle(Suit))
            cards.append(Card(next(suit_cycle), Rank(value)))
        return CardQueue(cards)

    return _make_pile
