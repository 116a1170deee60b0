"""
Immutable state models for the War card game.

This module provides dataclasses for representing what a game of War exposes
to the outside: the game snapshot and the result of each round. Both are
frozen; the live card piles never leave the server that owns them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import time
import uuid

from cardwar.common.card import Card
from cardwar.war.constants import DECK_SIZE, RoundOutcome, Side


def _card_dict(card: Optional[Card]) -> Optional[Dict[str, Any]]:
    return card.to_dict() if card is not None else None


@dataclass(frozen=True)
class WarRound:
    """
    One level of a war: the face-down cards and the face-up pair.

    Attributes:
        level: 1 for the first war, 2 for a war chained onto it, and so on
        player_face_down: Cards the player committed without comparing
        opponent_face_down: Cards the opponent committed without comparing
        player_card: The player's face-up card
        opponent_card: The opponent's face-up card
    """

    level: int
    player_face_down: Tuple[Card, ...] = ()
    opponent_face_down: Tuple[Card, ...] = ()
    player_card: Optional[Card] = None
    opponent_card: Optional[Card] = None

    @property
    def is_tied(self) -> bool:
        return (
            self.player_card is not None
            and self.opponent_card is not None
            and self.player_card.value == self.opponent_card.value
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "player_face_down": [card.to_dict() for card in self.player_face_down],
            "opponent_face_down": [card.to_dict() for card in self.opponent_face_down],
            "player_card": _card_dict(self.player_card),
            "opponent_card": _card_dict(self.opponent_card),
        }


@dataclass(frozen=True)
class WarSummary:
    """What happened during a war, for presentation."""

    rounds: Tuple[WarRound, ...] = ()
    exhausted: bool = False

    @property
    def depth(self) -> int:
        """Number of war levels played, 0 when the cards ran out immediately."""
        return len(self.rounds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "depth": self.depth,
            "exhausted": self.exhausted,
            "rounds": [war_round.to_dict() for war_round in self.rounds],
        }


@dataclass(frozen=True)
class RoundResult:
    """
    Immutable result of one resolution call.

    Attributes:
        player_card: First card the player drew this round (None if no draw)
        opponent_card: First card the opponent drew this round (None if no draw)
        outcome: PLAYER_WINS, OPPONENT_WINS, or WAR when the round tied
        winner: Side that took the pot, None for a drawn game
        cards_won: Size of the pot that was awarded
        is_game_ended: Whether one side can no longer play
        war: Details of the war, if there was one
        round_number: Sequence number assigned by the server (0 if unknown)
        player_cards_left: Player pile size after the round, filled in by the server
        opponent_cards_left: Opponent pile size after the round, filled in by the server
    """

    player_card: Optional[Card]
    opponent_card: Optional[Card]
    outcome: RoundOutcome
    winner: Optional[Side]
    cards_won: int = 0
    is_game_ended: bool = False
    war: Optional[WarSummary] = None
    round_number: int = 0
    player_cards_left: int = 0
    opponent_cards_left: int = 0

    @property
    def is_war(self) -> bool:
        return self.outcome is RoundOutcome.WAR

    @property
    def war_depth(self) -> int:
        return self.war.depth if self.war is not None else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_number": self.round_number,
            "player_card": _card_dict(self.player_card),
            "opponent_card": _card_dict(self.opponent_card),
            "outcome": self.outcome.name,
            "winner": self.winner.name if self.winner else None,
            "cards_won": self.cards_won,
            "is_game_ended": self.is_game_ended,
            "player_cards_left": self.player_cards_left,
            "opponent_cards_left": self.opponent_cards_left,
            "war": self.war.to_dict() if self.war else None,
        }


@dataclass(frozen=True)
class GameState:
    """
    Immutable snapshot of a game of War.

    Attributes:
        id: Unique identifier for this game
        player_card_count: Cards left in the player's pile
        opponent_card_count: Cards left in the opponent's pile
        last_player_card: Player's card from the latest round
        last_opponent_card: Opponent's card from the latest round
        rounds_played: Number of rounds resolved
        is_active: Whether rounds can still be requested
        total_wars: Number of rounds that went to war
        winner: Winner once the game is over (None while playing or on a draw)
        started_at: Time when the game was dealt
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    player_card_count: int = DECK_SIZE // 2
    opponent_card_count: int = DECK_SIZE // 2
    last_player_card: Optional[Card] = None
    last_opponent_card: Optional[Card] = None
    rounds_played: int = 0
    is_active: bool = False
    total_wars: int = 0
    winner: Optional[Side] = None
    started_at: float = field(default_factory=lambda: time.time())

    @property
    def total_cards(self) -> int:
        return self.player_card_count + self.opponent_card_count

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the game state to a dictionary suitable for serialization.

        Returns:
            Dictionary representation of the game state
        """
        return {
            "id": self.id,
            "player_card_count": self.player_card_count,
            "opponent_card_count": self.opponent_card_count,
            "last_player_card": _card_dict(self.last_player_card),
            "last_opponent_card": _card_dict(self.last_opponent_card),
            "rounds_played": self.rounds_played,
            "is_active": self.is_active,
            "total_wars": self.total_wars,
            "winner": self.winner.name if self.winner else None,
            "started_at": self.started_at,
        }


@dataclass
class WarEscalation:
    """
    Cards at stake during one resolution call. Never leaves the resolver.

    ``player_committed`` and ``opponent_committed`` record who put which card
    into the pot so a drawn game can hand them back.
    """

    pot: List[Card] = field(default_factory=list)
    player_committed: List[Card] = field(default_factory=list)
    opponent_committed: List[Card] = field(default_factory=list)
    rounds: List[WarRound] = field(default_factory=list)

    def commit(self, player_cards: List[Card], opponent_cards: List[Card]) -> None:
        self.player_committed.extend(player_cards)
        self.opponent_committed.extend(opponent_cards)
        self.pot.extend(player_cards)
        self.pot.extend(opponent_cards)

    def summary(self, exhausted: bool = False) -> WarSummary:
        return WarSummary(rounds=tuple(self.rounds), exhausted=exhausted)
