"""War-specific constants."""

from enum import Enum, auto

# Cards each side commits to a war: three face down plus one face up
WAR_CARD_COUNT = 4

# Every war level takes at least one card from each side and neither side can
# hold more than 26 cards' worth of ties, so deeper recursion means a bug
MAX_WAR_DEPTH = 26

DECK_SIZE = 52


class Side(Enum):
    """The two sides of a game."""

    PLAYER = auto()
    OPPONENT = auto()

    @property
    def label(self) -> str:
        return self.name.capitalize()


class RoundOutcome(Enum):
    """Possible results of one resolution call."""

    PLAYER_WINS = auto()
    OPPONENT_WINS = auto()
    WAR = auto()

    @classmethod
    def for_winner(cls, side: Side) -> "RoundOutcome":
        return cls.PLAYER_WINS if side is Side.PLAYER else cls.OPPONENT_WINS
