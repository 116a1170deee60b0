"""
This module contains the Deck class, the 52-card source deck for a game of
War, and the CardQueue class, the FIFO pile each side plays from.

>>> import random
>>> deck = Deck().shuffle(random.Random(7))
>>> player, opponent = deck.deal_alternately()
>>> player.size, opponent.size
(26, 26)
"""

import random
from collections import deque
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from cardwar.common.card import Card, Rank, Suit


class EmptyDeckError(Exception):
    """Raised when a card is dequeued from an empty pile."""

    pass


class Deck:
    """
    A class representing a deck of cards.
    """

    # Precompute the default deck
    _default_deck = [Card(suit, rank) for suit in Suit for rank in Rank]

    def __init__(self, cards: Union[List[Card], None] = None):
        """
        Initialize a Deck instance.

        :param cards: A list of Card instances to populate the deck (optional).
                      If not provided, a default deck will be constructed.
        >>> deck = Deck()
        >>> deck.size
        52
        """
        if cards is None:
            self.cards: List[Card] = self.initialize_default_deck()
        else:
            self.cards = list(cards)

    def initialize_default_deck(self) -> List[Card]:
        """
        Construct a default deck with all possible combinations of suits and ranks.

        :return: A list of Card instances representing the default deck.
        """
        return self._default_deck.copy()

    def shuffle(self, rng: Optional[random.Random] = None) -> "Deck":
        """
        Shuffle the cards in place with a uniform random permutation.

        ``random.Random.shuffle`` is a Fisher-Yates shuffle; passing a seeded
        ``rng`` makes the deal reproducible.

        :param rng: Random source to use (defaults to the module RNG).
        :return: The deck itself, for chaining.
        """
        (rng or random).shuffle(self.cards)
        return self

    def deal_alternately(self) -> Tuple["CardQueue", "CardQueue"]:
        """
        Deal the deck one card at a time into two piles, player first.

        :return: A (player, opponent) pair of queues.
        """
        player = CardQueue(self.cards[0::2])
        opponent = CardQueue(self.cards[1::2])
        self.cards = []
        return player, opponent

    @property
    def size(self) -> int:
        """
        Return the number of remaining cards in the deck.

        :return: The size of the deck.
        """
        return len(self.cards)

    def is_empty(self) -> bool:
        return len(self.cards) == 0

    def reset(self):
        """
        Reset the deck by recreating
        """
        self.cards = self.initialize_default_deck()

    def __repr__(self) -> str:
        return f"Deck({[repr(card) for card in self.cards]})"

    def __str__(self) -> str:
        return f"Deck of {len(self.cards)} cards"


class CardQueue:
    """
    FIFO pile of cards held by one side.

    Cards are taken from the front and won cards go to the back.
    """

    def __init__(self, cards: Optional[Iterable[Card]] = None):
        self._cards = deque(cards or ())

    def dequeue(self) -> Card:
        """
        Remove and return the front card.

        :raises EmptyDeckError: If the pile is empty. Callers check ``size`` first.
        """
        if not self._cards:
            raise EmptyDeckError("Cannot dequeue from an empty pile")
        return self._cards.popleft()

    def enqueue(self, card: Card) -> None:
        """Add a card to the back of the pile."""
        self._cards.append(card)

    def enqueue_all(self, cards: Iterable[Card]) -> None:
        self._cards.extend(cards)

    def peek(self) -> Optional[Card]:
        return self._cards[0] if self._cards else None

    def snapshot(self) -> Tuple[Card, ...]:
        """Return an immutable copy of the pile, front first."""
        return tuple(self._cards)

    @property
    def size(self) -> int:
        return len(self._cards)

    def is_empty(self) -> bool:
        return not self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(tuple(self._cards))

    def __repr__(self) -> str:
        return f"CardQueue({[repr(card) for card in self._cards]})"

    def __str__(self) -> str:
        return f"Pile of {len(self._cards)} cards"
